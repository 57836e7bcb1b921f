from __future__ import annotations
from enum import Enum
from typing import List, Optional
from uuid import uuid4

import pendulum as p
from pydantic import BaseModel, Field, field_serializer

from .. import config
from .errors import ValidationError


def new_id() -> str:
    return uuid4().hex


class Commute(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    mode: Optional[str] = None           # None → mode par défaut à la validation
    created_at: Optional[p.DateTime] = None

    model_config = {"arbitrary_types_allowed": True}

    @field_serializer("created_at")
    def _ser_created_at(self, dt: Optional[p.DateTime], _info):
        return dt.in_timezone("UTC").to_iso8601_string() if dt else None


class Session(BaseModel):
    # id / date absents → réparés par la validation avant commit
    id: Optional[str] = None
    commute_id: str
    duration: float                      # secondes
    date: Optional[p.DateTime] = None
    mode: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True}

    @field_serializer("date")
    def _ser_date(self, dt: Optional[p.DateTime], _info):
        return dt.in_timezone("UTC").to_iso8601_string() if dt else None


class Statistics(BaseModel):
    average: float = 0.0
    best: float = 0.0
    count: int = 0


class PRVerdict(BaseModel):
    is_pr: bool
    best_previous: Optional[float] = None


class TimingState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    AWAITING_SUBMIT = "awaiting_submit"


class SubmitResult(BaseModel):
    committed: bool = False
    pr_achieved: bool = False
    best_previous: Optional[float] = None
    too_short: bool = False
    session: Optional[Session] = None
    error: Optional[Exception] = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def validation_error(self) -> Optional[ValidationError]:
        return self.error if isinstance(self.error, ValidationError) else None


class CoreSettings(BaseModel):
    """Réglages injectés dans le cœur (validation, chrono, records)."""

    modes: List[str] = Field(default_factory=lambda: list(config.MODES))
    default_mode: str = config.DEFAULT_MODE
    min_duration_s: float = config.MIN_DURATION_S
    min_duration_mode_s: float = config.MIN_DURATION_MODE_S
    per_session_mode: bool = config.PER_SESSION_MODE
    session_mode_fallback: str = config.SESSION_MODE_FALLBACK

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "CoreSettings":
        return cls()

    @property
    def min_submit_duration(self) -> float:
        # Le flux avec mode par session filtre plus large que le flux historique
        return self.min_duration_mode_s if self.per_session_mode else self.min_duration_s

    def canonical_mode(self, mode: str) -> Optional[str]:
        wanted = mode.strip().lower()
        for m in self.modes:
            if m.lower() == wanted:
                return m
        return None

    def session_mode(self, commute_mode: Optional[str], mode: Optional[str] = None) -> str:
        if not self.per_session_mode:
            # flux historique : la session hérite du mode du trajet
            return commute_mode or self.default_mode
        if mode:
            return mode
        if self.session_mode_fallback == "global":
            return self.default_mode
        return commute_mode or self.default_mode
