"""Validation avant commit : rejette ou répare les entités en attente."""

from __future__ import annotations
import math
from typing import Callable, Optional, Union

import pendulum as p

from .errors import ValidationError, ValidationKind
from .models import Commute, CoreSettings, Session, new_id


def _check_mode(mode: str, settings: CoreSettings) -> str:
    canonical = settings.canonical_mode(mode)
    if canonical is None:
        raise ValidationError(ValidationKind.INVALID_MODE, f"Invalid commute mode: {mode}")
    return canonical


def validate_commute(
    commute: Commute,
    settings: CoreSettings,
    *,
    clock: Callable[[], p.DateTime] = p.now,
) -> Commute:
    if not commute.name or not commute.name.strip():
        raise ValidationError(ValidationKind.EMPTY_NAME, "Commute name cannot be empty")

    if commute.mode is None or not commute.mode.strip():
        commute.mode = settings.default_mode
    commute.mode = _check_mode(commute.mode, settings)

    if commute.created_at is None:
        commute.created_at = clock()
    return commute


def validate_session(
    session: Session,
    settings: CoreSettings,
    *,
    clock: Callable[[], p.DateTime] = p.now,
) -> Session:
    # NaN / ±inf refusés
    if not math.isfinite(session.duration):
        raise ValidationError(ValidationKind.NEGATIVE_DURATION, "Session duration must be a finite number")
    if session.duration < 0:
        raise ValidationError(ValidationKind.NEGATIVE_DURATION, "Session duration cannot be negative")

    if session.mode is not None:
        session.mode = _check_mode(session.mode, settings)

    # Réparations automatiques, appliquées en place
    if session.date is None:
        session.date = clock()
    if session.id is None:
        session.id = new_id()
    return session


def validate(
    entity: Union[Commute, Session],
    settings: Optional[CoreSettings] = None,
    *,
    clock: Callable[[], p.DateTime] = p.now,
) -> Union[Commute, Session]:
    settings = settings or CoreSettings.from_env()
    if isinstance(entity, Commute):
        return validate_commute(entity, settings, clock=clock)
    if isinstance(entity, Session):
        return validate_session(entity, settings, clock=clock)
    raise TypeError(f"Entité non supportée: {type(entity).__name__}")
