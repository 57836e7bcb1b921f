# commutepro/core/errors.py
from __future__ import annotations
from enum import Enum


class CommuteProError(Exception):
    """Racine de toutes les erreurs métier."""


class InvalidStateError(CommuteProError):
    """Opération demandée dans le mauvais état du chrono (bug appelant)."""


class ValidationKind(str, Enum):
    EMPTY_NAME = "empty_name"
    INVALID_MODE = "invalid_mode"
    NEGATIVE_DURATION = "negative_duration"


class ValidationError(CommuteProError):
    def __init__(self, kind: ValidationKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"Validation error: {self.message}"


class PersistenceError(CommuteProError):
    """Échec d'écriture/lecture du store (sqlite3.Error enveloppée)."""


class NotFoundError(CommuteProError):
    """Identifiant de trajet ou de session inconnu."""
