from __future__ import annotations

import pendulum as p
import pytest

from commutepro.core.errors import ValidationError, ValidationKind
from commutepro.core.models import Commute, Session
from commutepro.core.validation import validate, validate_commute, validate_session


@pytest.mark.parametrize("name", ["", "   ", "\t"])
def test_commute_rejects_blank_names(settings, name: str) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_commute(Commute(name=name, mode="bike"), settings)
    assert exc.value.kind is ValidationKind.EMPTY_NAME


def test_commute_mode_is_case_insensitive_and_canonicalised(settings) -> None:
    commute = validate_commute(Commute(name="Home", mode="BIKE"), settings)
    assert commute.mode == "bike"

    combo = validate_commute(Commute(name="Home", mode="Bike + Subway"), settings)
    assert combo.mode == "bike + subway"


def test_commute_rejects_unknown_mode(settings) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_commute(Commute(name="Home", mode="teleport"), settings)
    assert exc.value.kind is ValidationKind.INVALID_MODE
    assert "teleport" in str(exc.value)


def test_commute_without_mode_gets_default(settings, clock) -> None:
    commute = validate_commute(Commute(name="Home"), settings, clock=clock)
    assert commute.mode == "walk"
    assert commute.created_at == clock.now


def test_session_negative_duration_rejected(settings) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_session(Session(commute_id="c1", duration=-1.0), settings)
    assert exc.value.kind is ValidationKind.NEGATIVE_DURATION


def test_session_repairs_missing_id_and_date(settings, clock) -> None:
    session = Session(commute_id="c1", duration=0.0)
    out = validate_session(session, settings, clock=clock)
    assert out is session
    assert session.id
    assert session.date == clock.now


def test_session_keeps_existing_id_and_date(settings, clock) -> None:
    when = p.datetime(2025, 12, 24, 18, 30, tz="UTC")
    session = Session(id="fixed", commute_id="c1", duration=12.0, date=when, mode="Run")
    validate_session(session, settings, clock=clock)
    assert session.id == "fixed"
    assert session.date == when
    assert session.mode == "run"


def test_session_rejects_unknown_mode(settings) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_session(Session(commute_id="c1", duration=10.0, mode="hoverboard"), settings)
    assert exc.value.kind is ValidationKind.INVALID_MODE


def test_validate_dispatches_on_entity_type(settings) -> None:
    assert isinstance(validate(Commute(name="Gym", mode="run"), settings), Commute)
    assert isinstance(validate(Session(commute_id="c1", duration=5.0), settings), Session)
    with pytest.raises(TypeError):
        validate("not an entity", settings)  # type: ignore[arg-type]


@pytest.mark.parametrize("duration", [float("nan"), float("inf"), float("-inf")])
def test_session_rejects_non_finite_duration(settings, duration: float) -> None:
    session = Session(commute_id="c1", duration=duration)
    with pytest.raises(ValidationError) as exc:
        validate_session(session, settings)
    assert exc.value.kind is ValidationKind.NEGATIVE_DURATION
    assert session.id is None
