from __future__ import annotations

import pendulum as p
import pytest

from commutepro.core.models import CoreSettings
from commutepro.services.commute_service import CommuteService
from commutepro.storage.db import EntityStore


class FakeClock:
    def __init__(self, start: p.DateTime) -> None:
        self.now = start

    def __call__(self) -> p.DateTime:
        return self.now

    def advance(self, seconds: int = 0, microseconds: int = 0) -> None:
        self.now = self.now.add(seconds=seconds, microseconds=microseconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(p.datetime(2026, 3, 2, 8, 0, 0, tz="UTC"))


@pytest.fixture
def settings() -> CoreSettings:
    return CoreSettings(
        modes=["walk", "bike", "run", "subway", "drive", "bike + subway"],
        default_mode="walk",
        min_duration_s=1.0,
        min_duration_mode_s=3.0,
        per_session_mode=True,
        session_mode_fallback="commute",
    )


@pytest.fixture
def store(tmp_path, clock):
    s = EntityStore(str(tmp_path / "commutes.sqlite3"), clock=clock)
    s.ensure_schema()
    yield s
    s.close()


@pytest.fixture
def service(store, settings, clock) -> CommuteService:
    return CommuteService(store, settings, clock=clock)
