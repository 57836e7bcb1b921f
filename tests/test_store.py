from __future__ import annotations

import sqlite3
from pathlib import Path

import pendulum as p
import pytest

from commutepro.core.errors import NotFoundError, PersistenceError
from commutepro.core.models import Commute, Session
from commutepro.storage.db import EntityStore


def _commute(store: EntityStore, name: str, mode: str = "bike") -> Commute:
    commute = Commute(name=name, mode=mode, created_at=p.datetime(2026, 1, 1, tz="UTC"))
    store.add_commute(commute)
    return commute


def _session(commute: Commute, duration: float, when: p.DateTime, sid: str) -> Session:
    return Session(id=sid, commute_id=commute.id, duration=duration, date=when, mode=commute.mode)


def test_sessions_round_trip_most_recent_first(store, clock) -> None:
    home = _commute(store, "Home")
    store.add_session(_session(home, 130.5, clock.now.subtract(days=3), "a"))
    store.add_session(_session(home, 140.0, clock.now.subtract(days=1), "b"))
    store.add_session(_session(home, 150.0, clock.now.subtract(days=2), "c"))

    sessions = store.sessions_for(home.id)

    assert [s.id for s in sessions] == ["b", "c", "a"]
    first = store.get_session("a")
    assert first.duration == 130.5
    assert first.mode == "bike"
    assert first.date == clock.now.subtract(days=3)


def test_commutes_listed_by_name(store) -> None:
    _commute(store, "zoo")
    _commute(store, "Bakery")
    _commute(store, "gym")
    assert [c.name for c in store.list_commutes()] == ["Bakery", "gym", "zoo"]


def test_delete_commute_cascades(store, clock) -> None:
    home = _commute(store, "Home")
    work = _commute(store, "Work")
    store.add_session(_session(home, 100, clock.now.subtract(days=1), "h1"))
    store.add_session(_session(home, 110, clock.now.subtract(days=2), "h2"))
    store.add_session(_session(work, 200, clock.now.subtract(days=1), "w1"))

    assert store.delete_commute(home.id) is True

    assert store.sessions_for(home.id) == []
    with pytest.raises(NotFoundError):
        store.get_session("h1")
    with pytest.raises(NotFoundError):
        store.get_commute(home.id)
    assert store.statistics(home.id).count == 0
    assert store.counts() == (1, 1)


def test_delete_unknown_ids_is_noop(store) -> None:
    assert store.delete_commute("nope") is False
    assert store.delete_session("nope") is False


def test_statistics_skip_future_and_zero(store, clock) -> None:
    home = _commute(store, "Home")
    store.add_session(_session(home, 125, clock.now.subtract(hours=2), "a"))
    store.add_session(_session(home, 175, clock.now.subtract(days=1), "b"))
    store.add_session(_session(home, 0, clock.now.subtract(days=2), "zero"))
    store.add_session(_session(home, 60, clock.now.add(days=1), "future"))

    stats = store.statistics(home.id)

    assert stats.count == 2
    assert stats.best == 125
    assert stats.average == 150


def test_clear_sessions_keeps_commute(store, clock) -> None:
    home = _commute(store, "Home")
    store.add_session(_session(home, 100, clock.now, "a"))
    store.add_session(_session(home, 120, clock.now, "b"))
    assert store.clear_sessions(home.id) == 2
    assert store.get_commute(home.id).name == "Home"
    assert store.sessions_for(home.id) == []


def test_add_session_requires_known_commute(store, clock) -> None:
    orphan = Session(id="x", commute_id="ghost", duration=10, date=clock.now)
    with pytest.raises(NotFoundError):
        store.add_session(orphan)


def test_add_session_requires_validated_session(store) -> None:
    home = _commute(store, "Home")
    with pytest.raises(PersistenceError):
        store.add_session(Session(commute_id=home.id, duration=10))


def test_duplicate_id_is_a_persistence_error(store, clock) -> None:
    home = _commute(store, "Home")
    store.add_session(_session(home, 100, clock.now, "dup"))
    with pytest.raises(PersistenceError) as exc:
        store.add_session(_session(home, 90, clock.now, "dup"))
    assert isinstance(exc.value.__cause__, sqlite3.IntegrityError)
    assert len(store.sessions_for(home.id)) == 1


def test_reset_all_and_reopen(tmp_path: Path, clock) -> None:
    path = str(tmp_path / "reopen.sqlite3")
    with EntityStore(path, clock=clock) as first:
        home = _commute(first, "Home")
        first.add_session(_session(home, 99, clock.now, "a"))

    with EntityStore(path, clock=clock) as second:
        assert second.counts() == (1, 1)
        assert second.reset_all() == (1, 1)
        assert second.counts() == (0, 0)


def test_in_memory_store(clock) -> None:
    with EntityStore(":memory:", clock=clock) as mem:
        home = _commute(mem, "Home")
        mem.add_session(_session(home, 42, clock.now, "a"))
        assert mem.statistics(home.id).best == 42
