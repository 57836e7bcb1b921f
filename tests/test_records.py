from __future__ import annotations

import pendulum as p

from commutepro.core.models import Session
from commutepro.core.records import compute_statistics, evaluate, valid_sessions

NOW = p.datetime(2026, 3, 2, 8, 0, 0, tz="UTC")


def _s(duration: float, days_ago: int = 1) -> Session:
    return Session(id=f"s{duration}-{days_ago}", commute_id="c1", duration=duration,
                   date=NOW.subtract(days=days_ago), mode="bike")


def test_first_session_is_always_a_record() -> None:
    verdict = evaluate(600.0, [], now=NOW)
    assert verdict.is_pr is True
    assert verdict.best_previous is None


def test_equal_to_best_counts_as_record() -> None:
    history = [_s(130), _s(140, 2), _s(150, 3)]
    verdict = evaluate(130.0, history, now=NOW)
    assert verdict.is_pr is True
    assert verdict.best_previous == 130


def test_slower_than_best_is_not_a_record() -> None:
    history = [_s(130), _s(140, 2), _s(150, 3)]
    verdict = evaluate(135.0, history, now=NOW)
    assert verdict.is_pr is False
    assert verdict.best_previous == 130


def test_future_and_zero_sessions_are_ignored() -> None:
    future = _s(90, days_ago=-2)
    zero = _s(0, 4)
    history = [_s(130), _s(140, 2), _s(150, 3), future, zero]

    assert evaluate(135.0, history, now=NOW).is_pr is False
    assert evaluate(100.0, history, now=NOW).best_previous == 130
    # seul l'historique invalide → premier record
    assert evaluate(500.0, [future, zero], now=NOW).is_pr is True


def test_statistics_and_evaluate_share_the_same_population() -> None:
    history = [_s(130), _s(170, 2), _s(90, days_ago=-1), _s(0, 3)]
    pool = valid_sessions(history, now=NOW)
    stats = compute_statistics(history, now=NOW)

    assert [s.duration for s in pool] == [130, 170]
    assert stats.count == 2
    assert stats.best == 130
    assert stats.average == 150
    assert evaluate(999.0, history, now=NOW).best_previous == stats.best


def test_statistics_empty_is_zero() -> None:
    stats = compute_statistics([], now=NOW)
    assert (stats.average, stats.best, stats.count) == (0.0, 0.0, 0)


def test_evaluate_does_not_touch_history() -> None:
    history = [_s(130)]
    evaluate(100.0, history, now=NOW)
    assert len(history) == 1
    assert history[0].duration == 130
