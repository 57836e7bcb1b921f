"""
Records personnels et statistiques.

Les deux calculs partagent le même filtre `valid_sessions` : une session
compte si sa durée est > 0 et si sa date n'est pas dans le futur.
"""

from __future__ import annotations
from typing import Iterable, List, Optional

import pendulum as p

from .models import PRVerdict, Session, Statistics


def valid_sessions(sessions: Iterable[Session], now: Optional[p.DateTime] = None) -> List[Session]:
    now = now or p.now()
    return [
        s for s in sessions
        if s.duration > 0 and s.date is not None and s.date <= now
    ]


def evaluate(
    candidate_duration: float,
    history: Iterable[Session],
    now: Optional[p.DateTime] = None,
) -> PRVerdict:
    """
    Compare une durée candidate à l'historique (sans la candidate).
    Égalité avec le meilleur temps = nouveau record.
    """
    pool = valid_sessions(history, now)
    if not pool:
        return PRVerdict(is_pr=True, best_previous=None)

    best = min(s.duration for s in pool)
    return PRVerdict(is_pr=candidate_duration <= best, best_previous=best)


def compute_statistics(sessions: Iterable[Session], now: Optional[p.DateTime] = None) -> Statistics:
    pool = valid_sessions(sessions, now)
    if not pool:
        return Statistics()
    durations = [s.duration for s in pool]
    return Statistics(
        average=sum(durations) / len(durations),
        best=min(durations),
        count=len(durations),
    )
