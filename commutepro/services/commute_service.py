from __future__ import annotations
import logging
from typing import Dict, List, Optional

import pendulum as p

from ..core.errors import InvalidStateError
from ..core.models import Commute, CoreSettings, Session, Statistics, SubmitResult
from ..core.timing import Clock, TimingSession
from ..core.validation import validate_commute, validate_session
from ..storage.db import EntityStore

log = logging.getLogger(__name__)

# Données d'exemple (équivalent du store de prévisualisation)
SAMPLE_COMMUTES = [
    ("Maison → Bureau", "bike", [1250.0, 1190.0, 1320.0]),
    ("Bureau → Maison", "subway", [1710.0, 1655.0]),
    ("Tour Du Parc", "run", [905.0]),
]


class CommuteService:
    """
    Point d'entrée des écrans / de la CLI :
      - gère un chrono (TimingSession) par trajet
      - crée / supprime trajets et sessions via le store
      - expose les statistiques
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Optional[CoreSettings] = None,
        *,
        clock: Clock = p.now,
    ) -> None:
        self.store = store
        self.settings = settings or CoreSettings.from_env()
        self._clock = clock
        self._timers: Dict[str, TimingSession] = {}
        self.store.ensure_schema()

    # ──────────────────────────────────────────────────────────────────────
    # Chrono
    # ──────────────────────────────────────────────────────────────────────
    def timing(self, commute_id: str) -> TimingSession:
        ts = self._timers.get(commute_id)
        if ts is None:
            commute = self.store.get_commute(commute_id)  # NotFoundError si inconnu
            ts = TimingSession(commute, self.store, self.settings, clock=self._clock)
            self._timers[commute_id] = ts
        return ts

    def start_timing(self, commute_id: str) -> None:
        self.timing(commute_id).start()

    def stop_timing(self, commute_id: str) -> float:
        return self.timing(commute_id).stop()

    def reset_timing(self, commute_id: str) -> None:
        ts = self._timers.get(commute_id)
        if ts is not None:
            ts.reset()

    def submit_timing(self, commute_id: str, mode: Optional[str] = None) -> SubmitResult:
        ts = self._timers.get(commute_id)
        if ts is None:
            raise InvalidStateError("submit() sans chrono arrêté pour ce trajet")
        return ts.submit(mode)

    def elapsed(self, commute_id: str) -> float:
        ts = self._timers.get(commute_id)
        return ts.elapsed if ts else 0.0

    # ──────────────────────────────────────────────────────────────────────
    # Trajets
    # ──────────────────────────────────────────────────────────────────────
    def create_commute(self, name: str, mode: Optional[str] = None) -> str:
        commute = Commute(name=name.strip() if name else "", mode=mode)
        validate_commute(commute, self.settings, clock=self._clock)
        self.store.add_commute(commute)
        log.info("Trajet créé: %s (%s)", commute.name, commute.mode)
        return commute.id

    def delete_commute(self, commute_id: str) -> bool:
        self._timers.pop(commute_id, None)
        return self.store.delete_commute(commute_id)

    def list_commutes(self) -> List[Commute]:
        return self.store.list_commutes()

    # ──────────────────────────────────────────────────────────────────────
    # Sessions
    # ──────────────────────────────────────────────────────────────────────
    def add_manual_session(
        self,
        commute_id: str,
        duration: float,
        date: Optional[p.DateTime] = None,
        mode: Optional[str] = None,
    ) -> Session:
        """Saisie manuelle : pas de chrono, mais même validation qu'un submit."""
        commute = self.store.get_commute(commute_id)
        session = Session(
            commute_id=commute.id,
            duration=duration,
            date=date,
            mode=self.settings.session_mode(commute.mode, mode),
        )
        validate_session(session, self.settings, clock=self._clock)
        self.store.add_session(session)
        return session

    def delete_session(self, session_id: str) -> bool:
        return self.store.delete_session(session_id)

    def sessions(self, commute_id: str) -> List[Session]:
        return self.store.sessions_for(commute_id)

    def get_statistics(self, commute_id: str) -> Statistics:
        return self.store.statistics(commute_id)

    def seed_samples(self) -> int:
        """Crée quelques trajets d'exemple avec un historique passé."""
        now = self._clock()
        created = 0
        for name, mode, durations in SAMPLE_COMMUTES:
            cid = self.create_commute(name, mode)
            for days_ago, duration in enumerate(durations, start=1):
                self.add_manual_session(cid, duration, date=now.subtract(days=days_ago))
            created += 1
        return created
