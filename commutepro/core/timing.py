"""Chrono d'un trajet : Idle → Running → AwaitingSubmit → Idle."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import pendulum as p

from .errors import InvalidStateError, NotFoundError, PersistenceError, ValidationError
from .models import Commute, CoreSettings, Session, SubmitResult, TimingState
from .records import evaluate
from .validation import validate_session

log = logging.getLogger(__name__)

Clock = Callable[[], p.DateTime]


class TimingSession:
    """
    Tentative de chronométrage en cours pour un trajet.
    Jamais persistée : seule `submit()` écrit dans le store.
    """

    def __init__(
        self,
        commute: Commute,
        store,
        settings: Optional[CoreSettings] = None,
        *,
        clock: Clock = p.now,
    ) -> None:
        self.commute = commute
        self._store = store
        self._settings = settings or CoreSettings.from_env()
        self._clock = clock
        self.state = TimingState.IDLE
        self.started_at: Optional[p.DateTime] = None
        self.candidate_duration: Optional[float] = None

    @property
    def elapsed(self) -> float:
        if self.state is TimingState.RUNNING:
            return (self._clock() - self.started_at).total_seconds()
        if self.state is TimingState.AWAITING_SUBMIT:
            return self.candidate_duration
        return 0.0

    # ──────────────────────────────────────────────────────────────────────
    # Transitions
    # ──────────────────────────────────────────────────────────────────────
    def start(self) -> None:
        if self.state is not TimingState.IDLE:
            raise InvalidStateError(f"start() impossible dans l'état {self.state.value}")
        self.started_at = self._clock()
        self.state = TimingState.RUNNING
        log.debug("Chrono démarré pour %s", self.commute.name)

    def stop(self) -> float:
        if self.state is not TimingState.RUNNING:
            raise InvalidStateError(f"stop() impossible dans l'état {self.state.value}")
        self.candidate_duration = max(0.0, (self._clock() - self.started_at).total_seconds())
        self.state = TimingState.AWAITING_SUBMIT
        return self.candidate_duration

    def reset(self) -> None:
        # l'état passe à IDLE avant d'effacer started_at (lu par le ticker)
        self.state = TimingState.IDLE
        self.started_at = None
        self.candidate_duration = None

    discard = reset

    def submit(self, mode: Optional[str] = None) -> SubmitResult:
        if self.state is not TimingState.AWAITING_SUBMIT:
            raise InvalidStateError(f"submit() impossible dans l'état {self.state.value}")

        duration = self.candidate_duration
        if duration < self._settings.min_submit_duration:
            log.debug("Durée %.2fs sous le seuil (%.1fs) — ignorée", duration, self._settings.min_submit_duration)
            self.reset()
            return SubmitResult(too_short=True)

        session = Session(
            commute_id=self.commute.id,
            duration=duration,
            date=self._clock(),
            mode=self._settings.session_mode(self.commute.mode, mode),
        )

        try:
            validate_session(session, self._settings, clock=self._clock)
        except ValidationError as e:
            return SubmitResult(error=e)

        try:
            # Historique lu AVANT l'ajout de la nouvelle session
            verdict = evaluate(duration, self._store.sessions_for(self.commute.id), now=self._clock())
            self._store.add_session(session)
        except (PersistenceError, NotFoundError) as e:
            log.error("Session non enregistrée pour %s: %s", self.commute.name, e)
            return SubmitResult(error=e)

        self.reset()
        if verdict.is_pr:
            log.info("Nouveau record sur %s: %.1fs", self.commute.name, duration)
        else:
            log.info("Session enregistrée sur %s: %.1fs", self.commute.name, duration)
        return SubmitResult(
            committed=True,
            pr_achieved=verdict.is_pr,
            best_previous=verdict.best_previous,
            session=session,
        )


class ElapsedTicker:
    """
    Rappel périodique pour l'affichage du temps écoulé.
    Lecture seule : appelle `on_tick(read_elapsed())` toutes les `interval` s
    jusqu'à `cancel()`.
    """

    def __init__(
        self,
        read_elapsed: Callable[[], float],
        on_tick: Callable[[float], None],
        interval: float = 1.0,
    ) -> None:
        self._read = read_elapsed
        self._on_tick = on_tick
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="elapsed-ticker", daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            self._on_tick(self._read())

    def cancel(self) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 1.0)
        self._thread = None
