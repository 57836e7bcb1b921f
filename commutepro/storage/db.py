# commutepro/storage/db.py
from __future__ import annotations
import logging, sqlite3, pendulum as p
from typing import Callable, List, Optional, Tuple

from .. import config
from ..core.errors import NotFoundError, PersistenceError
from ..core.models import Commute, Session, Statistics
from ..core.records import compute_statistics

log = logging.getLogger(__name__)


def _to_ts(dt: p.DateTime) -> float:
    return dt.timestamp()


def _from_ts(ts: Optional[float]) -> Optional[p.DateTime]:
    return p.from_timestamp(ts, tz="UTC") if ts is not None else None


class EntityStore:
    """
    Trajets + sessions dans SQLite.
      - une connexion par store (":memory:" accepté)
      - suppression d'un trajet → sessions supprimées en cascade (FK)
      - toute sqlite3.Error remonte en PersistenceError
    """

    def __init__(self, path: Optional[str] = None, *, clock: Callable[[], p.DateTime] = p.now):
        self.path = path or config.DB_PATH
        self._clock = clock
        self._con: Optional[sqlite3.Connection] = None

    # ── connexion unique ───────────────────────────────────────────────────────
    def _connect(self) -> sqlite3.Connection:
        if self._con is None:
            try:
                con = sqlite3.connect(self.path)
                if self.path != ":memory:":
                    con.execute("PRAGMA journal_mode=WAL;")
                con.execute("PRAGMA synchronous=NORMAL;")
                con.execute("PRAGMA foreign_keys=ON;")
            except sqlite3.Error as e:
                raise PersistenceError(f"Failed to load data: {e}") from e
            self._con = con
        return self._con

    def close(self) -> None:
        if self._con is not None:
            self._con.close()
            self._con = None

    def __enter__(self) -> "EntityStore":
        self.ensure_schema()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _write(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        con = self._connect()
        try:
            with con:  # commit / rollback
                return con.execute(sql, params)
        except sqlite3.Error as e:
            log.error("Écriture SQLite échouée: %s", e)
            raise PersistenceError(f"Failed to save data: {e}") from e

    def _read(self, sql: str, params: tuple = ()) -> list:
        try:
            return self._connect().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to load data: {e}") from e

    # ── init DB ────────────────────────────────────────────────────────────────
    def ensure_schema(self) -> None:
        con = self._connect()
        try:
            with con:
                con.execute("""
                CREATE TABLE IF NOT EXISTS commutes (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    created_at REAL            -- epoch UTC
                )
                """)
                con.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    commute_id TEXT NOT NULL REFERENCES commutes(id) ON DELETE CASCADE,
                    duration REAL NOT NULL CHECK (duration >= 0),
                    date REAL NOT NULL,        -- epoch UTC
                    mode TEXT
                )
                """)
                con.execute("CREATE INDEX IF NOT EXISTS idx_sessions_commute ON sessions(commute_id, date)")
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to load data: {e}") from e

    # ── trajets ────────────────────────────────────────────────────────────────
    def add_commute(self, commute: Commute) -> None:
        self._write(
            "INSERT INTO commutes(id, name, mode, created_at) VALUES (?, ?, ?, ?)",
            (commute.id, commute.name, commute.mode,
             _to_ts(commute.created_at) if commute.created_at else None),
        )

    def get_commute(self, commute_id: str) -> Commute:
        rows = self._read("SELECT id, name, mode, created_at FROM commutes WHERE id=?", (commute_id,))
        if not rows:
            raise NotFoundError(f"Trajet introuvable: {commute_id}")
        cid, name, mode, created = rows[0]
        return Commute(id=cid, name=name, mode=mode, created_at=_from_ts(created))

    def list_commutes(self) -> List[Commute]:
        rows = self._read("SELECT id, name, mode, created_at FROM commutes ORDER BY name COLLATE NOCASE ASC")
        return [Commute(id=i, name=n, mode=m, created_at=_from_ts(c)) for (i, n, m, c) in rows]

    def delete_commute(self, commute_id: str) -> bool:
        """Supprime le trajet et (cascade) toutes ses sessions."""
        cur = self._write("DELETE FROM commutes WHERE id=?", (commute_id,))
        if cur.rowcount == 0:
            log.warning("delete_commute: %s inconnu", commute_id)
        return cur.rowcount > 0

    # ── sessions ───────────────────────────────────────────────────────────────
    def add_session(self, session: Session) -> None:
        if session.id is None or session.date is None:
            raise PersistenceError("Session non validée (id/date manquants)")
        if not self._read("SELECT 1 FROM commutes WHERE id=?", (session.commute_id,)):
            raise NotFoundError(f"Trajet introuvable: {session.commute_id}")
        self._write(
            "INSERT INTO sessions(id, commute_id, duration, date, mode) VALUES (?, ?, ?, ?, ?)",
            (session.id, session.commute_id, float(session.duration), _to_ts(session.date), session.mode),
        )

    def get_session(self, session_id: str) -> Session:
        rows = self._read(
            "SELECT id, commute_id, duration, date, mode FROM sessions WHERE id=?", (session_id,)
        )
        if not rows:
            raise NotFoundError(f"Session introuvable: {session_id}")
        sid, cid, dur, date, mode = rows[0]
        return Session(id=sid, commute_id=cid, duration=dur, date=_from_ts(date), mode=mode)

    def delete_session(self, session_id: str) -> bool:
        cur = self._write("DELETE FROM sessions WHERE id=?", (session_id,))
        return cur.rowcount > 0

    def clear_sessions(self, commute_id: str) -> int:
        """Suppression en lot des sessions d'un trajet (le trajet reste)."""
        cur = self._write("DELETE FROM sessions WHERE commute_id=?", (commute_id,))
        return cur.rowcount

    def sessions_for(self, commute_id: str) -> List[Session]:
        """Sessions du trajet, la plus récente d'abord."""
        rows = self._read(
            "SELECT id, commute_id, duration, date, mode FROM sessions "
            "WHERE commute_id=? ORDER BY date DESC",
            (commute_id,),
        )
        return [
            Session(id=sid, commute_id=cid, duration=dur, date=_from_ts(date), mode=mode)
            for (sid, cid, dur, date, mode) in rows
        ]

    def statistics(self, commute_id: str) -> Statistics:
        # Trajet inconnu/supprimé → aucune session → Statistics() à zéro
        return compute_statistics(self.sessions_for(commute_id), now=self._clock())

    # ── outils ─────────────────────────────────────────────────────────────────
    def counts(self) -> Tuple[int, int]:
        (n_commutes,), = self._read("SELECT COUNT(*) FROM commutes")
        (n_sessions,), = self._read("SELECT COUNT(*) FROM sessions")
        return n_commutes, n_sessions

    def reset_all(self) -> Tuple[int, int]:
        n_commutes, n_sessions = self.counts()
        self._write("DELETE FROM commutes")  # cascade sur sessions
        return n_commutes, n_sessions
