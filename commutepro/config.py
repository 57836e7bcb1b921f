# commutepro/config.py
from __future__ import annotations
import os
from dotenv import load_dotenv

# Charge automatiquement .env (à la racine du projet)
load_dotenv(override=False)


def _bool(envval: str | None, default: bool = False) -> bool:
    if envval is None:
        return default
    return envval.strip().lower() in {"1", "true", "yes", "on", "y"}


def _list(envval: str | None, default: str) -> list[str]:
    raw = envval if envval is not None else default
    return [part.strip() for part in raw.split(",") if part.strip()]


# ----- Timezone d'affichage -----
# Vide → fuseau local du système
COMMUTE_TZ = os.getenv("COMMUTE_TZ") or None


# ----- Modes de transport -----
MODES = _list(os.getenv("COMMUTE_MODES"), "walk,bike,run,subway,drive,bike + subway")
DEFAULT_MODE = os.getenv("COMMUTE_DEFAULT_MODE", "walk")


# ----- Chrono -----
# Seuils anti-bruit : flux historique (sans mode) vs flux avec mode par session
MIN_DURATION_S = float(os.getenv("COMMUTE_MIN_DURATION_S", "1"))
MIN_DURATION_MODE_S = float(os.getenv("COMMUTE_MIN_DURATION_MODE_S", "3"))
PER_SESSION_MODE = _bool(os.getenv("COMMUTE_PER_SESSION_MODE"), default=True)
SESSION_MODE_FALLBACK = os.getenv("COMMUTE_SESSION_MODE_FALLBACK", "commute")  # "commute" | "global"
TICK_S = float(os.getenv("COMMUTE_TICK_S", "1.0"))


# ----- Storage -----
DB_PATH = os.getenv("COMMUTE_DB_PATH", "commutepro.sqlite3")


# ──────────────────────────────────────────────
# Cohérence de la configuration
# ──────────────────────────────────────────────
if DEFAULT_MODE.lower() not in {m.lower() for m in MODES}:
    raise RuntimeError(
        f"COMMUTE_DEFAULT_MODE={DEFAULT_MODE!r} absent de COMMUTE_MODES ({', '.join(MODES)})\n"
        f"👉 Vérifie ton fichier .env"
    )

if SESSION_MODE_FALLBACK not in {"commute", "global"}:
    raise RuntimeError(
        f"COMMUTE_SESSION_MODE_FALLBACK doit valoir 'commute' ou 'global' (reçu: {SESSION_MODE_FALLBACK!r})"
    )
