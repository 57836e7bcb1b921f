from __future__ import annotations
import os
from typing import Dict, Tuple
import pendulum as p

from .. import config

ENV_GROUPS = {
    "Core": {
        "COMMUTE_TZ": "",
        "COMMUTE_DB_PATH": "commutepro.sqlite3",
    },
    "Modes": {
        "COMMUTE_MODES": "walk,bike,run,subway,drive,bike + subway",
        "COMMUTE_DEFAULT_MODE": "walk",
        "COMMUTE_PER_SESSION_MODE": "1",
        "COMMUTE_SESSION_MODE_FALLBACK": "commute",
    },
    "Chrono": {
        "COMMUTE_MIN_DURATION_S": "1",
        "COMMUTE_MIN_DURATION_MODE_S": "3",
        "COMMUTE_TICK_S": "1.0",
    },
}

_FLOAT_KEYS = ["COMMUTE_MIN_DURATION_S", "COMMUTE_MIN_DURATION_MODE_S", "COMMUTE_TICK_S"]


def generate_env_example() -> str:
    lines = [
        "# Commute Pro — .env.example",
        "# Duplique ce fichier en .env et ajuste les valeurs si besoin.",
        "# COMMUTE_TZ vide = fuseau local du système.",
        "",
    ]
    for group, values in ENV_GROUPS.items():
        lines.append(f"### {group}")
        lines.extend(f'{k}="{v}"' for k, v in values.items())
        lines.append("")
    return "\n".join(lines)


def write_env_example(path: str = ".env.example", overwrite: bool = False) -> str:
    if os.path.exists(path) and not overwrite:
        return path
    with open(path, "w", encoding="utf-8") as f:
        f.write(generate_env_example())
    return path


def check_env() -> Tuple[Dict[str, bool], Dict[str, str]]:
    """
    Retourne (status_par_clef, erreurs_par_clef).
    Aucune clé n'est obligatoire : on vérifie seulement que les valeurs
    présentes sont exploitables.
    """
    status: Dict[str, bool] = {}
    errors: Dict[str, str] = {}

    for k in _FLOAT_KEYS:
        raw = os.getenv(k)
        try:
            ok = raw is None or float(raw) >= 0
        except ValueError:
            ok = False
        status[k] = ok
        if not ok:
            errors[k] = f"nombre positif attendu (reçu: {raw!r})"

    tz = os.getenv("COMMUTE_TZ")
    status["COMMUTE_TZ"] = True
    if tz:
        try:
            p.timezone(tz)
        except Exception:  # InvalidTimezone / ZoneInfoNotFoundError selon la version
            status["COMMUTE_TZ"] = False
            errors["COMMUTE_TZ"] = f"fuseau inconnu: {tz}"

    modes = {m.lower() for m in config.MODES}
    status["COMMUTE_MODES"] = bool(modes)
    if not modes:
        errors["COMMUTE_MODES"] = "au moins un mode requis"
    status["COMMUTE_DEFAULT_MODE"] = config.DEFAULT_MODE.lower() in modes

    return status, errors
