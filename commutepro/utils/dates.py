# dates.py
from __future__ import annotations
from typing import Optional
import pendulum as p

from .. import config

MODE_EMOJI = {
    "walk": "🚶",
    "bike": "🚴",
    "run": "🏃",
    "subway": "🚇",
    "drive": "🚗",
    "bike + subway": "🚴🚇",
}


def display_tz():
    return p.timezone(config.COMMUTE_TZ) if config.COMMUTE_TZ else p.local_timezone()


def format_duration(seconds: float) -> str:
    # "MM:SS", minutes non bornées (ex: 75:03)
    total = int(seconds)
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_when(text: Optional[str], tz=None) -> p.DateTime:
    if not text or text.strip().lower() in {"now", "maintenant"}:
        return p.now(tz or display_tz())
    parsed = p.parse(text.strip(), tz=tz or display_tz())
    # p.parse rend aussi des Duration ("P2D"), Date ou Time
    if not isinstance(parsed, p.DateTime):
        raise ValueError(f"Date illisible (date et heure attendues): {text!r}")
    return parsed


def iso_local(dt: p.DateTime) -> str:
    return dt.in_timezone(display_tz()).to_datetime_string()


def normalize_name(text: str) -> str:
    # "  maison   bureau " → "Maison Bureau"
    return " ".join(w[:1].upper() + w[1:] for w in text.strip().split())


def mode_emoji(mode: Optional[str]) -> str:
    return MODE_EMOJI.get((mode or "").lower(), "•")


def parse_duration(text: str) -> float:
    # "125" / "125.5" (secondes), "02:05" (MM:SS) ou "1:02:05" (HH:MM:SS)
    parts = text.strip().split(":")
    if len(parts) > 3:
        raise ValueError(f"Durée illisible: {text!r}")
    total = 0.0
    for part in parts:
        total = total * 60 + float(part)
    return total
