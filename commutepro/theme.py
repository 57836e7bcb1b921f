from __future__ import annotations
from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

_theme = Theme({
    "ok": "bold green",
    "warn": "bold yellow",
    "err": "bold red",
    "muted": "grey50",
    "title": "bold white",
    "accent": "cyan",
    "pr": "bold magenta",        # nouveau record
    "chrono": "bold cyan",       # temps écoulé / durées
})

console = Console(theme=_theme)
# erreurs sur stderr
err_console = Console(theme=_theme, stderr=True)

print = console.print


def print_err(message: str) -> None:
    err_console.print(f"[err]{escape(message)}[/]", highlight=False)
