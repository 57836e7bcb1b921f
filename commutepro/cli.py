# commutepro/cli.py
from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from . import config
from .theme import console, print, print_err
from .log import setup_logging
from .core.errors import CommuteProError, NotFoundError, PersistenceError, ValidationError
from .core.models import Commute, SubmitResult
from .core.timing import ElapsedTicker
from .services.commute_service import CommuteService
from .storage.db import EntityStore
from .utils.dates import (
    format_duration,
    iso_local,
    mode_emoji,
    normalize_name,
    parse_duration,
    parse_when,
)
from .utils.envtools import write_env_example, check_env

app = typer.Typer(help="Commute Pro — chronomètre tes trajets, bats tes records.")

_state = {"db": config.DB_PATH}

# ──────────────────────────────────────────────────────────────────────────────
# Init / logging
# ──────────────────────────────────────────────────────────────────────────────
@app.callback()
def _init(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logs détaillés."),
    db: str = typer.Option(config.DB_PATH, "--db", help="Fichier SQLite des trajets."),
):
    import logging
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    _state["db"] = db


def _service() -> CommuteService:
    return CommuteService(EntityStore(_state["db"]))


def _resolve(svc: CommuteService, ref: str) -> Commute:
    """Trajet par id exact, sinon par nom (insensible à la casse)."""
    for c in svc.list_commutes():
        if c.id == ref or c.name.lower() == ref.strip().lower():
            return c
    raise NotFoundError(f"Trajet introuvable: {ref}")


def _fail(e: CommuteProError) -> None:
    print_err(str(e))
    raise typer.Exit(code=1)

# ──────────────────────────────────────────────────────────────────────────────
# ENV
# ──────────────────────────────────────────────────────────────────────────────
@app.command("env-example")
def env_example(
    force: bool = typer.Option(
        False, "--force", "-f", help="Écrase .env.example s’il existe déjà."
    )
):
    """Génère un fichier .env.example à la racine du projet."""
    path = write_env_example(overwrite=force)
    print(
        f"[ok]Fichier d’exemple généré : [bold]{path}[/] "
        "(duplique-le en .env et ajuste les valeurs)."
    )


@app.command("env-check")
def env_check():
    """Vérifie que les réglages présents dans l'environnement sont exploitables."""
    status, errors = check_env()

    table = Table(
        title="Vérification de l'environnement",
        show_header=True,
        header_style="accent",
    )
    table.add_column("Clé")
    table.add_column("OK ?")
    for k, ok in status.items():
        table.add_row(k, "✅" if ok else "❌")
    print(table)

    if errors:
        print("[err]Valeurs invalides :[/]")
        for k, why in errors.items():
            print(f" • [bold]{k}[/] — {why}")
        raise typer.Exit(code=1)
    print("[ok]Environnement prêt ✔[/]")

# ──────────────────────────────────────────────────────────────────────────────
# Trajets
# ──────────────────────────────────────────────────────────────────────────────
@app.command("commute-add")
def commute_add(
    name: str = typer.Argument(..., help="Nom du trajet (ex: maison bureau)"),
    mode: Optional[str] = typer.Option(
        None, "--mode", "-m", help=f"Mode de transport ({', '.join(config.MODES)})."
    ),
):
    """Crée un trajet."""
    svc = _service()
    try:
        cid = svc.create_commute(normalize_name(name), mode)
    except CommuteProError as e:
        _fail(e)
    print(f"[ok]Trajet créé[/] — [bold]{normalize_name(name)}[/] [muted]({cid})[/]")


@app.command("commute-list")
def commute_list():
    """Liste les trajets avec leurs statistiques."""
    svc = _service()
    commutes = svc.list_commutes()
    if not commutes:
        print("[muted]Aucun trajet. Lance [bold]commutepro commute-add[/].[/]")
        return

    table = Table(show_header=True, header_style="accent")
    table.add_column("Trajet")
    table.add_column("Mode")
    table.add_column("Sessions", justify="right")
    table.add_column("Moyenne", justify="right")
    table.add_column("Record", justify="right")
    table.add_column("Id", style="muted")
    for c in commutes:
        st = svc.get_statistics(c.id)
        table.add_row(
            c.name,
            f"{mode_emoji(c.mode)} {c.mode}",
            str(st.count),
            format_duration(st.average),
            format_duration(st.best),
            c.id,
        )
    print(table)


@app.command("commute-delete")
def commute_delete(
    ref: str = typer.Argument(..., help="Nom ou id du trajet"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Pas de confirmation."),
):
    """Supprime un trajet et toutes ses sessions."""
    svc = _service()
    try:
        commute = _resolve(svc, ref)
        n = len(svc.sessions(commute.id))
        if not yes and not typer.confirm(f"Supprimer « {commute.name} » et ses {n} session(s) ?"):
            raise typer.Abort()
        svc.delete_commute(commute.id)
    except CommuteProError as e:
        _fail(e)
    print(f"[ok]Trajet supprimé[/] — {commute.name} ({n} session(s))")

# ──────────────────────────────────────────────────────────────────────────────
# Chrono
# ──────────────────────────────────────────────────────────────────────────────
def _report(result: SubmitResult) -> None:
    if result.too_short:
        print("[muted]Trop court — session ignorée.[/]")
    elif result.pr_achieved:
        print("[pr]🏆 Nouveau record ![/]")
        if result.best_previous is not None:
            print(f"[muted]Ancien record : {format_duration(result.best_previous)}[/]")
    else:
        print(
            f"[ok]Session enregistrée.[/] Record à battre : "
            f"[bold]{format_duration(result.best_previous or 0)}[/]"
        )


@app.command("time")
def cmd_time(
    ref: str = typer.Argument(..., help="Nom ou id du trajet"),
    mode: Optional[str] = typer.Option(
        None, "--mode", "-m", help="Mode utilisé pour cette session (défaut : COMMUTE_SESSION_MODE_FALLBACK)."
    ),
):
    """
    Chronomètre un trajet :
    - Entrée pour démarrer, Entrée pour arrêter
    - puis enregistrement (ou abandon) de la session
    """
    svc = _service()
    try:
        commute = _resolve(svc, ref)
        timer = svc.timing(commute.id)
    except CommuteProError as e:
        _fail(e)

    print(f"[title]{mode_emoji(commute.mode)} {commute.name}[/]")
    console.input("[accent]Entrée[/] pour démarrer… ")
    timer.start()
    ticker = ElapsedTicker(
        lambda: timer.elapsed,
        lambda s: console.print(f"[chrono]⏱  {format_duration(s)}[/]", end="\r", highlight=False),
        interval=config.TICK_S,
    )
    ticker.start()
    try:
        console.input("[accent]Entrée[/] pour arrêter… ")
    finally:
        ticker.cancel()
    duration = timer.stop()
    print(f"Temps : [chrono]{format_duration(duration)}[/]")

    if svc.settings.per_session_mode and mode is None:
        mode = typer.prompt("Mode", default=svc.settings.session_mode(commute.mode))

    while True:
        if not typer.confirm("Enregistrer la session ?", default=True):
            timer.reset()
            print("[muted]Session abandonnée.[/]")
            return
        result = timer.submit(mode)
        if result.error is None:
            _report(result)
            return
        # le temps reste en attente : on corrige puis on retente
        print_err(str(result.error))
        if isinstance(result.error, ValidationError):
            mode = typer.prompt("Mode", default=svc.settings.session_mode(commute.mode))
        elif not isinstance(result.error, PersistenceError):
            raise typer.Exit(code=1)

# ──────────────────────────────────────────────────────────────────────────────
# Sessions
# ──────────────────────────────────────────────────────────────────────────────
@app.command("log")
def cmd_log(
    ref: str = typer.Argument(..., help="Nom ou id du trajet"),
    duration: str = typer.Argument(..., help="Durée : secondes, MM:SS ou HH:MM:SS"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Date ISO (défaut : maintenant)."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Mode utilisé."),
):
    """Ajoute une session saisie à la main."""
    svc = _service()
    try:
        seconds = parse_duration(duration)
        when = parse_when(date)
    except ValueError as e:
        print_err(str(e))
        raise typer.Exit(code=1)
    try:
        commute = _resolve(svc, ref)
        session = svc.add_manual_session(commute.id, seconds, date=when, mode=mode)
    except CommuteProError as e:
        _fail(e)
    print(
        f"[ok]Session ajoutée[/] — {commute.name} : [bold]{format_duration(session.duration)}[/] "
        f"le {iso_local(session.date)}"
    )


@app.command("sessions")
def cmd_sessions(ref: str = typer.Argument(..., help="Nom ou id du trajet")):
    """Historique des sessions (la plus récente d'abord)."""
    svc = _service()
    try:
        commute = _resolve(svc, ref)
    except CommuteProError as e:
        _fail(e)
    sessions = svc.sessions(commute.id)
    if not sessions:
        print(f"[muted]Aucune session pour {commute.name}.[/]")
        return

    table = Table(title=commute.name, show_header=True, header_style="accent")
    table.add_column("Date")
    table.add_column("Mode")
    table.add_column("Temps", justify="right")
    table.add_column("Id", style="muted")
    for s in sessions:
        table.add_row(iso_local(s.date), f"{mode_emoji(s.mode)} {s.mode or ''}", format_duration(s.duration), s.id)
    print(table)


@app.command("session-delete")
def cmd_session_delete(session_id: str = typer.Argument(..., help="Id de la session")):
    """Supprime une session."""
    svc = _service()
    try:
        deleted = svc.delete_session(session_id)
    except CommuteProError as e:
        _fail(e)
    if not deleted:
        print(f"[warn]Session inconnue :[/] {session_id}")
        raise typer.Exit(code=1)
    print("[ok]Session supprimée.[/]")


@app.command("stats")
def cmd_stats(ref: str = typer.Argument(..., help="Nom ou id du trajet")):
    """Moyenne, record et nombre de sessions d'un trajet."""
    svc = _service()
    try:
        commute = _resolve(svc, ref)
    except CommuteProError as e:
        _fail(e)
    st = svc.get_statistics(commute.id)
    print(f"[title]{mode_emoji(commute.mode)} {commute.name}[/]")
    print(f"• Moyenne : [bold]{format_duration(st.average)}[/]")
    print(f"• Record : [bold]{format_duration(st.best)}[/]")
    print(f"• Sessions : [bold]{st.count}[/]")

# ──────────────────────────────────────────────────────────────────────────────
# Base locale (SQLite) : exemples, stats & reset
# ──────────────────────────────────────────────────────────────────────────────
@app.command("seed")
def cmd_seed():
    """Crée des trajets d'exemple avec un petit historique."""
    svc = _service()
    try:
        n = svc.seed_samples()
    except CommuteProError as e:
        _fail(e)
    print(f"[ok]{n} trajets d'exemple créés.[/]")


@app.command("db-stats")
def db_stats():
    """Affiche l’emplacement de la base SQLite et le nombre d’entrées."""
    svc = _service()
    n_commutes, n_sessions = svc.store.counts()
    print("[title]Base locale[/]")
    print(f"• Fichier : [bold]{svc.store.path}[/]")
    print(f"• Trajets : [bold]{n_commutes}[/]")
    print(f"• Sessions : [bold]{n_sessions}[/]")


@app.command("reset-db")
def reset_db(yes: bool = typer.Option(False, "--yes", "-y", help="Pas de confirmation.")):
    """Vide tous les trajets et sessions."""
    if not yes and not typer.confirm("Tout supprimer ?"):
        raise typer.Abort()
    svc = _service()
    n_commutes, n_sessions = svc.store.reset_all()
    print(
        f"[ok]Base réinitialisée[/] — trajets supprimés: [bold]{n_commutes}[/], "
        f"sessions: [bold]{n_sessions}[/]"
    )

# ──────────────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app()
