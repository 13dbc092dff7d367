"""CLI entry point for the gamejolt tool.

This module is the composition root of the application.  It is the only
place that picks concrete implementations (FileCredentialStore,
AvatarCache, AvatarStore) and wires them into a GameJoltClient.
"""

import atexit
import csv
import json
import sys
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any

# Ensure UTF-8 output on Windows where stdout may default to cp1252.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import typer
from rich.console import Console
from rich.table import Table

from gamejolt.api.client import RANK_UNAVAILABLE, GameJoltClient
from gamejolt.auth.credentials import FileCredentialStore
from gamejolt.avatars.cache import AvatarCache
from gamejolt.avatars.store import AvatarStore
from gamejolt.core.config import ClientConfig
from gamejolt.core.models import Achieved, Trophy, TrophyOutcome
from gamejolt.core.result import Result
from gamejolt.log import attach_stderr_handler

app = typer.Typer(help="Game Jolt scores, trophies, and sessions.")

auth_app = typer.Typer(help="Manage the stored Game Jolt user.")
scores_app = typer.Typer(help="Submit and browse scores.")
trophies_app = typer.Typer(help="Browse and toggle trophies.")
friends_app = typer.Typer(help="Browse the user's friends.")
user_app = typer.Typer(help="Look up user profiles.")
cache_app = typer.Typer(help="Manage the avatar image cache.")

for _name, _sub in (
    ("auth", auth_app),
    ("scores", scores_app),
    ("trophies", trophies_app),
    ("friends", friends_app),
    ("user", user_app),
    ("cache", cache_app),
):
    app.add_typer(_sub, name=_name)

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)


class OutputFormat(str, Enum):
    """How listing commands print their rows."""

    table = "table"
    json = "json"
    csv = "csv"


_OUTPUT = typer.Option(
    OutputFormat.table, "--output", "-o", help="table, json, or csv."
)
_TABLE_ID = typer.Option(None, "--table", "-t", help="Score table ID.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_store() -> FileCredentialStore:
    return FileCredentialStore()


def _get_client() -> GameJoltClient:
    """Build a GameJoltClient from ``GAMEJOLT_*`` environment variables.

    Credentials come from the local credentials file; fetched avatars are
    persisted in the avatar store by background downloads that are
    drained before the process exits.  Exits with status 1 when the game
    identity is not configured.
    """
    attach_stderr_handler()
    config = ClientConfig.from_env()
    if not config.is_configured:
        err_console.print(
            "[red]Game identity is not configured.[/red] "
            "Set GAMEJOLT_GAME_ID and GAMEJOLT_PRIVATE_KEY."
        )
        raise typer.Exit(1)
    avatars = AvatarCache(store=AvatarStore())
    atexit.register(avatars.close)
    return GameJoltClient(config, store=_get_store(), image_cache=avatars)


def _unwrap(result: Result) -> Any:
    """Return the value of an ``Ok`` or exit with the ``Err`` message."""
    if result.ok:
        return result.value
    err_console.print(
        f"[red]Error ({result.kind.value}):[/red] {result.message}",
        highlight=False,
    )
    raise typer.Exit(1)


def _fmt_date(timestamp: int | None) -> str:
    if timestamp is None:
        return "—"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d")


def _print_rows(
    rows: list[dict], fields: list[str], output: OutputFormat
) -> bool:
    """Print *rows* as JSON or CSV.

    Args:
        rows: Serialisable records.
        fields: CSV columns, in order.  Other keys are left out of CSV
            but kept in JSON.
        output: Requested format.

    Returns:
        ``False`` for :attr:`OutputFormat.table`, which the caller renders
        itself.
    """
    if output == OutputFormat.json:
        print(json.dumps(rows, indent=2))
        return True
    if output == OutputFormat.csv:
        writer = csv.DictWriter(
            sys.stdout, fieldnames=fields, extrasaction="ignore", lineterminator="\n"
        )
        writer.writeheader()
        writer.writerows(rows)
        return True
    return False


def _trophy_row(trophy: Trophy) -> dict:
    row = asdict(trophy)
    row["achieved"] = (
        trophy.achieved.elapsed if isinstance(trophy.achieved, Achieved) else False
    )
    return row


def _plural(n: int, word: str = "entry", plural: str = "entries") -> str:
    return f"{n} {word if n == 1 else plural}"


# ---------------------------------------------------------------------------
# auth commands
# ---------------------------------------------------------------------------


@auth_app.command()
def login(
    username: str = typer.Option(..., prompt="Game Jolt username"),
    token: str = typer.Option(
        ..., prompt="Game token", hide_input=True, help="Your game token."
    ),
):
    """Store a username/token pair and open a session with it."""
    client = _get_client()
    with console.status("[dim]Validating credentials…[/dim]", spinner="dots"):
        _unwrap(client.set_user_info(username, token))
        profile = _unwrap(client.initialize())
    console.print(
        f"[green]✓ Logged in as[/green] [bold]{profile.username}[/bold]"
    )
    console.print(f"[dim]Credentials saved to: {client.store.path}[/dim]")


@auth_app.command()
def status():
    """Show the stored user and whether their session is open."""
    store = _get_store()
    credentials = store.read()
    if credentials is None:
        console.print("[yellow]No credentials stored.[/yellow]")
        console.print("Run [bold]gamejolt auth login[/bold].")
        raise typer.Exit(1)

    console.print(
        f"[green]✓ Stored user[/green]  {credentials.username}  "
        f"[dim]({store.path})[/dim]"
    )
    client = _get_client()
    with console.status("[dim]Checking session…[/dim]", spinner="dots"):
        logged = client.check_session()
    if logged:
        console.print("[green]✓ Session open.[/green]")
    else:
        console.print("[yellow]No open session.[/yellow]")


@auth_app.command()
def ping(
    idle: bool = typer.Option(False, "--idle", help="Report the user as idle."),
):
    """Keep the current session alive."""
    client = _get_client()
    _unwrap(client.ping_session("idle" if idle else "active"))
    console.print("[green]✓ Session pinged.[/green]")


@auth_app.command()
def logout():
    """Close the session and forget the stored credentials."""
    _unwrap(_get_client().logout())
    console.print("[green]✓ Logged out.[/green]")


@auth_app.command()
def clear():
    """Remove the local credentials file without contacting the service."""
    if _get_store().clear():
        console.print("[green]✓ Credentials removed.[/green]")
    else:
        console.print("[yellow]Nothing to remove.[/yellow]")


# ---------------------------------------------------------------------------
# scores commands
# ---------------------------------------------------------------------------


_SCORE_FIELDS = [
    "score", "sort", "extra_data", "user", "user_id",
    "guest", "stored", "stored_timestamp",
]


@scores_app.command("list")
def scores_list(
    table_id: int | None = _TABLE_ID,
    limit: int = typer.Option(10, "--limit", "-n", help="1 to 100."),
    delimiter: int | None = typer.Option(
        None,
        "--delimiter",
        help="Positive: better than this sort value. Negative: worse than.",
    ),
    mine: bool = typer.Option(False, "--mine", help="Only your own scores."),
    output: OutputFormat = _OUTPUT,
):
    """List scores from a table."""
    data = _unwrap(
        _get_client().fetch_scores(
            table_id=table_id, limit=limit, delimiter=delimiter, only_user=mine
        )
    )
    if _print_rows([asdict(s) for s in data], _SCORE_FIELDS, output):
        return

    table = Table(title="Scores")
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Player", style="cyan")
    table.add_column("Score")
    table.add_column("Sort", justify="right")
    table.add_column("Stored", justify="right")
    for rank, s in enumerate(data, 1):
        player = s.user or (f"{s.guest} (guest)" if s.guest else "—")
        table.add_row(
            str(rank), player, s.score, str(s.sort), _fmt_date(s.stored_timestamp)
        )
    console.print(table)
    console.print(f"[dim]{_plural(len(data), 'score', 'scores')}[/]")


@scores_app.command("add")
def scores_add(
    score: str,
    sort: int,
    table_id: int | None = _TABLE_ID,
    extra_data: str = typer.Option("", "--extra-data"),
    guest: str | None = typer.Option(
        None, "--guest", help="Submit as a guest with this name."
    ),
):
    """Submit a score."""
    added = _unwrap(
        _get_client().add_score(
            score, sort, table_id=table_id, extra_data=extra_data, guest=guest
        )
    )
    console.print(
        f"[green]✓ Score added:[/green] {added.score} (sort {added.sort})"
    )


@scores_app.command("rank")
def scores_rank(table_id: int | None = _TABLE_ID):
    """Show your global rank on a table."""
    client = _get_client()
    with console.status("[dim]Fetching rank…[/dim]", spinner="dots"):
        rank = client.fetch_rank(table_id)
    if rank == RANK_UNAVAILABLE:
        err_console.print(
            "[yellow]Rank unavailable.[/yellow] "
            "Log in and submit a score first."
        )
        raise typer.Exit(1)
    console.print(f"Rank: [bold cyan]#{rank}[/bold cyan]")


@scores_app.command("tables")
def scores_tables(output: OutputFormat = _OUTPUT):
    """List the game's score tables."""
    data = _unwrap(_get_client().fetch_tables())
    fields = ["id", "name", "description", "primary"]
    if _print_rows([asdict(t) for t in data], fields, output):
        return

    table = Table(title="Score tables")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Primary", justify="center")
    for t in data:
        table.add_row(str(t.id), t.name, t.description, "✓" if t.primary else "")
    console.print(table)


# ---------------------------------------------------------------------------
# trophies commands
# ---------------------------------------------------------------------------


_DIFFICULTY_STYLE: dict[str, str] = {
    "Bronze": "dark_orange3",
    "Silver": "grey70",
    "Gold": "gold1",
    "Platinum": "cyan",
}

_OUTCOME_MESSAGE: dict[TrophyOutcome, str] = {
    TrophyOutcome.ACHIEVED: "[green]✓ Trophy achieved.[/green]",
    TrophyOutcome.ALREADY_ACHIEVED: "[yellow]Trophy was already achieved.[/yellow]",
    TrophyOutcome.REMOVED: "[green]✓ Trophy removed.[/green]",
    TrophyOutcome.NOT_ACHIEVED: "[yellow]Trophy was not achieved yet.[/yellow]",
}


@trophies_app.command("list")
def trophies_list(
    achieved: bool | None = typer.Option(
        None,
        "--achieved/--unachieved",
        help="Only earned, or only unearned, trophies.",
    ),
    output: OutputFormat = _OUTPUT,
):
    """List the game's trophies and your progress."""
    data = _unwrap(_get_client().fetch_trophies(achieved=achieved))
    fields = ["id", "title", "difficulty", "description", "achieved"]
    if _print_rows([_trophy_row(t) for t in data], fields, output):
        return

    table = Table(title="Trophies")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Achieved", justify="right")
    for t in data:
        style = _DIFFICULTY_STYLE.get(t.difficulty)
        difficulty = f"[{style}]{t.difficulty}[/{style}]" if style else t.difficulty
        earned = (
            f"[green]{t.achieved.elapsed}[/green]" if t.is_achieved else "—"
        )
        table.add_row(str(t.id), t.title, difficulty, earned)
    console.print(table)
    earned_count = sum(t.is_achieved for t in data)
    console.print(f"[dim]{earned_count}/{len(data)} achieved[/]")


@trophies_app.command("add")
def trophies_add(trophy_id: int):
    """Mark a trophy as achieved."""
    outcome = _unwrap(_get_client().add_trophy(trophy_id))
    console.print(_OUTCOME_MESSAGE[outcome])


@trophies_app.command("remove")
def trophies_remove(trophy_id: int):
    """Revoke an achieved trophy."""
    outcome = _unwrap(_get_client().remove_trophy(trophy_id))
    console.print(_OUTCOME_MESSAGE[outcome])


# ---------------------------------------------------------------------------
# friends / user commands
# ---------------------------------------------------------------------------


_PROFILE_FIELDS = [
    "id", "username", "type", "status", "last_logged_in",
    "signed_up_timestamp", "last_logged_in_timestamp",
]


@friends_app.command("list")
def friends_list(
    workers: int = typer.Option(
        1,
        "--workers",
        "-w",
        help="Profiles fetched in parallel. 1 fetches one at a time.",
    ),
    output: OutputFormat = _OUTPUT,
):
    """List your friends."""
    client = _get_client()
    with console.status("[dim]Fetching friends…[/dim]", spinner="dots"):
        data = _unwrap(client.fetch_friends(max_workers=max(1, workers)))
    if _print_rows([asdict(p) for p in data], _PROFILE_FIELDS, output):
        return

    table = Table(title="Friends")
    table.add_column("Username", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Last seen", justify="right")
    for p in data:
        table.add_row(p.username, p.type, p.last_logged_in or "—")
    console.print(table)
    console.print(f"[dim]{_plural(len(data), 'friend', 'friends')}[/]")


@user_app.command("show")
def user_show(
    username: str | None = typer.Argument(
        None, help="Username to look up. Defaults to the stored user."
    ),
    user_id: int | None = typer.Option(None, "--id"),
    output: OutputFormat = _OUTPUT,
):
    """Show a user's profile."""
    client = _get_client()
    if user_id is None and not username:
        profile = _unwrap(client.fetch_current_user())
    else:
        profile = _unwrap(client.fetch_user(user_id=user_id, username=username))

    if _print_rows([asdict(profile)], _PROFILE_FIELDS, output):
        return

    console.print(
        f"[bold cyan]{profile.username}[/bold cyan]  [dim]#{profile.id}[/dim]"
    )
    for label, value in (
        ("Type", profile.type),
        ("Status", profile.status),
        ("Signed up", profile.signed_up),
        ("Last seen", profile.last_logged_in),
        ("Developer", profile.developer_name),
        ("Website", profile.developer_website),
    ):
        if value:
            console.print(f"  {label:<9} : {value}")


# ---------------------------------------------------------------------------
# cache commands
# ---------------------------------------------------------------------------


@cache_app.command(name="stats")
def cache_stats() -> None:
    """Show how many avatars are stored and how much space they use."""
    store = AvatarStore()
    s = store.stats()
    if not s:
        err_console.print(f"[yellow]Cannot read {store.path}.[/yellow]")
        raise typer.Exit(1)
    console.print(
        f"Avatars : {s['active']} valid, {s['expired']} expired "
        f"({s['total']} total)"
    )
    console.print(f"Images  : {s['size_bytes'] / 1024:.1f} KB")
    console.print(f"Database: {store.path}")


@cache_app.command(name="clear")
def cache_clear(
    expired_only: bool = typer.Option(
        False, "--expired", help="Only drop avatars past their TTL."
    ),
) -> None:
    """Delete stored avatar images."""
    store = AvatarStore()
    if expired_only:
        console.print(f"Removed {_plural(store.purge_expired())} past their TTL.")
    else:
        console.print(f"Removed {_plural(store.clear())}.")
