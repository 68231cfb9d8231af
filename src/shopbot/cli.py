"""Command-line interface for shopbot."""

from __future__ import annotations

import asyncio
import json
import time
from typing import Optional

import typer

from shopbot.config import get_settings
from shopbot.db.repository import get_engine
from shopbot.discord.client import DiscordClient
from shopbot.logging_utils import configure_logging
from shopbot.models.events import SuggestionField
from shopbot.shopping.reconcile import Reconciler
from shopbot.shopping.store import DatabaseItemStore
from shopbot.shopping.suggestions import SuggestionRanker

app = typer.Typer(help="Shared shopping-list bot commands.")


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(
        settings.log_level,
        settings.log_format,
        [settings.api_token or "", settings.discord_bot_token or ""],
    )


@app.command("init-db")
def init_db() -> None:
    """Create the database schema if it does not exist yet."""

    settings = get_settings()
    get_engine()
    typer.echo(f"Database ready at {settings.database_path}")


@app.command()
def suggest(
    prefix: str = typer.Argument("", help="Text typed so far."),
    field: SuggestionField = typer.Option(SuggestionField.ITEM, "--field", help="Option to complete."),
    user_id: int = typer.Option(0, "--user-id", help="User whose history is preferred."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """
    Print the autocomplete suggestions the bot would offer for PREFIX.
    """
    settings = get_settings()
    ranker = SuggestionRanker(
        DatabaseItemStore(),
        history_limit=settings.suggestion_history_limit,
    )
    values = ranker.suggest_values(field, user_id, prefix)
    typer.echo(json.dumps(values, indent=2 if pretty else None))


@app.command()
def reconcile(
    once: bool = typer.Option(False, "--once", help="Run a single sweep then exit."),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Override the seconds between sweeps.",
    ),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="Override batch size."),
) -> None:
    """Reconcile stored items with the messages that render them."""

    _setup_logging()
    settings = get_settings()
    reconciler = Reconciler(
        DatabaseItemStore(),
        DiscordClient(),
        batch_size=batch_size or settings.reconcile_batch_size,
    )

    if once:
        repairs = asyncio.run(reconciler.sweep())
        typer.echo(json.dumps(repairs, sort_keys=True))
        return

    pause = interval or settings.reconcile_interval
    typer.echo("Starting reconciliation loop. Press Ctrl+C to stop.")
    try:
        while True:
            asyncio.run(reconciler.sweep())
            time.sleep(pause)
    except KeyboardInterrupt:
        typer.echo("Stopping reconciliation…")


@app.command()
def serve() -> None:
    """Run the interactions HTTP server."""

    from shopbot.server.run import main as run_server

    run_server()


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m shopbot`."""
    app(prog_name="shopbot", args=argv)


if __name__ == "__main__":
    main()
