from __future__ import annotations

import logging
from typing import Optional

import typer
from rich import print

from . import __version__
from .commands.common import (
    read_config_or_exit,
    store_from_path,
    write_config_or_exit,
)
from .commands.config_cmds import config_set_cmd, config_show_cmd
from .commands.import_export_cmds import export_quotes_cmd, import_quotes_cmd
from .commands.quote_cmds import add_cmd, categories_cmd, last_cmd, list_cmd, show_cmd
from .commands.sync_cmds import (
    sync_attempts_cmd,
    sync_daemon_cmd,
    sync_once_cmd,
    sync_status_cmd,
)
from .config import get_config_path, load_config
from .sync.daemon import run_sync_daemon
from .sync.remote import post_quote_to_server
from .sync.sync_pass import sync_quotes

app = typer.Typer(help="quotesync: a local quote list kept in step with a remote API")
sync_app = typer.Typer(help="Reconcile local quotes with the server")
config_app = typer.Typer(help="Inspect and edit configuration")
app.add_typer(sync_app, name="sync")
app.add_typer(config_app, name="config")


def _store(db_path: str | None):
    return store_from_path(db_path)


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else load_config().log_level
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    _configure_logging(verbose)


@app.command()
def version() -> None:
    """Print the installed version."""

    print(__version__)


@app.command("init-db")
def init_db(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Create the database and seed the default quotes."""

    store = _store(db_path)
    try:
        print(f"Initialized database at {store.db_path} ({store.count()} quotes)")
    finally:
        store.close()


@app.command()
def show(
    category: Optional[str] = typer.Option(
        None, help="Category to draw from ('all' for every quote)"
    ),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Show a random quote."""

    show_cmd(store_from_path=_store, db_path=db_path, category=category)


@app.command()
def last(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Show the last quote displayed."""

    last_cmd(store_from_path=_store, db_path=db_path)


@app.command()
def add(
    text: str,
    category: str,
    post: Optional[bool] = typer.Option(
        None, "--post/--no-post", help="Send the quote to the server (default from config)"
    ),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Add a new quote."""

    add_cmd(
        store_from_path=_store,
        load_config=load_config,
        post_quote_to_server=post_quote_to_server,
        db_path=db_path,
        text=text,
        category=category,
        post=post,
    )


@app.command("list")
def list_quotes(
    category: Optional[str] = typer.Option(None, help="Only quotes in this category"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """List stored quotes."""

    list_cmd(store_from_path=_store, db_path=db_path, category=category)


@app.command()
def categories(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """List categories."""

    categories_cmd(store_from_path=_store, db_path=db_path)


@app.command("export")
def export_quotes(
    output: str = typer.Option("quotes.json", "--output", "-o", help="Output file path"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Export quotes to JSON."""

    export_quotes_cmd(store_from_path=_store, db_path=db_path, output=output)


@app.command("import")
def import_quotes(
    input_file: str = typer.Argument(..., help="JSON file to import"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Import quotes from JSON."""

    import_quotes_cmd(store_from_path=_store, db_path=db_path, input_file=input_file)


@sync_app.command("once")
def sync_once(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Run a single sync pass."""

    sync_once_cmd(
        store_from_path=_store,
        load_config=load_config,
        sync_quotes=sync_quotes,
        db_path=db_path,
    )


@sync_app.command("daemon")
def sync_daemon(
    interval_s: Optional[int] = typer.Option(
        None, "--interval", help="Seconds between sync passes (default from config)"
    ),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Sync periodically in the foreground."""

    sync_daemon_cmd(
        load_config=load_config,
        run_sync_daemon=run_sync_daemon,
        db_path=db_path,
        interval_s=interval_s,
    )


@sync_app.command("attempts")
def sync_attempts(
    limit: int = typer.Option(10, help="Number of attempts to show"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Show recent sync attempts."""

    sync_attempts_cmd(store_from_path=_store, db_path=db_path, limit=limit)


@sync_app.command("status")
def sync_status(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Show sync configuration and recent results."""

    sync_status_cmd(store_from_path=_store, load_config=load_config, db_path=db_path)


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""

    config_show_cmd(load_config=load_config, get_config_path=get_config_path)


@config_app.command("set")
def config_set(key: str, value: str) -> None:
    """Set a configuration value."""

    config_set_cmd(
        read_config_or_exit=read_config_or_exit,
        write_config_or_exit=write_config_or_exit,
        key=key,
        value=value,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
