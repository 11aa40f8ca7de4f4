from __future__ import annotations

from typing import Any

import typer
from rich import print
from rich.markup import escape

from quotesync.config import read_config_file, write_config_file
from quotesync.db import resolve_db_path
from quotesync.store import QuoteStore
from quotesync.types import Quote

LEVEL_COLORS = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
}


def store_from_path(db_path: str | None) -> QuoteStore:
    return QuoteStore(resolve_db_path(db_path))


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def write_config_or_exit(data: dict[str, Any]) -> None:
    try:
        write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def notify(message: str, level: str = "info") -> None:
    color = LEVEL_COLORS.get(level, LEVEL_COLORS["info"])
    print(f"[{color}]{escape(message)}[/{color}]")


def format_quote(quote: Quote) -> str:
    return escape(f'"{quote.text}" - {quote.category}')
