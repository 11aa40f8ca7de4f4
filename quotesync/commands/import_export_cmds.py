from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich import print
from rich.markup import escape

from quotesync.store import QuoteStore
from quotesync.types import Quote

from .common import notify


def parse_import_entries(data: Any) -> list[dict[str, Any]]:
    """Validate a decoded import file and return its entries.

    Every entry must be an object with non-blank ``text`` and ``category``.
    """

    if not isinstance(data, list):
        raise ValueError("import file must contain a JSON array of quotes")
    entries: list[dict[str, Any]] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ValueError(f"entry {index} is not an object")
        text = entry.get("text")
        category = entry.get("category")
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"entry {index} is missing text")
        if not isinstance(category, str) or not category.strip():
            raise ValueError(f"entry {index} is missing category")
        entries.append(entry)
    return entries


def import_quotes(store: QuoteStore, entries: list[dict[str, Any]]) -> list[Quote]:
    taken = {quote.id for quote in store.load_quotes()}
    next_id = store.next_quote_id()
    imported: list[Quote] = []
    for entry in entries:
        raw_id = entry.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, int) or raw_id in taken:
            while next_id in taken:
                next_id += 1
            raw_id = next_id
        taken.add(raw_id)
        imported.append(
            Quote(id=raw_id, text=entry["text"].strip(), category=entry["category"].strip())
        )
    store.append_quotes(imported)
    return imported


def export_quotes_cmd(*, store_from_path, db_path: str | None, output: str) -> None:
    """Export quotes to a JSON file."""

    store = store_from_path(db_path)
    try:
        quotes = store.load_quotes()
    finally:
        store.close()
    payload = [quote.to_dict() for quote in quotes]
    output_path = Path(output).expanduser()
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n")
    except OSError as exc:
        notify(f"Failed to write {output_path}: {exc}", "error")
        raise typer.Exit(code=1) from exc
    notify(f"Exported {len(payload)} quotes to {output_path}", "success")


def import_quotes_cmd(*, store_from_path, db_path: str | None, input_file: str) -> None:
    """Import quotes from a JSON file exported earlier."""

    input_path = Path(input_file).expanduser()
    if not input_path.exists():
        notify(f"File not found: {input_path}", "error")
        raise typer.Exit(code=1)
    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
        entries = parse_import_entries(data)
    except ValueError as exc:
        notify(f"Invalid import file: {exc}", "error")
        raise typer.Exit(code=1) from exc

    store = store_from_path(db_path)
    try:
        imported = import_quotes(store, entries)
        store.reconcile_selected_category()
    finally:
        store.close()
    notify(f"Quotes imported successfully! ({len(imported)} added)", "success")
    for quote in imported[:5]:
        print(f"- [{quote.id}] {escape(quote.category)}")
