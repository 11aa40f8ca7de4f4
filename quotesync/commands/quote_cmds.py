from __future__ import annotations

import typer
from rich import print
from rich.markup import escape

from .common import format_quote, notify


def show_cmd(*, store_from_path, db_path: str | None, category: str | None) -> None:
    """Show a random quote from the selected category."""

    store = store_from_path(db_path)
    try:
        if category is not None:
            selected = store.set_selected_category(category)
        else:
            selected = store.reconcile_selected_category()
        quote = store.random_quote(selected)
    finally:
        store.close()
    if quote is None:
        notify("No quotes available in this category.", "warning")
        return
    print(format_quote(quote))


def last_cmd(*, store_from_path, db_path: str | None) -> None:
    """Show the last quote displayed."""

    store = store_from_path(db_path)
    try:
        quote = store.last_viewed_quote()
    finally:
        store.close()
    if quote is None:
        notify("No quote viewed yet.", "info")
        return
    print(format_quote(quote))


def add_cmd(
    *,
    store_from_path,
    load_config,
    post_quote_to_server,
    db_path: str | None,
    text: str,
    category: str,
    post: bool | None,
) -> None:
    """Add a quote locally and optionally send it to the server."""

    config = load_config()
    store = store_from_path(db_path)
    try:
        try:
            quote = store.add_quote(text, category)
        except ValueError as exc:
            notify(f"Invalid quote: {exc}", "error")
            raise typer.Exit(code=1) from exc
    finally:
        store.close()

    should_post = config.post_new_quotes if post is None else post
    if not should_post:
        notify(f"Quote {quote.id} added locally.", "success")
        return
    response = post_quote_to_server(
        quote, config.server_url, timeout_s=config.http_timeout_s
    )
    if response is None:
        notify("Quote added locally, but server sync failed!", "error")
        return
    notify("Quote added locally & sent to server!", "success")


def list_cmd(*, store_from_path, db_path: str | None, category: str | None) -> None:
    """List stored quotes."""

    store = store_from_path(db_path)
    try:
        quotes = store.filter_quotes(category)
    finally:
        store.close()
    if not quotes:
        notify("No quotes available in this category.", "warning")
        return
    for quote in quotes:
        print(f"[{quote.id}] {format_quote(quote)}")


def categories_cmd(*, store_from_path, db_path: str | None) -> None:
    """List known categories, marking the selected one."""

    store = store_from_path(db_path)
    try:
        categories = store.categories()
        selected = store.reconcile_selected_category()
    finally:
        store.close()
    for category in categories:
        label = "All Categories" if category == "all" else escape(category)
        marker = "*" if category == selected else " "
        print(f"{marker} {label}")
