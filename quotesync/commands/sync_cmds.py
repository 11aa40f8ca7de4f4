from __future__ import annotations

import threading

import typer
from rich import print
from rich.markup import escape

from .common import notify


def sync_once_cmd(*, store_from_path, load_config, sync_quotes, db_path: str | None) -> None:
    """Fetch quotes from the server and merge them into the local list."""

    config = load_config()
    notify("Syncing quotes...", "info")
    store = store_from_path(db_path)
    try:
        result = sync_quotes(store, url=config.server_url, timeout_s=config.http_timeout_s)
    finally:
        store.close()
    notify(result.message, result.level)
    print(f"- Total quotes: {result.total}")


def sync_daemon_cmd(
    *,
    load_config,
    run_sync_daemon,
    db_path: str | None,
    interval_s: int | None,
) -> None:
    """Sync on a fixed interval until interrupted."""

    config = load_config()
    interval = config.sync_interval_s if interval_s is None else interval_s
    if interval <= 0:
        print("[red]Interval must be positive[/red]")
        raise typer.Exit(code=1)
    print(f"[green]Syncing with {config.server_url} every {interval}s (Ctrl+C to stop)[/green]")
    stop = threading.Event()
    try:
        run_sync_daemon(
            interval,
            db_path=db_path,
            url=config.server_url,
            timeout_s=config.http_timeout_s,
            stop_event=stop,
        )
    except KeyboardInterrupt:
        stop.set()
        print("[yellow]Sync daemon stopped[/yellow]")


def sync_attempts_cmd(*, store_from_path, db_path: str | None, limit: int) -> None:
    """Show recent sync attempts."""

    store = store_from_path(db_path)
    try:
        rows = store.sync_attempts(limit=limit)
    finally:
        store.close()
    if not rows:
        print("[yellow]No sync attempts recorded yet[/yellow]")
        return
    for row in rows:
        status = "ok" if int(row["ok"] or 0) else "error"
        error = escape(str(row["error"] or ""))
        suffix = f" | {error}" if error else ""
        print(
            f"{status}|fetched={int(row['fetched'] or 0)}|new={int(row['added'] or 0)}"
            f"|conflicts={int(row['conflicts'] or 0)}|{row['finished_at']}{suffix}"
        )


def sync_status_cmd(*, store_from_path, load_config, db_path: str | None) -> None:
    """Show sync configuration and the latest outcomes."""

    config = load_config()
    store = store_from_path(db_path)
    try:
        attempts = store.sync_attempts(limit=1)
        daemon_state = store.get_sync_daemon_state()
        total = store.count()
    finally:
        store.close()
    print("[bold]Sync[/bold]")
    print(f"- Server: {config.server_url}")
    print(f"- Interval: {config.sync_interval_s}s")
    print(f"- Local quotes: {total}")
    if attempts:
        last = attempts[0]
        status = "ok" if int(last["ok"] or 0) else "error"
        print(f"- Last attempt: {status} at {last['finished_at']}")
    else:
        print("- Last attempt: never")
    if daemon_state:
        if daemon_state.get("last_ok_at"):
            print(f"- Daemon last ok: {daemon_state['last_ok_at']}")
        if daemon_state.get("last_error"):
            print(
                f"[red]- Daemon last error: {escape(str(daemon_state['last_error']))} "
                f"({daemon_state.get('last_error_at')})[/red]"
            )
