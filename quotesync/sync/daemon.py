from __future__ import annotations

import datetime as dt
import logging
import threading
import traceback
from pathlib import Path

from .. import db
from ..config import DEFAULT_SERVER_URL
from ..store import QuoteStore
from . import sync_pass

logger = logging.getLogger(__name__)


def sync_daemon_tick(
    db_path: Path | str | None,
    *,
    url: str = DEFAULT_SERVER_URL,
    timeout_s: float = 5.0,
) -> sync_pass.SyncResult | None:
    try:
        store = QuoteStore(db.resolve_db_path(db_path))
    except Exception:
        tb = traceback.format_exc()
        logger.exception("sync tick could not open the quote store")
        _append_sync_daemon_log(tb)
        return None
    try:
        try:
            result = sync_pass.sync_quotes(store, url=url, timeout_s=timeout_s)
        except Exception as exc:
            tb = traceback.format_exc()
            logger.exception("sync tick failed")
            store.set_sync_daemon_error(str(exc), tb)
            _append_sync_daemon_log(tb)
            return None
        if result.ok:
            store.set_sync_daemon_ok()
        else:
            store.set_sync_daemon_error(sync_pass.NO_SERVER_QUOTES, "")
    finally:
        store.close()
    logger.info(result.message)
    return result


def run_sync_daemon(
    interval_s: int,
    *,
    db_path: Path | str | None = None,
    url: str = DEFAULT_SERVER_URL,
    timeout_s: float = 5.0,
    stop_event: threading.Event | None = None,
) -> int:
    """Sync now, then every ``interval_s`` seconds until ``stop_event`` is set.

    Returns the number of ticks run.
    """

    if interval_s <= 0:
        raise ValueError("interval must be positive")
    stop = stop_event or threading.Event()
    ticks = 0
    while True:
        sync_daemon_tick(db_path, url=url, timeout_s=timeout_s)
        ticks += 1
        if stop.wait(interval_s):
            return ticks


def _append_sync_daemon_log(message: str) -> None:
    try:
        log_dir = Path.home() / ".quotesync"
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / "sync-daemon.log"
        ts = dt.datetime.now(dt.UTC).isoformat()
        with log_path.open("a", encoding="utf-8", errors="ignore") as handle:
            handle.write(f"\n[{ts}]\n{message}\n")
    except OSError:
        return
