from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from ..config import DEFAULT_SERVER_URL
from ..merge import merge_quotes
from ..store import QuoteStore
from . import remote

logger = logging.getLogger(__name__)

NO_SERVER_QUOTES = "no quotes fetched"


@dataclass
class SyncResult:
    ok: bool
    fetched: int
    added: int
    conflicts: int
    total: int
    message: str
    level: str


def summarize(added: int, conflicts: int) -> tuple[str, str]:
    if conflicts > 0:
        return (
            f"Sync complete: {added} new, {conflicts} conflicts resolved (server wins).",
            "warning",
        )
    if added > 0:
        return f"Sync complete: {added} new quotes added!", "success"
    return "Sync complete: No changes.", "info"


def sync_quotes(
    store: QuoteStore,
    *,
    url: str = DEFAULT_SERVER_URL,
    timeout_s: float = 5.0,
) -> SyncResult:
    started_at = dt.datetime.now(dt.UTC).isoformat()
    server_quotes = remote.fetch_quotes_from_server(url, timeout_s=timeout_s)
    if not server_quotes:
        logger.warning("no quotes fetched from server; keeping local quotes")
        store.record_sync_attempt(ok=False, started_at=started_at, error=NO_SERVER_QUOTES)
        return SyncResult(
            ok=False,
            fetched=0,
            added=0,
            conflicts=0,
            total=store.count(),
            message="Sync complete: No new server quotes.",
            level="info",
        )

    result = merge_quotes(store.load_quotes(), server_quotes)
    store.save_quotes(result.quotes)
    store.reconcile_selected_category()
    store.record_sync_attempt(
        ok=True,
        started_at=started_at,
        fetched=len(server_quotes),
        added=result.added,
        conflicts=result.conflicts,
    )
    message, level = summarize(result.added, result.conflicts)
    logger.info("sync complete: %d quotes total", len(result.quotes))
    return SyncResult(
        ok=True,
        fetched=len(server_quotes),
        added=result.added,
        conflicts=result.conflicts,
        total=len(result.quotes),
        message=message,
        level=level,
    )
