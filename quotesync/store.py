from __future__ import annotations

import datetime as dt
import random
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from . import db
from .types import ALL_CATEGORIES, DEFAULT_QUOTES, Quote

SEEDED_KEY = "seeded"
SELECTED_CATEGORY_KEY = "selected_category"
LAST_VIEWED_KEY = "last_viewed_quote_id"


class QuoteStore:
    """SQLite-backed quote list plus the small preferences and sync bookkeeping around it."""

    def __init__(
        self,
        db_path: Path | str = db.DEFAULT_DB_PATH,
        *,
        check_same_thread: bool = True,
        seed_defaults: bool = True,
    ):
        self.db_path = Path(db_path).expanduser()
        self.conn = db.connect(self.db_path, check_same_thread=check_same_thread)
        db.initialize_schema(self.conn)
        if seed_defaults and self.get_preference(SEEDED_KEY) is None:
            self.save_quotes(DEFAULT_QUOTES)
            self.set_preference(SEEDED_KEY, "1")

    @staticmethod
    def _now_iso() -> str:
        return dt.datetime.now(dt.UTC).isoformat()

    @staticmethod
    def _row_to_quote(row: Any) -> Quote:
        return Quote(id=int(row["id"]), text=str(row["text"]), category=str(row["category"]))

    def close(self) -> None:
        self.conn.close()

    # preferences

    def get_preference(self, key: str) -> str | None:
        row = self.conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        return str(row["value"]) if row else None

    def set_preference(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO preferences(key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        self.conn.commit()

    def delete_preference(self, key: str) -> None:
        self.conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
        self.conn.commit()

    # quotes

    def load_quotes(self) -> list[Quote]:
        rows = self.conn.execute(
            "SELECT id, text, category FROM quotes ORDER BY position ASC, id ASC"
        ).fetchall()
        return [self._row_to_quote(row) for row in rows]

    def save_quotes(self, quotes: Iterable[Quote]) -> int:
        """Replace the stored list with ``quotes``, keeping their order."""

        rows: list[tuple[int, str, str, int]] = []
        seen: set[int] = set()
        for quote in quotes:
            if quote.id in seen:
                raise ValueError(f"duplicate quote id {quote.id}")
            seen.add(quote.id)
            rows.append((quote.id, quote.text, quote.category, len(rows)))
        with self.conn:
            self.conn.execute("DELETE FROM quotes")
            self.conn.executemany(
                "INSERT INTO quotes(id, text, category, position) VALUES (?, ?, ?, ?)",
                rows,
            )
        return len(rows)

    def get_quote(self, quote_id: int) -> Quote | None:
        row = self.conn.execute(
            "SELECT id, text, category FROM quotes WHERE id = ?", (quote_id,)
        ).fetchone()
        return self._row_to_quote(row) if row else None

    def count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) AS total FROM quotes").fetchone()
        return int(row["total"] or 0)

    def next_quote_id(self) -> int:
        # Millisecond timestamps stay clear of the small server-assigned ids.
        row = self.conn.execute("SELECT MAX(id) AS max_id FROM quotes").fetchone()
        max_id = int(row["max_id"]) if row and row["max_id"] is not None else 0
        return max(int(time.time() * 1000), max_id + 1)

    def _next_position(self) -> int:
        row = self.conn.execute("SELECT MAX(position) AS max_pos FROM quotes").fetchone()
        if row is None or row["max_pos"] is None:
            return 0
        return int(row["max_pos"]) + 1

    def add_quote(self, text: str, category: str) -> Quote:
        text = (text or "").strip()
        category = (category or "").strip()
        if not text or not category:
            raise ValueError("quote text and category are required")
        quote = Quote(id=self.next_quote_id(), text=text, category=category)
        self.append_quotes([quote])
        return quote

    def append_quotes(self, quotes: Iterable[Quote]) -> int:
        position = self._next_position()
        rows = []
        for offset, quote in enumerate(quotes):
            rows.append((quote.id, quote.text, quote.category, position + offset))
        with self.conn:
            self.conn.executemany(
                "INSERT INTO quotes(id, text, category, position) VALUES (?, ?, ?, ?)",
                rows,
            )
        return len(rows)

    def categories(self) -> list[str]:
        unique: list[str] = []
        for quote in self.load_quotes():
            if quote.category not in unique:
                unique.append(quote.category)
        return [ALL_CATEGORIES, *unique]

    def filter_quotes(self, category: str | None) -> list[Quote]:
        quotes = self.load_quotes()
        if not category or category == ALL_CATEGORIES:
            return quotes
        return [quote for quote in quotes if quote.category == category]

    def random_quote(
        self, category: str | None = None, *, rng: random.Random | None = None
    ) -> Quote | None:
        candidates = self.filter_quotes(category)
        if not candidates:
            return None
        quote = (rng or random).choice(candidates)
        self.set_preference(LAST_VIEWED_KEY, str(quote.id))
        return quote

    def last_viewed_quote(self) -> Quote | None:
        value = self.get_preference(LAST_VIEWED_KEY)
        if value is None:
            return None
        try:
            return self.get_quote(int(value))
        except ValueError:
            return None

    @property
    def selected_category(self) -> str:
        return self.get_preference(SELECTED_CATEGORY_KEY) or ALL_CATEGORIES

    def set_selected_category(self, category: str | None) -> str:
        value = (category or "").strip() or ALL_CATEGORIES
        self.set_preference(SELECTED_CATEGORY_KEY, value)
        return value

    def reconcile_selected_category(self) -> str:
        """Fall back to ``all`` when the remembered category has no quotes left."""

        selected = self.selected_category
        if selected in self.categories():
            return selected
        return self.set_selected_category(ALL_CATEGORIES)

    # sync bookkeeping

    def record_sync_attempt(
        self,
        *,
        ok: bool,
        started_at: str | None = None,
        fetched: int = 0,
        added: int = 0,
        conflicts: int = 0,
        error: str | None = None,
    ) -> None:
        now = self._now_iso()
        self.conn.execute(
            """
            INSERT INTO sync_attempts(
                started_at,
                finished_at,
                ok,
                fetched,
                added,
                conflicts,
                error
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (started_at or now, now, 1 if ok else 0, fetched, added, conflicts, error),
        )
        self.conn.commit()

    def sync_attempts(self, limit: int = 10) -> list[dict[str, Any]]:
        rows = self.conn.execute(
            """
            SELECT started_at, finished_at, ok, fetched, added, conflicts, error
            FROM sync_attempts
            ORDER BY id DESC
            LIMIT ?
            """,
            (limit,),
        ).fetchall()
        return [dict(row) for row in rows]

    def get_sync_daemon_state(self) -> dict[str, Any] | None:
        row = self.conn.execute(
            "SELECT last_error, last_traceback, last_error_at, last_ok_at FROM sync_daemon_state WHERE id = 1"
        ).fetchone()
        if row is None:
            return None
        return {
            "last_error": row["last_error"],
            "last_traceback": row["last_traceback"],
            "last_error_at": row["last_error_at"],
            "last_ok_at": row["last_ok_at"],
        }

    def set_sync_daemon_error(self, error: str, traceback_text: str) -> None:
        now = self._now_iso()
        self.conn.execute(
            """
            INSERT INTO sync_daemon_state(id, last_error, last_traceback, last_error_at)
            VALUES (1, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                last_error = excluded.last_error,
                last_traceback = excluded.last_traceback,
                last_error_at = excluded.last_error_at
            """,
            (error, traceback_text, now),
        )
        self.conn.commit()

    def set_sync_daemon_ok(self) -> None:
        now = self._now_iso()
        self.conn.execute(
            """
            INSERT INTO sync_daemon_state(id, last_ok_at)
            VALUES (1, ?)
            ON CONFLICT(id) DO UPDATE SET
                last_ok_at = excluded.last_ok_at
            """,
            (now,),
        )
        self.conn.commit()
