import random
from pathlib import Path

import pytest

from quotesync.store import QuoteStore
from quotesync.types import DEFAULT_QUOTES, Quote


def test_new_store_is_seeded_with_default_quotes(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        assert store.load_quotes() == list(DEFAULT_QUOTES)
        assert store.categories() == [
            "all",
            "Innovation",
            "Reflection",
            "Inspiration",
            "Wisdom",
            "Courage",
        ]
    finally:
        store.close()


def test_emptied_store_is_not_reseeded(tmp_path: Path) -> None:
    db_path = tmp_path / "quotes.sqlite"
    store = QuoteStore(db_path)
    store.save_quotes([])
    store.close()

    reopened = QuoteStore(db_path)
    try:
        assert reopened.load_quotes() == []
        assert reopened.categories() == ["all"]
    finally:
        reopened.close()


def test_save_quotes_preserves_order_and_rejects_duplicates(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        quotes = [Quote(9, "nine", "B"), Quote(2, "two", "A"), Quote(40, "forty", "B")]
        store.save_quotes(quotes)
        assert store.load_quotes() == quotes

        with pytest.raises(ValueError, match="duplicate quote id 2"):
            store.save_quotes([Quote(2, "a", "A"), Quote(2, "b", "B")])
        assert store.load_quotes() == quotes
    finally:
        store.close()


def test_add_quote_appends_with_id_above_server_range(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        first = store.add_quote("  Keep going.  ", " Grit ")
        second = store.add_quote("Again.", "Grit")

        assert first.text == "Keep going."
        assert first.category == "Grit"
        assert first.id > 100
        assert second.id > first.id
        assert store.load_quotes()[-2:] == [first, second]
    finally:
        store.close()


def test_add_quote_requires_text_and_category(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        with pytest.raises(ValueError):
            store.add_quote("   ", "Grit")
        with pytest.raises(ValueError):
            store.add_quote("Text", "")
        assert store.count() == len(DEFAULT_QUOTES)
    finally:
        store.close()


def test_filter_and_random_quote_respect_category(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        assert store.filter_quotes("all") == list(DEFAULT_QUOTES)
        assert store.filter_quotes("") == list(DEFAULT_QUOTES)
        assert [q.id for q in store.filter_quotes("Wisdom")] == [4]
        assert store.filter_quotes("Missing") == []

        quote = store.random_quote("Courage", rng=random.Random(0))
        assert quote is not None and quote.id == 5
        assert store.last_viewed_quote() == quote
        assert store.random_quote("Missing") is None
        assert store.last_viewed_quote() == quote
    finally:
        store.close()


def test_selected_category_resets_when_category_disappears(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        assert store.selected_category == "all"
        store.set_selected_category("Wisdom")
        assert store.reconcile_selected_category() == "Wisdom"

        store.save_quotes([Quote(1, "Only one", "User 1")])
        assert store.reconcile_selected_category() == "all"
        assert store.selected_category == "all"
    finally:
        store.close()


def test_sync_bookkeeping_roundtrip(tmp_path: Path) -> None:
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        assert store.get_sync_daemon_state() is None
        store.record_sync_attempt(ok=False, error="no quotes fetched")
        store.record_sync_attempt(ok=True, fetched=3, added=1, conflicts=2)

        attempts = store.sync_attempts(limit=5)
        assert [a["ok"] for a in attempts] == [1, 0]
        assert attempts[0]["conflicts"] == 2
        assert attempts[1]["error"] == "no quotes fetched"

        store.set_sync_daemon_error("boom", "Traceback...")
        store.set_sync_daemon_ok()
        state = store.get_sync_daemon_state()
        assert state is not None
        assert state["last_error"] == "boom"
        assert state["last_ok_at"]
    finally:
        store.close()
