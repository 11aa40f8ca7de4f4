from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path

from quotesync.store import QuoteStore
from quotesync.sync import remote, sync_pass
from quotesync.sync.sync_pass import summarize, sync_quotes
from quotesync.types import DEFAULT_QUOTES, Quote

POSTS = [
    {"userId": 1, "id": 1, "title": "sunt aut facere", "body": "quia et suscipit"},
    {"userId": 1, "id": 6, "title": "dolorem eum magni", "body": "ut aspernatur"},
]


def _start_posts_server(posts: list[dict]) -> tuple[HTTPServer, int]:
    body = json.dumps(posts).encode("utf-8")

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            if self.path != "/posts":
                self.send_response(404)
                self.end_headers()
                return
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args) -> None:  # noqa: A002
            return

    server = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, int(server.server_address[1])


def test_summarize_messages() -> None:
    assert summarize(2, 1) == (
        "Sync complete: 2 new, 1 conflicts resolved (server wins).",
        "warning",
    )
    assert summarize(3, 0) == ("Sync complete: 3 new quotes added!", "success")
    assert summarize(0, 0) == ("Sync complete: No changes.", "info")


def test_sync_with_empty_server_response_keeps_local_quotes(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(remote, "fetch_quotes_from_server", lambda *a, **k: [])
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        result = sync_quotes(store, url="https://example.test/posts")

        assert result.ok is False
        assert result.message == "Sync complete: No new server quotes."
        assert result.level == "info"
        assert (result.added, result.conflicts) == (0, 0)
        assert store.load_quotes() == list(DEFAULT_QUOTES)
        attempt = store.sync_attempts(limit=1)[0]
        assert attempt["ok"] == 0
        assert attempt["error"] == sync_pass.NO_SERVER_QUOTES
    finally:
        store.close()


def test_sync_merges_persists_and_resets_missing_category(tmp_path: Path, monkeypatch) -> None:
    server_quotes = [Quote(1, "Server one", "User 1"), Quote(6, "Server six", "User 1")]
    monkeypatch.setattr(remote, "fetch_quotes_from_server", lambda *a, **k: server_quotes)
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        store.save_quotes([DEFAULT_QUOTES[0], Quote(1700000000000, "Mine", "Personal")])
        store.set_selected_category("Innovation")

        result = sync_quotes(store, url="https://example.test/posts")

        assert result.ok is True
        assert (result.fetched, result.added, result.conflicts, result.total) == (2, 1, 1, 3)
        assert result.level == "warning"
        assert store.load_quotes() == [
            Quote(1, "Server one", "User 1"),
            Quote(6, "Server six", "User 1"),
            Quote(1700000000000, "Mine", "Personal"),
        ]
        assert store.selected_category == "all"
        attempt = store.sync_attempts(limit=1)[0]
        assert (attempt["ok"], attempt["added"], attempt["conflicts"]) == (1, 1, 1)
    finally:
        store.close()


def test_second_sync_reports_no_changes(tmp_path: Path, monkeypatch) -> None:
    server_quotes = [Quote(1, "Server one", "User 1")]
    monkeypatch.setattr(remote, "fetch_quotes_from_server", lambda *a, **k: server_quotes)
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        sync_quotes(store)
        result = sync_quotes(store)

        assert (result.added, result.conflicts) == (0, 0)
        assert result.message == "Sync complete: No changes."
    finally:
        store.close()


def test_sync_against_local_http_server(tmp_path: Path) -> None:
    server, port = _start_posts_server(POSTS)
    store = QuoteStore(tmp_path / "quotes.sqlite")
    try:
        result = sync_quotes(store, url=f"http://127.0.0.1:{port}/posts", timeout_s=2.0)

        assert result.ok is True
        assert result.added == 1
        assert result.conflicts == 1
        quotes = store.load_quotes()
        assert quotes[0] == Quote(1, "sunt aut facere", "User 1")
        assert quotes[1] == Quote(6, "dolorem eum magni", "User 1")
        assert [q.id for q in quotes[2:]] == [2, 3, 4, 5]
    finally:
        store.close()
        server.shutdown()
        server.server_close()
