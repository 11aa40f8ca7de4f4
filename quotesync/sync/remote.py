from __future__ import annotations

import logging
from typing import Any

from ..config import DEFAULT_SERVER_URL
from ..types import Quote
from . import http_client

logger = logging.getLogger(__name__)


def post_to_quote(post: object) -> Quote | None:
    """Map a JSONPlaceholder post onto a quote, or None when it is unusable."""

    if not isinstance(post, dict):
        return None
    post_id = post.get("id")
    title = post.get("title")
    if isinstance(post_id, bool) or not isinstance(post_id, int):
        return None
    user_id = post.get("userId")
    if not isinstance(title, str) or not title.strip():
        return None
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        return None
    return Quote(id=post_id, text=title, category=f"User {user_id}")


def fetch_quotes_from_server(
    url: str = DEFAULT_SERVER_URL, *, timeout_s: float = 5.0
) -> list[Quote]:
    base_url = http_client.build_base_url(url)
    try:
        status, payload = http_client.request_json("GET", base_url, timeout_s=timeout_s)
    except Exception as exc:
        logger.error("could not fetch quotes from %s: %s", base_url, exc)
        return []
    if status != 200:
        logger.error("could not fetch quotes from %s: HTTP %s", base_url, status)
        return []
    if not isinstance(payload, list):
        logger.error("unexpected quotes payload from %s: %s", base_url, type(payload).__name__)
        return []
    quotes: list[Quote] = []
    skipped = 0
    for post in payload:
        quote = post_to_quote(post)
        if quote is None:
            skipped += 1
            continue
        quotes.append(quote)
    if skipped:
        logger.warning("skipped %d malformed posts from %s", skipped, base_url)
    logger.info("fetched %d quotes from %s", len(quotes), base_url)
    return quotes


def post_quote_to_server(
    quote: Quote, url: str = DEFAULT_SERVER_URL, *, timeout_s: float = 5.0
) -> dict[str, Any] | None:
    base_url = http_client.build_base_url(url)
    try:
        status, payload = http_client.request_json(
            "POST", base_url, body=quote.to_dict(), timeout_s=timeout_s
        )
    except Exception as exc:
        logger.error("failed to post quote %s: %s", quote.id, exc)
        return None
    if status not in {200, 201}:
        logger.error("failed to post quote %s: HTTP %s", quote.id, status)
        return None
    logger.info("posted quote %s to %s", quote.id, base_url)
    return payload if isinstance(payload, dict) else {}
