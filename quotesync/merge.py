from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .types import Quote

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    quotes: list[Quote]
    added: int = 0
    conflicts: int = 0
    conflict_ids: list[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.conflicts)


def _first_by_id(quotes: Sequence[Quote]) -> dict[int, Quote]:
    by_id: dict[int, Quote] = {}
    for quote in quotes:
        by_id.setdefault(quote.id, quote)
    return by_id


def merge_quotes(local: Sequence[Quote], remote: Sequence[Quote]) -> MergeResult:
    """Reconcile the local list with a freshly fetched remote list.

    Remote records come first, in remote order, and always win on an id
    collision. A collision whose records differ counts as a conflict; a remote
    id with no local counterpart counts as an addition. Local records the
    remote never mentioned follow in their original order. An empty remote
    list leaves the local list untouched.
    """

    local_by_id = _first_by_id(local)
    if not remote:
        return MergeResult(quotes=list(local_by_id.values()))

    pending = dict(local_by_id)
    merged: list[Quote] = []
    seen: set[int] = set()
    result = MergeResult(quotes=merged)
    for remote_quote in remote:
        if remote_quote.id in seen:
            continue
        seen.add(remote_quote.id)
        local_quote = pending.pop(remote_quote.id, None)
        if local_quote is None:
            result.added += 1
        elif local_quote != remote_quote:
            result.conflicts += 1
            result.conflict_ids.append(remote_quote.id)
            logger.warning("conflict for quote %s: server version applied", remote_quote.id)
        merged.append(remote_quote)
    merged.extend(pending.values())
    return result
