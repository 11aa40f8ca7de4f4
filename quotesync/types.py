from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TypedDict


class QuotePayload(TypedDict):
    id: int
    text: str
    category: str


@dataclass(frozen=True)
class Quote:
    id: int
    text: str
    category: str

    def to_dict(self) -> QuotePayload:
        return QuotePayload(**asdict(self))


DEFAULT_QUOTES: tuple[Quote, ...] = (
    Quote(1, "The best way to predict the future is to create it.", "Innovation"),
    Quote(2, "Life is what happens when you're busy making other plans.", "Reflection"),
    Quote(
        3,
        "The only limit to our realization of tomorrow will be our doubts of today.",
        "Inspiration",
    ),
    Quote(4, "Strive not to be a success, but rather to be of value.", "Wisdom"),
    Quote(5, "Do one thing every day that scares you.", "Courage"),
)

ALL_CATEGORIES = "all"
