from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from .errors import DecodingError


class PaginationMode(Enum):
    """How a fetched page is merged into an accumulated list."""

    REPLACE = "replace"
    APPEND = "append"

    @classmethod
    def for_offset(cls, offset: int) -> "PaginationMode":
        # The first page (offset 0) is a fresh load; any later page continues
        # the list the caller has already scrolled through.
        if offset == 0:
            return cls.REPLACE
        return cls.APPEND


@dataclass(frozen=True)
class Hand:
    """
    A page of cards dealt from a deck at some offset.

    `next_offset` is the dealer's cursor for the following hand, or None
    when the deck has no further full hands.
    """

    cards: Tuple[str, ...]
    ranking_category: Optional[str] = None
    next_offset: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Hand":
        hand = _require_mapping(payload, "hand response").get("hand")
        hand = _require_mapping(hand, "hand")
        cards = hand.get("cards")
        if not isinstance(cards, list) or not all(isinstance(c, str) for c in cards):
            raise DecodingError("Malformed hand: 'cards' must be a list of strings.")

        ranking_category = hand.get("ranking_category")
        if ranking_category is not None and not isinstance(ranking_category, str):
            raise DecodingError("Malformed hand: 'ranking_category' must be a string.")

        return cls(
            cards=tuple(cards),
            ranking_category=ranking_category,
            next_offset=_optional_offset(payload.get("next_offset"), "hand response"),
        )


@dataclass(frozen=True)
class HistoryItem:
    """One dealt hand as recorded by the dealer's history log."""

    deck: str
    offset: int
    time: int

    @classmethod
    def from_payload(cls, payload: Any) -> "HistoryItem":
        data = _require_mapping(payload, "history item")
        deck = data.get("deck")
        offset = data.get("offset")
        time = data.get("time")
        if not isinstance(deck, str) or not _is_int(offset) or not _is_int(time):
            raise DecodingError(
                "Malformed history item: expected 'deck', 'offset' and 'time'."
            )
        return cls(deck=deck, offset=offset, time=time)


@dataclass
class HistoryPage:
    items: List[HistoryItem] = field(default_factory=list)
    next_offset: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "HistoryPage":
        data = _require_mapping(payload, "history response")
        items = data.get("items")
        if not isinstance(items, list):
            raise DecodingError("Malformed history response: 'items' must be a list.")
        return cls(
            items=[HistoryItem.from_payload(item) for item in items],
            next_offset=_optional_offset(data.get("next_offset"), "history response"),
        )


def parse_deck_id(payload: Any) -> str:
    """Extract the deck identifier from a `POST /decks` response."""

    deck_id = _require_mapping(payload, "deck response").get("id")
    if not isinstance(deck_id, str) or not deck_id:
        raise DecodingError("Malformed deck response: missing 'id'.")
    return deck_id


def _is_int(value: Any) -> bool:
    # bool is an int subclass, but never a valid offset or timestamp.
    return isinstance(value, int) and not isinstance(value, bool)


def _require_mapping(value: Any, what: str) -> dict:
    if not isinstance(value, dict):
        raise DecodingError(f"Malformed {what}: expected a JSON object.")
    return value


def _optional_offset(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if not _is_int(value) or value < 0:
        raise DecodingError(
            f"Malformed {what}: 'next_offset' must be a non-negative integer or null."
        )
    return value
