from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from domain.models import Hand, HistoryItem

_SUITS = {"k": "♣", "r": "♦", "h": "♥", "s": "♠"}
_RANKS = {"t": "10", "j": "J", "q": "Q", "k": "K", "a": "A"}


def render_card(code: str) -> str:
    """
    Render a dealer card code such as "ah" or "tk" as "A♥" / "10♣".

    Codes we do not recognise are returned unchanged.
    """

    if len(code) < 2:
        return code
    rank, suit = code[:-1].lower(), code[-1].lower()
    if suit not in _SUITS:
        return code
    return f"{_RANKS.get(rank, rank.upper())}{_SUITS[suit]}"


def render_hand(hand: Hand, offset: int) -> str:
    cards = " ".join(render_card(card) for card in hand.cards)
    line = f"Offset {offset}: {cards}"
    if hand.ranking_category:
        line += f" ({hand.ranking_category})"
    return line


def render_history_item(item: HistoryItem) -> str:
    dealt_at = datetime.fromtimestamp(item.time / 1000, tz=timezone.utc)
    return f"{dealt_at:%Y-%m-%d %H:%M:%S} UTC  deck {item.deck}  offset {item.offset}"


def render_history(items: List[HistoryItem], next_offset: Optional[int]) -> str:
    if not items:
        return "No hands dealt yet."

    lines = [render_history_item(item) for item in items]
    if next_offset is not None:
        lines.append("Type !more to load older hands.")
    return "\n".join(lines)
