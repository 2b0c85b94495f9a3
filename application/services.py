from __future__ import annotations

import logging
from typing import List, Optional

from domain.cells import CellFactory, ReadableCell
from domain.errors import DealerClientError, InvalidOffsetError, NoDeckError
from domain.models import Hand, HistoryItem, HistoryPage, PaginationMode, parse_deck_id
from domain.remote_client import RemoteClient

logger = logging.getLogger(__name__)


def _validate_offset(offset: int) -> Optional[InvalidOffsetError]:
    if offset < 0:
        return InvalidOffsetError(offset)
    return None


class DeckSession:
    """
    Owns the current deck and the hand being displayed from it.

    Every operation follows the same shape:
    - Synchronously clear the state that would otherwise be stale.
    - Await the dealer.
    - Synchronously apply the result (or record the failure).

    Failures are stored in `error` and then re-raised so the caller can
    react, e.g. by not navigating away.

    Overlapping calls are not sequenced against each other: whichever
    request resolves last writes the cells last.
    """

    def __init__(self, client: RemoteClient, cell_factory: CellFactory) -> None:
        self._client = client
        self._cells = cell_factory
        self._deck_id = cell_factory(None)
        self._hand_offset = cell_factory(0)
        self._current_hand = cell_factory(None)
        self._error = cell_factory(None)

    @property
    def deck_id(self) -> ReadableCell[Optional[str]]:
        return self._deck_id

    @property
    def hand_offset(self) -> ReadableCell[int]:
        return self._hand_offset

    @property
    def current_hand(self) -> ReadableCell[Optional[Hand]]:
        return self._current_hand

    @property
    def error(self) -> ReadableCell[Optional[str]]:
        return self._error

    @property
    def has_more_hands(self) -> bool:
        hand = self._current_hand.get()
        return hand is not None and hand.next_offset is not None

    async def create_deck(self) -> str:
        """
        Ask the dealer for a new deck and make it the current one.

        The previous hand is cleared before the request is sent, so it never
        shows up next to the new deck.
        """

        self._error.set(None)
        self._current_hand.set(None)

        try:
            payload = await self._client.request("POST", "/decks")
            deck_id = parse_deck_id(payload)
        except DealerClientError as exc:
            self._record_failure("create deck", exc)
            raise

        with self._cells.batch():
            self._deck_id.set(deck_id)
            self._hand_offset.set(0)
        logger.debug("Created deck %s", deck_id)
        return deck_id

    async def fetch_hand(self, offset: int = 0) -> Hand:
        """
        Fetch the hand at `offset` in the current deck.

        `current_hand` and `hand_offset` are only written after a successful
        response, and together. On failure both keep their previous values.
        """

        deck_id = self._deck_id.get()
        error = NoDeckError() if deck_id is None else _validate_offset(offset)
        if error:
            self._record_failure("fetch hand", error)
            raise error

        self._error.set(None)

        try:
            payload = await self._client.request(
                "GET", f"/decks/{deck_id}", params={"offset": offset}
            )
            hand = Hand.from_payload(payload)
        except DealerClientError as exc:
            self._record_failure("fetch hand", exc)
            raise

        # Subscribers of either cell only run once both hold the new values.
        with self._cells.batch():
            self._current_hand.set(hand)
            self._hand_offset.set(offset)
        logger.debug("Fetched hand at offset %d of deck %s", offset, deck_id)
        return hand

    async def fetch_next_hand(self) -> Optional[Hand]:
        """
        Follow the dealer's cursor to the next hand.

        Returns None, without a request, when there is no current hand or the
        deck has been dealt out.
        """

        hand = self._current_hand.get()
        if hand is None or hand.next_offset is None:
            return None
        return await self.fetch_hand(hand.next_offset)

    def _record_failure(self, operation: str, exc: DealerClientError) -> None:
        logger.warning("Failed to %s: %s", operation, exc)
        self._error.set(str(exc))


class HistoryFeed:
    """
    Accumulates the dealer's paginated history.

    Fetching offset 0 replaces the list; any other offset appends to it.
    Failures are only reported through `error`: history is a secondary view
    the user can simply retry.
    """

    def __init__(self, client: RemoteClient, cell_factory: CellFactory) -> None:
        self._client = client
        self._cells = cell_factory
        self._items = cell_factory([])
        self._next_offset = cell_factory(0)
        self._error = cell_factory(None)

    @property
    def items(self) -> ReadableCell[List[HistoryItem]]:
        return self._items

    @property
    def next_offset(self) -> ReadableCell[Optional[int]]:
        return self._next_offset

    @property
    def error(self) -> ReadableCell[Optional[str]]:
        return self._error

    @property
    def has_more(self) -> bool:
        return self._next_offset.get() is not None

    async def fetch_history(self, offset: int = 0) -> None:
        error = _validate_offset(offset)
        if error:
            self._record_failure(error)
            return

        self._error.set(None)

        try:
            payload = await self._client.request(
                "GET", "/history", params={"offset": offset}
            )
            page = HistoryPage.from_payload(payload)
        except DealerClientError as exc:
            self._record_failure(exc)
            return

        mode = PaginationMode.for_offset(offset)
        with self._cells.batch():
            if mode is PaginationMode.REPLACE:
                self._items.set(list(page.items))
            else:
                self._items.update(lambda items: [*items, *page.items])
            self._next_offset.set(page.next_offset)

        logger.debug(
            "Fetched %d history items at offset %d (%s)",
            len(page.items),
            offset,
            mode.value,
        )

    async def refresh(self) -> None:
        """Reload the feed from the first page."""

        await self.fetch_history(0)

    async def fetch_more(self) -> bool:
        """
        Append the next page, if the dealer reported one.

        Returns False, without a request, when the feed is exhausted.
        """

        next_offset = self._next_offset.get()
        if next_offset is None:
            return False
        await self.fetch_history(next_offset)
        return True

    def _record_failure(self, exc: DealerClientError) -> None:
        logger.warning("Failed to fetch history: %s", exc)
        self._error.set(str(exc))
