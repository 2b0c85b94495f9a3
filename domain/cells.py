from __future__ import annotations

from typing import Callable, ContextManager, Protocol, TypeVar

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]


class ReadableCell(Protocol[T]):
    """
    Read-only view of a reactive value.

    This is all the UI layer gets to see: it may read the current value and
    subscribe to changes, but never write.
    """

    def get(self) -> T:
        """Return the current value."""

        ...

    def subscribe(self, subscriber: Subscriber[T]) -> Unsubscribe:
        """
        Register `subscriber` to be called with every new value.

        Returns a callable that removes the subscription.
        """

        ...


class ReactiveCell(ReadableCell[T], Protocol[T]):
    """
    Abstraction over the hosting UI framework's observable state primitive.

    Only the component that created a cell mutates it.
    """

    def set(self, value: T) -> None:
        """Replace the value and notify subscribers."""

        ...

    def update(self, updater: Callable[[T], T]) -> None:
        """Replace the value with `updater(current)` and notify subscribers."""

        ...


class CellFactory(Protocol):
    """Creates the cells a component owns."""

    def __call__(self, initial: T) -> ReactiveCell[T]:
        """Create a new cell holding `initial`."""

        ...

    def batch(self) -> ContextManager[None]:
        """
        Group writes to cells from this factory.

        Subscribers are only notified once the block exits, so none of them
        can observe some of the writes without the others.
        """

        ...
