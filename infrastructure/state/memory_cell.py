from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from domain.cells import Subscriber, Unsubscribe

T = TypeVar("T")


class MemoryCell(Generic[T]):
    """
    In-process implementation of `ReactiveCell`.

    Mirrors the usual "writable store" contract:
    - `subscribe` calls the subscriber immediately with the current value.
    - Setting a value equal to the current one notifies nobody.
    - Subscribers run synchronously, in registration order, before `set`
      returns, unless the cell's store is inside a `batch()`.
    """

    def __init__(self, initial: T, store: Optional["MemoryCellStore"] = None) -> None:
        self._value = initial
        self._store = store
        self._subscribers: List[Subscriber[T]] = []

    def __repr__(self) -> str:
        return f"MemoryCell({self._value!r})"

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        if self._store is not None and self._store.batching:
            self._store.defer(self)
            return
        self.notify()

    def update(self, updater: Callable[[T], T]) -> None:
        self.set(updater(self._value))

    def subscribe(self, subscriber: Subscriber[T]) -> Unsubscribe:
        self._subscribers.append(subscriber)
        subscriber(self._value)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def notify(self) -> None:
        # Copy so a subscriber may unsubscribe itself while being notified.
        for subscriber in list(self._subscribers):
            subscriber(self._value)


class MemoryCellStore:
    """
    Creates `MemoryCell`s that can be written together.

    Inside `batch()` writes take effect immediately but notifications are
    held back; on exit every changed cell notifies once, with its final
    value, in the order the cells were first written.
    """

    def __init__(self) -> None:
        self._depth = 0
        # dict as an ordered set.
        self._pending: Dict[MemoryCell, None] = {}

    def __call__(self, initial: T) -> MemoryCell[T]:
        return MemoryCell(initial, store=self)

    @property
    def batching(self) -> bool:
        return self._depth > 0

    def defer(self, cell: MemoryCell) -> None:
        self._pending.setdefault(cell, None)

    @contextmanager
    def batch(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0:
                pending, self._pending = list(self._pending), {}
                for cell in pending:
                    cell.notify()
