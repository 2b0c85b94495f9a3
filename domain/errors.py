from __future__ import annotations

from typing import Optional


class DealerClientError(Exception):
    """
    Base class for every failure the client layer records in an `error` cell.

    `str(error)` is the human-readable message shown to the user.
    """


class TransportError(DealerClientError):
    """The request did not complete with a 2xx response."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class DecodingError(DealerClientError):
    """The response body was not the JSON shape we expected."""


class PreconditionError(DealerClientError):
    """An operation was attempted without the state it requires."""


class NoDeckError(PreconditionError):
    def __init__(self) -> None:
        super().__init__("No deck created")


class InvalidOffsetError(PreconditionError):
    def __init__(self, offset: int) -> None:
        super().__init__(f"Invalid offset {offset}: expected a non-negative integer.")
        self.offset = offset
