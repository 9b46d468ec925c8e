"""Exception types raised by pointprep."""

from __future__ import annotations


class PreconditionError(ValueError):
    """An operation was called with input it cannot work on.

    Raised for empty point sets, neighbor counts below the minimum an
    operation needs, and neighbor queries that come back empty.
    """


def require_points(n: int) -> None:
    if n == 0:
        raise PreconditionError("Point set is empty")


def require_k(k: int, minimum: int = 2) -> None:
    if k < minimum:
        raise PreconditionError(f"k must be >= {minimum}, got {k}")
