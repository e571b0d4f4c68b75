from __future__ import annotations

"""Candidate capability and loader interfaces shared by every language."""

import operator
from pathlib import Path
from typing import Any, Sequence

from ..constants import U64_LIMIT
from ..errors import InvocationError


def as_u64(value: Any, *, source: str) -> int:
    """Return ``value`` as a Python ``int`` within the ``uint64`` range.

    ``bool`` is rejected even though it subclasses ``int``; numpy integer
    scalars are accepted through ``__index__``.
    """

    if isinstance(value, bool):
        raise InvocationError(f"{source} returned a bool, expected an integer")
    try:
        number = operator.index(value)
    except TypeError as exc:
        raise InvocationError(
            f"{source} returned {type(value).__name__}, expected an integer"
        ) from exc
    if not 0 <= number < U64_LIMIT:
        raise InvocationError(f"{source} returned {number}, outside the uint64 range")
    return number


class Library:
    """A loaded candidate exposing ``solve(factors, upper_bound) -> int``.

    Instances own the foreign resource acquired while loading and release it
    on :meth:`close`.  They are context managers so callers can guarantee the
    release on every exit path.
    """

    language: str = ""

    def __init__(self, path: Path) -> None:
        self.path = path

    def solve(self, factors: Sequence[int], upper_bound: int) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    @property
    def closed(self) -> bool:  # pragma: no cover - interface
        return False

    def close(self) -> None:  # pragma: no cover - interface
        pass

    def __enter__(self) -> "Library":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{type(self).__name__} {self.language} {str(self.path)!r} ({state})>"


class LibraryLoader:
    """Turns a filesystem location into a :class:`Library`.

    ``load`` raises :class:`~solver_harness.errors.LoadError` when no library
    can be produced and must release anything it acquired before raising.
    """

    language: str = ""

    def load(self, path: str | Path) -> Library:  # pragma: no cover - interface
        raise NotImplementedError


__all__ = ["Library", "LibraryLoader", "as_u64"]
