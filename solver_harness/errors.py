from __future__ import annotations

"""Error taxonomy shared by the loaders, the tester and the adapters."""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    PATH_INVALID = "PathInvalid"
    ARTIFACT_NOT_FOUND = "ArtifactNotFound"
    SYMBOL_NOT_FOUND = "SymbolNotFound"
    RUNTIME_INIT_FAILURE = "RuntimeInitFailure"
    INVOCATION_FAILURE = "InvocationFailure"


class HarnessError(Exception):
    """Base error carrying an :class:`ErrorKind` tag."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


class LoadError(HarnessError):
    """A candidate library could not be produced from a path."""


class InvocationError(HarnessError):
    """A call into foreign code faulted or returned an unusable value.

    Raised during differential testing, it aborts the remaining batch; it is
    never recorded as an ordinary mismatch.
    """

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.INVOCATION_FAILURE, message)


__all__ = ["ErrorKind", "HarnessError", "LoadError", "InvocationError"]
