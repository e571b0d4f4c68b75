"""Loader for shared objects exporting the ``solve`` C ABI.

The exported symbol must have the signature::

    uint64_t solve(uint64_t factor_count, const uint64_t *factors, uint64_t upper_bound);

The callee reads ``factor_count`` values from ``factors`` and must not keep
the pointer after returning.
"""
from __future__ import annotations

import ctypes
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from ..constants import LIBRARY_FILENAME, SYMBOL_NAME
from ..errors import ErrorKind, InvocationError, LoadError
from .base import Library, LibraryLoader, as_u64

logger = logging.getLogger(__name__)

_FACTORS_POINTER = np.ctypeslib.ndpointer(dtype=np.uint64, ndim=1, flags="C_CONTIGUOUS")


def _release_handle(handle: int) -> None:
    import _ctypes  # type: ignore[import-not-found]

    if sys.platform == "win32":
        _ctypes.FreeLibrary(handle)  # type: ignore[attr-defined]
    else:
        _ctypes.dlclose(handle)  # type: ignore[attr-defined]


def call_native(func: Any, factors: Sequence[int], upper_bound: int) -> int:
    """Call ``func`` with a borrowed, read-only view of ``factors``.

    This is the only place a buffer address is handed to foreign code.  The
    buffer is built here, referenced by a local until the call returns and
    never escapes, so its lifetime always spans the foreign call.
    """

    values = [as_u64(f, source="factor") for f in factors]
    bound = as_u64(upper_bound, source="upper bound")
    buffer = np.array(values, dtype=np.uint64)
    buffer.flags.writeable = False
    try:
        result = func(buffer.size, buffer, bound)
    except ctypes.ArgumentError as exc:
        raise InvocationError(f"native call rejected its arguments: {exc}") from exc
    return as_u64(result, source="native solve")


class NativeLibrary(Library):
    """An open shared object together with its resolved ``solve`` symbol."""

    def __init__(self, dll: ctypes.CDLL, func: Any, path: Path, *, language: str) -> None:
        super().__init__(path)
        self.language = language
        self._dll: ctypes.CDLL | None = dll
        self._func = func

    @property
    def closed(self) -> bool:
        return self._dll is None

    def solve(self, factors: Sequence[int], upper_bound: int) -> int:
        func = self._func
        if func is None:
            raise InvocationError(f"{self.path} has been closed")
        return call_native(func, factors, upper_bound)

    def close(self) -> None:
        dll = self._dll
        if dll is None:
            return
        self._func = None
        self._dll = None
        _release_handle(dll._handle)
        logger.debug("[solver-harness] released %s", self.path)


def open_native_library(artifact: Path, *, language: str) -> NativeLibrary:
    """Open ``artifact`` and bind its ``solve`` symbol.

    Each call opens its own handle; nothing is shared with other callers
    beyond the dynamic loader's reference count.
    """

    try:
        dll = ctypes.CDLL(str(artifact))
    except OSError as exc:
        raise LoadError(
            ErrorKind.RUNTIME_INIT_FAILURE, f"could not open {artifact}: {exc}"
        ) from exc
    try:
        func = getattr(dll, SYMBOL_NAME)
    except AttributeError as exc:
        _release_handle(dll._handle)
        raise LoadError(
            ErrorKind.SYMBOL_NOT_FOUND, f"{artifact} does not export {SYMBOL_NAME!r}"
        ) from exc
    func.argtypes = (ctypes.c_uint64, _FACTORS_POINTER, ctypes.c_uint64)
    func.restype = ctypes.c_uint64
    return NativeLibrary(dll, func, artifact, language=language)


class NativeLibraryLoader(LibraryLoader):
    """Loads ``<dir>/libsolve.so`` (C libraries)."""

    language = "C"

    def artifact_path(self, directory: Path) -> Path:
        return directory / LIBRARY_FILENAME

    def load(self, path: str | Path) -> NativeLibrary:
        directory = Path(path).resolve()
        if not directory.is_dir():
            raise LoadError(ErrorKind.PATH_INVALID, f"{directory} is not a directory")
        artifact = self.artifact_path(directory)
        if not artifact.is_file():
            raise LoadError(ErrorKind.ARTIFACT_NOT_FOUND, f"{artifact} does not exist")
        library = open_native_library(artifact, language=self.language)
        logger.info("[solver-harness] loaded %s library from %s", self.language, artifact)
        return library


__all__ = ["NativeLibrary", "NativeLibraryLoader", "call_native", "open_native_library"]
