"""Loader for Python candidates executed in the host interpreter.

``path`` names a module or package.  Its parent directory is appended to
``sys.path`` and the module named after the last path segment must define::

    def solve(factors: list[int], upper_bound: int) -> int

Every call into candidate code holds the process-wide interpreter lock, so at
most one thread runs candidate code at a time.
"""
from __future__ import annotations

import importlib
import importlib.machinery
import importlib.util
import logging
import sys
import threading
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Sequence

from ..constants import PYTHON_ENTRYPOINT
from ..errors import ErrorKind, InvocationError, LoadError
from .base import Library, LibraryLoader, as_u64

logger = logging.getLogger(__name__)


class InterpreterRuntime:
    """Process-wide state of the interpreter hosting Python candidates.

    ``lock`` serializes calls into candidate code.  ``import_lock`` guards
    ``sys.path`` and ``sys.modules`` while a candidate module executes; it is
    never held during ``solve`` calls.

    ``sys.path`` gains one entry per distinct candidate parent directory and
    is never trimmed, so a long-running server accumulates them.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.import_lock = threading.Lock()

    def add_search_path(self, directory: str) -> None:
        if directory not in sys.path:
            sys.path.append(directory)

    def import_fresh(self, name: str, directory: str) -> ModuleType:
        """Execute module ``name`` from ``directory`` as a new module object.

        The module is registered in ``sys.modules`` only while it executes,
        so relative imports inside a package work, and is removed afterwards
        together with its submodules.  Later loads re-read the source.
        """

        def _owned(key: str) -> bool:
            return key == name or key.startswith(name + ".")

        with self.import_lock:
            self.add_search_path(directory)
            importlib.invalidate_caches()
            spec = importlib.machinery.PathFinder.find_spec(name, [directory])
            if spec is None or spec.loader is None:
                raise LoadError(
                    ErrorKind.ARTIFACT_NOT_FOUND, f"no module {name!r} in {directory}"
                )
            module = importlib.util.module_from_spec(spec)
            saved = {key: mod for key, mod in list(sys.modules.items()) if _owned(key)}
            sys.modules[name] = module
            try:
                spec.loader.exec_module(module)
            except BaseException as exc:  # includes SystemExit
                raise LoadError(
                    ErrorKind.RUNTIME_INIT_FAILURE,
                    f"importing {name!r} failed: {type(exc).__name__}: {exc}",
                ) from exc
            finally:
                for key in [key for key in list(sys.modules) if _owned(key)]:
                    del sys.modules[key]
                sys.modules.update(saved)
        return module


_RUNTIME: InterpreterRuntime | None = None
_RUNTIME_GUARD = threading.Lock()


def get_runtime() -> InterpreterRuntime:
    """Return the process-wide :class:`InterpreterRuntime`, creating it once."""
    global _RUNTIME
    with _RUNTIME_GUARD:
        if _RUNTIME is None:
            _RUNTIME = InterpreterRuntime()
            logger.debug("[solver-harness] interpreter runtime initialised")
        return _RUNTIME


class PythonLibrary(Library):
    language = "Python"

    def __init__(
        self,
        module: ModuleType,
        func: Callable[..., Any],
        path: Path,
        runtime: InterpreterRuntime,
    ) -> None:
        super().__init__(path)
        self._module: ModuleType | None = module
        self._func: Callable[..., Any] | None = func
        self._runtime = runtime

    @property
    def closed(self) -> bool:
        return self._func is None

    def solve(self, factors: Sequence[int], upper_bound: int) -> int:
        func = self._func
        if func is None:
            raise InvocationError(f"{self.path} has been closed")
        args = [int(f) for f in factors]
        bound = int(upper_bound)
        source = f"{self.path.name}.{PYTHON_ENTRYPOINT}"
        with self._runtime.lock:
            try:
                value = func(args, bound)
            except BaseException as exc:  # includes SystemExit
                raise InvocationError(f"{source} raised {type(exc).__name__}: {exc}") from exc
        return as_u64(value, source=source)

    def close(self) -> None:
        self._func = None
        self._module = None


class PythonLibraryLoader(LibraryLoader):
    language = "Python"

    def __init__(self, runtime: InterpreterRuntime | None = None) -> None:
        self._runtime = runtime

    @property
    def runtime(self) -> InterpreterRuntime:
        return self._runtime or get_runtime()

    def load(self, path: str | Path) -> PythonLibrary:
        target = Path(path).resolve()
        name = target.stem if target.suffix == ".py" else target.name
        if not name.isidentifier():
            raise LoadError(ErrorKind.PATH_INVALID, f"{target} does not name a Python module")
        parent = target.parent
        if not parent.is_dir():
            raise LoadError(ErrorKind.PATH_INVALID, f"{parent} is not a directory")

        runtime = self.runtime
        module = runtime.import_fresh(name, str(parent))
        func = getattr(module, PYTHON_ENTRYPOINT, None)
        if func is None:
            raise LoadError(
                ErrorKind.SYMBOL_NOT_FOUND, f"module {name!r} has no attribute {PYTHON_ENTRYPOINT!r}"
            )
        if not callable(func):
            raise LoadError(
                ErrorKind.SYMBOL_NOT_FOUND,
                f"{name}.{PYTHON_ENTRYPOINT} is {type(func).__name__}, not callable",
            )
        logger.info("[solver-harness] loaded Python library %s from %s", name, parent)
        return PythonLibrary(module, func, target, runtime)


__all__ = ["InterpreterRuntime", "PythonLibrary", "PythonLibraryLoader", "get_runtime"]
