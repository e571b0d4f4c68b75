"""Public package interface for the solver harness.

Load a candidate ``solve`` implementation written in C, Rust or Python and
compare it against the reference solver on random inputs.

Typical usage
-------------
>>> from solver_harness import load, random_tests
>>> with load("Python", "./examples/python") as library:
...     outcomes = random_tests(library, 100)
"""
from importlib.metadata import version as _version  # type: ignore

from .errors import ErrorKind, HarnessError, InvocationError, LoadError
from .libraries import (
    Library,
    LibraryLoader,
    LoaderRegistry,
    SupportedLanguage,
    load,
    registry,
    supported_languages,
)
from .reference import correct
from .testing import SolverArguments, TestOutcome, random_tests, run_test, summarize

__all__ = [
    "ErrorKind",
    "HarnessError",
    "InvocationError",
    "LoadError",
    "Library",
    "LibraryLoader",
    "LoaderRegistry",
    "SupportedLanguage",
    "load",
    "registry",
    "supported_languages",
    "correct",
    "SolverArguments",
    "TestOutcome",
    "random_tests",
    "run_test",
    "summarize",
    "__version__",
]

try:
    __version__ = _version("solver_harness")
except Exception:  # pragma: no cover – package not installed yet
    __version__ = "0.0.0"
