"""Supported languages and the registry mapping each one to its loader.

Typical usage
-------------
>>> from solver_harness.libraries import registry
>>> with registry.load("C", "./examples/c") as library:
...     library.solve([3, 5], 10)
23
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Mapping

from ..errors import ErrorKind, LoadError
from .base import Library, LibraryLoader
from .native import NativeLibraryLoader
from .python import PythonLibraryLoader
from .rust import RustLibraryLoader

logger = logging.getLogger(__name__)


class SupportedLanguage(str, Enum):
    """Source languages a candidate library may be written in."""

    C = "C"
    RUST = "Rust"
    PYTHON = "Python"

    @classmethod
    def parse(cls, tag: "str | SupportedLanguage") -> "SupportedLanguage":
        """Return the member for ``tag``, matching case-insensitively."""
        if isinstance(tag, cls):
            return tag
        text = str(tag).strip()
        for member in cls:
            if member.value == text or member.value.lower() == text.lower():
                return member
        expected = ", ".join(m.value for m in cls)
        raise ValueError(f"unsupported language {tag!r}; expected one of: {expected}")


class LoaderRegistry:
    """Dispatches ``load(language, path)`` to the loader registered for ``language``."""

    def __init__(self, loaders: Mapping[SupportedLanguage, LibraryLoader] | None = None) -> None:
        self._loaders: dict[SupportedLanguage, LibraryLoader] = dict(loaders or {})

    def register(self, language: str | SupportedLanguage, loader: LibraryLoader) -> None:
        self._loaders[SupportedLanguage.parse(language)] = loader

    def supported(self) -> list[SupportedLanguage]:
        return [language for language in SupportedLanguage if language in self._loaders]

    def loader_for(self, language: str | SupportedLanguage) -> LibraryLoader:
        lang = SupportedLanguage.parse(language)
        try:
            return self._loaders[lang]
        except KeyError:
            raise ValueError(f"no loader registered for {lang.value}") from None

    def load(self, language: str | SupportedLanguage, path: str | Path) -> Library:
        """Load the library at ``path`` as ``language``.

        Every loading failure surfaces as :class:`LoadError`; unknown language
        tags raise ``ValueError`` before anything is touched.
        """

        loader = self.loader_for(language)
        logger.info("[solver-harness] loading %s library from %s", loader.language, path)
        try:
            return loader.load(path)
        except LoadError as exc:
            logger.info("[solver-harness] load failed: %s", exc)
            raise
        except OSError as exc:
            logger.info("[solver-harness] load failed: %s", exc)
            raise LoadError(ErrorKind.PATH_INVALID, f"cannot access {path}: {exc}") from exc


def default_registry() -> LoaderRegistry:
    return LoaderRegistry(
        {
            SupportedLanguage.C: NativeLibraryLoader(),
            SupportedLanguage.RUST: RustLibraryLoader(),
            SupportedLanguage.PYTHON: PythonLibraryLoader(),
        }
    )


registry = default_registry()


def load(language: str | SupportedLanguage, path: str | Path) -> Library:
    return registry.load(language, path)


def supported_languages() -> list[str]:
    return [language.value for language in registry.supported()]


__all__ = [
    "Library",
    "LibraryLoader",
    "LoaderRegistry",
    "SupportedLanguage",
    "default_registry",
    "load",
    "registry",
    "supported_languages",
]
