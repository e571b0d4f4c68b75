"""Loader for Rust crates built as ``cdylib``.

The crate exposes the same C ABI as :mod:`solver_harness.libraries.native`::

    #[no_mangle]
    pub unsafe extern "C" fn solve(factor_count: u64, factors: *const u64, upper_bound: u64) -> u64;

Only the artifact location differs: ``<crate>/target/release/libsolve.so``.
"""
from __future__ import annotations

from pathlib import Path

from ..constants import LIBRARY_FILENAME, RUST_BUILD_SUBPATH
from .native import NativeLibraryLoader


class RustLibraryLoader(NativeLibraryLoader):
    language = "Rust"

    def artifact_path(self, directory: Path) -> Path:
        return directory / RUST_BUILD_SUBPATH / LIBRARY_FILENAME


__all__ = ["RustLibraryLoader"]
