from __future__ import annotations

import shutil
import subprocess
import threading
from pathlib import Path

import numpy as np
import pytest

from solver_harness.errors import ErrorKind, InvocationError, LoadError
from solver_harness.libraries.native import NativeLibraryLoader, call_native
from solver_harness.libraries.rust import RustLibraryLoader
from solver_harness.testing import random_tests

EXAMPLE_SOURCE = Path(__file__).resolve().parents[1] / "examples" / "c" / "src.c"
COMPILER = shutil.which("cc") or shutil.which("gcc") or shutil.which("clang")

needs_compiler = pytest.mark.skipif(COMPILER is None, reason="no C compiler available")


def _compile(source: Path, out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    artifact = out_dir / "libsolve.so"
    subprocess.run(
        [COMPILER, "-O2", "-shared", "-fPIC", "-o", str(artifact), str(source)],  # type: ignore[list-item]
        check=True,
        capture_output=True,
    )
    return artifact


@pytest.fixture(scope="module")
def c_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    if COMPILER is None:
        pytest.skip("no C compiler available")
    out = tmp_path_factory.mktemp("c")
    _compile(EXAMPLE_SOURCE, out)
    return out


@needs_compiler
def test_load_c_library(c_dir: Path) -> None:
    with NativeLibraryLoader().load(c_dir) as lib:
        assert lib.language == "C"
        assert lib.solve([3, 5], 10) == 3 + 5 + 6 + 9
        assert lib.solve([3, 2, 4, 4, 5], 10) == 37
        assert lib.solve([3, 5], 1000) == 233168


@needs_compiler
def test_c_library_random_tests(c_dir: Path) -> None:
    with NativeLibraryLoader().load(c_dir) as lib:
        outcomes = random_tests(lib, 100)
    assert all(o.success for o in outcomes)


@needs_compiler
def test_rust_loader_uses_build_output(tmp_path: Path) -> None:
    _compile(EXAMPLE_SOURCE, tmp_path / "target" / "release")
    with RustLibraryLoader().load(tmp_path) as lib:
        assert lib.language == "Rust"
        assert lib.solve([3, 5], 10) == 23
    # The C convention does not look inside target/release
    with pytest.raises(LoadError) as exc:
        NativeLibraryLoader().load(tmp_path)
    assert exc.value.kind is ErrorKind.ARTIFACT_NOT_FOUND


@needs_compiler
def test_missing_symbol(tmp_path: Path) -> None:
    source = tmp_path / "other.c"
    source.write_text("int not_solve(void) { return 0; }\n", "utf-8")
    _compile(source, tmp_path / "lib")
    with pytest.raises(LoadError) as exc:
        NativeLibraryLoader().load(tmp_path / "lib")
    assert exc.value.kind is ErrorKind.SYMBOL_NOT_FOUND


@needs_compiler
def test_independent_handles_and_close(c_dir: Path) -> None:
    first = NativeLibraryLoader().load(c_dir)
    second = NativeLibraryLoader().load(c_dir)
    first.close()
    first.close()
    assert first.closed
    with pytest.raises(InvocationError):
        first.solve([3, 5], 10)
    assert second.solve([3, 5], 10) == 23
    second.close()


@needs_compiler
def test_concurrent_requests(c_dir: Path) -> None:
    results: dict[int, bool] = {}

    def _worker(idx: int) -> None:
        with NativeLibraryLoader().load(c_dir) as lib:
            results[idx] = all(o.success for o in random_tests(lib, 20))

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == {0: True, 1: True, 2: True, 3: True}


@needs_compiler
def test_negative_factor_rejected_before_call(c_dir: Path) -> None:
    with NativeLibraryLoader().load(c_dir) as lib:
        with pytest.raises(InvocationError):
            lib.solve([-3], 10)


def test_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(LoadError) as exc:
        NativeLibraryLoader().load(tmp_path / "nowhere")
    assert exc.value.kind is ErrorKind.PATH_INVALID


def test_missing_artifact(tmp_path: Path) -> None:
    with pytest.raises(LoadError) as exc:
        NativeLibraryLoader().load(tmp_path)
    assert exc.value.kind is ErrorKind.ARTIFACT_NOT_FOUND


def test_unloadable_artifact(tmp_path: Path) -> None:
    (tmp_path / "libsolve.so").write_bytes(b"not an ELF file")
    with pytest.raises(LoadError) as exc:
        NativeLibraryLoader().load(tmp_path)
    assert exc.value.kind is ErrorKind.RUNTIME_INIT_FAILURE


def test_call_native_passes_readonly_contiguous_buffer() -> None:
    seen: dict[str, object] = {}

    def fake(count: int, buffer: np.ndarray, bound: int) -> int:
        seen["count"] = count
        seen["dtype"] = buffer.dtype
        seen["writeable"] = buffer.flags.writeable
        seen["contiguous"] = buffer.flags.c_contiguous
        seen["values"] = buffer.tolist()
        return bound

    assert call_native(fake, [3, 5, 5], 99) == 99
    assert seen == {
        "count": 3,
        "dtype": np.dtype(np.uint64),
        "writeable": False,
        "contiguous": True,
        "values": [3, 5, 5],
    }
