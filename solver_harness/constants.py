"""Package‑wide constants: sampler ranges, artifact conventions and defaults."""

from pathlib import PurePath

# Argument sampler ranges. Upper limits are exclusive and part of the test
# contract, not tuning knobs.
FACTOR_COUNT_MIN = 1
FACTOR_COUNT_MAX = 8
FACTOR_MIN = 2
FACTOR_MAX = 256
UPPER_BOUND_MIN = 8
UPPER_BOUND_MAX = 65536

# Largest value representable by the native ``uint64_t`` return type.
U64_LIMIT = 2**64

DEFAULT_TEST_COUNT = 10

# Native artifact conventions
LIBRARY_FILENAME = "libsolve.so"
SYMBOL_NAME = "solve"
RUST_BUILD_SUBPATH = PurePath("target", "release")

# Attribute looked up on imported Python candidates
PYTHON_ENTRYPOINT = "solve"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
HOST_ENV = "SOLVER_HARNESS_HOST"
PORT_ENV = "SOLVER_HARNESS_PORT"

__all__ = [
    "FACTOR_COUNT_MIN",
    "FACTOR_COUNT_MAX",
    "FACTOR_MIN",
    "FACTOR_MAX",
    "UPPER_BOUND_MIN",
    "UPPER_BOUND_MAX",
    "U64_LIMIT",
    "DEFAULT_TEST_COUNT",
    "LIBRARY_FILENAME",
    "SYMBOL_NAME",
    "RUST_BUILD_SUBPATH",
    "PYTHON_ENTRYPOINT",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "HOST_ENV",
    "PORT_ENV",
]
