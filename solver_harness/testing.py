"""Differential tester: run a candidate and the reference on random inputs.

Batches are not reproducible replays; each call draws fresh arguments from
the supplied random generator.
"""
from __future__ import annotations

import logging
import operator
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

import numpy as np

from . import constants as C
from .errors import InvocationError
from .libraries.base import Library
from .reference import correct

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverArguments:
    """Arguments handed to both the candidate and the reference."""

    factors: tuple[int, ...]
    upper_bound: int

    @classmethod
    def new(cls, factors: Sequence[int], upper_bound: int) -> "SolverArguments":
        return cls(tuple(int(f) for f in factors), int(upper_bound))

    @classmethod
    def sample(cls, rng: np.random.Generator) -> "SolverArguments":
        """Draw arguments uniformly from the fixed sampler ranges.

        Factor count, then each factor independently (repeats allowed), then
        the upper bound.  All upper limits are exclusive.
        """
        count = int(rng.integers(C.FACTOR_COUNT_MIN, C.FACTOR_COUNT_MAX))
        factors = rng.integers(C.FACTOR_MIN, C.FACTOR_MAX, size=count)
        upper_bound = rng.integers(C.UPPER_BOUND_MIN, C.UPPER_BOUND_MAX)
        return cls(tuple(int(f) for f in factors), int(upper_bound))

    def to_dict(self) -> dict[str, Any]:
        return {"factors": list(self.factors), "upper_bound": self.upper_bound}


@dataclass(frozen=True)
class TestOutcome:
    """Candidate value (``solution``) next to the reference value (``proposal``)."""

    __test__ = False  # keep pytest from collecting this class

    arguments: SolverArguments
    solution: int
    proposal: int
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "success", self.solution == self.proposal)

    def to_dict(self) -> dict[str, Any]:
        return {
            "arguments": self.arguments.to_dict(),
            "solution": self.solution,
            "proposal": self.proposal,
            "success": self.success,
        }


def _call_with_timeout(func: Callable[..., int], timeout: float, *args: Any) -> int:
    """Run ``func(*args)`` on a daemon thread and wait at most ``timeout`` seconds.

    A call that overruns is abandoned, not stopped: the thread keeps running
    in the background and, for Python candidates, keeps holding the
    interpreter lock until it returns.
    """

    box: dict[str, Any] = {}
    done = threading.Event()

    def _target() -> None:
        try:
            box["value"] = func(*args)
        except Exception as exc:
            box["error"] = exc
        except BaseException as exc:
            error = InvocationError(f"{type(exc).__name__}: {exc}")
            error.__cause__ = exc
            box["error"] = error
        finally:
            done.set()

    worker = threading.Thread(target=_target, name="solver-harness-call", daemon=True)
    worker.start()
    if not done.wait(timeout):
        logger.warning("[solver-harness] abandoning candidate call after %.3fs", timeout)
        raise InvocationError(f"candidate did not return within {timeout:g}s")
    if "error" in box:
        raise box["error"]
    return box["value"]


def _invoke(library: Library, arguments: SolverArguments, timeout: float | None) -> int:
    factors = list(arguments.factors)
    try:
        if timeout is None:
            return library.solve(factors, arguments.upper_bound)
        return _call_with_timeout(library.solve, timeout, factors, arguments.upper_bound)
    except InvocationError:
        raise
    except BaseException as exc:
        raise InvocationError(f"{type(exc).__name__}: {exc}") from exc


def run_test(
    library: Library, arguments: SolverArguments, *, timeout: float | None = None
) -> TestOutcome:
    """Compare ``library`` against the reference on one set of arguments."""
    solution = _invoke(library, arguments, timeout)
    proposal = correct(arguments.factors, arguments.upper_bound)
    return TestOutcome(arguments=arguments, solution=solution, proposal=proposal)


def random_tests(
    library: Library,
    test_count: int = C.DEFAULT_TEST_COUNT,
    rng: np.random.Generator | None = None,
    *,
    timeout: float | None = None,
) -> list[TestOutcome]:
    """Run ``test_count`` random differential tests against ``library``.

    Mismatches are recorded as ``success=False``.  A failing invocation
    (foreign exception, unusable return value, timeout) aborts the batch with
    :class:`InvocationError` naming the offending sample.
    """

    try:
        if isinstance(test_count, bool):
            raise TypeError
        test_count = operator.index(test_count)
    except TypeError:
        raise ValueError(f"test_count must be a positive integer, got {test_count!r}") from None
    if test_count < 1:
        raise ValueError(f"test_count must be a positive integer, got {test_count!r}")
    if timeout is not None and timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout!r}")
    if rng is None:
        rng = np.random.default_rng()

    outcomes: list[TestOutcome] = []
    for idx in range(test_count):
        arguments = SolverArguments.sample(rng)
        try:
            outcome = run_test(library, arguments, timeout=timeout)
        except InvocationError as exc:
            logger.warning(
                "[solver-harness] sample %d/%d aborted the batch: %s",
                idx + 1,
                test_count,
                exc.message,
            )
            raise InvocationError(
                f"sample {idx + 1}/{test_count} {arguments.to_dict()}: {exc.message}"
            ) from exc
        if outcome.success:
            logger.debug("[solver-harness] sample %d/%d ok", idx + 1, test_count)
        else:
            logger.warning(
                "[solver-harness] sample %d/%d mismatch: %s solution=%d proposal=%d",
                idx + 1,
                test_count,
                arguments.to_dict(),
                outcome.solution,
                outcome.proposal,
            )
        outcomes.append(outcome)

    passed = sum(o.success for o in outcomes)
    logger.info("[solver-harness] %d/%d samples passed for %r", passed, test_count, library)
    return outcomes


def summarize(outcomes: Iterable[TestOutcome]) -> dict[str, Any]:
    items = list(outcomes)
    passed = sum(1 for o in items if o.success)
    total = len(items)
    return {
        "total": total,
        "passed": passed,
        "failed": total - passed,
        "success_rate": (passed / total) if total else 0.0,
    }


__all__ = [
    "SolverArguments",
    "TestOutcome",
    "random_tests",
    "run_test",
    "summarize",
]
