from __future__ import annotations

"""Reference solver used as the oracle for every candidate."""

from typing import Sequence


def correct(factors: Sequence[int], upper_bound: int) -> int:
    """Sum every ``m`` in ``[1, upper_bound)`` divisible by some factor.

    Each multiple is counted once, at the first factor dividing it, so
    overlapping factors never double count.
    """

    total = 0
    for multiple in range(1, upper_bound):
        for factor in factors:
            if multiple % factor == 0:
                total += multiple
                break
    return total


__all__ = ["correct"]
