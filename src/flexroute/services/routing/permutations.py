"""Candidate generation for the constrained route search."""

from __future__ import annotations

import math
from typing import Iterable, Iterator, Sequence


def partition_indices(n: int, fixed: Iterable[int]) -> tuple[list[int], list[int]]:
    """Split ``0..n-1`` into (fixed, flexible) index lists, both ascending."""
    fixed_set = set(fixed)
    fixed_ordered = sorted(fixed_set)
    flexible = [i for i in range(n) if i not in fixed_set]
    return fixed_ordered, flexible


def swap_permutations(items: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """Yield every ordering of ``items`` in recursive swap order.

    Works on a private copy, so the caller's sequence is never touched and
    calling again restarts the enumeration. The order is deterministic:
    position ``k`` is filled by swapping in ``buffer[k]``, ``buffer[k+1]``, ...
    in turn and recursing, restoring the buffer after each branch. An empty
    input yields a single empty tuple.
    """
    buffer = list(items)

    def _permute(start: int) -> Iterator[tuple[int, ...]]:
        if start >= len(buffer):
            yield tuple(buffer)
            return
        for i in range(start, len(buffer)):
            buffer[start], buffer[i] = buffer[i], buffer[start]
            yield from _permute(start + 1)
            buffer[start], buffer[i] = buffer[i], buffer[start]

    return _permute(0)


def assemble_route(n: int, fixed: set[int] | frozenset[int], permutation: Sequence[int]) -> tuple[int, ...]:
    """Interleave fixed slots with a permutation of the flexible indices."""
    flexible_values = iter(permutation)
    return tuple(i if i in fixed else next(flexible_values) for i in range(n))


def count_candidates(n: int, fixed: Iterable[int]) -> int:
    return math.factorial(n - len(set(fixed)))
