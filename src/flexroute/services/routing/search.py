"""Exhaustive route search with destinations pinned to their slots.

Every ordering of the non-fixed destinations is generated, fixed
destinations are put back at their original positions, and each complete
candidate is priced leg by leg through the distance oracle. The cheapest
candidate wins; on ties the first one enumerated is kept.

The search is factorial in the number of flexible destinations and is
meant for a handful of stops.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from itertools import islice
from typing import Iterable, Iterator, Sequence, TypeVar

from ...models.domain import Criterion, LegMetrics
from .errors import InvalidInput, OracleFailure
from .evaluator import gather_cancelling, score_route
from .oracle import Coordinate, DistanceOracle
from .permutations import assemble_route, count_candidates, partition_indices, swap_permutations

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class SearchResult:
    route: tuple[int, ...]
    metric: float
    criterion: Criterion
    candidates_evaluated: int
    candidates_skipped: int = 0
    legs: list[LegMetrics] = field(default_factory=list)


def validate_search_input(
    coordinates: Sequence[Coordinate],
    fixed_indices: Iterable[int],
    max_destinations: int | None = None,
) -> frozenset[int]:
    """Reject unusable input and return the fixed set as a frozenset."""
    n = len(coordinates)
    if n < 2:
        raise InvalidInput("At least two destinations are required to optimize a route.")
    if max_destinations is not None and n > max_destinations:
        raise InvalidInput(
            f"Too many destinations ({n}); at most {max_destinations} can be optimized at once."
        )
    fixed = frozenset(fixed_indices)
    out_of_range = [i for i in fixed if isinstance(i, bool) or not isinstance(i, int) or not 0 <= i < n]
    if out_of_range:
        raise InvalidInput(f"Fixed indices out of range [0, {n}): {out_of_range}")
    return fixed


def _windows(items: Iterable[T], size: int) -> Iterator[list[T]]:
    iterator = iter(items)
    while window := list(islice(iterator, size)):
        yield window


async def flexible_tsp(
    coordinates: Sequence[Coordinate],
    fixed_indices: Iterable[int],
    criterion: Criterion | str,
    oracle: DistanceOracle,
    *,
    candidate_concurrency: int = 1,
    concurrent_legs: bool = False,
    skip_unreachable: bool = False,
    max_destinations: int | None = None,
) -> SearchResult:
    """Find the cheapest visiting order that keeps fixed destinations in place.

    Args:
        coordinates: (lat, lon) per destination, in the user's order.
        fixed_indices: Positions that must hold their own destination.
        criterion: ``"distance"`` or ``"duration"``.
        oracle: Leg pricing service.
        candidate_concurrency: Candidates scored at once. Results are
            folded in enumeration order, so the answer does not depend on it.
        concurrent_legs: Price all legs of a candidate at once.
        skip_unreachable: Treat a candidate with a failing leg as infeasible
            and keep searching instead of aborting.
        max_destinations: Optional cap on ``len(coordinates)``.

    Raises:
        InvalidInput: Fewer than two destinations, too many, or a fixed
            index outside ``[0, N)``.
        OracleFailure: A leg lookup failed (or, when skipping, every
            candidate failed).
    """
    if candidate_concurrency < 1:
        raise InvalidInput("candidate_concurrency must be at least 1.")
    fixed = validate_search_input(coordinates, fixed_indices, max_destinations)
    criterion = Criterion(criterion)
    # Snapshot so later changes to the caller's list cannot leak into scoring.
    coords: tuple[Coordinate, ...] = tuple((float(lat), float(lon)) for lat, lon in coordinates)
    n = len(coords)
    _, flexible = partition_indices(n, fixed)

    logger.info(
        f"Searching {count_candidates(n, fixed)} candidate routes over {n} destinations "
        f"({len(fixed)} fixed, criterion={criterion.value})"
    )

    async def _score(route: tuple[int, ...]):
        try:
            metric, legs = await score_route(route, coords, criterion, oracle, concurrent_legs=concurrent_legs)
        except OracleFailure as failure:
            if not skip_unreachable:
                raise
            return None, [], failure
        return metric, legs, None

    best_route: tuple[int, ...] = ()
    best_metric = math.inf
    best_legs: list[LegMetrics] = []
    evaluated = 0
    skipped = 0
    last_failure: OracleFailure | None = None

    candidates = (assemble_route(n, fixed, permutation) for permutation in swap_permutations(flexible))
    for window in _windows(candidates, candidate_concurrency):
        if len(window) == 1:
            outcomes = [await _score(window[0])]
        else:
            outcomes = await gather_cancelling(_score(route) for route in window)
        for route, (metric, legs, failure) in zip(window, outcomes):
            if failure is not None:
                skipped += 1
                last_failure = failure
                logger.info(f"Skipping unreachable candidate {list(route)}: {failure.reason}")
                continue
            evaluated += 1
            if metric < best_metric:
                best_metric = metric
                best_route = route
                best_legs = legs

    if not best_route:
        if last_failure is not None:
            logger.warning(f"All {skipped} candidate routes were unreachable")
            raise last_failure
        raise OracleFailure("No candidate route produced a comparable metric")

    logger.info(
        f"Best route {list(best_route)} with {criterion.value}={best_metric:.1f} "
        f"({evaluated} evaluated, {skipped} skipped)"
    )
    return SearchResult(
        route=best_route,
        metric=best_metric,
        criterion=criterion,
        candidates_evaluated=evaluated,
        candidates_skipped=skipped,
        legs=best_legs,
    )
