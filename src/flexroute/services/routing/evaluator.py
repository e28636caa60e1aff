"""Route metric evaluation against a distance oracle."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Iterable, Sequence, TypeVar

from ...models.domain import Criterion, LegMetrics
from .errors import OracleFailure
from .oracle import Coordinate, DistanceOracle

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_cancelling(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await all of ``aws``; on the first error cancel the rest and re-raise it."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # First failure wins; stop whatever is still in flight.
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _checked(leg: LegMetrics, origin: Coordinate, destination: Coordinate) -> LegMetrics:
    for value in (leg.distance, leg.duration):
        if not (math.isfinite(value) and value >= 0):
            raise OracleFailure(
                f"Invalid leg metric {leg}", origin=origin, destination=destination
            )
    return leg


async def measure_legs(
    route: Sequence[int],
    coordinates: Sequence[Coordinate],
    oracle: DistanceOracle,
    *,
    concurrent_legs: bool = False,
) -> list[LegMetrics]:
    """Look up every consecutive leg of ``route``.

    Sequential mode awaits each leg before issuing the next, in route order.
    Any :class:`OracleFailure` propagates from the first failing leg; a leg
    reported as negative or non-finite counts as a failure.
    """
    pairs = [(coordinates[route[i]], coordinates[route[i + 1]]) for i in range(len(route) - 1)]
    if not pairs:
        return []
    if concurrent_legs:
        results = await gather_cancelling(oracle.lookup(origin, destination) for origin, destination in pairs)
        return [_checked(leg, origin, destination) for leg, (origin, destination) in zip(results, pairs)]
    legs: list[LegMetrics] = []
    for origin, destination in pairs:
        legs.append(_checked(await oracle.lookup(origin, destination), origin, destination))
    return legs


async def score_route(
    route: Sequence[int],
    coordinates: Sequence[Coordinate],
    criterion: Criterion,
    oracle: DistanceOracle,
    *,
    concurrent_legs: bool = False,
) -> tuple[float, list[LegMetrics]]:
    """Price ``route`` and keep its legs, so callers need not look them up again."""
    criterion = Criterion(criterion)
    if len(route) <= 1:
        return 0.0, []
    legs = await measure_legs(route, coordinates, oracle, concurrent_legs=concurrent_legs)
    metric = float(sum(criterion.pick(leg) for leg in legs))
    logger.debug(f"Route {list(route)} scored {metric:.1f} ({criterion.value})")
    return metric, legs


async def evaluate_route(
    route: Sequence[int],
    coordinates: Sequence[Coordinate],
    criterion: Criterion,
    oracle: DistanceOracle,
    *,
    concurrent_legs: bool = False,
) -> float:
    """Sum the criterion's leg values along ``route``; routes of length <= 1 cost 0."""
    metric, _ = await score_route(route, coordinates, criterion, oracle, concurrent_legs=concurrent_legs)
    return metric
