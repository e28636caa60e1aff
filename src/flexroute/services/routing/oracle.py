"""Contract for the pairwise distance/duration lookup service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ...models.domain import LegMetrics

Coordinate = tuple[float, float]


@runtime_checkable
class DistanceOracle(Protocol):
    """Anything that can price a single directed leg.

    ``lookup`` makes exactly one attempt and returns the metrics of one
    real-world route between the two points. It raises
    :class:`~flexroute.services.routing.errors.OracleFailure` when no route
    can be computed. Implementations must not cache results.
    """

    async def lookup(self, origin: Coordinate, destination: Coordinate) -> LegMetrics:
        ...
