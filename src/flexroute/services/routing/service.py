"""Routing orchestration service."""

from __future__ import annotations

import logging
import time

from ...config import settings
from ...models.domain import Criterion, Destination
from ...schemas.routing import OptimizedStopModel, OptimizeRequest, OptimizeResponse
from .errors import InvalidInput, OracleFailure
from .oracle import DistanceOracle
from .osrm_client import OSRMClient
from .search import SearchResult, flexible_tsp

logger = logging.getLogger(__name__)


def _to_destinations(payload: OptimizeRequest) -> list[Destination]:
    return [
        Destination(label=item.label, latitude=item.latitude, longitude=item.longitude)
        for item in payload.destinations
    ]


def _build_response(
    destinations: list[Destination],
    fixed: set[int],
    result: SearchResult,
    elapsed_seconds: float,
) -> OptimizeResponse:
    legs = result.legs

    stops: list[OptimizedStopModel] = []
    total_distance = 0.0
    total_duration = 0.0
    for sequence, index in enumerate(result.route, start=1):
        destination = destinations[index]
        leg = legs[sequence - 2] if sequence > 1 else None
        distance = leg.distance if leg else 0.0
        duration = leg.duration if leg else 0.0
        total_distance += distance
        total_duration += duration
        stops.append(
            OptimizedStopModel(
                sequence=sequence,
                index=index,
                label=destination.label,
                latitude=destination.latitude,
                longitude=destination.longitude,
                fixed=index in fixed,
                distance_from_prev_m=distance,
                duration_from_prev_s=duration,
            )
        )

    metadata = {
        "status": "optimal",
        "criterion": result.criterion.value,
        "destinations": len(destinations),
        "fixed_indices": sorted(fixed),
        "candidates_evaluated": result.candidates_evaluated,
        "candidates_skipped": result.candidates_skipped,
        "elapsed_seconds": round(elapsed_seconds, 3),
        "map_overlays": {
            "path": [[stop.latitude, stop.longitude] for stop in stops],
        },
    }

    return OptimizeResponse(
        criterion=result.criterion.value,
        order=list(result.route),
        metric=result.metric,
        total_distance_m=total_distance,
        total_duration_s=total_duration,
        stops=stops,
        metadata=metadata,
    )


async def _optimize_with(payload: OptimizeRequest, oracle: DistanceOracle) -> OptimizeResponse:
    destinations = _to_destinations(payload)
    fixed = set(payload.fixed_indices)
    skip_unreachable = (
        payload.skip_unreachable if payload.skip_unreachable is not None else settings.skip_unreachable
    )

    started = time.perf_counter()
    result = await flexible_tsp(
        [destination.coordinate for destination in destinations],
        fixed,
        Criterion(payload.criterion),
        oracle,
        candidate_concurrency=settings.candidate_concurrency,
        concurrent_legs=settings.concurrent_legs,
        skip_unreachable=skip_unreachable,
        max_destinations=settings.max_destinations,
    )
    elapsed = time.perf_counter() - started
    return _build_response(destinations, fixed, result, elapsed)


async def optimize_destinations(
    payload: OptimizeRequest,
    oracle: DistanceOracle | None = None,
) -> OptimizeResponse:
    """Optimize the visiting order of ``payload.destinations``.

    Uses an :class:`OSRMClient` built from settings unless an oracle is
    passed in. Any oracle failure aborts the whole optimization; no
    partial route is returned.
    """
    if len(payload.destinations) < 2:
        raise InvalidInput("Please add at least two destinations.")

    logger.info(
        f"Optimizing {len(payload.destinations)} destinations by {payload.criterion} "
        f"with fixed positions {sorted(set(payload.fixed_indices))}"
    )
    try:
        if oracle is not None:
            return await _optimize_with(payload, oracle)
        async with OSRMClient() as client:
            return await _optimize_with(payload, client)
    except OracleFailure as e:
        logger.error(f"Optimization failed: {e}")
        raise
