"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..config import settings


class DestinationModel(BaseModel):
    label: str = Field(..., min_length=1, description="Display name, e.g. the formatted address.")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class OptimizeRequest(BaseModel):
    destinations: List[DestinationModel] = Field(
        ..., description="Destinations in the user's current order."
    )
    fixed_indices: List[int] = Field(
        default_factory=list,
        description="Zero-based positions whose destination must stay in place.",
    )
    criterion: Literal["distance", "duration"] = Field(
        default_factory=lambda: settings.default_criterion,
        description="Minimize summed leg distance (metres) or travel time (seconds).",
    )
    skip_unreachable: Optional[bool] = Field(
        default=None,
        description="Skip candidates with an unreachable leg instead of failing. Defaults to the server setting.",
    )


class OptimizedStopModel(BaseModel):
    sequence: int = Field(..., description="1-based visiting position (map marker label).")
    index: int = Field(..., description="Position of this destination in the request.")
    label: str
    latitude: float
    longitude: float
    fixed: bool
    distance_from_prev_m: float
    duration_from_prev_s: float


class OptimizeResponse(BaseModel):
    criterion: Literal["distance", "duration"]
    order: List[int]
    metric: float
    total_distance_m: float
    total_duration_s: float
    stops: List[OptimizedStopModel]
    metadata: dict
