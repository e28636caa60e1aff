"""Domain models for destinations and leg metrics."""

from dataclasses import dataclass
from enum import Enum


@dataclass(slots=True, frozen=True)
class Destination:
    """A place the user wants to visit, identified by its position in the input list."""

    label: str
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(slots=True, frozen=True)
class LegMetrics:
    """Distance (metres) and duration (seconds) of one directed leg."""

    distance: float
    duration: float


class Criterion(str, Enum):
    """Route metric being minimized."""

    DISTANCE = "distance"
    DURATION = "duration"

    def pick(self, leg: LegMetrics) -> float:
        return leg.distance if self is Criterion.DISTANCE else leg.duration
