"""Errors raised by the route optimization engine."""

from __future__ import annotations


class InvalidInput(ValueError):
    """Search input rejected before any permutation work begins."""


class OracleFailure(RuntimeError):
    """A leg distance/duration lookup could not be completed."""

    def __init__(
        self,
        reason: str,
        *,
        origin: tuple[float, float] | None = None,
        destination: tuple[float, float] | None = None,
    ) -> None:
        self.reason = reason
        self.origin = origin
        self.destination = destination
        if origin is not None and destination is not None:
            message = f"Leg {origin} -> {destination} failed: {reason}"
        else:
            message = reason
        super().__init__(message)
