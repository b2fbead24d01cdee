# gpssplit/analyze/points.py
"""
Point value type and the small numeric helpers shared by segments and tracks.

Everything here is pure: no I/O, no logging, no module-level state.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass, replace
from typing import Optional, Union

from haversine import haversine, Unit

from gpssplit.errors import DegenerateDurationError, MissingElevationError

Seconds = Union[float, int, _dt.timedelta]


@dataclass(frozen=True)
class GeoPoint:
    """
    A single recorded fix.

    `timestamp` is always tz-aware; naive datetimes are taken as UTC
    (the same assumption the GPX reader makes).
    """
    latitude: float
    longitude: float
    timestamp: _dt.datetime
    elevation: Optional[float] = None

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            object.__setattr__(
                self, "timestamp", self.timestamp.replace(tzinfo=_dt.timezone.utc)
            )

    @property
    def epoch_second(self) -> int:
        """Timestamp truncated to whole seconds since the Unix epoch."""
        return epoch_second(self.timestamp)

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None

    def require_elevation(self, index: Optional[int] = None) -> float:
        if self.elevation is None:
            where = f" at index {index}" if index is not None else ""
            raise MissingElevationError(f"point{where} has no elevation ({self.timestamp.isoformat()})")
        return self.elevation

    def with_elevation(self, elevation: Optional[float]) -> "GeoPoint":
        """Return a copy with only the elevation replaced."""
        return replace(self, elevation=elevation)


def epoch_second(moment: _dt.datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=_dt.timezone.utc)
    # floor, so sub-second parts never push a point into the next second
    return math.floor(moment.timestamp())


def as_seconds(value: Seconds) -> float:
    """Accept a timedelta or a plain number of seconds."""
    if isinstance(value, _dt.timedelta):
        return value.total_seconds()
    return float(value)


def seconds_between(a: GeoPoint, b: GeoPoint) -> float:
    """Elapsed seconds from a to b (negative if b was recorded first)."""
    return (b.timestamp - a.timestamp).total_seconds()


def geodesic_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters. Elevation is ignored."""
    return haversine((a.latitude, a.longitude), (b.latitude, b.longitude), unit=Unit.METERS)


def safe_rate(amount: float, dt_s: float) -> float:
    """
    amount / dt_s, refusing zero or negative time spans.

    All speed-like divisions go through here so a bad time delta surfaces as
    DegenerateDurationError instead of inf/nan.
    """
    if dt_s <= 0:
        raise DegenerateDurationError(f"cannot compute a rate over {dt_s} s")
    return amount / dt_s
