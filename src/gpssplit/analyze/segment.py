# gpssplit/analyze/segment.py
"""
Segment: a time-bounded view over recorded points.

A segment either wraps a point list as given, or is cut out of a longer list
by a time window (see `Segment.between`). Metrics are recomputed on every call.
"""

from __future__ import annotations

import datetime as _dt
from typing import Iterable, Iterator, Optional

from gpssplit.analyze.points import (
    GeoPoint,
    epoch_second,
    geodesic_distance,
    safe_rate,
    seconds_between,
)
from gpssplit.errors import DegenerateDurationError, InsufficientPointsError

# Speed (m/s) under which a pair of points counts as standing still when
# autopause is on. 1 m/s = 3.6 km/h, a slow walk.
PAUSE_THRESHOLD_MPS = 1.0


class Segment:
    """Ordered, read-only run of points."""

    def __init__(self, points: Iterable[GeoPoint]):
        self._points = tuple(points)

    @classmethod
    def between(
        cls,
        points: Iterable[GeoPoint],
        start: _dt.datetime,
        end: _dt.datetime,
    ) -> "Segment":
        """
        Keep every point whose whole-second timestamp lies in [start, end].

        Comparison is done on epoch seconds, so fractional parts of the window
        bounds and of the point times are ignored.
        """
        start_s = epoch_second(start)
        end_s = epoch_second(end)
        # closed on both ends: a point stamped exactly on a boundary belongs
        # to both neighbouring windows
        return cls(p for p in points if start_s <= p.epoch_second <= end_s)

    # ---- sequence access -------------------------

    @property
    def points(self) -> tuple[GeoPoint, ...]:
        return self._points

    @property
    def start(self) -> Optional[_dt.datetime]:
        return self._points[0].timestamp if self._points else None

    @property
    def end(self) -> Optional[_dt.datetime]:
        return self._points[-1].timestamp if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points)

    def _pairs(self):
        return zip(self._points, self._points[1:])

    # ---- metrics ---------------------------------

    def distance(self) -> float:
        """Meters travelled, summed pair by pair."""
        return sum(geodesic_distance(p0, p1) for p0, p1 in self._pairs())

    def duration(self) -> float:
        """Seconds from the first to the last point."""
        if not self._points:
            raise InsufficientPointsError("duration of an empty segment is undefined")
        return seconds_between(self._points[0], self._points[-1])

    def paused_duration(self, max_speed: float) -> float:
        """
        Seconds spent moving slower than `max_speed` (m/s).

        Pairs recorded in the same second are neither moving nor paused.
        """
        paused = 0.0
        for p0, p1 in self._pairs():
            dt_s = seconds_between(p0, p1)
            if dt_s <= 0:
                continue
            if safe_rate(geodesic_distance(p0, p1), dt_s) < max_speed:
                paused += dt_s
        return paused

    def speed(self, autopause: bool = False) -> float:
        """
        Average speed in m/s.

        With autopause, time spent below PAUSE_THRESHOLD_MPS is taken out of
        the denominator. Raises DegenerateDurationError when no moving time
        is left (single point, or everything paused).
        """
        moving = self.duration()
        if autopause:
            moving -= self.paused_duration(PAUSE_THRESHOLD_MPS)
        return safe_rate(self.distance(), moving)

    # ---- rendering -------------------------------

    def summary(self) -> str:
        return (
            f"distance={_fmt(self.distance, ' m', 1)}, "
            f"duration={_fmt(self.duration, ' s', 0)}, "
            f"speed={_fmt(lambda: self.speed(False), ' m/s', 3)}, "
            f"speed_autopause={_fmt(lambda: self.speed(True), ' m/s', 3)}"
        )

    def __str__(self) -> str:
        return f"Segment{{{self.summary()}}} ({len(self._points)} points)"

    def __repr__(self) -> str:
        return f"Segment(points={len(self._points)}, start={self.start!r}, end={self.end!r})"


def _fmt(metric, unit: str, digits: int) -> str:
    try:
        return f"{metric():.{digits}f}{unit}"
    except (InsufficientPointsError, DegenerateDurationError):
        return "n/a"
