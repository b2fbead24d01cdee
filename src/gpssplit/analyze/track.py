# gpssplit/analyze/track.py
"""
Track analysis functions for GPSsplit
"""

from __future__ import annotations

import datetime as _dt
import math
from typing import Iterable, Iterator, Optional

from gpssplit.analyze.points import GeoPoint, Seconds, as_seconds, safe_rate, seconds_between
from gpssplit.analyze.segment import PAUSE_THRESHOLD_MPS, Segment
from gpssplit.errors import (
    ConfigurationError,
    DegenerateDurationError,
    InsufficientPointsError,
)


class Track:
    """
    All points of one recording, flattened into a single ordered sequence.

    A Track never changes after construction; `correct_altitude` returns a
    new Track.
    """

    def __init__(self, points: Iterable[GeoPoint]):
        self._points = tuple(points)

    @classmethod
    def from_segment(cls, segment: Segment) -> "Track":
        return cls(segment.points)

    @property
    def points(self) -> tuple[GeoPoint, ...]:
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points)

    def whole(self) -> Segment:
        """A segment covering every point."""
        return Segment(self._points)

    def split(self, interval: Seconds) -> list[Segment]:
        """
        Cut the track into consecutive windows of `interval` seconds.

        There are floor(duration / interval) + 1 windows, so a track whose
        duration is an exact multiple of the interval gets one trailing window
        holding only the last point. Window i spans
        [start + i*interval, start + (i+1)*interval], boundaries inclusive.
        """
        step = as_seconds(interval)
        if step <= 0:
            raise ConfigurationError(f"split interval must be positive, got {step}")
        if not self._points:
            raise InsufficientPointsError("cannot split an empty track")

        total = self.whole().duration()
        first = self._points[0].timestamp
        count = math.floor(total / step) + 1

        segments = []
        for i in range(count):
            start = first + _dt.timedelta(seconds=i * step)
            end = first + _dt.timedelta(seconds=(i + 1) * step)
            segments.append(Segment.between(self._points, start, end))
        return segments

    def top_speed(self, interval: Seconds, autopause: bool = False) -> float:
        """
        Fastest average speed (m/s) over any single split.

        Splits without a usable duration are left out; 0.0 if none qualifies.
        """
        best = 0.0
        for segment in self.split(interval):
            try:
                v = segment.speed(autopause)
            except (DegenerateDurationError, InsufficientPointsError):
                continue
            best = max(best, v)
        return best

    def correct_altitude(self, max_vertical_speed: float) -> "Track":
        """
        Clamp elevation jumps faster than `max_vertical_speed` (m/s).

        Runs left to right over a copy of the points. Each step compares a
        point with its already corrected predecessor, so one clamp can cause
        the next. A clamped point keeps its position and time; its elevation
        becomes predecessor +/- max_vertical_speed * dt, in the direction of
        the original jump.
        """
        if not max_vertical_speed > 0:
            raise ConfigurationError(
                f"max vertical speed must be positive, got {max_vertical_speed}"
            )

        corrected = list(self._points)
        for i in range(len(corrected) - 1):
            prev, cur = corrected[i], corrected[i + 1]
            prev_ele = prev.require_elevation(i)
            d_ele = cur.require_elevation(i + 1) - prev_ele
            dt_s = seconds_between(prev, cur)
            if dt_s <= 0:
                continue
            if safe_rate(abs(d_ele), dt_s) > max_vertical_speed:
                corrected[i + 1] = cur.with_elevation(
                    prev_ele + math.copysign(max_vertical_speed * dt_s, d_ele)
                )
        return Track(corrected)

    def summary(self) -> str:
        return self.whole().summary()

    def __str__(self) -> str:
        return f"Track{{{self.summary()}}} ({len(self._points)} points)"

    def __repr__(self) -> str:
        return f"Track(points={len(self._points)})"


def track_stats(track: Track, *, interval: Seconds = 60, autopause: bool = False) -> dict:
    if len(track) < 2:
        return {"points": len(track), "splits": 0}

    whole = track.whole()
    return {
        "points": len(track),
        "splits": len(track.split(interval)),
        "distance_m": whole.distance(),
        "duration_s": whole.duration(),
        "paused_s": whole.paused_duration(PAUSE_THRESHOLD_MPS),
        "avg_speed_mps": _speed_or_none(whole, False),
        "avg_speed_autopause_mps": _speed_or_none(whole, True),
        "top_speed_mps": track.top_speed(interval, autopause),
    }


def _speed_or_none(segment: Segment, autopause: bool) -> Optional[float]:
    try:
        return segment.speed(autopause)
    except DegenerateDurationError:
        return None
