from __future__ import annotations

import datetime as dt
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import pytest

from gpssplit.analyze.points import GeoPoint
from gpssplit.analyze.track import Track

T0 = dt.datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt.timezone.utc)


def at(seconds: float) -> dt.datetime:
    return T0 + dt.timedelta(seconds=seconds)


def pt(lat: float, lon: float, seconds: float, ele: float | None = None) -> GeoPoint:
    return GeoPoint(latitude=lat, longitude=lon, timestamp=at(seconds), elevation=ele)


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def workout() -> Track:
    """Roughly 157 km covered in 60 seconds."""
    return Track([pt(1, 1, 0), pt(2, 2, 60)])


@pytest.fixture
def paused() -> Track:
    """The same 157 km, after standing still for 60 seconds."""
    return Track([pt(1, 1, 0), pt(1, 1, 60), pt(2, 2, 120)])


@pytest.fixture
def altitude() -> Track:
    """Stationary, with an impossible 100 m elevation spike at t=60."""
    return Track([pt(1, 1, 0, 0), pt(1, 1, 60, 100), pt(1, 1, 120, 0), pt(1, 1, 180, 0)])
