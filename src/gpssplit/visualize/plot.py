# gpssplit/visualize/plot.py
"""
Plotting routines for GPSsplit
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from gpssplit.analyze.track import Track
from gpssplit.errors import DegenerateDurationError


def _finish(fig, out_path: Optional[Path], show: bool):
    if out_path is not None:
        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path)
    if show:
        plt.show()
    return fig


def plot_split_speeds(
        track: Track, interval: float, *,
        autopause: bool = False,
        out_path: Optional[Path] = None,
        show: bool = True,
):
    """Bar chart of average speed per split. Splits without a speed are drawn as 0."""
    speeds = []
    for segment in track.split(interval):
        try:
            speeds.append(segment.speed(autopause))
        except DegenerateDurationError:
            speeds.append(0.0)

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(range(1, len(speeds) + 1), speeds, color="tab:blue")
    ax.set_xlabel(f"Split ({interval:g} s)")
    ax.set_ylabel("Speed (m/s)")
    ax.set_title("Split speeds" + (" (autopause)" if autopause else ""))
    return _finish(fig, out_path, show)


def plot_elevation(
        original: Track, corrected: Optional[Track] = None, *,
        out_path: Optional[Path] = None,
        show: bool = True,
):
    """Elevation over elapsed time; points without elevation are left out."""
    fig, ax = plt.subplots(figsize=(8, 4))

    for track, label, style in ((original, "recorded", "-"), (corrected, "corrected", "--")):
        if track is None or not track.points:
            continue
        t0 = track.points[0].timestamp
        xs = [(p.timestamp - t0).total_seconds() for p in track.points if p.has_elevation]
        ys = [p.elevation for p in track.points if p.has_elevation]
        ax.plot(xs, ys, style, label=label)

    ax.set_xlabel("Elapsed (s)")
    ax.set_ylabel("Elevation (m)")
    ax.set_title("Elevation profile")
    ax.legend()
    return _finish(fig, out_path, show)
