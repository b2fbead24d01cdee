#!/usr/bin/env python3
"""
gpssplit-analyze: report distance, time, pauses and split speeds for GPX files,
optionally writing an altitude-corrected copy of each track.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from gpssplit.analyze.track import track_stats
from gpssplit.config import load_config
from gpssplit.errors import GPSsplitError, SelectionError
from gpssplit.formats.gpx import read_track, write_track
from gpssplit.util.fzf import select_gpx_files
from gpssplit.util.logging import log, warn


TSV_COLUMNS = (
    "points", "splits", "distance_m", "duration_s", "paused_s",
    "avg_speed_mps", "avg_speed_autopause_mps", "top_speed_mps",
)


def _num(v: Optional[float], digits: int) -> str:
    return "n/a" if v is None else f"{v:.{digits}f}"


def print_report(path: Path, stats: dict, *, tsv: bool) -> None:
    if tsv:
        cells = [str(path), str(stats.get("points", 0)), str(stats.get("splits", 0))]
        cells += [_num(stats.get(k), 3) for k in TSV_COLUMNS[2:]]
        print("\t".join(cells))
    else:
        print(f"\n{path}")
        print(f"  points              : {stats.get('points', 0)}")
        print(f"  splits              : {stats.get('splits', 0)}")
        print(f"  distance (m)        : {_num(stats.get('distance_m'), 2)}")
        print(f"  duration (s)        : {_num(stats.get('duration_s'), 1)}")
        print(f"  paused (s)          : {_num(stats.get('paused_s'), 1)}")
        print(f"  avg speed m/s       : {_num(stats.get('avg_speed_mps'), 3)}")
        print(f"  avg speed m/s (ap)  : {_num(stats.get('avg_speed_autopause_mps'), 3)}")
        print(f"  top split speed m/s : {_num(stats.get('top_speed_mps'), 3)}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="GPSsplit: analyze GPX file(s).")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, use fzf selection under the work root.")
    ap.add_argument("--work-root", default=None,
                    help="Working root (default: from GPSsplit config or ~/GPS/_work)")
    ap.add_argument("--interval", type=float, default=None,
                    help="Split length in seconds (default: from config, 60)")
    ap.add_argument("--autopause", action="store_true", default=None,
                    help="Leave paused time out of split speeds.")
    ap.add_argument("--max-vertical-speed", type=float, default=None,
                    help="Vertical speed bound (m/s) for altitude correction (default: from config, 5)")
    ap.add_argument("--correct", action="store_true",
                    help="Write an altitude-corrected GPX per input into the configured out root.")
    ap.add_argument("--correct-out", default=None, metavar="DIR",
                    help="Like --correct, but write into DIR.")
    ap.add_argument("--plot", action="store_true",
                    help="Show split-speed and elevation charts.")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    return ap


def process_file(path: Path, args: argparse.Namespace, *, interval: float,
                 autopause: bool, max_vertical_speed: float,
                 out_dir: Optional[Path] = None) -> None:
    track = read_track(path)
    print_report(path, track_stats(track, interval=interval, autopause=autopause), tsv=args.tsv)

    corrected = None
    if out_dir is not None:
        corrected = track.correct_altitude(max_vertical_speed)
        out_path = out_dir / f"{path.stem}_corrected.gpx"
        write_track(corrected, out_path, name=path.stem)

    if args.plot and len(track):
        from gpssplit.visualize.plot import plot_elevation, plot_split_speeds
        plot_split_speeds(track, interval, autopause=autopause)
        plot_elevation(track, corrected)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()

    interval = args.interval if args.interval is not None else cfg.analysis.split_interval_s
    autopause = args.autopause if args.autopause is not None else cfg.analysis.autopause
    max_vs = (args.max_vertical_speed if args.max_vertical_speed is not None
              else cfg.analysis.max_vertical_speed_mps)

    if args.correct_out:
        out_dir = Path(args.correct_out).expanduser()
    elif args.correct:
        out_dir = cfg.paths.out_root
    else:
        out_dir = None

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        work_root = Path(args.work_root).expanduser() if args.work_root else cfg.paths.work_root
        try:
            selected = select_gpx_files(work_root)
        except SelectionError as e:
            raise SystemExit(str(e)) from e

    if args.tsv:
        print("file\t" + "\t".join(TSV_COLUMNS))

    failures = 0
    for path in selected:
        if not path.is_file():
            warn(f"Skipping (not a file): {path}")
            failures += 1
            continue
        try:
            process_file(path, args, interval=interval, autopause=autopause,
                         max_vertical_speed=max_vs, out_dir=out_dir)
        except (GPSsplitError, OSError) as e:
            warn(f"{path}: {e}")
            failures += 1

    if not args.tsv:
        log(f"Analyzed {len(selected) - failures} of {len(selected)} file(s)")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
