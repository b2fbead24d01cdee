# gpssplit/util/fzf.py
"""
Interactive choice of GPX tracks under the work root, via `fzf`.

Tracks live in dated subfolders and often share a file name
("Current.gpx"), so candidates are shown by their path relative to the
work root. The absolute path travels in a hidden second column and is
what the caller gets back.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which

from gpssplit.errors import FzfNotFoundError, SelectionError

# fzf exits 1 for "no match" and 130 for Esc / Ctrl-C: both mean nothing chosen
_NOTHING_CHOSEN = (1, 130)


def find_gpx_files(work_root: Path) -> list[Path]:
    """All *.gpx files below `work_root`, sorted; empty if the root is missing."""
    if not work_root.is_dir():
        return []
    return sorted(p for p in work_root.rglob("*.gpx") if p.is_file())


def _candidate_lines(tracks: list[Path], work_root: Path) -> str:
    lines = []
    for p in tracks:
        try:
            label = p.relative_to(work_root).as_posix()
        except ValueError:
            label = str(p)
        lines.append(f"{label}\t{p.resolve()}")
    return "\n".join(lines) + "\n"


def _fzf_command(header: str, multi: bool) -> list[str]:
    cmd = [
        "fzf",
        "--delimiter=\t",
        "--with-nth=1",
        "--layout=reverse",
        "--height=60%",
        "--border",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")
    return cmd


def _chosen_paths(stdout: str) -> list[Path]:
    chosen = []
    for line in stdout.splitlines():
        _label, sep, abs_path = line.partition("\t")
        if sep and abs_path.strip():
            chosen.append(Path(abs_path.strip()))
    return chosen


def select_gpx_files(
        work_root: Path, *,
        header: str = "Select GPX track(s) to analyze:",
        multi: bool = True,
) -> list[Path]:
    """
    Let the user pick tracks below `work_root`.

    Raises SelectionError when there is nothing to pick from and
    FzfNotFoundError when fzf is not installed. An aborted picker
    returns [].
    """
    work_root = work_root.expanduser()
    tracks = find_gpx_files(work_root)
    if not tracks:
        raise SelectionError(f"No GPX files found under {work_root}")
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    proc = subprocess.run(
        _fzf_command(header, multi),
        input=_candidate_lines(tracks, work_root),
        capture_output=True,
        text=True,
    )
    if proc.returncode in _NOTHING_CHOSEN:
        return []
    if proc.returncode != 0:
        raise SelectionError(f"fzf failed ({proc.returncode}): {proc.stderr.strip()}")
    return _chosen_paths(proc.stdout)
