# gpssplit/util/logging.py
from __future__ import annotations

import datetime
import sys

def log(msg: str) -> None:
    """Print a timestamped log line (local time with timezone) to stderr, keeping stdout for reports."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}", file=sys.stderr)

def warn(msg: str) -> None:
    log(f"WARNING: {msg}")
