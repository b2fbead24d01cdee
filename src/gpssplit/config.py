"""
GPSsplit configuration loader

This module centralizes configuration handling for GPSsplit.

Design goals:
- CLI flags override everything.
- Sensible defaults if no config exists.
- Per-machine config without committing personal paths:
    ~/.config/gpssplit/config.toml
- Repo-local config:
    <repo_root>/config/config.toml
- Environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by the CLI)
2) Environment variables (GPSSPLIT_*)
3) User config: ~/.config/gpssplit/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

Recognized TOML layout:

    [paths]
    work_root = "~/GPS/_work"
    out_root = "~/GPS/_work/_corrected"

    [analysis]
    split_interval_s = 60
    max_vertical_speed_mps = 5.0
    autopause = false

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` otherwise.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from gpssplit.errors import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


DEFAULT_SPLIT_INTERVAL_S = 60.0
DEFAULT_MAX_VERTICAL_SPEED_MPS = 5.0


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    - Missing file: empty dict (missing config files are normal).
    - Invalid TOML: ConfigurationError naming the file.
    """
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "analysis.split_interval_s")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_bool(v: Any) -> Optional[bool]:
    """
    Coerce loosely-typed values (TOML, env strings) into booleans.

    Returns None for anything unrecognized so the caller keeps its default.
    """
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    return None


def _as_float(v: Any, key: str) -> Optional[float]:
    """
    Coerce a numeric value. Unlike paths and flags, a number that is present
    but unreadable is an error: a silently ignored threshold is worse than a
    loud one.
    """
    if v is None:
        return None
    if isinstance(v, bool):
        raise ConfigurationError(f"{key} must be a number, got {v!r}")
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number, got {v!r}") from e


def _require_positive(value: float, key: str) -> float:
    if not value > 0:
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for a directory holding `config/`.
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_work_root() -> Path:
    return Path.home() / "GPS" / "_work"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GPSsplitPaths:
    work_root: Path
    out_root: Path


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Thresholds handed to the analysis core by the CLI.

    The core itself never reads config; these are only defaults for flags.
    """
    split_interval_s: float = DEFAULT_SPLIT_INTERVAL_S
    max_vertical_speed_mps: float = DEFAULT_MAX_VERTICAL_SPEED_MPS
    autopause: bool = False


@dataclass(frozen=True)
class GPSsplitConfig:
    """
    Fully merged GPSsplit configuration.

    Attributes:
    - paths: resolved filesystem layout
    - analysis: default thresholds
    - source: provenance map showing where each value came from
    """
    paths: GPSsplitPaths
    analysis: AnalysisConfig
    source: dict[str, str]


_PATH_KEYS = ("paths.work_root", "paths.out_root")
_FLOAT_KEYS = ("analysis.split_interval_s", "analysis.max_vertical_speed_mps")
_BOOL_KEYS = ("analysis.autopause",)

ENV_MAP = {
    "GPSSPLIT_WORK_ROOT": "paths.work_root",
    "GPSSPLIT_OUT_ROOT": "paths.out_root",
    "GPSSPLIT_SPLIT_INTERVAL_S": "analysis.split_interval_s",
    "GPSSPLIT_MAX_VERTICAL_SPEED_MPS": "analysis.max_vertical_speed_mps",
    "GPSSPLIT_AUTOPAUSE": "analysis.autopause",
}


def _coerce(key: str, raw: Any) -> Any:
    if key in _PATH_KEYS:
        return _as_path(raw)
    if key in _FLOAT_KEYS:
        return _as_float(raw, key)
    return _as_bool(raw)


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> GPSsplitConfig:
    """
    Load, merge, and validate all GPSsplit configuration.

    This function is the single authoritative entry point for
    configuration access.
    """
    if environ is None:
        environ = dict(os.environ)

    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "gpssplit" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    values: dict[str, Any] = {
        "paths.work_root": default_work_root(),
        "paths.out_root": None,
        "analysis.split_interval_s": DEFAULT_SPLIT_INTERVAL_S,
        "analysis.max_vertical_speed_mps": DEFAULT_MAX_VERTICAL_SPEED_MPS,
        "analysis.autopause": False,
    }
    src = {k: "default" for k in values}

    # Repo, then user: later layers win
    for cfg, label in ((repo_cfg, f"repo:{repo_config_path}"), (user_cfg, f"user:{user_config_path}")):
        for key in values:
            v = _coerce(key, _deep_get(cfg, key))
            if v is None:
                continue
            values[key] = v
            src[key] = label

    # Environment variable overrides (highest non-CLI precedence)
    for env, key in ENV_MAP.items():
        raw = environ.get(env)
        if not raw:
            continue
        v = _coerce(key, raw)
        if v is None:
            continue
        values[key] = v
        src[key] = f"env:{env}"

    work_root = values["paths.work_root"].expanduser()
    out_root = values["paths.out_root"]
    if out_root is None:
        # Derive from work_root if not configured
        out_root = work_root / "_corrected"

    analysis = AnalysisConfig(
        split_interval_s=_require_positive(
            values["analysis.split_interval_s"], "analysis.split_interval_s"),
        max_vertical_speed_mps=_require_positive(
            values["analysis.max_vertical_speed_mps"], "analysis.max_vertical_speed_mps"),
        autopause=values["analysis.autopause"],
    )

    return GPSsplitConfig(
        paths=GPSsplitPaths(work_root=work_root, out_root=out_root.expanduser()),
        analysis=analysis,
        source=src,
    )
