# gpssplit/errors

"""
gpssplit.errors

Central exception hierarchy for GPSsplit.

Rationale:
  - Analysis code raises specific, meaningful errors instead of returning
    zeroed or infinite values.
  - Callers can catch GPSsplitError (broad) or specific subclasses (narrow).
"""


class GPSsplitError(RuntimeError):
    """Base class for all GPSsplit runtime errors."""


# ---- Analysis errors ---------------------------

class AnalysisError(GPSsplitError):
    """Errors raised while computing metrics over a track or segment."""

class InsufficientPointsError(AnalysisError):
    """The operation needs more points than the sequence holds."""

class DegenerateDurationError(AnalysisError):
    """A rate was requested over a zero or negative time span."""

class MissingElevationError(AnalysisError):
    """A point without elevation was used where elevation is required."""


# ---- Configuration errors ----------------------

class ConfigurationError(GPSsplitError):
    """An invalid threshold or config value was supplied."""


# ---- Track file errors -------------------------

class FormatError(GPSsplitError):
    """Errors reading or writing track files."""

class InvalidGpxError(FormatError):
    """GPX file could not be parsed or did not contain expected data structures."""


# ---- Interactive selection errors --------------

class SelectionError(GPSsplitError):
    """Errors in interactive file selection."""

class FzfNotFoundError(SelectionError):
    """fzf is required but not available on PATH."""
