"""
Error taxonomy for telemetry loading and per-tick state derivation.

Each error also subclasses the built-in exception that would otherwise be
raised for the same condition, so callers may catch either one.

    TableLoadError          -- a table source is missing or unreadable (fatal)
    StageConfigurationError -- the stage list cannot cover index 0 (fatal)
    StageNotFoundError      -- no stage starts at or before an index
    TelemetryIndexError     -- an index has no corresponding telemetry row
    MalformedRowError       -- a row has fewer fields than a consumer needs
"""


class TelemetryReplayError(Exception):
    """Root of all telemetry replay errors."""


class TableLoadError(TelemetryReplayError, OSError):
    """A table source could not be opened or read."""


class StageConfigurationError(TelemetryReplayError, ValueError):
    """The stage table is empty or its first stage starts after index 0."""


class StageNotFoundError(TelemetryReplayError, LookupError):
    """No stage definition starts at or before the requested index."""


class TelemetryIndexError(TelemetryReplayError, IndexError):
    """A simulation index falls outside a telemetry table."""


class MalformedRowError(TelemetryReplayError, ValueError):
    """A telemetry row is missing a column that a consumer requires."""

    def __init__(self, message: str, row_index: int, column: int) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.column = column
