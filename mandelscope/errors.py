"""Exception types raised by the explorer."""


class MandelscopeError(Exception):
    """Base class for all explorer errors."""


class GenerationError(MandelscopeError):
    """
    A worker could not deliver the iteration counts for its rows.

    The image buffer is left untouched when this is raised, so callers can
    keep presenting the last good frame.

    Attributes:
        rows: range of image rows whose result was lost
    """

    def __init__(self, rows, message=None):
        self.rows = rows
        if message is None:
            message = f"failed to generate rows {rows.start}..{rows.stop - 1}"
        super().__init__(message)


class ConfigError(MandelscopeError, ValueError):
    """Invalid configuration value (command line or settings file)."""
