"""Custom exceptions for world generation."""


class WorldGenError(Exception):
    """Base exception for world generation errors."""

    pass


class ConfigurationError(WorldGenError, ValueError):
    """Raised when generation parameters are invalid.

    Covers non-positive dimensions, empty octave stacks, broken biome band
    tables and reveal origins outside the grid.
    """

    pass


class InvalidStateError(WorldGenError, RuntimeError):
    """Raised when a reveal operation is called in the wrong state."""

    pass
