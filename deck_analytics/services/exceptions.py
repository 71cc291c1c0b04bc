"""Typed failures raised by the analytics engine.

Degenerate input (empty decks, unknown archetypes, missing card data)
never raises; these exceptions are reserved for genuine faults and
illegal state transitions.
"""


class AnalyticsError(Exception):
    """Base exception for engine errors."""

    pass


class MetaDataUnavailableError(AnalyticsError):
    """Raised when the meta data source fails and no snapshot is cached."""

    pass


class PracticeMatchClosedError(AnalyticsError):
    """Raised when recording a game on a match that is already completed."""

    pass


class UnknownFormatError(AnalyticsError):
    """Raised when looking up a tournament format that does not exist."""

    pass
