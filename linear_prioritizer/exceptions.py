"""Exception hierarchy for the prioritizer."""

from typing import Any


class PrioritizerError(Exception):
    """Base class for all prioritizer errors."""


class ConfigurationError(PrioritizerError, ValueError):
    """Raised when required settings are missing or malformed."""


class LinearAPIError(PrioritizerError):
    """Raised when the Linear GraphQL API returns an error."""


class ScoringError(PrioritizerError):
    """Raised when an issue in a batch cannot be scored.

    The whole batch fails so that a ranking never silently omits an issue.
    """


class CacheWriteError(PrioritizerError):
    """Raised when a cache snapshot could not be persisted.

    The computed result is attached so callers can still use it.
    """

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result
