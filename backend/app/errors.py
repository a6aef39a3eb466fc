"""Error types raised by the preference matching pipeline."""


class MatchingError(Exception):
    """Base class for matching failures surfaced to API callers."""

    status_code = 500


class NotFoundError(MatchingError):
    """The requested preference does not exist."""

    status_code = 404


class ValidationError(MatchingError):
    """The preference cannot be normalized into matching criteria."""

    status_code = 400


class FetchError(MatchingError):
    """The listing store failed or timed out. Safe for callers to retry."""

    status_code = 503
