"""Custom exceptions for the portfolio advisor.

Data errors are raised by the indicator functions and the provider layer;
persistence errors by the SQLite store. Callers that loop over holdings catch
them per item so one bad ticker never blocks a run.
"""

from typing import Optional


class AdvisorError(Exception):
    """Base exception for all advisor errors."""

    pass


# ============================================================================
# Data errors
# ============================================================================


class DataError(AdvisorError):
    """Base class for data-related errors."""

    pass


class InsufficientDataError(DataError):
    """Raised when a price series is shorter than an indicator period."""

    def __init__(self, message: str, required: Optional[int] = None, available: Optional[int] = None):
        super().__init__(message)
        self.required = required
        self.available = available


class DataNotFoundError(DataError):
    """Raised when a provider has no data for a ticker."""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message)
        self.resource = resource


class TransientDataError(DataError):
    """Raised on network failures, bad HTTP statuses or undecodable payloads."""

    pass


# ============================================================================
# Storage errors
# ============================================================================


class PersistenceError(AdvisorError):
    """Raised when a store operation (insert/update/delete) fails."""

    pass
