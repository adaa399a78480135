"""
Domain exceptions for the rate-resolution, ranking and assignment services.

Every error raised by the core derives from ServiceException so that the
HTTP boundary can map it to a status code in one place
(see web/backend/exceptions.py). None of these are retried by the core.
"""

from typing import Optional


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class ValidationError(ServiceException):
    """Raised when input is malformed or a required field is missing."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ServiceException):
    """Raised when a referenced org, staffing request, person or assignment is absent."""
    pass


class ConflictError(ServiceException):
    """Raised when a mutation violates the assignment lifecycle."""
    pass


class ResolutionError(ServiceException):
    """Raised when no billable rate can be produced for a targeting context.

    ``reason`` is one of the class-level constants so operators can tell a
    misconfigured rate card from missing FX data.
    """

    NO_ORG_DEFAULT = "no_org_default"
    CURRENCY_UNAVAILABLE = "currency_unavailable"

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class CurrencyUnavailableError(ServiceException):
    """Raised by a currency converter when no usable rate exists for the date."""

    def __init__(self, from_currency: str, to_currency: str, as_of):
        super().__init__(
            f"No FX rate {from_currency}->{to_currency} available as of {as_of}"
        )
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.as_of = as_of


class SnapshotImmutableError(ServiceException):
    """Raised when something tries to rewrite a frozen assignment rate snapshot."""
    pass
