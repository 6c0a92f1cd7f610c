"""
Typed errors raised across service boundaries.

Handlers let these propagate; api.errors maps them to HTTP responses.
"""


class ArtmarketError(Exception):
    """Base class for errors raised by artmarket services."""


class InvalidDocumentError(ArtmarketError, ValueError):
    """A request body or document snapshot does not match its schema."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []


class SearchServiceError(ArtmarketError):
    """The search engine could not be reached or rejected a write."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PushDeliveryError(ArtmarketError):
    """The push service could not deliver a message."""
