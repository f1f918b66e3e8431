"""Exceptions raised by the product search client and executor."""

from __future__ import annotations


class SearchError(Exception):
    """Base class for search failures surfaced to the controller."""


class NetworkError(SearchError):
    """Raised when a page fetch fails in transport (connect, timeout, HTTP status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(NetworkError):
    """Raised when the endpoint answers with a body that is not a product page."""
