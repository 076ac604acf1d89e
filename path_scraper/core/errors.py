"""
Exception types raised by the scraper core.

Every error carries the HTTP status code and machine-readable error code the
API layer reports when the error reaches a request boundary.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base exception for scraper service failures."""

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, *, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class StoreError(ScraperError):
    """Raised when the job record store is unavailable or rejects a write."""

    status_code = 500
    error_code = "STORE_ERROR"


class FetchError(ScraperError):
    """Raised when a page cannot be fetched or returns a non-success status."""

    status_code = 502
    error_code = "SCRAPING_FAILED"


class ServiceError(ScraperError):
    """Raised when the AI service or the main service call fails."""

    status_code = 502
    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        service_name: str,
        message: str | None = None,
        *,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            message or f"Failed to communicate with {service_name}.",
            original_error=original_error,
        )
        self.service_name = service_name


class NotFoundError(ScraperError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    error_code = "NOT_FOUND"
