"""Custom exceptions for the GitHub commit statistics collector."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import CommitResults


class GHSError(Exception):
    """Base exception for all github-stats errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GHSError):
    """Raised when there's a configuration problem."""
    pass


# =============================================================================
# Data Collection Errors
# =============================================================================


class CollectionError(GHSError):
    """Base exception for data collection errors."""

    def __init__(self, message: str, source: str | None = None):
        """Initialize collection error.

        Args:
            message: Error message
            source: Source of the error (e.g., 'branches', 'commits')
        """
        super().__init__(message)
        self.source = source
        # Totals folded before the walk was aborted. Never a valid result.
        self.partial: Optional["CommitResults"] = None


class ApiError(CollectionError):
    """Raised when a GitHub API request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        source: str | None = None,
    ):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code if available
            url: Requested URL if known
            source: Source of the error (e.g., 'branches', 'commits')
        """
        super().__init__(message, source=source)
        self.status_code = status_code
        self.url = url


class RequestBuildError(ApiError):
    """Raised when the request cannot be constructed (e.g. invalid URL)."""
    pass


class TransportError(ApiError):
    """Raised on network-level failures: DNS, connection, timeout."""
    pass


class HTTPStatusError(ApiError):
    """Raised when GitHub answers with a non-2xx status code."""
    pass


class DecodeError(ApiError):
    """Raised when a response body is not the expected JSON list.

    Only raised when strict decoding is enabled; otherwise malformed bodies
    are logged and treated as empty.
    """
    pass
