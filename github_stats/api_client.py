"""GitHub REST API client used by the branch walker and commit fetcher."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .constants import API_HEADERS
from .exceptions import DecodeError, HTTPStatusError, RequestBuildError, TransportError

logger = logging.getLogger(__name__)

# requests raises these before anything goes on the wire
_REQUEST_BUILD_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


class GitHubApiClient:
    """Thin wrapper around a :class:`requests.Session` for one access token.

    This class handles:
    - Authentication and media type headers
    - Mapping transport and status failures onto ``ApiError`` subclasses
    - Decoding list bodies, leniently unless ``strict_decode`` is set

    There is no retry and no caching: a failed request fails the caller.
    """

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        strict_decode: bool = False,
    ):
        """Initialize GitHub API client.

        Args:
            token: Access token sent with the legacy ``token`` scheme
            session: Optional requests session for connection pooling
            timeout: Request timeout in seconds, None for the transport default
            strict_decode: Raise DecodeError on malformed bodies instead of
                treating them as empty
        """
        self.timeout = timeout
        self.strict_decode = strict_decode
        self.session = session
        self._owns_session = session is None
        self._headers: Dict[str, str] = {
            "Authorization": f"{API_HEADERS['auth_scheme']} {token}",
            "Accept": API_HEADERS["accept"],
        }

    def _get_session(self) -> requests.Session:
        """Get or create the requests session."""
        if self.session is None:
            self.session = requests.Session()
            logger.debug("Initialized requests session")
        return self.session

    def get(
        self, url: str, params: Optional[Dict[str, Any]] = None, source: str | None = None
    ) -> requests.Response:
        """Issue a GET request and require a 2xx answer.

        Args:
            url: Absolute request URL
            params: Optional query parameters
            source: Label used in error messages ('branches', 'commits')

        Returns:
            The successful response

        Raises:
            RequestBuildError: If the URL is empty or invalid
            TransportError: On connection, DNS or timeout failures
            HTTPStatusError: If the status code is not 2xx
        """
        if not url or not url.strip():
            raise RequestBuildError("Request URL cannot be empty", url=url, source=source)

        logger.debug(f"GET {url} params={params}")
        try:
            response = self._get_session().get(
                url, params=params, headers=self._headers, timeout=self.timeout
            )
        except _REQUEST_BUILD_ERRORS as exc:
            raise RequestBuildError(
                f"Invalid request for {url}: {exc}", url=url, source=source
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(
                f"Network error for {url}: {exc}", url=url, source=source
            ) from exc

        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(
                f"GitHub API returned {response.status_code} for {url}",
                status_code=response.status_code,
                url=url,
                source=source,
            )
        return response

    def decode_list(
        self, response: requests.Response, source: str | None = None
    ) -> List[Dict[str, Any]]:
        """Decode a JSON list body.

        A body that is not JSON, or not a list, is logged and read as an
        empty list unless ``strict_decode`` is enabled.

        Raises:
            DecodeError: In strict mode, for malformed bodies
        """
        try:
            payload = response.json()
        except ValueError as exc:
            return self._malformed(response, f"invalid JSON: {exc}", source)

        if not isinstance(payload, list):
            return self._malformed(
                response, f"expected list, got {type(payload).__name__}", source
            )
        return [item for item in payload if isinstance(item, dict)]

    def _malformed(
        self, response: requests.Response, reason: str, source: str | None
    ) -> List[Dict[str, Any]]:
        url = getattr(response, "url", None)
        if self.strict_decode:
            raise DecodeError(
                f"Malformed {source or 'response'} body from {url}: {reason}",
                status_code=response.status_code,
                url=url,
                source=source,
            )
        logger.warning(f"Ignoring malformed {source or 'response'} body from {url}: {reason}")
        return []

    def close(self) -> None:
        """Close the requests session if this client created it."""
        if self.session is not None and self._owns_session:
            self.session.close()
            self.session = None

    def __enter__(self) -> "GitHubApiClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close session."""
        self.close()
