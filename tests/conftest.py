"""Shared test fixtures: a fake requests session standing in for GitHub."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
from requests.structures import CaseInsensitiveDict

API_URL = "https://api.github.test"
REPO_URL = f"{API_URL}/repos/acme/widgets"
COLLECTION_ID = "4242"
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class DummyResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        headers: Optional[Dict[str, str]] = None,
        text: Optional[str] = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self._payload = [] if payload is None else payload
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})
        self.url = url

    def json(self) -> Any:
        if self.text is not None:
            return json.loads(self.text)
        return self._payload


Handler = Callable[[Dict[str, Any]], Union[DummyResponse, Exception]]


class DummySession:
    """Routes GET requests by URL to handlers receiving the query params."""

    def __init__(self) -> None:
        self.routes: Dict[str, Handler] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def route(self, url: str, handler: Handler) -> None:
        self.routes[url] = handler

    def get(self, url, params=None, headers=None, timeout=None):  # type: ignore[override]
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if url not in self.routes:
            raise AssertionError(f"Unhandled path {url}")
        response = self.routes[url](params)
        if isinstance(response, Exception):
            raise response
        response.url = url
        return response

    def close(self) -> None:
        self.closed = True

    def urls(self) -> List[str]:
        return [call["url"] for call in self.calls]


def iso(when: datetime) -> str:
    return when.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def commit(author: str, when: datetime, sha: str = "") -> Dict[str, Any]:
    return {
        "sha": sha or f"sha-{author}-{when.timestamp()}",
        "commit": {"author": {"name": author, "date": iso(when)}},
    }


def branch(name: str) -> Dict[str, Any]:
    return {"name": name, "commit": {"sha": f"head-{name}", "url": f"{REPO_URL}/commits/head-{name}"}}


def link_header(next_page: int, last_page: int, collection_id: str = COLLECTION_ID) -> str:
    base = f"{API_URL}/repositories/{collection_id}/branches"
    return (
        f'<{base}?per_page=100&page={next_page}>; rel="next", '
        f'<{base}?per_page=100&page={last_page}>; rel="last"'
    )


def commits_by_branch(mapping: Dict[str, List[Dict[str, Any]]]) -> Handler:
    """Commit listing handler answering per ``sha`` query parameter."""

    def handler(params: Dict[str, Any]) -> DummyResponse:
        return DummyResponse(payload=mapping.get(params.get("sha"), []))

    return handler


@pytest.fixture
def session() -> DummySession:
    return DummySession()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def recent() -> datetime:
    """A commit time inside a one hour active interval."""
    return NOW - timedelta(minutes=10)
