import pytest
import requests

from conftest import REPO_URL, DummyResponse
from github_stats.api_client import GitHubApiClient
from github_stats.exceptions import DecodeError, HTTPStatusError, RequestBuildError, TransportError


def test_sends_legacy_token_and_v3_media_type(session):
    session.route(REPO_URL, lambda params: DummyResponse(payload=[]))
    client = GitHubApiClient("abc123", session=session, timeout=5)

    client.get(REPO_URL, params={"per_page": 100})

    call = session.calls[0]
    assert call["headers"] == {
        "Authorization": "token abc123",
        "Accept": "application/vnd.github.v3+json",
    }
    assert call["params"] == {"per_page": 100}
    assert call["timeout"] == 5


def test_default_timeout_is_transport_default(session):
    session.route(REPO_URL, lambda params: DummyResponse(payload=[]))

    GitHubApiClient("abc123", session=session).get(REPO_URL)

    assert session.calls[0]["timeout"] is None


@pytest.mark.parametrize("status", [301, 401, 404, 500])
def test_non_2xx_is_http_status_error(session, status):
    session.route(REPO_URL, lambda params: DummyResponse(status_code=status))

    with pytest.raises(HTTPStatusError) as excinfo:
        GitHubApiClient("abc123", session=session).get(REPO_URL, source="branches")

    assert excinfo.value.status_code == status
    assert excinfo.value.url == REPO_URL


def test_any_2xx_is_success(session):
    session.route(REPO_URL, lambda params: DummyResponse(status_code=203, payload=[{"name": "x"}]))
    client = GitHubApiClient("abc123", session=session)

    response = client.get(REPO_URL)

    assert client.decode_list(response) == [{"name": "x"}]


def test_empty_url_is_request_build_error(session):
    with pytest.raises(RequestBuildError):
        GitHubApiClient("abc123", session=session).get("  ")
    assert session.calls == []


def test_invalid_url_is_request_build_error(session):
    session.route("api.github.com/repos", lambda params: requests.exceptions.MissingSchema("no scheme"))

    with pytest.raises(RequestBuildError):
        GitHubApiClient("abc123", session=session).get("api.github.com/repos")


@pytest.mark.parametrize(
    "exc",
    [requests.ConnectionError("refused"), requests.Timeout("slow"), requests.exceptions.ChunkedEncodingError("cut")],
)
def test_network_failures_are_transport_errors(session, exc):
    session.route(REPO_URL, lambda params: exc)

    with pytest.raises(TransportError) as excinfo:
        GitHubApiClient("abc123", session=session).get(REPO_URL)

    assert excinfo.value.__cause__ is exc


def test_decode_list_is_lenient_by_default(session, caplog):
    client = GitHubApiClient("abc123", session=session)

    assert client.decode_list(DummyResponse(text="not json"), source="commits") == []
    assert client.decode_list(DummyResponse(payload={"message": "x"}), source="commits") == []
    assert "Ignoring malformed commits body" in caplog.text


def test_decode_list_drops_non_object_items(session):
    client = GitHubApiClient("abc123", session=session)

    assert client.decode_list(DummyResponse(payload=[{"a": 1}, "junk", 3])) == [{"a": 1}]


def test_decode_list_strict_mode_raises(session):
    client = GitHubApiClient("abc123", session=session, strict_decode=True)

    with pytest.raises(DecodeError) as excinfo:
        client.decode_list(DummyResponse(payload={"message": "x"}), source="branches")

    assert excinfo.value.source == "branches"


def test_close_leaves_injected_session_open(session):
    client = GitHubApiClient("abc123", session=session)

    client.close()

    assert session.closed is False


def test_close_releases_own_session():
    with GitHubApiClient("abc123") as client:
        own = client._get_session()
        assert isinstance(own, requests.Session)

    assert client.session is None
