"""Property-based tests for GitHubEventsClient.

Feature: github-events-sync
"""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from hypothesis import given, settings
from hypothesis import strategies as st

from event_sync.exceptions import DataError, RateLimitError, TransportError
from event_sync.ingestion.credentials import Credentials
from event_sync.ingestion.github_client import GitHubEventsClient
from event_sync.models.config import GitHubConfig
from event_sync.models.event import FetchPage


CREDENTIALS = Credentials(login="octocat", token="test-token")


def make_response(
    status_code: int = 200,
    body: Any = None,
    headers: dict[str, str] | None = None,
    raw: bytes | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = raw if raw is not None else json.dumps(body).encode("utf-8")
    response.headers.update(headers or {})
    response.url = "https://api.github.com/users/octocat/events"
    return response


def event_bodies(ids: list[int]) -> list[dict[str, Any]]:
    return [{"id": str(i), "type": "PushEvent"} for i in ids]


def make_client(responses: list[Any], **config: Any) -> tuple[GitHubEventsClient, MagicMock]:
    session = MagicMock()
    session.get.side_effect = responses
    client = GitHubEventsClient(CREDENTIALS, GitHubConfig(**config), session=session)
    return client, session


def test_request_shape():
    client, session = make_client([make_response(body=event_bodies([3, 2, 1]))], page_size=30)

    page = client.fetch_page(1)

    assert isinstance(page, FetchPage)
    assert [e.id for e in page.events] == [3, 2, 1]
    session.get.assert_called_once_with(
        "https://api.github.com/users/octocat/events",
        params={"per_page": 30, "page": 1},
        timeout=30.0,
    )
    headers = session.headers.update.call_args.args[0]
    assert headers["Authorization"] == "Bearer test-token"
    assert headers["Accept"] == "application/vnd.github+json"


def test_custom_api_url_is_used():
    client, _ = make_client([], api_url="https://ghe.example.com/api/v3/")
    assert client.events_url == "https://ghe.example.com/api/v3/users/octocat/events"


@given(
    page_count=st.integers(min_value=1, max_value=5),
    page_size=st.integers(min_value=1, max_value=10),
    last_page_fill=st.integers(min_value=0, max_value=10),
)
@settings(max_examples=100)
def test_pagination_stops_at_short_page(page_count: int, page_size: int, last_page_fill: int):
    """For any feed, pages are requested in order until a short page or max_pages."""
    last_page_fill = min(last_page_fill, page_size - 1)
    next_id = 10_000
    responses = []
    for number in range(1, page_count + 1):
        size = page_size if number < page_count else last_page_fill
        ids = list(range(next_id, next_id - size, -1))
        next_id -= size
        responses.append(make_response(body=event_bodies(ids)))

    client, session = make_client(responses, page_size=page_size, max_pages=10)

    pages = list(client.iter_pages())

    assert [p.number for p in pages] == list(range(1, page_count + 1))
    assert session.get.call_count == page_count
    assert [p.has_next for p in pages] == [True] * (page_count - 1) + [False]


def test_max_pages_bounds_pagination():
    responses = [make_response(body=event_bodies([9 - 2 * n, 8 - 2 * n])) for n in range(4)]
    client, session = make_client(responses, page_size=2, max_pages=3)

    pages = list(client.iter_pages())

    assert [p.number for p in pages] == [1, 2, 3]
    assert pages[-1].has_next is False
    assert session.get.call_count == 3


def test_link_header_without_next_ends_pagination():
    last = make_response(
        body=event_bodies([2, 1]),
        headers={"Link": '<https://api.github.com/users/octocat/events?page=1>; rel="first"'},
    )
    client, session = make_client([last], page_size=2)

    pages = list(client.iter_pages())

    assert len(pages) == 1
    assert pages[0].has_next is False


def test_link_header_with_next_continues():
    first = make_response(
        body=event_bodies([4, 3]),
        headers={"Link": '<https://api.github.com/users/octocat/events?page=2>; rel="next"'},
    )
    second = make_response(body=[])
    client, session = make_client([first, second], page_size=2)

    pages = list(client.iter_pages())

    assert [len(p) for p in pages] == [2, 0]


def test_pages_are_requested_lazily():
    responses = [make_response(body=event_bodies([4, 3])), make_response(body=event_bodies([2, 1]))]
    client, session = make_client(responses, page_size=2)

    pages = client.iter_pages()
    next(pages)

    assert session.get.call_count == 1


def test_network_failure_is_transport_error():
    client, _ = make_client([requests.ConnectionError("connection refused")])

    with pytest.raises(TransportError, match="page 1"):
        client.fetch_page(1)


def test_timeout_is_transport_error():
    client, _ = make_client([requests.Timeout("read timed out")])

    with pytest.raises(TransportError):
        client.fetch_page(1)


@pytest.mark.parametrize("status_code", [401, 404, 422, 500, 502])
def test_error_status_is_transport_error(status_code: int):
    client, _ = make_client([make_response(status_code, body={"message": "Bad credentials"})])

    with pytest.raises(TransportError) as exc_info:
        client.fetch_page(1)

    assert exc_info.value.status_code == status_code
    assert not isinstance(exc_info.value, RateLimitError)
    assert "Bad credentials" in str(exc_info.value)


def test_exhausted_rate_limit_is_rate_limit_error():
    response = make_response(
        403,
        body={"message": "API rate limit exceeded"},
        headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"},
    )
    client, _ = make_client([response])

    with pytest.raises(RateLimitError, match="resets at 2023-11-14T22:13:20"):
        client.fetch_page(1)


def test_too_many_requests_is_rate_limit_error():
    client, _ = make_client([make_response(429, body={}, headers={"Retry-After": "60"})])

    with pytest.raises(RateLimitError, match="retry after 60s"):
        client.fetch_page(1)


def test_forbidden_without_rate_limit_headers_is_plain_transport_error():
    client, _ = make_client([make_response(403, body={"message": "Forbidden"})])

    with pytest.raises(TransportError) as exc_info:
        client.fetch_page(1)

    assert not isinstance(exc_info.value, RateLimitError)


def test_malformed_body_is_data_error():
    client, _ = make_client([make_response(raw=b"[{\"id\": \"1\"")])

    with pytest.raises(DataError, match="not valid JSON"):
        client.fetch_page(1)


def test_non_array_body_is_data_error():
    client, _ = make_client([make_response(body={"id": "1"})])

    with pytest.raises(DataError, match="JSON array"):
        client.fetch_page(1)


def test_event_without_id_is_data_error():
    client, _ = make_client([make_response(body=[{"id": "2"}, {"type": "PushEvent"}])])

    with pytest.raises(DataError):
        client.fetch_page(1)


def test_context_manager_closes_session():
    client, session = make_client([])

    with client:
        pass

    session.close.assert_called_once()
