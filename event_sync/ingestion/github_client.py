"""GitHub events feed client."""

from datetime import datetime, timezone
from typing import Any, Generator

import requests
import structlog

from event_sync import __version__
from event_sync.exceptions import DataError, RateLimitError, TransportError
from event_sync.ingestion.credentials import Credentials
from event_sync.models.config import GitHubConfig
from event_sync.models.event import Event, FetchPage

log = structlog.stdlib.get_logger()

GITHUB_API_VERSION = "2022-11-28"


class GitHubEventsClient:
    """Reads the newest-first event feed of one GitHub user, a page at a time.

    Requests are never retried: any failure aborts the run so that the local
    log is left as it was.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: GitHubConfig | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize the events client.

        Args:
            credentials: GitHub login and token
            config: Feed configuration (defaults apply if None)
            session: Optional pre-built HTTP session
        """
        self._config: GitHubConfig = config or GitHubConfig()
        self._login: str = credentials.login
        self._base_url: str = str(self._config.api_url).rstrip("/")
        self._session: requests.Session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {credentials.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": f"github-events-sync/{__version__}",
            }
        )
        log.info(
            "github_client_initialized",
            base_url=self._base_url,
            login=self._login,
            page_size=self._config.page_size,
            max_pages=self._config.max_pages,
        )

    @property
    def events_url(self) -> str:
        return f"{self._base_url}/users/{self._login}/events"

    def __enter__(self) -> "GitHubEventsClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def iter_pages(self) -> Generator[FetchPage, None, None]:
        """
        Lazily fetch pages in feed order, starting at page 1.

        A page is only requested when the consumer asks for it, so breaking
        out of the loop stops pagination.

        Yields:
            FetchPage objects, newest events first

        Raises:
            TransportError: If a request fails
            DataError: If a page body is malformed
        """
        for number in range(1, self._config.max_pages + 1):
            page = self.fetch_page(number)
            yield page
            if not page.has_next:
                log.info("event_feed_exhausted", page=number)
                return

    def fetch_page(self, number: int) -> FetchPage:
        """
        Fetch one page of events.

        Args:
            number: 1-based page number

        Returns:
            FetchPage with the page's events in feed order

        Raises:
            TransportError: On network failure or a non-success status
            RateLimitError: When GitHub refuses the request for rate limiting
            DataError: If the body is not a JSON array of events
        """
        params = {"per_page": self._config.page_size, "page": number}
        log.info("fetching_events_page", url=self.events_url, page=number)

        try:
            response = self._session.get(
                self.events_url,
                params=params,
                timeout=self._config.timeout_seconds,
            )
        except requests.RequestException as e:
            log.error("events_request_failed", page=number, error=str(e))
            raise TransportError(f"Request for events page {number} failed: {e}") from e

        if not response.ok:
            raise self._status_error(response, number)

        try:
            body = response.json()
        except ValueError as e:
            raise DataError(f"Events page {number} is not valid JSON: {e}") from e

        if not isinstance(body, list):
            raise DataError(
                f"Events page {number} should be a JSON array, got {type(body).__name__}"
            )

        events = [Event.from_record(record) for record in body]
        page = FetchPage(
            number=number,
            events=events,
            has_next=self._has_next(response, number, len(events)),
        )

        log.info(
            "events_page_fetched",
            page=number,
            event_count=len(events),
            has_next=page.has_next,
        )
        return page

    def _has_next(self, response: requests.Response, number: int, event_count: int) -> bool:
        """Decide whether the feed has a page after ``number``."""
        if event_count < self._config.page_size:
            return False
        if number >= self._config.max_pages:
            return False
        # GitHub omits the Link header entirely when everything fits on one page
        if response.headers.get("Link") and "next" not in response.links:
            return False
        return True

    def _status_error(self, response: requests.Response, number: int) -> TransportError:
        """Build the error for a non-success response."""
        status = response.status_code
        message = _api_message(response)

        remaining = response.headers.get("X-RateLimit-Remaining")
        retry_after = response.headers.get("Retry-After")
        if status == 429 or (status == 403 and (remaining == "0" or retry_after)):
            reset = _rate_limit_reset(response)
            log.error("events_rate_limited", page=number, status=status, reset=reset)
            detail = f"; resets at {reset}" if reset else ""
            if retry_after:
                detail += f"; retry after {retry_after}s"
            return RateLimitError(
                f"Rate limited by GitHub on events page {number} (HTTP {status}){detail}",
                status_code=status,
            )

        log.error("events_request_rejected", page=number, status=status, message=message)
        suffix = f": {message}" if message else ""
        return TransportError(
            f"GitHub returned HTTP {status} for events page {number}{suffix}",
            status_code=status,
        )


def _api_message(response: requests.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.reason or None
    if isinstance(body, dict):
        return body.get("message")
    return None


def _rate_limit_reset(response: requests.Response) -> str | None:
    reset = response.headers.get("X-RateLimit-Reset")
    if not reset or not reset.isdigit():
        return None
    return datetime.fromtimestamp(int(reset), tz=timezone.utc).isoformat()
