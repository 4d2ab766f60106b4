"""Change detection against the event log watermark."""

from typing import Iterable

import structlog

from event_sync.models.event import Event, FetchPage

log = structlog.stdlib.get_logger()


class ChangeDetector:
    """Selects the events that are newer than the watermark.

    Relies on the feed being strictly descending by id: the first page that
    contributes nothing ends the scan, and later pages are never inspected.
    """

    def __init__(self) -> None:
        self.pages_scanned: int = 0

    def detect_new_events(self, watermark: int, pages: Iterable[FetchPage]) -> list[Event]:
        """
        Collect events newer than the watermark, in chronological order.

        Pages are consumed lazily; no further page is requested once a page
        contributes no new events.

        Args:
            watermark: Id of the newest event already stored (0 if none)
            pages: Feed pages, newest first

        Returns:
            New events, oldest first
        """
        log.info("detecting_new_events", watermark=watermark)

        collected: list[Event] = []
        self.pages_scanned = 0

        for page in pages:
            self.pages_scanned += 1
            fresh = self.filter_newer(page.events, watermark)

            log.debug(
                "page_filtered",
                page=page.number,
                event_count=len(page.events),
                new_event_count=len(fresh),
            )

            if not fresh:
                break
            collected.extend(fresh)
            if not page.has_next:
                break

        collected.reverse()

        log.info(
            "new_events_detected",
            watermark=watermark,
            pages_scanned=self.pages_scanned,
            new_events=len(collected),
        )
        return collected

    @staticmethod
    def filter_newer(events: Iterable[Event], watermark: int) -> list[Event]:
        """Keep events whose id is strictly greater than the watermark, in order."""
        return [event for event in events if event.id > watermark]
