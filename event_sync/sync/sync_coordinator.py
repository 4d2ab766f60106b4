"""Synchronization coordinator for one incremental fetch-and-append run."""

from datetime import datetime

import structlog

from event_sync.ingestion.github_client import GitHubEventsClient
from event_sync.storage.event_log import EventLog
from event_sync.sync.change_detector import ChangeDetector
from event_sync.sync.models import SyncReport

log = structlog.stdlib.get_logger()


class SyncCoordinator:
    """Orchestrates synchronization between the GitHub feed and the event log."""

    def __init__(
        self,
        client: GitHubEventsClient,
        event_log: EventLog,
        change_detector: ChangeDetector | None = None,
    ):
        """
        Initialize sync coordinator.

        Args:
            client: Client for the GitHub events feed
            event_log: Local append-only event log
            change_detector: Optional detector (a fresh one is created if None)
        """
        self._client: GitHubEventsClient = client
        self._event_log: EventLog = event_log
        self._change_detector: ChangeDetector = change_detector or ChangeDetector()

        log.info("sync_coordinator_initialized", log_path=str(event_log.path))

    def sync(self) -> SyncReport:
        """
        Perform one incremental synchronization.

        This method:
        1. Reads the watermark from the last line of the log
        2. Pulls feed pages until one contributes nothing new
        3. Appends the new events, oldest first, in a single write

        New events are held in memory until every page has been fetched, so a
        failure at any stage leaves the log exactly as it was.

        Returns:
            SyncReport with synchronization results

        Raises:
            EventSyncError: If any stage fails (nothing is written)
        """
        start_time = datetime.now()
        log.info("sync_started", log_path=str(self._event_log.path), start_time=start_time)

        watermark = self._event_log.read_watermark()

        new_events = self._change_detector.detect_new_events(watermark, self._client.iter_pages())

        appended = self._event_log.append(new_events)

        end_time = datetime.now()
        duration = (end_time - start_time).total_seconds()

        report = SyncReport(
            log_path=self._event_log.path,
            watermark=watermark,
            events_appended=appended,
            pages_fetched=self._change_detector.pages_scanned,
            newest_id=new_events[-1].id if new_events else (watermark or None),
            duration_seconds=duration,
            start_time=start_time,
            end_time=end_time,
        )

        log.info(
            "sync_completed",
            log_path=str(self._event_log.path),
            watermark=watermark,
            events_appended=appended,
            pages_fetched=report.pages_fetched,
            duration_seconds=duration,
        )

        return report
