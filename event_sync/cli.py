"""
Command-line entry point: fetch new GitHub events and append them to the log.

Designed to be run unattended (cron, systemd timer) as well as by hand. It
takes no options; configuration comes from the environment, the optional
config file and the gh CLI's credential store.

Usage:
    github-events-sync
"""

import argparse
import sys
from typing import Sequence

from event_sync import __version__
from event_sync.exceptions import EventSyncError
from event_sync.ingestion.credentials import CredentialStore
from event_sync.ingestion.github_client import GitHubEventsClient
from event_sync.models.config import AppConfig
from event_sync.storage.event_log import EventLog
from event_sync.sync.models import SyncReport
from event_sync.sync.sync_coordinator import SyncCoordinator
from event_sync.utils.config_loader import ConfigLoader
from event_sync.utils.logging_config import configure_logging, get_logger
from event_sync.utils.paths import resolve_log_path

log = get_logger(__name__)


def perform_sync(config: AppConfig) -> SyncReport:
    """
    Run one synchronization.

    Credentials are resolved before the HTTP session is opened, so a missing
    login or token fails without any network traffic.

    Args:
        config: Application configuration

    Returns:
        SyncReport for the run

    Raises:
        EventSyncError: If any stage fails
    """
    credentials = CredentialStore(config.github).load()
    event_log = EventLog(resolve_log_path(config.storage))

    with GitHubEventsClient(credentials, config.github) as client:
        coordinator = SyncCoordinator(client=client, event_log=event_log)
        return coordinator.sync()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-events-sync",
        description=(
            "Append your newest GitHub events to a local JSON Lines log. "
            "Configured through GHEVENTS_* environment variables, "
            "~/.config/github-events-sync/config.yaml and the gh CLI login."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point; returns the process exit status."""
    build_parser().parse_args(argv)
    configure_logging()

    try:
        config = ConfigLoader().load_config()
        configure_logging(
            log_level=config.logging.log_level,
            json_logs=config.logging.json_logs,
            log_file=config.logging.log_file,
        )
        report = perform_sync(config)
    except EventSyncError as e:
        log.error("sync_failed", error=str(e), error_type=type(e).__name__)
        print(f"Fatal: {e}", file=sys.stderr)
        return 1

    if report.has_new_events and sys.stdout.isatty():
        print(f"Fetched {report.events_appended} events")

    return 0


if __name__ == "__main__":
    sys.exit(main())
