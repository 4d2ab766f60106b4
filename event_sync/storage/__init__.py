"""Local persistence for fetched events."""

from event_sync.storage.event_log import EventLog

__all__ = ["EventLog"]
