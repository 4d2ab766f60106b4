"""Synchronization components for incremental, append-only updates."""

from event_sync.sync.change_detector import ChangeDetector
from event_sync.sync.models import SyncReport
from event_sync.sync.sync_coordinator import SyncCoordinator

__all__ = [
    "ChangeDetector",
    "SyncCoordinator",
    "SyncReport",
]
