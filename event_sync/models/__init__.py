"""Data models for the GitHub events synchronizer."""

from event_sync.models.config import (
    AppConfig,
    GitHubConfig,
    LoggingConfig,
    StorageConfig,
)
from event_sync.models.event import Event, FetchPage

__all__ = [
    "Event",
    "FetchPage",
    "AppConfig",
    "GitHubConfig",
    "LoggingConfig",
    "StorageConfig",
]
