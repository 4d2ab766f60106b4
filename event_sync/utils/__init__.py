"""Shared utilities for configuration, logging, and filesystem locations"""

from event_sync.utils.config_loader import ConfigLoader
from event_sync.utils.logging_config import configure_logging, get_logger
from event_sync.utils.paths import documents_dir, resolve_log_path

__all__ = ["ConfigLoader", "configure_logging", "documents_dir", "get_logger", "resolve_log_path"]
