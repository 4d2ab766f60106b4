"""Filesystem location helpers."""

import shutil
import subprocess
from pathlib import Path

import structlog

from event_sync.models.config import StorageConfig

log = structlog.stdlib.get_logger()

XDG_USER_DIR_COMMAND = "xdg-user-dir"


def documents_dir() -> Path:
    """
    Resolve the user's documents directory.

    Asks ``xdg-user-dir DOCUMENTS`` first. Falls back to ``~/Documents`` when
    the utility is missing, fails, or answers with the bare home directory
    (its answer when no documents directory is configured).

    Returns:
        Path to the documents directory (not necessarily existing)
    """
    home = Path.home()
    fallback = home / "Documents"

    executable = shutil.which(XDG_USER_DIR_COMMAND)
    if executable is None:
        log.debug("xdg_user_dir_unavailable", fallback=str(fallback))
        return fallback

    try:
        result = subprocess.run(
            [executable, "DOCUMENTS"],
            capture_output=True,
            text=True,
            timeout=10,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.warning("xdg_user_dir_failed", error=str(e), fallback=str(fallback))
        return fallback

    resolved = result.stdout.strip()
    if not resolved or Path(resolved) == home:
        return fallback

    return Path(resolved)


def resolve_log_path(storage: StorageConfig) -> Path:
    """
    Determine where the event log lives.

    Args:
        storage: Storage configuration

    Returns:
        Explicit ``log_path`` when configured, else ``<documents>/<file_name>``
    """
    if storage.log_path is not None:
        return storage.log_path.expanduser()
    return documents_dir() / storage.file_name
