"""Append-only JSON Lines event log.

The log holds one JSON object per line in ascending id order (oldest first).
Lines are never rewritten; new events are only ever appended at the end.
The watermark is not stored anywhere else: it is the id on the last line.
"""

import json
import os
from pathlib import Path
from typing import Iterable

import structlog

from event_sync.exceptions import DataError, StorageError
from event_sync.models.event import Event

log = structlog.stdlib.get_logger()


class EventLog:
    """Reads the watermark from, and appends batches to, a JSON Lines file."""

    # Bytes read per step when scanning backwards for the last line
    TAIL_BLOCK_SIZE: int = 8192

    def __init__(self, path: Path | str):
        """
        Initialize the event log.

        Args:
            path: Location of the JSON Lines file (need not exist yet)
        """
        self._path: Path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def exists(self) -> bool:
        return self._path.is_file()

    def read_watermark(self) -> int:
        """
        Compute the watermark from the last line of the log.

        Returns:
            Id of the newest stored event, or 0 if the log is absent or empty

        Raises:
            DataError: If the last line is not valid JSON or has no usable id
            StorageError: If the file exists but cannot be read
        """
        if not self.exists:
            log.info("event_log_absent", path=str(self._path))
            return 0

        last_line = self._read_last_line()
        if not last_line:
            log.info("event_log_empty", path=str(self._path))
            return 0

        try:
            record = json.loads(last_line)
        except ValueError as e:
            raise DataError(f"Last line of {self._path} is not valid JSON: {e}") from e

        try:
            watermark = Event.from_record(record).id
        except DataError as e:
            raise DataError(f"Last line of {self._path} has no usable id: {e}") from e

        log.info("watermark_loaded", path=str(self._path), watermark=watermark)
        return watermark

    def append(self, events: Iterable[Event]) -> int:
        """
        Append a batch of events, in the given order, with a single write.

        The whole batch is serialized before the file is opened, so a record
        that cannot be encoded leaves the log untouched. An empty batch does
        not touch the file at all.

        Args:
            events: Events in chronological order

        Returns:
            Number of records appended

        Raises:
            DataError: If a record cannot be encoded as UTF-8
            StorageError: If the file cannot be written
        """
        lines = [event.to_json_line() for event in events]
        if not lines:
            log.info("no_events_to_append", path=str(self._path))
            return 0

        try:
            data = "".join(lines).encode("utf-8")
        except UnicodeEncodeError as e:
            log.error("failed_to_encode_events", path=str(self._path), error=str(e))
            raise DataError(f"Events cannot be encoded as UTF-8: {e}") from e

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if self._needs_line_break():
                data = b"\n" + data
            with self._path.open("ab") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as e:
            log.error("failed_to_append_events", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to append to {self._path}: {e}") from e

        log.info("events_appended", path=str(self._path), count=len(lines))
        return len(lines)

    def read_events(self) -> list[Event]:
        """
        Read every record in the log.

        Not used by a sync run, which only needs the last line; this is for
        inspecting or verifying a log after the fact.

        Returns:
            Events in file order (oldest first)

        Raises:
            DataError: If any non-blank line is malformed
            StorageError: If the file cannot be read
        """
        if not self.exists:
            return []

        events: list[Event] = []
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                for line_number, line in enumerate(handle, start=1):
                    if not line.strip():
                        continue
                    try:
                        record = json.loads(line)
                    except ValueError as e:
                        raise DataError(
                            f"Line {line_number} of {self._path} is not valid JSON: {e}"
                        ) from e
                    events.append(Event.from_record(record))
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        return events

    def _read_last_line(self) -> str:
        """Return the last non-blank line, reading only the tail of the file."""
        try:
            with self._path.open("rb") as handle:
                handle.seek(0, os.SEEK_END)
                position = handle.tell()
                buffer = b""

                while position > 0:
                    step = min(self.TAIL_BLOCK_SIZE, position)
                    position -= step
                    handle.seek(position)
                    buffer = handle.read(step) + buffer

                    stripped = buffer.rstrip()
                    if b"\n" in stripped:
                        buffer = stripped.rsplit(b"\n", 1)[1]
                        break
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        try:
            return buffer.strip().decode("utf-8")
        except UnicodeDecodeError as e:
            raise DataError(f"Last line of {self._path} is not valid UTF-8: {e}") from e

    def _needs_line_break(self) -> bool:
        """Check whether the existing file ends without a trailing newline."""
        if not self.exists:
            return False
        with self._path.open("rb") as handle:
            handle.seek(0, os.SEEK_END)
            if handle.tell() == 0:
                return False
            handle.seek(-1, os.SEEK_END)
            return handle.read(1) != b"\n"
