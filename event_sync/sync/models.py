"""Data models for synchronization operations."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field


class SyncReport(BaseModel):
    """Report of a successful synchronization run."""

    log_path: Path = Field(..., description="Event log that was synchronized")
    watermark: int = Field(..., ge=0, description="Newest stored id before the run")
    events_appended: int = Field(default=0, ge=0, description="Number of events appended")
    pages_fetched: int = Field(default=0, ge=0, description="Number of feed pages requested")
    newest_id: int | None = Field(default=None, description="Newest stored id after the run")
    duration_seconds: float = Field(default=0.0, ge=0.0, description="Sync duration in seconds")
    start_time: datetime = Field(..., description="Sync start timestamp")
    end_time: datetime = Field(..., description="Sync end timestamp")

    @property
    def has_new_events(self) -> bool:
        """Check if the run appended anything."""
        return self.events_appended > 0
