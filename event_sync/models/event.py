"""Pydantic models for feed events and fetch pages."""

import json
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from event_sync.exceptions import DataError


class Event(BaseModel):
    """Represents one activity event from the remote feed.

    Only the identifier is interpreted. The rest of the record is carried
    verbatim so it can be written back to the log unchanged.

    Identifiers are assumed to increase monotonically with recency: a strictly
    greater id denotes a strictly newer event. This is a property of the
    remote API's id allocation and is not verified here.
    """

    id: int = Field(default=..., ge=0, description="Numeric event identifier")
    record: dict[str, Any] = Field(default=..., description="Original JSON object, untouched")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": 33812941877,
                "record": {
                    "id": "33812941877",
                    "type": "PushEvent",
                    "actor": {"login": "octocat"},
                    "repo": {"name": "octocat/Hello-World"},
                    "created_at": "2024-01-15T14:30:00Z",
                },
            }
        },
    }

    @field_validator("id", mode="before")
    @classmethod
    def validate_numeric_id(cls, v: Any) -> int:
        """Accept a JSON integer or a string of decimal digits, nothing else."""
        if isinstance(v, bool):
            raise ValueError("id must be numeric, not boolean")
        if isinstance(v, int):
            return v
        if isinstance(v, str) and v.isascii() and v.isdigit():
            return int(v)
        raise ValueError(f"id must be a numeric string or integer, got {v!r}")

    @classmethod
    def from_record(cls, record: Any) -> "Event":
        """
        Build an Event from a decoded JSON value.

        Args:
            record: Decoded JSON value, expected to be an object with an ``id``

        Returns:
            Event wrapping the record

        Raises:
            DataError: If the value is not an object or has no usable id
        """
        if not isinstance(record, dict):
            raise DataError(f"Event must be a JSON object, got {type(record).__name__}")
        if "id" not in record:
            raise DataError("Event is missing the 'id' field")

        try:
            return cls(id=record["id"], record=record)
        except ValidationError as e:
            raise DataError(f"Event has an invalid id {record['id']!r}: {e}") from e

    def to_json_line(self) -> str:
        """Serialize the original record as one compact JSON line."""
        return json.dumps(self.record, ensure_ascii=False, separators=(",", ":")) + "\n"


class FetchPage(BaseModel):
    """One bounded response unit from the paginated feed, newest event first."""

    number: int = Field(default=..., ge=1, description="1-based page number")
    events: list[Event] = Field(default_factory=list, description="Events in feed order")
    has_next: bool = Field(default=False, description="Whether the feed advertises a further page")

    def __len__(self) -> int:
        return len(self.events)
