"""Event models.

`Event` is the persisted record as returned by every storage path (REST
backend, relational store, local mirror). `EventCreate` and `EventUpdate`
are the inputs accepted by the service layer; both accept snake_case field
names as well as the camelCase names used by the web client
(`eventName`, `audienceSize`, ...).
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Free-text fields that default to an empty string rather than null
TEXT_FIELDS = (
    "event_name",
    "event_type",
    "description",
    "location",
    "city",
    "venue_type",
    "duration",
)


class Event(BaseModel):
    """A planned event owned by a single user."""

    model_config = ConfigDict(from_attributes=True)

    # Identity
    id: str = Field(..., description="Unique event identifier")
    user_id: str | None = Field(default=None, description="Owner reference")

    # Basic info
    event_name: str = ""
    event_type: str = Field(default="", description="Category tag (conference, wedding, ...)")
    description: str = ""

    # Schedule
    date: dt.date | None = None
    time: dt.time | None = None
    duration: str = Field(default="", description="Duration descriptor, e.g. '2 hours'")

    # Venue
    location: str = ""
    city: str = ""
    venue_type: str = ""
    audience_size: int = Field(default=0, ge=0, description="Expected attendees")

    # Timestamps
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def null_text_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("audience_size", mode="before")
    @classmethod
    def null_size_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    def to_record(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible dict stored in the local mirror."""
        return self.model_dump(mode="json")


class _EventInput(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("date", "time", mode="before", check_fields=False)
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v


class EventCreate(_EventInput):
    """Fields supplied when creating an event."""

    event_name: str = ""
    event_type: str = ""
    description: str = ""
    date: dt.date | None = None
    time: dt.time | None = None
    location: str = ""
    city: str = ""
    venue_type: str = ""
    audience_size: int = Field(default=0, ge=0)
    duration: str = ""

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("audience_size", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v in (None, "") else v

    def to_insert(self, user_id: str) -> dict[str, Any]:
        """Build the column values for a new row owned by `user_id`."""
        return {"user_id": user_id, **self.model_dump()}


class EventUpdate(_EventInput):
    """Partial update. Only fields explicitly provided form the patch."""

    event_name: str | None = None
    event_type: str | None = None
    description: str | None = None
    date: dt.date | None = None
    time: dt.time | None = None
    location: str | None = None
    city: str | None = None
    venue_type: str | None = None
    audience_size: int | None = Field(default=None, ge=0)
    duration: str | None = None

    # Explicit nulls clear a field to its default; the columns are NOT NULL
    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("audience_size", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v in (None, "") else v

    def to_patch(self, mode: str = "python") -> dict[str, Any]:
        """Return the explicitly set fields, keyed by column name."""
        return self.model_dump(exclude_unset=True, mode=mode)
