"""Database models for the event planner.

The authoritative schema lives in the managed PostgreSQL database, which
also enforces row-level security (every row visible only to its owner) and
an update trigger that forces `updated_at` to the current time. These models
map the same tables so the application can query them, and create them for
local development.

## Schema Overview

```
events
└── ai_generated_content (1:N, ON DELETE CASCADE)
```
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class GUID(TypeDecorator):
    """Identifier column: native UUID on PostgreSQL, plain string elsewhere.

    Values are always exchanged as strings.
    """

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(UUID(as_uuid=False))
        return dialect.type_descriptor(String(36))

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)


JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all database models."""

    type_annotation_map = {
        dict[str, Any]: JSONDocument,
    }


class EventRow(Base):
    """A planned event, owned by exactly one user."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(GUID(), primary_key=True, default=new_id)
    # References auth.users(id) in the managed database
    user_id: Mapped[str | None] = mapped_column(GUID())

    event_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    event_type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text, default="")
    date: Mapped[dt.date | None] = mapped_column(Date)
    time: Mapped[dt.time | None] = mapped_column(Time)
    location: Mapped[str | None] = mapped_column(Text, default="")
    city: Mapped[str | None] = mapped_column(Text, default="")
    venue_type: Mapped[str | None] = mapped_column(Text, default="")
    audience_size: Mapped[int | None] = mapped_column(Integer, default=0)
    duration: Mapped[str | None] = mapped_column(Text, default="")

    # Timestamps
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    contents: Mapped[list["ContentRow"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("events_user_id_idx", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<EventRow {self.event_name[:30]}>"


class ContentRow(Base):
    """AI-generated content attached to an event."""

    __tablename__ = "ai_generated_content"

    id: Mapped[str] = mapped_column(GUID(), primary_key=True, default=new_id)
    event_id: Mapped[str] = mapped_column(
        GUID(), ForeignKey("events.id", ondelete="CASCADE")
    )
    user_id: Mapped[str | None] = mapped_column(GUID())

    content_type: Mapped[str] = mapped_column(
        Text, nullable=False, default="event_plan"
    )  # event_plan, email, social_media, ...
    prompt: Mapped[str | None] = mapped_column(Text, default="")
    generated_content: Mapped[dict[str, Any]] = mapped_column(default=dict)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any]] = mapped_column("metadata", default=dict)

    # Timestamps
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    event: Mapped["EventRow"] = relationship(back_populates="contents")

    __table_args__ = (
        Index("ai_generated_content_event_id_idx", "event_id"),
        Index("ai_generated_content_user_id_idx", "user_id"),
        Index("ai_generated_content_content_type_idx", "content_type"),
    )

    def __repr__(self) -> str:
        return f"<ContentRow {self.content_type} event_id={self.event_id}>"


Index("events_created_at_idx", EventRow.created_at.desc())
