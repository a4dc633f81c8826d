"""Domain models for the event planner."""

from event_planner.models.content import (
    ContentCreate,
    ContentType,
    ContentUpdate,
    GeneratedContent,
)
from event_planner.models.event import Event, EventCreate, EventUpdate

__all__ = [
    # Event
    "Event",
    "EventCreate",
    "EventUpdate",
    # Generated content
    "GeneratedContent",
    "ContentCreate",
    "ContentType",
    "ContentUpdate",
]
