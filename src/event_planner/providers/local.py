"""On-device event provider.

Serves events from the local mirror. Writes here never reach a remote
store; they stay local until an online path rewrites the same record.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from event_planner.models.event import Event, EventCreate, EventUpdate
from event_planner.providers.base import EventNotFoundError, EventProvider
from event_planner.storage.mirror import EventMirror

logger = logging.getLogger(__name__)


def _parse(record: dict) -> Event | None:
    try:
        return Event.model_validate(record)
    except ValidationError:
        logger.warning(f"Skipping malformed mirror record {record.get('id')!r}")
        return None


def next_timestamp(previous: datetime | None) -> datetime:
    """Current UTC time, forced strictly later than `previous`."""
    now = datetime.now(timezone.utc)
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class LocalEventProvider(EventProvider):
    """Event provider backed by the local mirror.

    Args:
        mirror: The mirrored event list
    """

    name = "local"

    def __init__(self, mirror: EventMirror):
        self.mirror = mirror

    async def list_events(self) -> list[Event]:
        events = []
        for record in self.mirror.load():
            event = _parse(record)
            if event is not None:
                events.append(event)
        return events

    async def get_event(self, event_id: str) -> Event | None:
        record = self.mirror.find(event_id)
        return _parse(record) if record else None

    async def create_event(self, data: EventCreate, user_id: str) -> Event:
        now = datetime.now(timezone.utc)
        event = Event(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **data.to_insert(user_id),
        )
        self.mirror.prepend(event.to_record())
        return event

    async def update_event(self, event_id: str, patch: EventUpdate) -> Event:
        current = self.mirror.find(event_id)
        if current is None:
            raise EventNotFoundError(event_id)

        previous = Event.model_validate(current)
        merged = {
            **current,
            **patch.to_patch(mode="json"),
            "updated_at": next_timestamp(previous.updated_at).isoformat(),
        }
        updated = Event.model_validate(merged)
        self.mirror.replace(updated.to_record())
        logger.info(f"Updated event {event_id} locally only")
        return updated

    async def delete_event(self, event_id: str) -> None:
        # Removing an absent entry is a no-op
        self.mirror.remove(event_id)
