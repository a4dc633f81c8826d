"""Event routes.

Serves the REST contract consumed by `RestEventProvider`. Every response
wraps its payload as `{"data": ...}`.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from event_planner.models.event import Event, EventCreate, EventUpdate
from event_planner.providers.base import EventNotFoundError, ProviderError
from event_planner.providers.database import DatabaseEventProvider

logger = logging.getLogger(__name__)

router = APIRouter()


class EventEnvelope(BaseModel):
    data: Event


class EventListEnvelope(BaseModel):
    data: list[Event]


class DeletedEnvelope(BaseModel):
    data: dict[str, str]


class EventCreateRequest(EventCreate):
    """Create event request; the client supplies the owner."""

    user_id: str = Field(..., min_length=1)


def get_event_store() -> DatabaseEventProvider:
    """FastAPI dependency for the relational event store."""
    return DatabaseEventProvider()


def _not_found(event_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Event not found: {event_id}",
    )


def _store_failed(e: ProviderError) -> HTTPException:
    logger.error(f"Event store failure: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Event store unavailable",
    )


@router.get("", response_model=EventListEnvelope)
async def list_events(
    store: DatabaseEventProvider = Depends(get_event_store),
) -> EventListEnvelope:
    """List all events, newest first."""
    try:
        events = await store.list_events()
    except ProviderError as e:
        raise _store_failed(e)
    return EventListEnvelope(data=events)


@router.get("/{event_id}", response_model=EventEnvelope)
async def get_event(
    event_id: str,
    store: DatabaseEventProvider = Depends(get_event_store),
) -> EventEnvelope:
    """Get a single event."""
    try:
        event = await store.get_event(event_id)
    except ProviderError as e:
        raise _store_failed(e)
    if event is None:
        raise _not_found(event_id)
    return EventEnvelope(data=event)


@router.post("", response_model=EventEnvelope, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreateRequest,
    store: DatabaseEventProvider = Depends(get_event_store),
) -> EventEnvelope:
    """Create an event."""
    data = EventCreate.model_validate(body.model_dump(exclude={"user_id"}))
    try:
        event = await store.create_event(data, body.user_id)
    except ProviderError as e:
        raise _store_failed(e)
    return EventEnvelope(data=event)


@router.put("/{event_id}", response_model=EventEnvelope)
async def update_event(
    event_id: str,
    patch: EventUpdate,
    store: DatabaseEventProvider = Depends(get_event_store),
) -> EventEnvelope:
    """Partially update an event. Only fields present in the body change."""
    try:
        event = await store.update_event(event_id, patch)
    except EventNotFoundError:
        raise _not_found(event_id)
    except ProviderError as e:
        raise _store_failed(e)
    return EventEnvelope(data=event)


@router.delete("/{event_id}", response_model=DeletedEnvelope)
async def delete_event(
    event_id: str,
    store: DatabaseEventProvider = Depends(get_event_store),
) -> DeletedEnvelope:
    """Delete an event and its generated content."""
    try:
        await store.delete_event(event_id)
    except EventNotFoundError:
        raise _not_found(event_id)
    except ProviderError as e:
        raise _store_failed(e)
    return DeletedEnvelope(data={"id": event_id})
