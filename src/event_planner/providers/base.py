"""Event storage provider abstraction.

Events can be served by three interchangeable providers that share one
interface:

- `RestEventProvider`: the REST backend (`/api/events`)
- `DatabaseEventProvider`: the managed relational store, accessed directly
- `LocalEventProvider`: the on-device mirror

The `EventService` picks providers per call from the result of a liveness
probe; providers themselves hold no availability state.

## Errors

Providers raise `ProviderError` for transport and store failures and
`EventNotFoundError` when asked to modify an unknown event. Lookups of an
unknown event return None instead of raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from event_planner.models.event import Event, EventCreate, EventUpdate


class EventPlannerError(Exception):
    """Base exception for event planner errors."""

    pass


class AuthenticationError(EventPlannerError):
    """Raised when a write requires a signed-in user and none is found."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class EventNotFoundError(EventPlannerError):
    """Raised when an event to modify does not exist."""

    def __init__(self, event_id: str, message: str | None = None):
        super().__init__(message or f"Event not found: {event_id}")
        self.event_id = event_id


class ContentNotFoundError(EventPlannerError):
    """Raised when generated content to modify does not exist."""

    def __init__(self, content_id: str):
        super().__init__(f"Content not found: {content_id}")
        self.content_id = content_id


class ProviderError(EventPlannerError):
    """Raised when a storage provider fails (network, HTTP or database)."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class EventProvider(ABC):
    """Abstract base class for event storage providers.

    Attributes:
        name: Short provider name used in logs and errors
    """

    name: str

    @abstractmethod
    async def list_events(self) -> list[Event]:
        """List all events visible to the current user, newest first."""
        pass

    @abstractmethod
    async def get_event(self, event_id: str) -> Event | None:
        """Get a single event, or None if it does not exist."""
        pass

    @abstractmethod
    async def create_event(self, data: EventCreate, user_id: str) -> Event:
        """Persist a new event owned by `user_id`.

        Returns:
            The stored record, with identifier and timestamps assigned
        """
        pass

    @abstractmethod
    async def update_event(self, event_id: str, patch: EventUpdate) -> Event:
        """Apply a partial update.

        Raises:
            EventNotFoundError: If the event does not exist
        """
        pass

    @abstractmethod
    async def delete_event(self, event_id: str) -> None:
        """Delete an event.

        Raises:
            EventNotFoundError: If a remote provider does not know the event
        """
        pass
