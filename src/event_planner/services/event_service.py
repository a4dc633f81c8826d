"""Event data-access service.

Every operation runs the same sequence:

1. Probe the REST backend once (short timeout, no retries) and capture the
   result in a `BackendContext`
2. Dispatch to the provider selected by that context
3. Mirror the outcome into local storage so the list stays readable offline

## Provider Selection

| Operation | Backend live | Backend down |
|-----------|--------------|--------------|
| list | REST, mirror refreshed | local mirror |
| get | REST | local mirror |
| create | REST, prepended to mirror | relational store, prepended to mirror |
| update | REST, mirror entry replaced | local mirror only |
| delete | REST, then mirror | local mirror only |

Creates always go to an authority that assigns identifiers (REST or the
relational store). Offline updates and deletes stay local; nothing replays
them to the backend later.

## Failures

Reads use `READ_POLICY` (degrade to the mirror, never raise); writes use
`WRITE_POLICY` (log and re-raise). A failed remote delete leaves the mirror
untouched. Once an authoritative write succeeds, a failure to update the
mirror is logged and the write still returns its result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from event_planner.config import Settings, get_settings
from event_planner.models.event import Event, EventCreate, EventUpdate
from event_planner.providers.base import AuthenticationError, EventProvider
from event_planner.providers.database import DatabaseEventProvider
from event_planner.providers.local import LocalEventProvider
from event_planner.providers.rest import RestEventProvider
from event_planner.services.policy import READ_POLICY, WRITE_POLICY, guarded
from event_planner.storage.identity import IdentityResolver
from event_planner.storage.local import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    StorageError,
)
from event_planner.storage.mirror import EventMirror

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendContext:
    """Outcome of one liveness probe, threaded through a single operation."""

    backend_available: bool
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def mode(self) -> str:
        return "online" if self.backend_available else "offline"


class EventService:
    """CRUD over events with REST, relational-store and local fallbacks.

    Args:
        remote: REST backend provider (also performs the liveness probe)
        store: Relational store provider, the authority for offline creates
        local: Local mirror provider
        identity: Resolver for the signed-in user
    """

    def __init__(
        self,
        remote: RestEventProvider,
        store: EventProvider,
        local: LocalEventProvider,
        identity: IdentityResolver,
    ):
        self.remote = remote
        self.store = store
        self.local = local
        self.identity = identity

    @property
    def mirror(self) -> EventMirror:
        return self.local.mirror

    async def __aenter__(self) -> EventService:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.remote.aclose()

    async def probe(self) -> BackendContext:
        """Check backend liveness for the current operation."""
        context = BackendContext(backend_available=await self.remote.probe())
        logger.debug(f"Backend is {context.mode}")
        return context

    def authority_for(self, context: BackendContext) -> EventProvider:
        """Provider that assigns identifiers to new events."""
        return self.remote if context.backend_available else self.store

    def _sync_mirror(self, operation: str, update: Callable[[], Any]) -> None:
        """Apply a mirror update following a successful authoritative write.

        Storage failures are logged, not raised. The next online list
        rewrites the mirror.
        """
        try:
            update()
        except StorageError as e:
            logger.warning(f"Error {operation}, local mirror is stale: {e}")

    async def list_events(self) -> list[Event]:
        """List events, newest first. Never raises."""
        context = await self.probe()

        async def from_selected() -> list[Event]:
            if not context.backend_available:
                return await self.local.list_events()
            events = await self.remote.list_events()
            self._sync_mirror(
                "refreshing mirror",
                lambda: self.mirror.save([event.to_record() for event in events]),
            )
            return events

        return await guarded(
            "loading events", READ_POLICY, from_selected, self.local.list_events
        )

    async def get_event(self, event_id: str) -> Event | None:
        """Get one event, or None if unknown. Never raises."""
        context = await self.probe()

        async def from_selected() -> Event | None:
            if not context.backend_available:
                return await self.local.get_event(event_id)
            return await self.remote.get_event(event_id)

        async def from_mirror() -> Event | None:
            return await self.local.get_event(event_id)

        return await guarded("getting event", READ_POLICY, from_selected, from_mirror)

    async def create_event(self, data: EventCreate | dict[str, Any]) -> Event:
        """Create an event owned by the signed-in user.

        Raises:
            AuthenticationError: If no user is signed in (nothing is written)
            ProviderError: If the authority rejects or cannot store the event
        """

        async def create() -> Event:
            payload = data if isinstance(data, EventCreate) else EventCreate.model_validate(data)
            user_id = self.identity.resolve_user_id()
            if not user_id:
                raise AuthenticationError()

            context = await self.probe()
            authority = self.authority_for(context)
            event = await authority.create_event(payload, user_id)
            self._sync_mirror(
                "mirroring new event", lambda: self.mirror.prepend(event.to_record())
            )
            logger.info(f"Created event {event.id} via {authority.name}")
            return event

        return await guarded("creating event", WRITE_POLICY, create)

    async def update_event(
        self, event_id: str, updates: EventUpdate | dict[str, Any]
    ) -> Event:
        """Apply a partial update.

        Raises:
            EventNotFoundError: If the event is unknown to the selected path
            ProviderError: If the backend update fails
        """

        async def update() -> Event:
            patch = (
                updates
                if isinstance(updates, EventUpdate)
                else EventUpdate.model_validate(updates)
            )
            context = await self.probe()
            if not context.backend_available:
                return await self.local.update_event(event_id, patch)

            event = await self.remote.update_event(event_id, patch)
            self._sync_mirror(
                "mirroring update", lambda: self.mirror.replace(event.to_record())
            )
            return event

        return await guarded("updating event", WRITE_POLICY, update)

    async def delete_event(self, event_id: str) -> bool:
        """Delete an event. Returns True on success.

        Raises:
            EventNotFoundError: If the backend does not know the event
            ProviderError: If the backend delete fails
        """

        async def delete() -> bool:
            context = await self.probe()
            if not context.backend_available:
                await self.local.delete_event(event_id)
                return True

            await self.remote.delete_event(event_id)
            self._sync_mirror("mirroring delete", lambda: self.mirror.remove(event_id))
            return True

        return await guarded("deleting event", WRITE_POLICY, delete)


def build_event_service(
    settings: Settings | None = None,
    session_storage: KeyValueStorage | None = None,
    persistent_storage: KeyValueStorage | None = None,
    client: httpx.AsyncClient | None = None,
) -> EventService:
    """Wire an `EventService` from settings.

    The relational store must be initialized separately (`init_db()`).
    """
    settings = settings or get_settings()
    session_storage = session_storage or MemoryStorage()
    persistent_storage = persistent_storage or FileStorage(settings.storage_dir)

    mirror = EventMirror(persistent_storage, settings.events_storage_key)
    identity = IdentityResolver(
        session_storage, persistent_storage, key=settings.identity_storage_key
    )
    remote = RestEventProvider(
        settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        probe_timeout=settings.probe_timeout_seconds,
        client=client,
    )

    return EventService(
        remote=remote,
        store=DatabaseEventProvider(),
        local=LocalEventProvider(mirror),
        identity=identity,
    )
