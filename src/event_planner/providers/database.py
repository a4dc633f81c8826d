"""Relational store providers.

Direct access to the managed database through SQLAlchemy. Row-level
security in the managed database scopes every statement to the signed-in
owner, so queries here carry no owner filter of their own.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from event_planner.database.connection import DatabaseNotInitializedError, get_db
from event_planner.database.models import ContentRow, EventRow
from event_planner.models.content import GeneratedContent
from event_planner.models.event import Event, EventCreate, EventUpdate
from event_planner.providers.base import (
    EventNotFoundError,
    EventProvider,
    ProviderError,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]

# Failures surfaced as ProviderError (OSError covers driver connect failures)
STORE_ERRORS = (SQLAlchemyError, DatabaseNotInitializedError, OSError)


class DatabaseEventProvider(EventProvider):
    """Event provider backed by the relational store.

    Args:
        session_factory: Callable returning an async session context manager
    """

    name = "database"

    def __init__(self, session_factory: SessionFactory = get_db):
        self.session_factory = session_factory

    def _error(self, action: str, exc: Exception) -> ProviderError:
        return ProviderError(f"Failed to {action}: {exc}", provider=self.name)

    async def list_events(self) -> list[Event]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(EventRow).order_by(EventRow.created_at.desc())
                )
                return [Event.model_validate(row) for row in result.scalars().all()]
        except STORE_ERRORS as e:
            raise self._error("list events", e) from e

    async def get_event(self, event_id: str) -> Event | None:
        try:
            async with self.session_factory() as session:
                row = await session.get(EventRow, event_id)
                return Event.model_validate(row) if row else None
        except STORE_ERRORS as e:
            raise self._error(f"get event {event_id}", e) from e

    async def create_event(self, data: EventCreate, user_id: str) -> Event:
        try:
            async with self.session_factory() as session:
                row = EventRow(**data.to_insert(user_id))
                session.add(row)
                await session.commit()
                # Load server-assigned defaults (timestamps)
                await session.refresh(row)
                logger.info(f"Created event {row.id} for user {user_id}")
                return Event.model_validate(row)
        except STORE_ERRORS as e:
            raise self._error("create event", e) from e

    async def update_event(self, event_id: str, patch: EventUpdate) -> Event:
        try:
            async with self.session_factory() as session:
                row = await session.get(EventRow, event_id)
                if row is None:
                    raise EventNotFoundError(event_id)

                for field_name, value in patch.to_patch().items():
                    setattr(row, field_name, value)

                await session.commit()
                await session.refresh(row)
                return Event.model_validate(row)
        except STORE_ERRORS as e:
            raise self._error(f"update event {event_id}", e) from e

    async def delete_event(self, event_id: str) -> None:
        try:
            async with self.session_factory() as session:
                row = await session.get(EventRow, event_id)
                if row is None:
                    raise EventNotFoundError(event_id)

                # Generated content goes with it (ORM cascade + FK ON DELETE CASCADE)
                await session.delete(row)
                await session.commit()
                logger.info(f"Deleted event {event_id}")
        except STORE_ERRORS as e:
            raise self._error(f"delete event {event_id}", e) from e


def content_from_row(row: ContentRow) -> GeneratedContent:
    return GeneratedContent(
        id=row.id,
        event_id=row.event_id,
        user_id=row.user_id,
        content_type=row.content_type,
        prompt=row.prompt or "",
        generated_content=row.generated_content or {},
        metadata=row.metadata_ or {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DatabaseContentStore:
    """Generated-content access in the relational store.

    Args:
        session_factory: Callable returning an async session context manager
    """

    name = "database"

    def __init__(self, session_factory: SessionFactory = get_db):
        self.session_factory = session_factory

    async def list_content(
        self,
        event_id: str | None = None,
        content_type: str | None = None,
    ) -> list[GeneratedContent]:
        query = select(ContentRow).order_by(ContentRow.created_at.desc())
        if event_id is not None:
            query = query.where(ContentRow.event_id == event_id)
        if content_type is not None:
            query = query.where(ContentRow.content_type == content_type)

        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return [content_from_row(row) for row in result.scalars().all()]
        except STORE_ERRORS as e:
            raise ProviderError(f"Failed to list content: {e}", provider=self.name) from e

    async def get_content(self, content_id: str) -> GeneratedContent | None:
        try:
            async with self.session_factory() as session:
                row = await session.get(ContentRow, content_id)
                return content_from_row(row) if row else None
        except STORE_ERRORS as e:
            raise ProviderError(f"Failed to get content: {e}", provider=self.name) from e

    async def create_content(self, values: dict[str, Any]) -> GeneratedContent:
        """Insert a content row.

        Raises:
            EventNotFoundError: If the owning event does not exist
        """
        values = dict(values)
        if "metadata" in values:
            values["metadata_"] = values.pop("metadata")

        try:
            async with self.session_factory() as session:
                if await session.get(EventRow, values["event_id"]) is None:
                    raise EventNotFoundError(values["event_id"])

                row = ContentRow(**values)
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return content_from_row(row)
        except STORE_ERRORS as e:
            raise ProviderError(
                f"Failed to create content: {e}", provider=self.name
            ) from e

    async def update_content(
        self, content_id: str, patch: dict[str, Any]
    ) -> GeneratedContent | None:
        """Apply a partial update. Returns None if the content does not exist."""
        try:
            async with self.session_factory() as session:
                row = await session.get(ContentRow, content_id)
                if row is None:
                    return None

                for field_name, value in patch.items():
                    attr = "metadata_" if field_name == "metadata" else field_name
                    setattr(row, attr, value)

                await session.commit()
                await session.refresh(row)
                return content_from_row(row)
        except STORE_ERRORS as e:
            raise ProviderError(
                f"Failed to update content: {e}", provider=self.name
            ) from e

    async def delete_content(self, content_id: str) -> bool:
        """Delete content. Returns False if it does not exist."""
        try:
            async with self.session_factory() as session:
                row = await session.get(ContentRow, content_id)
                if row is None:
                    return False
                await session.delete(row)
                await session.commit()
                return True
        except STORE_ERRORS as e:
            raise ProviderError(
                f"Failed to delete content: {e}", provider=self.name
            ) from e
