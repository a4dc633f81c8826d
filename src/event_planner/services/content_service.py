"""Generated-content service.

AI-generated content (event plans, emails, social media posts) lives only in
the relational store. Content is owned by the signed-in user and attached to
one event; deleting the event deletes its content.
"""

from __future__ import annotations

import logging
from typing import Any

from event_planner.models.content import ContentCreate, ContentUpdate, GeneratedContent
from event_planner.providers.base import AuthenticationError, ContentNotFoundError
from event_planner.providers.database import DatabaseContentStore
from event_planner.services.policy import READ_POLICY, WRITE_POLICY, guarded
from event_planner.storage.identity import IdentityResolver

logger = logging.getLogger(__name__)


class ContentService:
    """CRUD over generated content.

    Args:
        store: Relational content store
        identity: Resolver for the signed-in user
    """

    def __init__(self, store: DatabaseContentStore, identity: IdentityResolver):
        self.store = store
        self.identity = identity

    async def list_content(
        self,
        event_id: str | None = None,
        content_type: str | None = None,
    ) -> list[GeneratedContent]:
        """List content, optionally for one event and/or of one type. Never raises."""

        async def nothing() -> list[GeneratedContent]:
            return []

        return await guarded(
            "loading content",
            READ_POLICY,
            lambda: self.store.list_content(event_id=event_id, content_type=content_type),
            nothing,
        )

    async def get_content(self, content_id: str) -> GeneratedContent | None:
        """Get one content record, or None. Never raises."""

        async def nothing() -> None:
            return None

        return await guarded(
            "getting content",
            READ_POLICY,
            lambda: self.store.get_content(content_id),
            nothing,
        )

    async def create_content(
        self, event_id: str, data: ContentCreate | dict[str, Any]
    ) -> GeneratedContent:
        """Store generated content for an event.

        Raises:
            AuthenticationError: If no user is signed in
            EventNotFoundError: If the event does not exist
        """

        async def create() -> GeneratedContent:
            payload = (
                data if isinstance(data, ContentCreate) else ContentCreate.model_validate(data)
            )
            user_id = self.identity.resolve_user_id()
            if not user_id:
                raise AuthenticationError()

            content = await self.store.create_content(
                {
                    "event_id": event_id,
                    "user_id": user_id,
                    **payload.model_dump(mode="json"),
                }
            )
            logger.info(f"Stored {content.content_type} content for event {event_id}")
            return content

        return await guarded("creating content", WRITE_POLICY, create)

    async def update_content(
        self, content_id: str, updates: ContentUpdate | dict[str, Any]
    ) -> GeneratedContent:
        """Apply a partial update.

        Raises:
            ContentNotFoundError: If the content does not exist
        """

        async def update() -> GeneratedContent:
            patch = (
                updates
                if isinstance(updates, ContentUpdate)
                else ContentUpdate.model_validate(updates)
            )
            content = await self.store.update_content(content_id, patch.to_patch())
            if content is None:
                raise ContentNotFoundError(content_id)
            return content

        return await guarded("updating content", WRITE_POLICY, update)

    async def delete_content(self, content_id: str) -> bool:
        """Delete content. Returns False if it did not exist."""
        return await guarded(
            "deleting content",
            WRITE_POLICY,
            lambda: self.store.delete_content(content_id),
        )
