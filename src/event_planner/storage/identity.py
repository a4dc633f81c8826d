"""Current-identity resolution.

After sign-in with the external auth provider, the client stores the user
record as JSON under a well-known key, either in session storage ("remember
me" off) or persistent storage. The resolver reads it back and extracts the
user id. It fails soft: a missing, unreadable or malformed record means
"no identity".
"""

from __future__ import annotations

import json
import logging
from typing import Any

from event_planner.storage.local import KeyValueStorage

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolve the signed-in user from on-device storage.

    Args:
        session: Session-scoped storage, checked first
        persistent: Persistent storage, checked second
        key: Storage key of the identity record
    """

    def __init__(
        self,
        session: KeyValueStorage,
        persistent: KeyValueStorage,
        key: str = "user",
    ):
        self.session = session
        self.persistent = persistent
        self.key = key

    def resolve_user_id(self) -> str | None:
        """Return the current user id, or None if nobody is signed in."""
        try:
            stored = self.session.get_item(self.key) or self.persistent.get_item(
                self.key
            )
            if not stored:
                return None

            user = json.loads(stored)
            user_id = user.get("id")
        except Exception as e:
            logger.error(f"Error getting current user: {e}")
            return None

        if user_id is None or user_id == "":
            return None
        return str(user_id)

    def remember(self, user: dict[str, Any], persistent: bool = True) -> None:
        """Store the identity record of a signed-in user."""
        if not user.get("id"):
            raise ValueError("Identity record requires an 'id'")
        storage = self.persistent if persistent else self.session
        storage.set_item(self.key, json.dumps(user))
        logger.info(f"Stored identity in {storage.scope} storage")

    def forget(self) -> None:
        """Remove the identity record from both scopes."""
        self.session.remove_item(self.key)
        self.persistent.remove_item(self.key)
