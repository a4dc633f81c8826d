"""On-device storage: key/value scopes, the event mirror and identity."""

from event_planner.storage.identity import IdentityResolver
from event_planner.storage.local import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    StorageError,
)
from event_planner.storage.mirror import EventMirror

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
    "StorageError",
    "EventMirror",
    "IdentityResolver",
]
