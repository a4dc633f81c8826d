"""Local mirror of the event list.

The mirror is a JSON array of event records stored under a single key in
persistent storage. It is kept in step with whichever path served the latest
read or write, so the event list remains available offline.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from event_planner.storage.local import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

EventRecord = dict[str, Any]


class EventMirror:
    """Read-modify-write access to the mirrored event list.

    Args:
        storage: Persistent storage holding the mirror
        key: Storage key of the mirror record
    """

    def __init__(self, storage: KeyValueStorage, key: str):
        self.storage = storage
        self.key = key

    def load(self) -> list[EventRecord]:
        """Load the mirrored records. Missing or corrupt data yields []."""
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as e:
            logger.warning(f"Local mirror unavailable: {e}")
            return []

        if not raw:
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding corrupt local mirror under '{self.key}'")
            return []

        if not isinstance(records, list):
            logger.warning(f"Discarding malformed local mirror under '{self.key}'")
            return []
        return [r for r in records if isinstance(r, dict)]

    def save(self, records: list[EventRecord]) -> None:
        self.storage.set_item(self.key, json.dumps(records))

    def find(self, event_id: str) -> EventRecord | None:
        for record in self.load():
            if record.get("id") == event_id:
                return record
        return None

    def prepend(self, record: EventRecord) -> None:
        records = self.load()
        records.insert(0, record)
        self.save(records)

    def replace(self, record: EventRecord) -> bool:
        """Replace the entry with the same id. Returns False if absent."""
        records = self.load()
        for index, existing in enumerate(records):
            if existing.get("id") == record.get("id"):
                records[index] = record
                self.save(records)
                return True
        return False

    def remove(self, event_id: str) -> None:
        records = self.load()
        self.save([r for r in records if r.get("id") != event_id])
