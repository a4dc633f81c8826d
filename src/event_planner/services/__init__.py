"""Data-access services."""

from event_planner.services.content_service import ContentService
from event_planner.services.event_service import (
    BackendContext,
    EventService,
    build_event_service,
)
from event_planner.services.policy import FailurePolicy, guarded

__all__ = [
    "BackendContext",
    "EventService",
    "build_event_service",
    "ContentService",
    "FailurePolicy",
    "guarded",
]
