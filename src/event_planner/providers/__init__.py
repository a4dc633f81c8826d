"""Event storage providers."""

from event_planner.providers.base import (
    AuthenticationError,
    ContentNotFoundError,
    EventNotFoundError,
    EventPlannerError,
    EventProvider,
    ProviderError,
)
from event_planner.providers.database import DatabaseContentStore, DatabaseEventProvider
from event_planner.providers.local import LocalEventProvider
from event_planner.providers.rest import RestEventProvider

__all__ = [
    "EventProvider",
    "EventPlannerError",
    "AuthenticationError",
    "ContentNotFoundError",
    "EventNotFoundError",
    "ProviderError",
    "RestEventProvider",
    "DatabaseEventProvider",
    "DatabaseContentStore",
    "LocalEventProvider",
]
