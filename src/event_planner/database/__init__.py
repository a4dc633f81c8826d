"""Database module for the event planner.

This module provides:
- SQLAlchemy async database connection
- Event and generated-content table mappings
"""

from event_planner.database.connection import (
    DatabaseNotInitializedError,
    close_db,
    create_tables,
    get_db,
    init_db,
)
from event_planner.database.models import Base, ContentRow, EventRow

__all__ = [
    # Connection
    "get_db",
    "init_db",
    "close_db",
    "create_tables",
    "DatabaseNotInitializedError",
    # Models
    "Base",
    "EventRow",
    "ContentRow",
]
