"""REST backend.

## API Structure

- /api/events - Event CRUD, payloads wrapped as `{"data": ...}`
- /health - Liveness check

Row-level access control is enforced by the managed database.
"""

from event_planner.api.app import create_app

__all__ = ["create_app"]
