"""REST backend provider.

## Endpoints
Base URL: `{API_BASE_URL}` (default http://localhost:5000/api)

| Method | Path | Body | Response |
|--------|------|------|----------|
| GET | /events | | `{"data": [Event, ...]}` |
| GET | /events/{id} | | `{"data": Event}` |
| POST | /events | EventCreate + user_id | `{"data": Event}` |
| PUT | /events/{id} | partial Event | `{"data": Event}` |
| DELETE | /events/{id} | | `{"data": {"id": ...}}` |

Unknown ids answer 404. Requests are never retried.

## Liveness
`probe()` issues `GET /events` with a short timeout. Any transport error or
error status means the backend is unavailable for the rest of the call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from event_planner.models.event import Event, EventCreate, EventUpdate
from event_planner.providers.base import (
    EventNotFoundError,
    EventProvider,
    ProviderError,
)

logger = logging.getLogger(__name__)


class RestEventProvider(EventProvider):
    """Event provider backed by the REST API.

    Args:
        base_url: API base URL, e.g. "http://localhost:5000/api"
        timeout: Timeout for regular requests in seconds
        probe_timeout: Timeout for the liveness probe in seconds
        client: Optional preconfigured HTTP client (owned by the caller)
    """

    name = "rest"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        probe_timeout: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> RestEventProvider:
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def probe(self) -> bool:
        """Check whether the backend answers within the probe timeout."""
        try:
            response = await self._get_client().get(
                self._url("/events"), timeout=self.probe_timeout
            )
        except httpx.HTTPError as e:
            logger.debug(f"Backend probe failed: {e!r}")
            return False

        if response.status_code >= 400:
            logger.debug(f"Backend probe answered {response.status_code}")
            return False
        return True

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._get_client().request(
                method, self._url(path), json=json
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{method} {path} failed: {e!r}", provider=self.name
            ) from e

        if response.status_code >= 400 and response.status_code != 404:
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )
        return response

    def _unwrap(self, response: httpx.Response) -> Any:
        """Extract the payload from the `{"data": ...}` envelope."""
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                "Response is not JSON",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not isinstance(body, dict):
            raise ProviderError(
                "Response envelope is not an object",
                provider=self.name,
                status_code=response.status_code,
            )
        return body.get("data")

    async def list_events(self) -> list[Event]:
        response = await self._request("GET", "/events")
        if response.status_code == 404:
            raise ProviderError(
                "Events endpoint not found", provider=self.name, status_code=404
            )
        data = self._unwrap(response) or []
        return [Event.model_validate(item) for item in data]

    async def get_event(self, event_id: str) -> Event | None:
        response = await self._request("GET", f"/events/{event_id}")
        if response.status_code == 404:
            return None
        data = self._unwrap(response)
        return Event.model_validate(data) if data else None

    async def create_event(self, data: EventCreate, user_id: str) -> Event:
        body = {"user_id": user_id, **data.model_dump(mode="json")}
        response = await self._request("POST", "/events", json=body)
        if response.status_code == 404:
            raise ProviderError(
                "Events endpoint not found", provider=self.name, status_code=404
            )
        return Event.model_validate(self._unwrap(response))

    async def update_event(self, event_id: str, patch: EventUpdate) -> Event:
        response = await self._request(
            "PUT", f"/events/{event_id}", json=patch.to_patch(mode="json")
        )
        if response.status_code == 404:
            raise EventNotFoundError(event_id)
        return Event.model_validate(self._unwrap(response))

    async def delete_event(self, event_id: str) -> None:
        response = await self._request("DELETE", f"/events/{event_id}")
        if response.status_code == 404:
            raise EventNotFoundError(event_id)
