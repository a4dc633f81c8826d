"""Tests for the REST, relational-store and local event providers."""

import json
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from event_planner.database.connection import get_db
from event_planner.database.models import ContentRow
from event_planner.models.event import EventCreate, EventUpdate
from event_planner.providers.base import EventNotFoundError, ProviderError
from event_planner.providers.database import DatabaseContentStore, DatabaseEventProvider
from event_planner.providers.local import LocalEventProvider, next_timestamp
from event_planner.providers.rest import RestEventProvider
from event_planner.storage.mirror import EventMirror

from conftest import USER_ID, refusing_transport

BASE_URL = "http://backend.test/api"

EVENT_PAYLOAD = {
    "id": "e1",
    "user_id": USER_ID,
    "event_name": "Launch",
    "event_type": "conference",
    "audience_size": 50,
}


def rest_provider(handler) -> RestEventProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestEventProvider(BASE_URL, client=client)


class TestNextTimestamp:
    """Tests for the strictly increasing modification stamp."""

    def test_without_previous(self):
        assert next_timestamp(None).tzinfo is not None

    def test_later_than_future_previous(self):
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        assert next_timestamp(future) > future

    def test_naive_previous_treated_as_utc(self):
        previous = datetime(2020, 1, 1)
        assert next_timestamp(previous) > previous.replace(tzinfo=timezone.utc)


class TestLocalEventProvider:
    """Tests for the mirror-backed provider."""

    async def test_create_assigns_identity_and_timestamps(self, mirror: EventMirror):
        provider = LocalEventProvider(mirror)
        event = await provider.create_event(EventCreate(event_name="Picnic"), "u1")

        assert event.id
        assert event.user_id == "u1"
        assert event.created_at is not None
        assert mirror.find(event.id)["event_name"] == "Picnic"

    async def test_list_skips_malformed_records(self, mirror: EventMirror):
        mirror.save([{"id": "ok"}, {"id": "bad", "audience_size": -5}])
        events = await LocalEventProvider(mirror).list_events()
        assert [e.id for e in events] == ["ok"]

    async def test_get_unknown_returns_none(self, mirror: EventMirror):
        assert await LocalEventProvider(mirror).get_event("missing") is None

    async def test_update_unknown_raises(self, mirror: EventMirror):
        with pytest.raises(EventNotFoundError):
            await LocalEventProvider(mirror).update_event("missing", EventUpdate(city="X"))

    async def test_update_keeps_owner_and_creation_time(self, mirror: EventMirror):
        provider = LocalEventProvider(mirror)
        created = await provider.create_event(EventCreate(event_name="Picnic"), "u1")

        updated = await provider.update_event(created.id, EventUpdate(city="Porto"))

        assert updated.user_id == "u1"
        assert updated.created_at == created.created_at
        assert updated.city == "Porto"
        assert updated.updated_at > created.updated_at

    async def test_delete_unknown_is_noop(self, mirror: EventMirror):
        mirror.save([{"id": "keep"}])
        await LocalEventProvider(mirror).delete_event("missing")
        assert mirror.load() == [{"id": "keep"}]


class TestRestEventProvider:
    """Tests for the REST provider against a mocked transport."""

    async def test_probe_succeeds_on_ok_response(self):
        provider = rest_provider(lambda request: httpx.Response(200, json={"data": []}))
        assert await provider.probe() is True

    async def test_probe_fails_on_error_status(self):
        provider = rest_provider(lambda request: httpx.Response(503))
        assert await provider.probe() is False

    async def test_probe_fails_when_unreachable(self):
        client = httpx.AsyncClient(transport=refusing_transport())
        assert await RestEventProvider(BASE_URL, client=client).probe() is False

    async def test_probe_hits_events_endpoint(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            return httpx.Response(200, json={"data": []})

        await rest_provider(handler).probe()
        assert seen == [("GET", f"{BASE_URL}/events")]

    async def test_list_unwraps_envelope(self):
        provider = rest_provider(
            lambda request: httpx.Response(200, json={"data": [EVENT_PAYLOAD]})
        )
        events = await provider.list_events()
        assert [e.event_name for e in events] == ["Launch"]

    async def test_list_with_null_data_is_empty(self):
        provider = rest_provider(lambda request: httpx.Response(200, json={"data": None}))
        assert await provider.list_events() == []

    async def test_get_unknown_returns_none(self):
        provider = rest_provider(lambda request: httpx.Response(404, json={}))
        assert await provider.get_event("missing") is None

    async def test_update_sends_partial_body(self):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(200, json={"data": {**EVENT_PAYLOAD, "city": "Oslo"}})

        event = await rest_provider(handler).update_event("e1", EventUpdate(city="Oslo"))
        assert event.city == "Oslo"
        assert [json.loads(body) for body in bodies] == [{"city": "Oslo"}]

    async def test_update_unknown_raises_not_found(self):
        provider = rest_provider(lambda request: httpx.Response(404, json={}))
        with pytest.raises(EventNotFoundError):
            await provider.update_event("missing", EventUpdate(city="X"))

    async def test_server_error_raises_provider_error(self):
        provider = rest_provider(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(ProviderError) as exc_info:
            await provider.list_events()
        assert exc_info.value.status_code == 500
        assert exc_info.value.response_body == "boom"

    async def test_transport_error_raises_provider_error(self):
        client = httpx.AsyncClient(transport=refusing_transport())
        provider = RestEventProvider(BASE_URL, client=client)
        with pytest.raises(ProviderError):
            await provider.delete_event("e1")

    async def test_non_json_body_raises_provider_error(self):
        provider = rest_provider(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderError):
            await provider.list_events()

    async def test_create_sends_owner(self):
        bodies = []

        def handler(request):
            bodies.append(request.read())
            return httpx.Response(201, json={"data": EVENT_PAYLOAD})

        event = await rest_provider(handler).create_event(
            EventCreate(event_name="Launch"), USER_ID
        )
        assert event.id == "e1"
        assert json.loads(bodies[0])["user_id"] == USER_ID

    async def test_injected_client_not_closed(self):
        client = httpx.AsyncClient(transport=refusing_transport())
        async with RestEventProvider(BASE_URL, client=client):
            pass
        assert client.is_closed is False
        await client.aclose()


class TestDatabaseEventProvider:
    """Tests for the relational store provider (in-memory SQLite)."""

    async def test_create_assigns_id_and_timestamps(self, database):
        provider = DatabaseEventProvider()
        event = await provider.create_event(
            EventCreate(event_name="Launch", audience_size=50), USER_ID
        )

        assert event.id
        assert event.user_id == USER_ID
        assert event.audience_size == 50
        assert event.created_at is not None
        assert event.updated_at is not None

    async def test_ids_are_unique(self, database):
        provider = DatabaseEventProvider()
        first = await provider.create_event(EventCreate(), USER_ID)
        second = await provider.create_event(EventCreate(), USER_ID)
        assert first.id != second.id

    async def test_get_and_list(self, database):
        provider = DatabaseEventProvider()
        created = await provider.create_event(EventCreate(event_name="Gala"), USER_ID)

        assert await provider.get_event(created.id) == created
        assert [e.id for e in await provider.list_events()] == [created.id]
        assert await provider.get_event("missing") is None

    async def test_update_applies_patch_only(self, database):
        provider = DatabaseEventProvider()
        created = await provider.create_event(
            EventCreate(event_name="Gala", city="Rome"), USER_ID
        )

        updated = await provider.update_event(created.id, EventUpdate(city="Milan"))

        assert updated.city == "Milan"
        assert updated.event_name == "Gala"
        assert updated.user_id == USER_ID

    async def test_update_unknown_raises(self, database):
        with pytest.raises(EventNotFoundError):
            await DatabaseEventProvider().update_event("missing", EventUpdate(city="X"))

    async def test_delete_unknown_raises(self, database):
        with pytest.raises(EventNotFoundError):
            await DatabaseEventProvider().delete_event("missing")

    async def test_delete_cascades_to_content(self, database):
        provider = DatabaseEventProvider()
        event = await provider.create_event(EventCreate(event_name="Gala"), USER_ID)
        contents = DatabaseContentStore()
        content = await contents.create_content(
            {"event_id": event.id, "user_id": USER_ID, "prompt": "Plan it"}
        )

        await provider.delete_event(event.id)

        assert await provider.get_event(event.id) is None
        async with get_db() as session:
            assert await session.get(ContentRow, content.id) is None

    async def test_uninitialized_database_raises_provider_error(self):
        with pytest.raises(ProviderError) as exc_info:
            await DatabaseEventProvider().list_events()
        assert exc_info.value.provider == "database"

    async def test_connection_failure_raises_provider_error(self):
        @asynccontextmanager
        async def unreachable():
            raise ConnectionRefusedError("Connection refused")
            yield

        with pytest.raises(ProviderError):
            await DatabaseEventProvider(session_factory=unreachable).get_event("e1")
        with pytest.raises(ProviderError):
            await DatabaseContentStore(session_factory=unreachable).list_content()
