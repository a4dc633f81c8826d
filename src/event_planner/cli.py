"""Command-line interface for the event planner."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from event_planner.config import Settings, get_settings
from event_planner.database.connection import close_db, create_tables, init_db
from event_planner.providers.base import EventPlannerError
from event_planner.services.event_service import build_event_service
from event_planner.storage.identity import IdentityResolver
from event_planner.storage.local import FileStorage, MemoryStorage, StorageError

logger = logging.getLogger(__name__)

# CLI option -> event field
EVENT_FIELD_OPTIONS = {
    "name": "event_name",
    "type": "event_type",
    "description": "description",
    "date": "date",
    "time": "time",
    "location": "location",
    "city": "city",
    "venue_type": "venue_type",
    "audience_size": "audience_size",
    "duration": "duration",
}


def _add_event_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", help="Event name")
    parser.add_argument("--type", help="Event type (conference, wedding, ...)")
    parser.add_argument("--description", help="Free-text description")
    parser.add_argument("--date", help="Date (YYYY-MM-DD)")
    parser.add_argument("--time", help="Time of day (HH:MM)")
    parser.add_argument("--location", help="Venue or address")
    parser.add_argument("--city", help="City")
    parser.add_argument("--venue-type", dest="venue_type", help="Venue type")
    parser.add_argument(
        "--audience-size", dest="audience_size", type=int, help="Expected attendees"
    )
    parser.add_argument("--duration", help="Duration, e.g. '3 hours'")


def _event_fields(args: argparse.Namespace) -> dict[str, Any]:
    return {
        field_name: getattr(args, option)
        for option, field_name in EVENT_FIELD_OPTIONS.items()
        if getattr(args, option) is not None
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="event-planner",
        description="Smart Event Planner - manage events online or offline",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List events")

    get_parser = subparsers.add_parser("get", help="Show one event")
    get_parser.add_argument("event_id", help="Event identifier")

    create_parser = subparsers.add_parser("create", help="Create an event")
    _add_event_fields(create_parser)

    update_parser = subparsers.add_parser("update", help="Update fields of an event")
    update_parser.add_argument("event_id", help="Event identifier")
    _add_event_fields(update_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete an event")
    delete_parser.add_argument("event_id", help="Event identifier")

    login_parser = subparsers.add_parser(
        "login", help="Remember the signed-in user on this device"
    )
    login_parser.add_argument("user_id", help="User identifier from the auth provider")
    login_parser.add_argument("--email", help="User email")

    subparsers.add_parser("logout", help="Forget the signed-in user")

    subparsers.add_parser("init-db", help="Create database tables (development)")

    serve_parser = subparsers.add_parser("serve", help="Run the REST backend")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")

    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


async def _run_event_command(args: argparse.Namespace, settings: Settings) -> int:
    await init_db(settings)
    try:
        async with build_event_service(settings) as service:
            if args.command == "list":
                events = await service.list_events()
                _print_json([event.to_record() for event in events])
            elif args.command == "get":
                event = await service.get_event(args.event_id)
                if event is None:
                    print(f"Event not found: {args.event_id}", file=sys.stderr)
                    return 1
                _print_json(event.to_record())
            elif args.command == "create":
                event = await service.create_event(_event_fields(args))
                _print_json(event.to_record())
            elif args.command == "update":
                event = await service.update_event(args.event_id, _event_fields(args))
                _print_json(event.to_record())
            elif args.command == "delete":
                await service.delete_event(args.event_id)
                print(f"Deleted {args.event_id}")
    finally:
        await close_db()
    return 0


async def _init_db(settings: Settings) -> int:
    await init_db(settings)
    try:
        await create_tables()
    finally:
        await close_db()
    print("Database tables created")
    return 0


def _identity(settings: Settings) -> IdentityResolver:
    return IdentityResolver(
        MemoryStorage(),
        FileStorage(settings.storage_dir),
        key=settings.identity_storage_key,
    )


def _login(args: argparse.Namespace, settings: Settings) -> int:
    user = {"id": args.user_id}
    if args.email:
        user["email"] = args.email
    _identity(settings).remember(user)
    print(f"Signed in as {args.user_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init-db":
        return asyncio.run(_init_db(settings))

    if args.command == "serve":
        import uvicorn

        from event_planner.api import create_app

        uvicorn.run(
            create_app(),
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
        return 0

    try:
        if args.command == "login":
            return _login(args, settings)
        if args.command == "logout":
            _identity(settings).forget()
            print("Signed out")
            return 0
        return asyncio.run(_run_event_command(args, settings))
    except (EventPlannerError, StorageError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
