"""
Salvo CLI - Command-line interface for the room server.

Usage:
    salvo serve [--host H] [--port P]   Run the HTTP/WebSocket server
    salvo rooms [--data-file F]         List rooms in the persisted table
"""

import argparse
import logging
import sys

from .config import Settings


def main():
    """Main CLI entry point."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="Salvo - Two-player Battleship room server",
        prog="salvo",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the server")
    serve_parser.add_argument("--host", default=settings.host, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    serve_parser.add_argument("--data-file", default=settings.data_file, help="Room table file")

    # Rooms command
    rooms_parser = subparsers.add_parser("rooms", help="List persisted rooms")
    rooms_parser.add_argument("--data-file", default=settings.data_file, help="Room table file")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args, settings)
    elif args.command == "rooms":
        cmd_rooms(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args, settings: Settings):
    """Run the server under uvicorn."""
    import uvicorn
    from .api.app import create_app

    settings.host = args.host
    settings.port = args.port
    settings.data_file = args.data_file

    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=args.log_level.lower())


def cmd_rooms(args):
    """List rooms in the persisted table."""
    from .session import JsonFileStore
    from .engine_core import Room

    store = JsonFileStore(args.data_file)
    records = store.load_all()
    if not records:
        print(f"No rooms in {args.data_file}")
        return

    for room_id, data in sorted(records.items()):
        try:
            room = Room.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            print(f"{room_id}: unreadable ({e})")
            continue
        winner = f" winner={room.winner}" if room.winner is not None else ""
        print(
            f"{room.room_id}: {room.status.value} "
            f"players={len(room.occupied_slots())} shots={room.shot_count}{winner}"
        )


if __name__ == "__main__":
    main()
