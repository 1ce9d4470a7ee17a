"""Command-line interface for running a syncbeat relay, host or listener."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Sequence

import aioconsole

from aiosyncbeat.config import (
    DEFAULT_DRIFT_CHECK_INTERVAL,
    DEFAULT_DRIFT_THRESHOLD,
    DEFAULT_HOST_BROADCAST_INTERVAL,
    DEFAULT_JOIN_DELAY,
    RoomConfig,
)
from aiosyncbeat.discovery import RelayAdvertisement, RelayDiscovery
from aiosyncbeat.driver import SimulatedPlaybackDriver
from aiosyncbeat.room import Room
from aiosyncbeat.transport.relay import RelayServer, WebSocketTransport

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8927


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for syncbeat."""
    parser = argparse.ArgumentParser(description="Listen to music together in sync")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level to use",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    relay = commands.add_parser("relay", help="Run a relay forwarding room broadcasts")
    relay.add_argument("--host", default="0.0.0.0", help="Address to listen on")  # noqa: S104
    relay.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on")
    relay.add_argument(
        "--no-advertise",
        action="store_true",
        help="Do not announce the relay via mDNS",
    )

    host = commands.add_parser("host", help="Create and host a room")
    host.add_argument("--room", default=None, help="Room code to use, random if omitted")
    _add_member_arguments(host)

    join = commands.add_parser("join", help="Join a room as a listener")
    join.add_argument("room", help="Code of the room to join")
    _add_member_arguments(join)

    return parser.parse_args(argv)


def _add_member_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--url",
        default=None,
        help="WebSocket URL of the relay. If omitted, discover via mDNS.",
    )
    parser.add_argument("--name", default="syncbeat", help="Display name in the room")
    parser.add_argument(
        "--drift-threshold",
        type=float,
        default=DEFAULT_DRIFT_THRESHOLD,
        help="Seconds of drift tolerated before a listener seeks",
    )
    parser.add_argument(
        "--drift-interval",
        type=float,
        default=DEFAULT_DRIFT_CHECK_INTERVAL,
        help="Seconds between drift checks on a listener",
    )
    parser.add_argument(
        "--broadcast-interval",
        type=float,
        default=DEFAULT_HOST_BROADCAST_INTERVAL,
        help="Seconds between playback re-broadcasts of the host",
    )
    parser.add_argument(
        "--join-delay",
        type=float,
        default=DEFAULT_JOIN_DELAY,
        help="Seconds to wait after connecting before announcing a join",
    )
    parser.add_argument(
        "--track-length",
        type=float,
        default=180.0,
        help="Simulated length of tracks without a known duration",
    )


def build_config(args: argparse.Namespace) -> RoomConfig:
    """Create the room configuration from parsed arguments."""
    return RoomConfig(
        drift_threshold=args.drift_threshold,
        drift_check_interval=args.drift_interval,
        host_broadcast_interval=args.broadcast_interval,
        join_delay=args.join_delay,
    )


async def run_relay(args: argparse.Namespace) -> int:
    """Serve a relay until interrupted."""
    server = RelayServer()
    await server.start(args.host, args.port)
    advertisement = None if args.no_advertise else RelayAdvertisement(args.port)
    if advertisement is not None:
        await advertisement.start()
    _print_event(f"Relay running on port {args.port}")

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, stop.set)
    try:
        await stop.wait()
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        if advertisement is not None:
            await advertisement.stop()
        await server.stop()
    return 0


async def run_member(args: argparse.Namespace) -> int:
    """Host or join a room and run the keyboard loop."""
    try:
        config = build_config(args)
    except ValueError as err:
        _print_event(f"Invalid configuration: {err}")
        return 2

    discovery = RelayDiscovery()
    url = args.url
    if url is None:
        await discovery.start()
        logger.info("Waiting for mDNS discovery of a syncbeat relay...")
        _print_event("Searching for relay...")
        try:
            url = await discovery.wait_for_first_relay()
        except Exception:
            logger.exception("Failed to discover relay")
            await discovery.stop()
            return 1
        _print_event(f"Found relay at {url}")

    loop = asyncio.get_running_loop()
    driver = SimulatedPlaybackDriver(loop=loop, default_duration=args.track_length)
    room = Room(WebSocketTransport(url), driver, config=config)

    try:
        if args.command == "host":
            code = await room.create(args.name, room_id=args.room)
            _print_event(f"Hosting room {code}")
        else:
            await room.join(args.room, args.name)
            _print_event(f"Joined room {args.room}")
    except Exception:
        logger.exception("Could not connect to relay at %s", url)
        await discovery.stop()
        return 1

    _print_instructions(room)
    keyboard_task = asyncio.create_task(_keyboard_loop(room))
    watch_task = asyncio.create_task(_watch_room(room))
    loop.add_signal_handler(signal.SIGINT, keyboard_task.cancel)
    try:
        await keyboard_task
    except asyncio.CancelledError:  # pragma: no cover - cancellation path
        logger.debug("Keyboard loop cancelled")
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        watch_task.cancel()
        await room.leave()
        await discovery.stop()
    return 0


async def _watch_room(room: Room) -> None:
    """Print a line whenever the playing track or play state changes."""
    last: tuple[str | None, bool] | None = None
    while room.active:
        cursor = room.cursor
        current = (cursor.current_track_id, cursor.is_playing)
        if current != last:
            last = current
            track = room.current_track
            if track is None:
                _print_event("Nothing playing")
            else:
                status = "Playing" if cursor.is_playing else "Paused"
                _print_event(f"{status}: {track.title} (added by {track.added_by})")
        await asyncio.sleep(0.5)


async def _keyboard_loop(room: Room) -> None:
    while True:
        try:
            line = await aioconsole.ainput()
        except EOFError:
            break
        parts = line.strip().split(maxsplit=1)
        if not parts:
            continue
        keyword = parts[0].lower()
        argument = parts[1] if len(parts) > 1 else ""
        if keyword in {"quit", "exit", "q"}:
            break
        if keyword == "add" and argument:
            track = room.add_track(argument)
            _print_event(f"Queued {track.title} [{track.id}]")
        elif keyword in {"rm", "remove"} and argument:
            if not room.remove_track(argument):
                _print_event("Cannot remove that track")
        elif keyword in {"toggle", "p"}:
            room.toggle_play()
        elif keyword in {"next", "n"}:
            room.next_track()
        elif keyword == "play" and argument:
            if not room.play_track(argument):
                _print_event("Cannot play that track")
        elif keyword == "seek" and argument:
            _handle_seek(room, argument)
        elif keyword == "queue":
            _print_event(_describe_queue(room))
        elif keyword == "members":
            _print_event(_describe_members(room))
        elif keyword == "sync":
            room.request_sync()
        else:
            _print_event("Unknown command")


def _handle_seek(room: Room, argument: str) -> None:
    try:
        seconds = float(argument)
    except ValueError:
        _print_event("Invalid position")
        return
    room.seek(seconds)


def _describe_queue(room: Room) -> str:
    queue = room.queue
    if not queue:
        return "Queue is empty"
    current_id = room.cursor.current_track_id
    lines = []
    for index, track in enumerate(queue, start=1):
        marker = ">" if track.id == current_id else " "
        lines.append(f"{marker} {index:>2}. {track.title} [{track.id}] by {track.added_by}")
    return "\n".join(lines)


def _describe_members(room: Room) -> str:
    return "\n".join(
        f"{member.display_name}{' (host)' if member.is_host else ''}" for member in room.members
    )


def _print_event(message: str) -> None:
    print(message, flush=True)  # noqa: T201


def _print_instructions(room: Room) -> None:
    if room.is_host:
        commands = (
            "add <url>, rm <id>, toggle(p), next(n), play <id>, seek <s>, queue, members, quit(q)"
        )
    else:
        commands = "add <url>, rm <id>, queue, members, sync, quit(q)"
    _print_event(f"Commands: {commands}")


async def main_async(argv: Sequence[str] | None = None) -> int:
    """Entry point executing the asynchronous CLI workflow."""
    args = parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=getattr(logging, args.log_level))
    if args.command == "relay":
        return await run_relay(args)
    return await run_member(args)


def main() -> int:
    """Run the CLI."""
    return asyncio.run(main_async(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
