"""
Run the puck-alerts poller.

Usage:
    python -m puck_alerts [--create-tables] [--watch GAME_ID]

Runs until SIGINT/SIGTERM. ``--watch`` registers a headless viewer for one
game so it is polled at the active cadence and published to the live state.
"""

from __future__ import annotations

import argparse
import asyncio
import signal

from .db import create_all, dispose_engine, get_session_factory
from .jobs.polling import PollingScheduler
from .live.nhl_client import NHLSnapshotClient
from .logging import logger
from .services.dispatch import WebhookDispatcher
from .services.event_processing import EventProcessor
from .state.game_state import LiveGameState


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="puck-alerts", description="NHL live game webhook notifier")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before starting (development only)",
    )
    parser.add_argument("--watch", type=int, metavar="GAME_ID", help="Watch one game as if a viewer were present")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> None:
    if args.create_tables:
        await create_all()

    session_factory = get_session_factory()
    state = LiveGameState()
    client = NHLSnapshotClient()
    dispatcher = WebhookDispatcher(session_factory)
    processor = EventProcessor(session_factory, dispatcher)
    scheduler = PollingScheduler(client, state, processor, session_factory)

    if args.watch:
        state.set_current_game(args.watch)
        state.register_viewer()
        logger.info("watching_game", game_id=args.watch)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scheduler.stop)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(scheduler.stop))

    try:
        await scheduler.run()
    finally:
        await client.aclose()
        await dispatcher.aclose()
        await dispose_engine()


def main(argv: list[str] | None = None) -> None:
    asyncio.run(run(_parse_args(argv)))


if __name__ == "__main__":
    main()
