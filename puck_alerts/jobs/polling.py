"""Adaptive polling scheduler.

Each tick decides what to fetch:

- Watching: someone is viewing a game. Fetch its landing, play-by-play,
  boxscore and shift chart together, publish them to the live state and
  diff them. A finished game is not fetched again.
- BackgroundLive: nobody is watching, but teams with enabled rules have
  live games. Fetch landing + play-by-play for each and diff.
- Idle: nothing to do but the periodic checks.

The live-game, upcoming-game and retention checks run on their own timers
within the same loop. A failing tick is logged and followed by a cool-down;
the loop only ends when ``stop()`` is called or the task is cancelled.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from enum import Enum
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import PollingConfig, RetentionConfig, WebhookConfig, settings
from ..db import session_scope
from ..live.nhl_client import NHLSnapshotClient
from ..logging import logger
from ..models.snapshots import LIVE_STATES, UPCOMING_STATES, ScheduleGame
from ..persistence.rules import get_teams_with_enabled_rules
from ..services.event_processing import EventProcessor
from ..state.game_state import LiveGameState
from ..utils.datetime_utils import now_utc
from .retention import run_retention

T = TypeVar("T")


class SchedulerMode(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"
    BACKGROUND_LIVE = "background_live"


def choose_interval(
    watching: bool,
    terminal: bool,
    background_count: int,
    active_seconds: float = 3.0,
    idle_seconds: float = 30.0,
) -> float:
    """Seconds until the next tick.

    Short while a watched game is in progress or any subscribed team is
    live; long otherwise.
    """
    if (watching and not terminal) or background_count > 0:
        return active_seconds
    return idle_seconds


class PollingScheduler:
    def __init__(
        self,
        client: NHLSnapshotClient,
        state: LiveGameState,
        processor: EventProcessor,
        session_factory: async_sessionmaker[AsyncSession],
        config: PollingConfig | None = None,
        webhook_config: WebhookConfig | None = None,
        retention_config: RetentionConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = now_utc,
    ) -> None:
        self._client = client
        self._state = state
        self._processor = processor
        self._session_factory = session_factory
        self._config = config or settings.polling
        self._webhook_config = webhook_config or settings.webhooks
        self._retention_config = retention_config or settings.retention
        self._clock = clock
        self._now = now
        self._stop = asyncio.Event()
        # team abbreviation -> live game id, for teams with enabled rules
        self.background_games: dict[str, int] = {}
        self._last_live_check: float | None = None
        self._last_upcoming_check: float | None = None
        self._last_cleanup: float | None = None

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def mode(self) -> SchedulerMode:
        snapshot = self._state.snapshot
        if snapshot.active_viewers > 0 and snapshot.current_game_id is not None:
            return SchedulerMode.WATCHING
        if self.background_games:
            return SchedulerMode.BACKGROUND_LIVE
        return SchedulerMode.IDLE

    async def run(self) -> None:
        logger.info("polling_scheduler_started")
        try:
            while not self._stop.is_set():
                try:
                    stopped, interval = await self._until_stopped(self.tick())
                except Exception as exc:
                    logger.exception("polling_tick_error", error=str(exc))
                    stopped, interval = False, self._config.error_cooldown_seconds
                if stopped or await self._wait(interval):
                    break
        finally:
            logger.info("polling_scheduler_stopped")

    async def tick(self) -> float:
        """Run one scheduling iteration and return the delay before the next."""
        if self._due(self._last_live_check, self._config.live_game_check_interval_seconds):
            await self.check_live_games()
            self._last_live_check = self._clock()

        if self._due(self._last_upcoming_check, self._config.upcoming_game_check_interval_seconds):
            await self.check_upcoming_games()
            self._last_upcoming_check = self._clock()

        if self._due(self._last_cleanup, self._config.cleanup_interval_seconds):
            await run_retention(self._processor, self._session_factory, self._retention_config, self._now())
            self._last_cleanup = self._clock()

        mode = self.mode()
        watching = mode is SchedulerMode.WATCHING
        if watching:
            if self._state.is_terminal:
                logger.debug("watched_game_final", game_id=self._state.current_game_id)
                # Nothing left to fetch for the watched game; subscribed teams still get served
                if self.background_games:
                    await self.poll_background_games()
            else:
                await self.poll_watched_game()
        elif mode is SchedulerMode.BACKGROUND_LIVE:
            await self.poll_background_games()

        return choose_interval(
            watching,
            self._state.is_terminal,
            len(self.background_games),
            self._config.active_interval_seconds,
            self._config.idle_interval_seconds,
        )

    async def poll_watched_game(self) -> None:
        game_id = self._state.current_game_id
        if game_id is None:
            return

        if self._state.is_live:
            self._client.invalidate_live_game(game_id)

        landing, play_by_play, boxscore, shift_chart = await asyncio.gather(
            self._client.get_landing(game_id),
            self._client.get_play_by_play(game_id),
            self._client.get_boxscore(game_id),
            self._client.get_shift_chart(game_id),
        )
        if not self._state.update_all(landing, play_by_play, boxscore, shift_chart, game_id=game_id):
            return

        if landing is not None and play_by_play is not None:
            await self._processor.process_game_events(game_id, play_by_play, landing)

        logger.debug(
            "watched_game_updated",
            game_id=game_id,
            game_state=landing.game_state if landing else None,
            away_score=landing.away_team.score if landing else None,
            home_score=landing.home_team.score if landing else None,
        )

    async def poll_background_games(self) -> None:
        finished: set[int] = set()
        # Two subscribed teams can share one game; fetch it once
        for game_id in sorted(set(self.background_games.values())):
            try:
                self._client.invalidate_live_game(game_id)
                landing, play_by_play = await asyncio.gather(
                    self._client.get_landing(game_id),
                    self._client.get_play_by_play(game_id),
                )
                if landing is None or play_by_play is None:
                    logger.warning("background_game_fetch_incomplete", game_id=game_id)
                    continue

                await self._processor.process_game_events(game_id, play_by_play, landing)
                if landing.is_terminal:
                    finished.add(game_id)
            except Exception as exc:
                logger.warning("background_game_poll_error", game_id=game_id, error=str(exc))

        for team, game_id in list(self.background_games.items()):
            if game_id in finished:
                logger.info("background_game_finished", team=team, game_id=game_id)
                del self.background_games[team]

    async def check_live_games(self) -> None:
        """Refresh the team -> live game map for teams with enabled rules."""
        teams = await self._teams_with_rules()
        if not teams:
            if self.background_games:
                logger.info("background_games_cleared", teams=sorted(self.background_games))
            self.background_games.clear()
            return

        season = self._client.current_season()
        stale = set(self.background_games)
        for team in teams:
            schedule = await self._client.get_team_schedule(team, season, refresh=True)
            if schedule is None:
                continue
            live = next((g for g in schedule.games if g.game_state in LIVE_STATES), None)
            if live is None:
                continue
            stale.discard(team)
            if self.background_games.get(team) != live.id:
                logger.info("background_game_added", team=team, game_id=live.id)
                self.background_games[team] = live.id

        for team in stale:
            logger.info("background_game_removed", team=team, game_id=self.background_games[team])
            del self.background_games[team]

    async def check_upcoming_games(self) -> None:
        """Send pre-game reminders for games starting within the reminder window."""
        teams = await self._teams_with_rules()
        if not teams:
            return

        now = self._now()
        window_end = now + timedelta(minutes=self._webhook_config.pre_game_reminder_minutes)
        season = self._client.current_season()
        upcoming: dict[int, tuple[ScheduleGame, list[str]]] = {}
        for team in teams:
            schedule = await self._client.get_team_schedule(team, season)
            if schedule is None:
                continue
            for game in schedule.games:
                start = game.start_time_utc
                if game.game_state not in UPCOMING_STATES or start is None:
                    continue
                if now <= start <= window_end:
                    upcoming.setdefault(game.id, (game, []))[1].append(team)

        for game, subscribed in upcoming.values():
            if await self._processor.notify_starting_soon(game, subscribed, now):
                logger.info("pre_game_reminder_sent", game_id=game.id, teams=subscribed)

    async def _teams_with_rules(self) -> list[str]:
        async with session_scope(self._session_factory) as session:
            return await get_teams_with_enabled_rules(session)

    def _due(self, last_run: float | None, interval: float) -> bool:
        return last_run is None or self._clock() - last_run >= interval

    async def _wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _until_stopped(self, work: Awaitable[T]) -> tuple[bool, T | None]:
        """Run ``work`` unless stop is requested first, in which case cancel it."""
        task = asyncio.ensure_future(work)
        stopper = asyncio.ensure_future(self._stop.wait())
        try:
            await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            stopper.cancel()
        if task.done():
            return False, task.result()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return True, None
