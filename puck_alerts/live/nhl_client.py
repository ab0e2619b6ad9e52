"""Async client for the NHL snapshot API (api-web.nhle.com).

Every read goes through a two-tier TTL cache: rosters, schedules and
standings are held for hours, per-game live resources for seconds. A failed
fetch (non-200, transport error, malformed body) is logged and returns
``None``; nothing is cached in that case.
"""

from __future__ import annotations

from typing import TypeVar

import httpx
from pydantic import BaseModel

from ..config import NhlApiConfig, settings
from ..logging import logger
from ..models.snapshots import (
    Boxscore,
    GameLanding,
    PlayByPlay,
    Roster,
    Scoreboard,
    ShiftChart,
    Standings,
    TeamSchedule,
)
from ..utils.cache import TTLCache
from ..utils.datetime_utils import current_season
from .nhl_constants import (
    BOXSCORE_CACHE_KEY,
    LANDING_CACHE_KEY,
    LIVE_GAME_CACHE_KEYS,
    NHL_BOXSCORE_PATH,
    NHL_LANDING_PATH,
    NHL_PBP_PATH,
    NHL_ROSTER_PATH,
    NHL_SCOREBOARD_PATH,
    NHL_SHIFTCHART_PATH,
    NHL_STANDINGS_PATH,
    NHL_TEAM_SCHEDULE_PATH,
    PBP_CACHE_KEY,
    SHIFTCHART_CACHE_KEY,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class NHLSnapshotClient:
    """Cached reads of landing, play-by-play, boxscore, shift chart and team data."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        cache: TTLCache | None = None,
        config: NhlApiConfig | None = None,
    ) -> None:
        self._config = config or settings.nhl_api
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.request_timeout_seconds,
            headers={"User-Agent": self._config.user_agent},
        )
        self._cache = cache or TTLCache()

    async def __aenter__(self) -> NHLSnapshotClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # Per-game live tier

    async def get_landing(self, game_id: int) -> GameLanding | None:
        return await self._get_cached(
            LANDING_CACHE_KEY.format(game_id=game_id),
            NHL_LANDING_PATH.format(game_id=game_id),
            GameLanding,
            self._config.live_ttl_seconds,
        )

    async def get_play_by_play(self, game_id: int) -> PlayByPlay | None:
        return await self._get_cached(
            PBP_CACHE_KEY.format(game_id=game_id),
            NHL_PBP_PATH.format(game_id=game_id),
            PlayByPlay,
            self._config.live_ttl_seconds,
        )

    async def get_boxscore(self, game_id: int) -> Boxscore | None:
        return await self._get_cached(
            BOXSCORE_CACHE_KEY.format(game_id=game_id),
            NHL_BOXSCORE_PATH.format(game_id=game_id),
            Boxscore,
            self._config.live_ttl_seconds,
        )

    async def get_shift_chart(self, game_id: int) -> ShiftChart | None:
        return await self._get_cached(
            SHIFTCHART_CACHE_KEY.format(game_id=game_id),
            NHL_SHIFTCHART_PATH.format(game_id=game_id),
            ShiftChart,
            self._config.live_ttl_seconds,
        )

    async def get_scoreboard(self) -> Scoreboard | None:
        return await self._get_cached(
            "scoreboard_now",
            NHL_SCOREBOARD_PATH,
            Scoreboard,
            self._config.live_ttl_seconds,
        )

    # Static tier

    async def get_team_schedule(
        self,
        team_abbrev: str,
        season: int | None = None,
        refresh: bool = False,
    ) -> TeamSchedule | None:
        """Full season schedule for one club; ``season`` defaults to the current one.

        ``refresh`` skips the cached copy (game states inside it go stale long
        before the static TTL runs out) and stores the fresh response.
        """
        season = season or self.current_season()
        cache_key = f"schedule_{team_abbrev}_{season}"
        if refresh:
            self._cache.invalidate([cache_key])
        return await self._get_cached(
            cache_key,
            NHL_TEAM_SCHEDULE_PATH.format(team=team_abbrev, season=season),
            TeamSchedule,
            self._config.static_ttl_seconds,
        )

    async def get_standings(self) -> Standings | None:
        return await self._get_cached(
            "standings_now",
            NHL_STANDINGS_PATH,
            Standings,
            self._config.static_ttl_seconds,
        )

    async def get_roster(self, team_abbrev: str) -> Roster | None:
        return await self._get_cached(
            f"roster_{team_abbrev}",
            NHL_ROSTER_PATH.format(team=team_abbrev),
            Roster,
            self._config.static_ttl_seconds,
        )

    def invalidate_live_game(self, game_id: int) -> None:
        """Drop cached landing, play-by-play, boxscore and shift chart for one game."""
        removed = self._cache.invalidate(key.format(game_id=game_id) for key in LIVE_GAME_CACHE_KEYS)
        if removed:
            logger.debug("nhl_live_cache_invalidated", game_id=game_id, removed=removed)

    @staticmethod
    def current_season() -> int:
        return current_season()

    async def _get_cached(
        self,
        cache_key: str,
        path: str,
        model: type[ModelT],
        ttl_seconds: float,
    ) -> ModelT | None:
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        logger.debug("nhl_api_fetch", path=path)
        try:
            response = await self.client.get(path)
        except httpx.HTTPError as exc:
            logger.error("nhl_api_fetch_error", path=path, error=str(exc))
            return None

        if response.status_code != 200:
            logger.warning(
                "nhl_api_fetch_failed",
                path=path,
                status=response.status_code,
                body=response.text[:200] if response.text else "",
            )
            return None

        try:
            parsed = model.model_validate(response.json())
        except ValueError as exc:
            # Covers both JSON decoding and pydantic validation errors
            logger.error("nhl_api_parse_error", path=path, model=model.__name__, error=str(exc)[:500])
            return None

        self._cache.put(cache_key, parsed, ttl_seconds)
        return parsed
