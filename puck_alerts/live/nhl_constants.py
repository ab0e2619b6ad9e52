"""Constants for NHL snapshot fetching and event mapping.

Contains API endpoint paths, cache keys and play type codes.
"""

from __future__ import annotations

# Endpoint paths, relative to settings.nhl_api.base_url
NHL_LANDING_PATH = "/v1/gamecenter/{game_id}/landing"
NHL_PBP_PATH = "/v1/gamecenter/{game_id}/play-by-play"
NHL_BOXSCORE_PATH = "/v1/gamecenter/{game_id}/boxscore"
NHL_SHIFTCHART_PATH = "/v1/gamecenter/{game_id}/shiftchart"
NHL_TEAM_SCHEDULE_PATH = "/v1/club-schedule-season/{team}/{season}"
NHL_STANDINGS_PATH = "/v1/standings/now"
NHL_ROSTER_PATH = "/v1/roster/{team}/current"
NHL_SCOREBOARD_PATH = "/v1/score/now"

# Cache keys; the four per-game live keys are what invalidation drops
LANDING_CACHE_KEY = "landing_{game_id}"
PBP_CACHE_KEY = "playbyplay_{game_id}"
BOXSCORE_CACHE_KEY = "boxscore_{game_id}"
SHIFTCHART_CACHE_KEY = "shiftchart_{game_id}"
LIVE_GAME_CACHE_KEYS = (
    LANDING_CACHE_KEY,
    PBP_CACHE_KEY,
    BOXSCORE_CACHE_KEY,
    SHIFTCHART_CACHE_KEY,
)

# Play typeCode values the event pipeline reacts to
TYPE_CODE_GOAL = 505
TYPE_CODE_PENALTY = 509
TYPE_CODE_PERIOD_START = 520
TYPE_CODE_PERIOD_END = 521
TYPE_CODE_GAME_END = 524

# periodDescriptor.periodType values
PERIOD_TYPE_OVERTIME = "OT"
PERIOD_TYPE_SHOOTOUT = "SO"
