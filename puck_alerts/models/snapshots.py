"""Pydantic models for api-web.nhle.com snapshot resources.

Only the fields the service reads are declared; the rest of each payload is
kept (``extra="allow"``) so a snapshot can be handed on unchanged.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Loosely typed upstream stat values (e.g. "35/60", 12, 0.583) decode to this
# closed variant; anything else fails validation.
StatValue = str | int | float | None

LIVE_STATES = frozenset({"LIVE", "CRIT"})
TERMINAL_STATES = frozenset({"FINAL", "OFF"})
UPCOMING_STATES = frozenset({"FUT", "PRE"})


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class LocalizedName(ApiModel):
    default: str = ""


class PeriodDescriptor(ApiModel):
    number: int = 1
    period_type: str = Field(default="REG", alias="periodType")


class GameClock(ApiModel):
    time_remaining: str = Field(default="20:00", alias="timeRemaining")
    seconds_remaining: int | None = Field(default=None, alias="secondsRemaining")
    running: bool = False
    in_intermission: bool = Field(default=False, alias="inIntermission")


class SituationTeam(ApiModel):
    abbrev: str = ""
    strength: int | None = None
    situation_descriptor: list[str] | str | None = Field(default=None, alias="situationDescriptor")


class GameSituation(ApiModel):
    home_team: SituationTeam | None = Field(default=None, alias="homeTeam")
    away_team: SituationTeam | None = Field(default=None, alias="awayTeam")
    situation_code: str | None = Field(default=None, alias="situationCode")
    time_remaining: str | None = Field(default=None, alias="timeRemaining")


class GameTeam(ApiModel):
    id: int
    abbrev: str
    score: int = 0
    sog: int | None = None
    name: LocalizedName | None = None


class TeamGameStat(ApiModel):
    category: str
    away_value: StatValue = Field(default=None, alias="awayValue")
    home_value: StatValue = Field(default=None, alias="homeValue")


class GameLanding(ApiModel):
    """``/v1/gamecenter/{id}/landing``"""

    id: int
    season: int | None = None
    game_type: int | None = Field(default=None, alias="gameType")
    game_date: str | None = Field(default=None, alias="gameDate")
    start_time_utc: datetime | None = Field(default=None, alias="startTimeUTC")
    game_state: str = Field(default="FUT", alias="gameState")
    period_descriptor: PeriodDescriptor | None = Field(default=None, alias="periodDescriptor")
    home_team: GameTeam = Field(alias="homeTeam")
    away_team: GameTeam = Field(alias="awayTeam")
    clock: GameClock | None = None
    situation: GameSituation | None = None
    team_game_stats: list[TeamGameStat] = Field(default_factory=list, alias="teamGameStats")

    @property
    def is_live(self) -> bool:
        return self.game_state in LIVE_STATES

    @property
    def is_terminal(self) -> bool:
        return self.game_state in TERMINAL_STATES


class PlayDetails(ApiModel):
    event_owner_team_id: int | None = Field(default=None, alias="eventOwnerTeamId")
    scoring_player_id: int | None = Field(default=None, alias="scoringPlayerId")
    assist1_player_id: int | None = Field(default=None, alias="assist1PlayerId")
    assist2_player_id: int | None = Field(default=None, alias="assist2PlayerId")
    committed_by_player_id: int | None = Field(default=None, alias="committedByPlayerId")
    drawn_by_player_id: int | None = Field(default=None, alias="drawnByPlayerId")
    shot_type: str | None = Field(default=None, alias="shotType")
    desc_key: str | None = Field(default=None, alias="descKey")
    duration: int | None = None
    home_score: int | None = Field(default=None, alias="homeScore")
    away_score: int | None = Field(default=None, alias="awayScore")
    x_coord: int | None = Field(default=None, alias="xCoord")
    y_coord: int | None = Field(default=None, alias="yCoord")
    zone_code: str | None = Field(default=None, alias="zoneCode")


class Play(ApiModel):
    event_id: int = Field(alias="eventId")
    type_code: int = Field(alias="typeCode")
    type_desc_key: str | None = Field(default=None, alias="typeDescKey")
    period_descriptor: PeriodDescriptor = Field(default_factory=PeriodDescriptor, alias="periodDescriptor")
    time_in_period: str | None = Field(default=None, alias="timeInPeriod")
    time_remaining: str | None = Field(default=None, alias="timeRemaining")
    situation_code: str | None = Field(default=None, alias="situationCode")
    sort_order: int | None = Field(default=None, alias="sortOrder")
    details: PlayDetails | None = None


class RosterSpot(ApiModel):
    team_id: int | None = Field(default=None, alias="teamId")
    player_id: int = Field(alias="playerId")
    first_name: LocalizedName = Field(default_factory=LocalizedName, alias="firstName")
    last_name: LocalizedName = Field(default_factory=LocalizedName, alias="lastName")
    sweater_number: int | None = Field(default=None, alias="sweaterNumber")
    position_code: str | None = Field(default=None, alias="positionCode")

    @property
    def full_name(self) -> str:
        return f"{self.first_name.default} {self.last_name.default}".strip()


class PlayByPlay(ApiModel):
    """``/v1/gamecenter/{id}/play-by-play``"""

    id: int
    game_state: str = Field(default="FUT", alias="gameState")
    home_team: GameTeam = Field(alias="homeTeam")
    away_team: GameTeam = Field(alias="awayTeam")
    plays: list[Play] = Field(default_factory=list)
    roster_spots: list[RosterSpot] = Field(default_factory=list, alias="rosterSpots")


class Boxscore(ApiModel):
    """``/v1/gamecenter/{id}/boxscore``; player stats stay as raw fields."""

    id: int
    game_state: str | None = Field(default=None, alias="gameState")


class ShiftChart(ApiModel):
    """``/v1/gamecenter/{id}/shiftchart``"""

    data: list[dict] = Field(default_factory=list)


class ScheduleTeam(ApiModel):
    id: int | None = None
    abbrev: str = ""


class ScheduleGame(ApiModel):
    id: int
    game_state: str = Field(default="FUT", alias="gameState")
    start_time_utc: datetime | None = Field(default=None, alias="startTimeUTC")
    home_team: ScheduleTeam = Field(default_factory=ScheduleTeam, alias="homeTeam")
    away_team: ScheduleTeam = Field(default_factory=ScheduleTeam, alias="awayTeam")


class TeamSchedule(ApiModel):
    """``/v1/club-schedule-season/{team}/{season}``"""

    games: list[ScheduleGame] = Field(default_factory=list)


class Roster(ApiModel):
    """``/v1/roster/{team}/current``"""

    forwards: list[dict] = Field(default_factory=list)
    defensemen: list[dict] = Field(default_factory=list)
    goalies: list[dict] = Field(default_factory=list)


class Standings(ApiModel):
    """``/v1/standings/now``"""

    standings: list[dict] = Field(default_factory=list)


class Scoreboard(ApiModel):
    """``/v1/score/now``"""

    games: list[dict] = Field(default_factory=list)
