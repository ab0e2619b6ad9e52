"""Domain events and outbound webhook payload models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..utils.datetime_utils import now_utc


class EventType(str, Enum):
    """Game occurrences a webhook rule can subscribe to."""

    GoalScored = "GoalScored"
    PenaltyCommitted = "PenaltyCommitted"
    PowerPlayStart = "PowerPlayStart"
    PowerPlayEnd = "PowerPlayEnd"
    GoaliePulled = "GoaliePulled"
    GoalieReturned = "GoalieReturned"
    PeriodStart = "PeriodStart"
    PeriodEnd = "PeriodEnd"
    GameEnd = "GameEnd"
    GameStart = "GameStart"
    TeamWin = "TeamWin"
    TeamLoss = "TeamLoss"
    OvertimeStart = "OvertimeStart"
    ShootoutStart = "ShootoutStart"
    GameStartingSoon = "GameStartingSoon"


class PayloadFormat(str, Enum):
    Generic = "Generic"
    Discord = "Discord"
    HomeAssistant = "HomeAssistant"


@dataclass(frozen=True)
class EventDetails:
    team: str | None = None
    player: str | None = None
    jersey_number: int | None = None
    assists: tuple[str, ...] | None = None
    goal_type: str | None = None
    penalty_type: str | None = None
    penalty_minutes: int | None = None
    strength: str | None = None


@dataclass(frozen=True)
class DomainEvent:
    """One semantically typed occurrence in a game.

    ``event_key`` is the dedup identity within the game: ``"{eventId}_{typeCode}"``
    for plays, a derived key (``pp_TOR_2_10:00``, ``team_win``...) for
    synthetic events. ``teams`` lists the abbreviations whose rules should
    receive the event.
    """

    event_type: EventType
    game_id: int
    event_key: str
    period: int
    time_in_period: str | None
    home_team: str
    away_team: str
    home_score: int
    away_score: int
    teams: tuple[str, ...]
    details: EventDetails = field(default_factory=EventDetails)
    occurred_at: datetime = field(default_factory=now_utc)

    def describe(self) -> str:
        """Short human description used in audit logs."""
        d = self.details
        who = f"{d.player} ({d.team})" if d.player and d.team else (d.player or d.team or "")
        if self.event_type is EventType.GoalScored:
            return f"Goal by {who}".strip()
        if self.event_type is EventType.PenaltyCommitted:
            penalty = f"{d.penalty_type} " if d.penalty_type else ""
            return f"Penalty: {penalty}on {who}".strip()
        if self.event_type is EventType.PowerPlayStart:
            return f"{d.team} power play ({d.strength})"
        if self.event_type is EventType.GoaliePulled:
            return f"{d.team} pulled their goalie"
        if self.event_type in (EventType.TeamWin, EventType.TeamLoss):
            return (
                f"{self.event_type.value}: {self.away_team} {self.away_score} - "
                f"{self.home_score} {self.home_team}"
            )
        return f"{self.event_type.value} ({self.away_team} @ {self.home_team}, P{self.period})"


class RgbColor(BaseModel):
    r: int
    g: int
    b: int


class WebhookEventDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team: str | None = None
    player: str | None = None
    jersey_number: int | None = Field(default=None, alias="jerseyNumber")
    assists: list[str] | None = None
    goal_type: str | None = Field(default=None, alias="goalType")
    penalty_type: str | None = Field(default=None, alias="penaltyType")
    penalty_minutes: int | None = Field(default=None, alias="penaltyMinutes")
    strength: str | None = None


class WebhookPayload(BaseModel):
    """Canonical (Generic format) webhook body."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(alias="eventType")
    timestamp: datetime
    game_id: int = Field(alias="gameId")
    period: int
    time_in_period: str | None = Field(default=None, alias="timeInPeriod")
    home_team: str = Field(alias="homeTeam")
    away_team: str = Field(alias="awayTeam")
    home_score: int = Field(alias="homeScore")
    away_score: int = Field(alias="awayScore")
    details: WebhookEventDetails | None = None
    team_colors: list[RgbColor] | None = None

    @classmethod
    def from_event(cls, event: DomainEvent, team_colors: list[RgbColor] | None = None) -> WebhookPayload:
        d = event.details
        return cls(
            event_type=event.event_type.value,
            timestamp=event.occurred_at,
            game_id=event.game_id,
            period=event.period,
            time_in_period=event.time_in_period,
            home_team=event.home_team,
            away_team=event.away_team,
            home_score=event.home_score,
            away_score=event.away_score,
            details=WebhookEventDetails(
                team=d.team,
                player=d.player,
                jersey_number=d.jersey_number,
                assists=list(d.assists) if d.assists is not None else None,
                goal_type=d.goal_type,
                penalty_type=d.penalty_type,
                penalty_minutes=d.penalty_minutes,
                strength=d.strength,
            ),
            team_colors=team_colors,
        )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
