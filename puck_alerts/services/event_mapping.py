"""Mapping of upstream plays to domain events.

Pure functions: no I/O and no ledger lookups. The event processor decides
what is new; this module only says what a play means.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..live.nhl_constants import (
    TYPE_CODE_GAME_END,
    TYPE_CODE_GOAL,
    TYPE_CODE_PENALTY,
    TYPE_CODE_PERIOD_END,
    TYPE_CODE_PERIOD_START,
)
from ..models.events import DomainEvent, EventDetails, EventType
from ..models.snapshots import GameLanding, Play, PlayByPlay, RosterSpot


def map_type_code(type_code: int, period: int | None) -> EventType | None:
    """Event type for a play ``typeCode``; ``None`` for codes nobody subscribes to.

    A period-start play in period 1 is the start of the game.
    """
    if type_code == TYPE_CODE_GOAL:
        return EventType.GoalScored
    if type_code == TYPE_CODE_PENALTY:
        return EventType.PenaltyCommitted
    if type_code == TYPE_CODE_PERIOD_START:
        return EventType.GameStart if period == 1 else EventType.PeriodStart
    if type_code == TYPE_CODE_PERIOD_END:
        return EventType.PeriodEnd
    if type_code == TYPE_CODE_GAME_END:
        return EventType.GameEnd
    return None


def play_event_id(play: Play) -> str:
    """Ledger identity of a play, stable across polls."""
    return f"{play.event_id}_{play.type_code}"


@dataclass(frozen=True)
class PlayLookup:
    """Team and player lookups built once per play-by-play snapshot."""

    team_by_id: dict[int, str]
    roster: dict[int, RosterSpot]

    @classmethod
    def from_play_by_play(cls, pbp: PlayByPlay) -> PlayLookup:
        return cls(
            team_by_id={pbp.home_team.id: pbp.home_team.abbrev, pbp.away_team.id: pbp.away_team.abbrev},
            roster={spot.player_id: spot for spot in pbp.roster_spots},
        )

    def team(self, team_id: int | None) -> str | None:
        return self.team_by_id.get(team_id) if team_id is not None else None

    def player_name(self, player_id: int | None) -> str | None:
        spot = self.roster.get(player_id) if player_id is not None else None
        return (spot.full_name or None) if spot else None

    def sweater(self, player_id: int | None) -> int | None:
        spot = self.roster.get(player_id) if player_id is not None else None
        return spot.sweater_number if spot else None


def build_play_event(
    play: Play,
    event_type: EventType,
    game_id: int,
    landing: GameLanding,
    lookup: PlayLookup,
) -> DomainEvent:
    """Domain event for a mapped play.

    Period and clock come from the play; scores come from the play details
    on goals and from the landing otherwise.
    """
    home_score = landing.home_team.score
    away_score = landing.away_team.score
    details = EventDetails()
    d = play.details

    if d is not None:
        team = lookup.team(d.event_owner_team_id)
        if event_type is EventType.GoalScored:
            assists = tuple(
                name
                for name in (
                    lookup.player_name(d.assist1_player_id),
                    lookup.player_name(d.assist2_player_id),
                )
                if name
            )
            details = EventDetails(
                team=team,
                player=lookup.player_name(d.scoring_player_id),
                jersey_number=lookup.sweater(d.scoring_player_id),
                assists=assists if d.assist1_player_id is not None else None,
                goal_type=d.shot_type,
            )
            if d.home_score is not None:
                home_score = d.home_score
            if d.away_score is not None:
                away_score = d.away_score
        elif event_type is EventType.PenaltyCommitted:
            details = EventDetails(
                team=team,
                player=lookup.player_name(d.committed_by_player_id),
                jersey_number=lookup.sweater(d.committed_by_player_id),
                penalty_type=d.desc_key,
                penalty_minutes=d.duration,
            )
        else:
            details = EventDetails(team=team)

    home = landing.home_team.abbrev
    away = landing.away_team.abbrev
    return DomainEvent(
        event_type=event_type,
        game_id=game_id,
        event_key=play_event_id(play),
        period=play.period_descriptor.number,
        time_in_period=play.time_in_period,
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
        teams=(home, away),
        details=details,
    )
