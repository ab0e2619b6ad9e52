"""Events inferred from continuous game state rather than discrete plays.

Power plays, pulled goalies, overtime/shootout starts, final results and
pre-game reminders never appear as plays; they are read off the landing
(or the schedule) and given deterministic keys so the ledger can
deduplicate them like any other event.
"""

from __future__ import annotations

from datetime import datetime

from ..config import PowerPlayKeyPolicy, SituationCodeLayout
from ..live.nhl_constants import PERIOD_TYPE_OVERTIME, PERIOD_TYPE_SHOOTOUT
from ..models.events import DomainEvent, EventDetails, EventType
from ..models.snapshots import GameLanding, ScheduleGame, SituationTeam

# Strength assumed when the situation omits it
EVEN_STRENGTH = 5

# (home goalie index, away goalie index) in situationCode
_GOALIE_DIGITS: dict[str, tuple[int, int]] = {
    "home_first": (0, 3),
    "away_first": (3, 0),
}


def _state_event(
    landing: GameLanding,
    event_type: EventType,
    event_key: str,
    teams: tuple[str, ...],
    details: EventDetails | None = None,
) -> DomainEvent:
    period = landing.period_descriptor.number if landing.period_descriptor else 1
    clock = landing.clock.time_remaining if landing.clock else "20:00"
    return DomainEvent(
        event_type=event_type,
        game_id=landing.id,
        event_key=event_key,
        period=period,
        time_in_period=clock,
        home_team=landing.home_team.abbrev,
        away_team=landing.away_team.abbrev,
        home_score=landing.home_team.score,
        away_score=landing.away_team.score,
        teams=teams,
        details=details or EventDetails(),
    )


def power_play_key(
    team: str,
    period: int,
    clock: str | None,
    situation_code: str | None,
    policy: PowerPlayKeyPolicy = "clock",
) -> str:
    """Dedup key for a power play.

    ``clock`` keys on the clock reading, so a power play still in effect on
    a later poll fires again; ``strength_state`` keys on the situation code
    and fires once per distinct strength state within a period.
    """
    if policy == "strength_state":
        return f"pp_{team}_{period}_{situation_code or ''}"
    return f"pp_{team}_{period}_{clock or ''}"


def _strength(team: SituationTeam | None) -> int:
    if team is None or team.strength is None:
        return EVEN_STRENGTH
    return team.strength


def _power_play(landing: GameLanding, policy: PowerPlayKeyPolicy) -> list[DomainEvent]:
    situation = landing.situation
    if situation is None or not situation.situation_code:
        return []

    home_strength = _strength(situation.home_team)
    away_strength = _strength(situation.away_team)
    if home_strength == away_strength:
        return []

    if home_strength > away_strength:
        team, strength = landing.home_team.abbrev, f"{home_strength}v{away_strength}"
    else:
        team, strength = landing.away_team.abbrev, f"{away_strength}v{home_strength}"

    period = landing.period_descriptor.number if landing.period_descriptor else 1
    clock = landing.clock.time_remaining if landing.clock else None
    key = power_play_key(team, period, clock, situation.situation_code, policy)
    return [
        _state_event(
            landing,
            EventType.PowerPlayStart,
            key,
            (team,),
            EventDetails(team=team, strength=strength),
        )
    ]


def _goalie_pulled(landing: GameLanding, layout: SituationCodeLayout) -> list[DomainEvent]:
    situation = landing.situation
    code = situation.situation_code if situation else None
    if not code or len(code) < 4:
        return []

    period = landing.period_descriptor.number if landing.period_descriptor else 1
    home_index, away_index = _GOALIE_DIGITS[layout]
    events = []
    for index, team in (
        (home_index, landing.home_team.abbrev),
        (away_index, landing.away_team.abbrev),
    ):
        if code[index] == "0":
            events.append(
                _state_event(
                    landing,
                    EventType.GoaliePulled,
                    f"goalie_pulled_{team}_{period}",
                    (team,),
                    EventDetails(team=team),
                )
            )
    return events


def _extra_time(landing: GameLanding) -> list[DomainEvent]:
    if not landing.is_live or landing.period_descriptor is None:
        return []
    both = (landing.home_team.abbrev, landing.away_team.abbrev)
    period_type = landing.period_descriptor.period_type
    if period_type == PERIOD_TYPE_OVERTIME:
        return [_state_event(landing, EventType.OvertimeStart, f"ot_{landing.period_descriptor.number}", both)]
    if period_type == PERIOD_TYPE_SHOOTOUT:
        return [_state_event(landing, EventType.ShootoutStart, "shootout", both)]
    return []


def _result(landing: GameLanding) -> list[DomainEvent]:
    home, away = landing.home_team, landing.away_team
    if not landing.is_terminal or home.score == away.score:
        return []
    winner, loser = (home, away) if home.score > away.score else (away, home)
    return [
        _state_event(
            landing,
            EventType.TeamWin,
            "team_win",
            (winner.abbrev,),
            EventDetails(team=winner.abbrev),
        ),
        _state_event(
            landing,
            EventType.TeamLoss,
            "team_loss",
            (loser.abbrev,),
            EventDetails(team=loser.abbrev),
        ),
    ]


def derive_state_events(
    landing: GameLanding,
    policy: PowerPlayKeyPolicy = "clock",
    layout: SituationCodeLayout = "home_first",
) -> list[DomainEvent]:
    """All synthetic events implied by one landing snapshot, in a fixed order."""
    return [
        *_power_play(landing, policy),
        *_goalie_pulled(landing, layout),
        *_extra_time(landing),
        *_result(landing),
    ]


def starting_soon_event(game: ScheduleGame, teams: tuple[str, ...], now: datetime) -> DomainEvent:
    """Pre-game reminder addressed to the subscribed teams playing in ``game``."""
    details = EventDetails(team=teams[0] if len(teams) == 1 else None)
    return DomainEvent(
        event_type=EventType.GameStartingSoon,
        game_id=game.id,
        event_key="starting_soon",
        period=1,
        time_in_period="20:00",
        home_team=game.home_team.abbrev,
        away_team=game.away_team.abbrev,
        home_score=0,
        away_score=0,
        teams=teams,
        details=details,
        occurred_at=now,
    )
