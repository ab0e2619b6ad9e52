"""Tests for services/event_mapping.py module."""

from __future__ import annotations

import pytest

from puck_alerts.models.events import EventType
from puck_alerts.models.snapshots import Play
from puck_alerts.services.event_mapping import (
    PlayLookup,
    build_play_event,
    map_type_code,
    play_event_id,
)

from snapshot_factories import AWAY_ID, GAME_ID, make_landing, make_pbp, play_payload


class TestMapTypeCode:
    """Tests for typeCode to event type mapping."""

    @pytest.mark.parametrize(
        ("type_code", "period", "expected"),
        [
            (505, 2, EventType.GoalScored),
            (509, 1, EventType.PenaltyCommitted),
            (520, 1, EventType.GameStart),
            (520, 2, EventType.PeriodStart),
            (520, 4, EventType.PeriodStart),
            (521, 3, EventType.PeriodEnd),
            (524, 3, EventType.GameEnd),
        ],
    )
    def test_known_codes(self, type_code, period, expected):
        """Subscribed codes map to their event type."""
        assert map_type_code(type_code, period) is expected

    @pytest.mark.parametrize("type_code", [502, 503, 504, 506, 507, 508, 516, 535])
    def test_unmapped_codes(self, type_code):
        """Faceoffs, hits, shots and the like are ignored."""
        assert map_type_code(type_code, 1) is None


class TestBuildPlayEvent:
    """Tests for building domain events from plays."""

    def test_goal_details_and_scores(self, sample_nhl_goal_play):
        """Goal carries scorer, sweater, assists, shot type and play scores."""
        pbp = make_pbp([sample_nhl_goal_play])
        play = pbp.plays[0]

        event = build_play_event(
            play,
            EventType.GoalScored,
            GAME_ID,
            make_landing(home_score=0, away_score=0),
            PlayLookup.from_play_by_play(pbp),
        )

        assert event.event_key == "55_505"
        assert event.period == 2
        assert event.time_in_period == "15:30"
        assert (event.home_score, event.away_score) == (3, 1)
        assert event.teams == ("TOR", "BOS")
        assert event.details.team == "TOR"
        assert event.details.player == "Auston Matthews"
        assert event.details.jersey_number == 34
        assert event.details.assists == ("Mitch Marner",)
        assert event.details.goal_type == "wrist"

    def test_unassisted_goal_has_no_assists(self):
        """No primary assist means assists is None rather than empty."""
        pbp = make_pbp([play_payload(7, 505, details={"eventOwnerTeamId": 10, "scoringPlayerId": 8477939})])

        event = build_play_event(
            pbp.plays[0], EventType.GoalScored, GAME_ID, make_landing(), PlayLookup.from_play_by_play(pbp)
        )

        assert event.details.assists is None
        assert event.details.player == "William Nylander"

    def test_penalty_details(self):
        """Penalty carries offender, infraction and minutes."""
        pbp = make_pbp(
            [
                play_payload(
                    60,
                    509,
                    period=2,
                    time_in_period="10:00",
                    details={
                        "eventOwnerTeamId": AWAY_ID,
                        "committedByPlayerId": 8473419,
                        "descKey": "tripping",
                        "duration": 2,
                    },
                )
            ]
        )

        event = build_play_event(
            pbp.plays[0],
            EventType.PenaltyCommitted,
            GAME_ID,
            make_landing(home_score=2, away_score=1),
            PlayLookup.from_play_by_play(pbp),
        )

        assert event.details.team == "BOS"
        assert event.details.player == "Brad Marchand"
        assert event.details.jersey_number == 63
        assert event.details.penalty_type == "tripping"
        assert event.details.penalty_minutes == 2
        assert (event.home_score, event.away_score) == (2, 1)

    def test_play_without_details(self):
        """Period markers without details use the landing score."""
        pbp = make_pbp([play_payload(1, 520)])

        event = build_play_event(
            pbp.plays[0],
            EventType.GameStart,
            GAME_ID,
            make_landing(home_score=1, away_score=1),
            PlayLookup.from_play_by_play(pbp),
        )

        assert event.details.team is None
        assert (event.home_score, event.away_score) == (1, 1)


class TestPlayLookup:
    """Tests for roster/team lookups."""

    def test_unknown_ids(self):
        """Missing ids resolve to None."""
        lookup = PlayLookup.from_play_by_play(make_pbp([]))

        assert lookup.team(999) is None
        assert lookup.team(None) is None
        assert lookup.player_name(1) is None
        assert lookup.sweater(None) is None

    def test_play_event_id(self):
        """Ledger id combines event id and type code."""
        play = Play.model_validate(play_payload(123, 509))
        assert play_event_id(play) == "123_509"
