"""Tests for services/synthetic_events.py module."""

from __future__ import annotations

from datetime import datetime, timezone

from puck_alerts.models.events import EventType
from puck_alerts.models.snapshots import ScheduleGame
from puck_alerts.services.synthetic_events import (
    derive_state_events,
    power_play_key,
    starting_soon_event,
)

from snapshot_factories import GAME_ID, make_landing, situation_payload


def _types(events):
    return [e.event_type for e in events]


class TestPowerPlay:
    """Tests for PowerPlayStart derivation."""

    def test_home_advantage(self):
        """Home 5 on 4 gives a home power play keyed by clock."""
        landing = make_landing(
            period=2, time_remaining="10:00", situation=situation_payload("1451", home_strength=5, away_strength=4)
        )

        events = derive_state_events(landing)

        assert _types(events) == [EventType.PowerPlayStart]
        assert events[0].event_key == "pp_TOR_2_10:00"
        assert events[0].teams == ("TOR",)
        assert events[0].details.strength == "5v4"
        assert events[0].time_in_period == "10:00"

    def test_away_advantage(self):
        """Away 5 on 3 is reported from the away side."""
        landing = make_landing(situation=situation_payload("1531", home_strength=3, away_strength=5))

        event = derive_state_events(landing)[0]

        assert event.details.team == "BOS"
        assert event.details.strength == "5v3"

    def test_even_strength_emits_nothing(self):
        """Equal strengths are not a power play."""
        landing = make_landing(situation=situation_payload("1551"))
        assert derive_state_events(landing) == []

    def test_missing_situation_code_emits_nothing(self):
        """Without a situation code nothing is derived."""
        landing = make_landing(situation={"homeTeam": {"strength": 5}, "awayTeam": {"strength": 4}})
        assert derive_state_events(landing) == []

    def test_clock_policy_refires_on_new_clock(self):
        """Same power play at two clock readings yields two keys."""
        situation = situation_payload("1451", home_strength=5, away_strength=4)
        first = derive_state_events(make_landing(time_remaining="10:00", situation=situation))[0]
        second = derive_state_events(make_landing(time_remaining="09:45", situation=situation))[0]

        assert first.event_key != second.event_key

    def test_strength_state_policy_is_stable(self):
        """The situation-code policy keys the same power play once."""
        situation = situation_payload("1451", home_strength=5, away_strength=4)
        first = derive_state_events(make_landing(time_remaining="10:00", situation=situation), "strength_state")[0]
        second = derive_state_events(make_landing(time_remaining="09:45", situation=situation), "strength_state")[0]

        assert first.event_key == second.event_key == "pp_TOR_2_1451"

    def test_power_play_key(self):
        """Key formats for both policies."""
        assert power_play_key("TOR", 2, "10:00", "1451") == "pp_TOR_2_10:00"
        assert power_play_key("TOR", 2, "10:00", "1451", "strength_state") == "pp_TOR_2_1451"


class TestGoaliePulled:
    """Tests for goalie-pulled derivation from the situation code."""

    @staticmethod
    def _pulled(landing, *layout):
        return [e for e in derive_state_events(landing, "clock", *layout) if e.event_type is EventType.GoaliePulled]

    def test_leading_zero_is_home_net_by_default(self):
        """Default layout reads digit 0 as the home goalie."""
        landing = make_landing(period=3, situation=situation_payload("0651", home_strength=6, away_strength=5))

        events = self._pulled(landing)

        assert len(events) == 1
        assert events[0].event_key == "goalie_pulled_TOR_3"
        assert events[0].teams == ("TOR",)

    def test_trailing_zero_is_away_net_by_default(self):
        """Default layout reads digit 3 as the away goalie."""
        landing = make_landing(period=3, situation=situation_payload("1560", home_strength=5, away_strength=6))

        assert [e.event_key for e in self._pulled(landing)] == ["goalie_pulled_BOS_3"]

    def test_away_first_layout(self):
        """The away-first layout swaps which net each end digit describes."""
        leading = make_landing(period=3, situation=situation_payload("0651", home_strength=5, away_strength=6))
        trailing = make_landing(period=3, situation=situation_payload("1560", home_strength=6, away_strength=5))

        assert [e.teams for e in self._pulled(leading, "away_first")] == [("BOS",)]
        assert [e.teams for e in self._pulled(trailing, "away_first")] == [("TOR",)]

    def test_both_nets_empty(self):
        """Both goalies out yields one event per team, home first."""
        landing = make_landing(period=3, situation=situation_payload("0660", home_strength=6, away_strength=6))

        assert [e.event_key for e in self._pulled(landing)] == ["goalie_pulled_TOR_3", "goalie_pulled_BOS_3"]

    def test_short_code_ignored(self):
        """Codes shorter than four digits are skipped."""
        landing = make_landing(situation=situation_payload("155"))
        assert derive_state_events(landing) == []


class TestGameFlow:
    """Tests for OT, shootout and final result."""

    def test_overtime_while_live(self):
        """Live OT period emits OvertimeStart for both teams."""
        events = derive_state_events(make_landing(period=4, period_type="OT"))

        assert _types(events) == [EventType.OvertimeStart]
        assert events[0].event_key == "ot_4"
        assert events[0].teams == ("TOR", "BOS")

    def test_shootout_while_live(self):
        """Live SO period emits ShootoutStart."""
        events = derive_state_events(make_landing(period=5, period_type="SO"))
        assert [e.event_key for e in events] == ["shootout"]

    def test_overtime_not_emitted_when_final(self):
        """A finished OT game only reports the result."""
        events = derive_state_events(make_landing(state="OFF", period=4, period_type="OT", home_score=3, away_score=2))
        assert _types(events) == [EventType.TeamWin, EventType.TeamLoss]

    def test_final_win_and_loss(self):
        """FINAL 4-2 gives TeamWin to home and TeamLoss to away."""
        events = derive_state_events(make_landing(state="FINAL", period=3, home_score=4, away_score=2))

        win, loss = events
        assert win.event_key == "team_win" and win.teams == ("TOR",)
        assert loss.event_key == "team_loss" and loss.teams == ("BOS",)

    def test_away_win(self):
        """Away side wins when it has more goals."""
        win, loss = derive_state_events(make_landing(state="OFF", home_score=1, away_score=5))
        assert win.details.team == "BOS"
        assert loss.details.team == "TOR"

    def test_tie_emits_nothing(self):
        """A terminal tie produces no result events."""
        assert derive_state_events(make_landing(state="FINAL", home_score=2, away_score=2)) == []

    def test_not_final_emits_nothing(self):
        """Live regulation play with no special situation is quiet."""
        assert derive_state_events(make_landing(home_score=4, away_score=2)) == []


class TestStartingSoon:
    """Tests for the pre-game reminder event."""

    def test_event_fields(self):
        """Reminder is keyed per game and addressed to the given teams."""
        now = datetime(2024, 12, 14, 23, 40, tzinfo=timezone.utc)
        game = ScheduleGame.model_validate(
            {
                "id": GAME_ID,
                "gameState": "FUT",
                "startTimeUTC": "2024-12-15T00:00:00Z",
                "homeTeam": {"abbrev": "TOR"},
                "awayTeam": {"abbrev": "BOS"},
            }
        )

        event = starting_soon_event(game, ("TOR", "BOS"), now)

        assert event.event_type is EventType.GameStartingSoon
        assert event.event_key == "starting_soon"
        assert event.teams == ("TOR", "BOS")
        assert event.details.team is None
        assert event.occurred_at == now
        assert starting_soon_event(game, ("TOR",), now).details.team == "TOR"
