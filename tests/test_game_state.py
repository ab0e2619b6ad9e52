"""Tests for state/game_state.py module."""

from __future__ import annotations

from puck_alerts.models.snapshots import Boxscore, ShiftChart
from puck_alerts.state.game_state import LiveGameState

from snapshot_factories import GAME_ID, make_landing, make_pbp


class TestCurrentGame:
    """Tests for set/clear of the watched game."""

    def test_setting_different_game_clears_data(self):
        """Switching games drops resources held for the old one."""
        state = LiveGameState()
        state.set_current_game(GAME_ID)
        state.update_landing(make_landing())

        state.set_current_game(GAME_ID + 1)

        assert state.current_game_id == GAME_ID + 1
        assert state.landing is None

    def test_setting_same_game_keeps_data(self):
        """Re-selecting the current game is a no-op."""
        state = LiveGameState()
        state.set_current_game(GAME_ID)
        state.update_landing(make_landing())

        state.set_current_game(GAME_ID)

        assert state.landing is not None

    def test_clear_keeps_viewer_count(self):
        """Clearing the game does not reset viewers."""
        state = LiveGameState()
        state.register_viewer()
        state.set_current_game(GAME_ID)

        state.clear_current_game()

        assert state.current_game_id is None
        assert state.active_viewers == 1


class TestViewers:
    """Tests for viewer counting."""

    def test_count_never_negative(self):
        """Unregistering more than registered floors at zero."""
        state = LiveGameState()
        state.register_viewer()
        state.unregister_viewer()
        state.unregister_viewer()

        assert state.active_viewers == 0


class TestUpdates:
    """Tests for copy-on-write publication."""

    def test_update_all_replaces_resources_together(self):
        """update_all publishes one snapshot with all four resources."""
        state = LiveGameState()
        state.set_current_game(GAME_ID)
        before = state.snapshot

        state.update_all(make_landing(state="FINAL"), make_pbp([]), Boxscore(id=GAME_ID), ShiftChart())

        after = state.snapshot
        assert before.landing is None
        assert after.landing.game_state == "FINAL"
        assert after.play_by_play is not None
        assert after.last_updated is not None
        assert after.is_terminal and not after.is_live

    def test_update_for_replaced_game_dropped(self):
        """A result fetched for the previous game never reaches the new one."""
        state = LiveGameState()
        state.set_current_game(GAME_ID)
        sub = state.subscribe()
        state.set_current_game(GAME_ID + 1)

        applied = state.update_all(
            make_landing(state="FINAL"), make_pbp([]), Boxscore(id=GAME_ID), ShiftChart(), game_id=GAME_ID
        )

        assert applied is False
        assert state.current_game_id == GAME_ID + 1
        assert state.landing is None and state.last_updated is None
        assert sub.pending() == 0

    def test_update_for_current_game_applied(self):
        """A matching game id is applied and reported."""
        state = LiveGameState()
        state.set_current_game(GAME_ID)

        assert state.update_all(make_landing(), make_pbp([]), Boxscore(id=GAME_ID), ShiftChart(), game_id=GAME_ID)
        assert state.landing is not None

    def test_update_publishes_state_changed(self):
        """Each data mutation posts one StateChanged to subscribers."""
        state = LiveGameState()
        sub = state.subscribe()
        state.set_current_game(GAME_ID)

        state.update_landing(make_landing())
        state.update_play_by_play(make_pbp([]))

        first = sub.get_nowait()
        second = sub.get_nowait()
        assert first.reason == "landing"
        assert first.game_id == GAME_ID
        assert second.snapshot.play_by_play is not None
        assert sub.get_nowait() is None

    def test_viewer_changes_do_not_publish(self):
        """Viewer registration is not a data change."""
        state = LiveGameState()
        sub = state.subscribe()

        state.register_viewer()

        assert sub.get_nowait() is None
        state.unsubscribe(sub)
