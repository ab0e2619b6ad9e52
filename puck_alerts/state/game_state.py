"""Live state holder for the single watched game.

Writers serialize on one lock and publish a fresh frozen ``GameSnapshot``;
readers take ``snapshot`` without locking and always see a consistent set
of resources. Data mutations announce themselves on a ``StateChanged``
channel so UI-facing consumers can refresh.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime

from ..logging import logger
from ..models.snapshots import Boxscore, GameLanding, PlayByPlay, ShiftChart
from ..services.pubsub import Channel, Subscription
from ..utils.datetime_utils import now_utc


@dataclass(frozen=True)
class GameSnapshot:
    current_game_id: int | None = None
    landing: GameLanding | None = None
    play_by_play: PlayByPlay | None = None
    boxscore: Boxscore | None = None
    shift_chart: ShiftChart | None = None
    last_updated: datetime | None = None
    active_viewers: int = 0

    @property
    def is_live(self) -> bool:
        return self.landing is not None and self.landing.is_live

    @property
    def is_terminal(self) -> bool:
        return self.landing is not None and self.landing.is_terminal


@dataclass(frozen=True)
class StateChanged:
    """Published after every data mutation."""

    game_id: int | None
    reason: str
    snapshot: GameSnapshot


class LiveGameState:
    def __init__(self, channel: Channel[StateChanged] | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = GameSnapshot()
        self.changes: Channel[StateChanged] = channel or Channel("state_changed")

    @property
    def snapshot(self) -> GameSnapshot:
        return self._snapshot

    # Read-through conveniences over the published snapshot

    @property
    def current_game_id(self) -> int | None:
        return self._snapshot.current_game_id

    @property
    def landing(self) -> GameLanding | None:
        return self._snapshot.landing

    @property
    def play_by_play(self) -> PlayByPlay | None:
        return self._snapshot.play_by_play

    @property
    def boxscore(self) -> Boxscore | None:
        return self._snapshot.boxscore

    @property
    def shift_chart(self) -> ShiftChart | None:
        return self._snapshot.shift_chart

    @property
    def last_updated(self) -> datetime | None:
        return self._snapshot.last_updated

    @property
    def active_viewers(self) -> int:
        return self._snapshot.active_viewers

    @property
    def is_live(self) -> bool:
        return self._snapshot.is_live

    @property
    def is_terminal(self) -> bool:
        return self._snapshot.is_terminal

    def subscribe(self, maxsize: int | None = None) -> Subscription[StateChanged]:
        return self.changes.subscribe(maxsize)

    def unsubscribe(self, subscription: Subscription[StateChanged]) -> None:
        self.changes.unsubscribe(subscription)

    def set_current_game(self, game_id: int) -> None:
        """Watch ``game_id``; switching to a different game drops held data."""
        with self._lock:
            current = self._snapshot
            if current.current_game_id == game_id:
                return
            self._snapshot = GameSnapshot(
                current_game_id=game_id,
                active_viewers=current.active_viewers,
            )

    def clear_current_game(self) -> None:
        with self._lock:
            self._snapshot = GameSnapshot(active_viewers=self._snapshot.active_viewers)

    def update_landing(self, landing: GameLanding | None) -> None:
        self._mutate("landing", landing=landing)

    def update_play_by_play(self, play_by_play: PlayByPlay | None) -> None:
        self._mutate("play_by_play", play_by_play=play_by_play)

    def update_boxscore(self, boxscore: Boxscore | None) -> None:
        self._mutate("boxscore", boxscore=boxscore)

    def update_shift_chart(self, shift_chart: ShiftChart | None) -> None:
        self._mutate("shift_chart", shift_chart=shift_chart)

    def update_all(
        self,
        landing: GameLanding | None,
        play_by_play: PlayByPlay | None,
        boxscore: Boxscore | None,
        shift_chart: ShiftChart | None,
        game_id: int | None = None,
    ) -> bool:
        """Replace all four resources in one publication.

        With ``game_id`` the update only lands if that game is still the
        watched one; a fetch that finished after a switch returns False.
        """
        return self._mutate(
            "all",
            game_id=game_id,
            landing=landing,
            play_by_play=play_by_play,
            boxscore=boxscore,
            shift_chart=shift_chart,
        )

    def register_viewer(self) -> int:
        with self._lock:
            self._snapshot = replace(self._snapshot, active_viewers=self._snapshot.active_viewers + 1)
            return self._snapshot.active_viewers

    def unregister_viewer(self) -> int:
        with self._lock:
            self._snapshot = replace(
                self._snapshot,
                active_viewers=max(0, self._snapshot.active_viewers - 1),
            )
            return self._snapshot.active_viewers

    def _mutate(self, reason: str, game_id: int | None = None, **fields) -> bool:
        with self._lock:
            if game_id is not None and self._snapshot.current_game_id != game_id:
                logger.info(
                    "stale_game_update_dropped",
                    game_id=game_id,
                    current_game_id=self._snapshot.current_game_id,
                    reason=reason,
                )
                return False
            self._snapshot = replace(self._snapshot, last_updated=now_utc(), **fields)
            published = self._snapshot
        self.changes.publish(StateChanged(published.current_game_id, reason, published))
        return True
