"""Event-diff engine: new plays and state changes to dispatched webhooks.

One pass over a game:

1. Load the ledger ids for the game and the enabled rules of both teams
   (three queries, no per-play lookups).
2. Map unseen plays to domain events.
3. Claim the new event ids in one conflict-tolerant insert and dispatch only
   what this pass claimed, so overlapping passes never double-send.
4. Repeat 2-3 for events derived from the landing (power play, pulled
   goalie, OT/SO, final result), strictly after the discrete plays.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import PowerPlayKeyPolicy, SituationCodeLayout, settings
from ..db import session_scope
from ..db.models import WebhookRule
from ..logging import logger
from ..models.events import DomainEvent, EventType
from ..models.snapshots import GameLanding, PlayByPlay, ScheduleGame
from ..persistence.ledger import claim_events, load_processed_ids, purge_processed_events
from ..persistence.rules import get_enabled_rules_by_event
from ..utils.datetime_utils import now_utc
from .dispatch import WebhookDispatcher
from .event_mapping import PlayLookup, build_play_event, map_type_code, play_event_id
from .synthetic_events import derive_state_events, starting_soon_event

RulesByTeam = dict[str, dict[EventType, list[WebhookRule]]]


class EventProcessor:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: WebhookDispatcher,
        power_play_key_policy: PowerPlayKeyPolicy | None = None,
        situation_code_layout: SituationCodeLayout | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._pp_policy = power_play_key_policy or settings.polling.power_play_key_policy
        self._layout = situation_code_layout or settings.polling.situation_code_layout

    async def process_game_events(
        self,
        game_id: int,
        play_by_play: PlayByPlay | None,
        landing: GameLanding | None,
    ) -> int:
        """Diff one snapshot pair against the ledger and dispatch what is new.

        Returns:
            Number of discrete plays newly processed by this pass. Synthetic
            events are dispatched but not counted.
        """
        if play_by_play is None or landing is None:
            return 0

        home = landing.home_team.abbrev
        away = landing.away_team.abbrev
        async with session_scope(self._session_factory) as session:
            processed = await load_processed_ids(session, game_id)
            rules: RulesByTeam = {
                home: await get_enabled_rules_by_event(session, home),
                away: await get_enabled_rules_by_event(session, away),
            }

        lookup = PlayLookup.from_play_by_play(play_by_play)
        play_events: list[DomainEvent] = []
        for play in play_by_play.plays:
            if play_event_id(play) in processed:
                continue
            event_type = map_type_code(play.type_code, play.period_descriptor.number)
            if event_type is None:
                continue
            play_events.append(build_play_event(play, event_type, game_id, landing, lookup))

        processed_count = await self._claim_and_dispatch(game_id, play_events, rules)

        state_events = [
            event
            for event in derive_state_events(landing, self._pp_policy, self._layout)
            if event.event_key not in processed
        ]
        await self._claim_and_dispatch(game_id, state_events, rules)

        if processed_count:
            logger.info(
                "game_events_processed",
                game_id=game_id,
                processed=processed_count,
                game_state=landing.game_state,
            )
        return processed_count

    async def notify_starting_soon(
        self,
        game: ScheduleGame,
        teams: Sequence[str],
        now: datetime | None = None,
    ) -> bool:
        """Send the pre-game reminder for ``game`` to the given teams' rules, once."""
        event = starting_soon_event(game, tuple(teams), now or now_utc())
        async with session_scope(self._session_factory) as session:
            rules: RulesByTeam = {team: await get_enabled_rules_by_event(session, team) for team in teams}
        return await self._claim_and_dispatch(game.id, [event], rules) > 0

    async def cleanup_old_events(self, older_than: datetime) -> int:
        async with session_scope(self._session_factory) as session:
            return await purge_processed_events(session, older_than)

    async def _claim_and_dispatch(
        self,
        game_id: int,
        events: list[DomainEvent],
        rules: RulesByTeam,
    ) -> int:
        if not events:
            return 0

        async with session_scope(self._session_factory) as session:
            claimed = await claim_events(
                session,
                game_id,
                [(event.event_key, event.event_type) for event in events],
            )

        dispatched = 0
        for event in events:
            if event.event_key not in claimed:
                continue
            # A key is claimed once even if it appears twice in one snapshot
            claimed.discard(event.event_key)
            dispatched += 1
            await self._dispatch(event, rules)
        return dispatched

    async def _dispatch(self, event: DomainEvent, rules: RulesByTeam) -> None:
        for team in event.teams:
            for rule in rules.get(team, {}).get(event.event_type, []):
                try:
                    await self._dispatcher.deliver(rule, event)
                except Exception as exc:
                    logger.exception(
                        "webhook_dispatch_error",
                        rule_id=rule.id,
                        event_type=event.event_type.value,
                        game_id=event.game_id,
                        error=str(exc),
                    )
