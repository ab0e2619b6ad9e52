"""Processed-event ledger (dedup) persistence.

The ledger is the only thing that makes dispatch idempotent across ticks and
across the viewer / background pollers, so inserts go through a single
conflict-tolerant statement: whichever writer inserts the row first owns
the event, everyone else gets nothing back.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from ..db.models import ProcessedEvent
from ..logging import logger
from ..models.events import EventType
from ..utils.datetime_utils import now_utc

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_UPSERT_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


async def load_processed_ids(session: AsyncSession, game_id: int) -> set[str]:
    """Every event id already recorded for a game, in one query."""
    result = await session.execute(
        select(ProcessedEvent.event_id).where(ProcessedEvent.game_id == game_id)
    )
    return set(result.scalars().all())


async def is_processed(session: AsyncSession, game_id: int, event_id: str) -> bool:
    result = await session.execute(
        select(ProcessedEvent.id)
        .where(ProcessedEvent.game_id == game_id, ProcessedEvent.event_id == event_id)
        .limit(1)
    )
    return result.first() is not None


async def claim_events(
    session: AsyncSession,
    game_id: int,
    entries: Iterable[tuple[str, EventType]],
) -> set[str]:
    """Record events as processed and return the ids this call inserted.

    Ids already present (including ones inserted concurrently by another
    poller after the caller's snapshot was taken) are skipped silently and
    are not part of the returned set.
    """
    by_id: dict[str, EventType] = {}
    for event_id, event_type in entries:
        by_id.setdefault(event_id, event_type)
    if not by_id:
        return set()

    processed_at = now_utc()
    rows = [
        {
            "game_id": game_id,
            "event_id": event_id,
            "event_type": event_type.value,
            "processed_at": processed_at,
        }
        for event_id, event_type in by_id.items()
    ]

    insert = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
    if insert is not None:
        stmt = (
            insert(ProcessedEvent)
            .values(rows)
            .on_conflict_do_nothing(index_elements=["game_id", "event_id"])
            .returning(ProcessedEvent.event_id)
        )
        result = await session.execute(stmt)
        claimed = set(result.scalars().all())
    else:
        claimed = set()
        for row in rows:
            try:
                async with session.begin_nested():
                    session.add(ProcessedEvent(**row))
            except IntegrityError:
                continue
            claimed.add(row["event_id"])

    skipped = len(rows) - len(claimed)
    if skipped:
        logger.debug(
            "processed_event_already_recorded",
            game_id=game_id,
            skipped=skipped,
            event_ids=sorted(set(by_id) - claimed)[:10],
        )
    return claimed


async def purge_processed_events(session: AsyncSession, older_than: datetime) -> int:
    """Delete ledger rows with ``processed_at`` strictly before ``older_than``."""
    result = await session.execute(
        delete(ProcessedEvent).where(ProcessedEvent.processed_at < older_than)
    )
    count = result.rowcount or 0
    if count:
        logger.info("processed_events_purged", count=count, older_than=older_than.isoformat())
    return count
