"""Retention sweep for the processed-event ledger and webhook logs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import RetentionConfig, settings
from ..db import session_scope
from ..logging import logger
from ..persistence.webhook_logs import purge_webhook_logs
from ..services.event_processing import EventProcessor
from ..utils.datetime_utils import now_utc


@dataclass(frozen=True)
class RetentionResult:
    processed_events: int
    webhook_logs: int


async def run_retention(
    processor: EventProcessor,
    session_factory: async_sessionmaker[AsyncSession],
    config: RetentionConfig | None = None,
    now: datetime | None = None,
) -> RetentionResult:
    """Purge ledger rows and log rows older than their retention windows.

    Rows exactly at the cutoff are kept.
    """
    config = config or settings.retention
    now = now or now_utc()

    events_removed = await processor.cleanup_old_events(now - timedelta(days=config.processed_event_days))
    async with session_scope(session_factory) as session:
        logs_removed = await purge_webhook_logs(session, now - timedelta(days=config.webhook_log_days))

    logger.info(
        "retention_sweep_complete",
        processed_events=events_removed,
        webhook_logs=logs_removed,
    )
    return RetentionResult(processed_events=events_removed, webhook_logs=logs_removed)
