"""Webhook audit log persistence."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from ..db.models import WebhookLog
from ..logging import logger
from ..utils.datetime_utils import now_utc

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

# Keep stored error text bounded; full bodies go to the log stream.
_MAX_ERROR_LENGTH = 2000


async def append_log(
    session: AsyncSession,
    *,
    rule_id: int,
    event_type: str,
    game_id: int | None,
    success: bool,
    http_status_code: int | None = None,
    error_message: str | None = None,
    event_description: str | None = None,
    triggered_at: datetime | None = None,
) -> WebhookLog:
    entry = WebhookLog(
        webhook_rule_id=rule_id,
        event_type=event_type,
        game_id=game_id,
        success=success,
        http_status_code=http_status_code,
        error_message=error_message[:_MAX_ERROR_LENGTH] if error_message else None,
        event_description=event_description[:500] if event_description else None,
        triggered_at=triggered_at or now_utc(),
    )
    session.add(entry)
    await session.flush()
    return entry


async def recent_logs(
    session: AsyncSession,
    rule_id: int | None = None,
    limit: int = 50,
) -> list[WebhookLog]:
    """Newest first, optionally for one rule."""
    stmt = select(WebhookLog).order_by(WebhookLog.triggered_at.desc(), WebhookLog.id.desc()).limit(limit)
    if rule_id is not None:
        stmt = stmt.where(WebhookLog.webhook_rule_id == rule_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def purge_webhook_logs(session: AsyncSession, older_than: datetime) -> int:
    result = await session.execute(delete(WebhookLog).where(WebhookLog.triggered_at < older_than))
    count = result.rowcount or 0
    if count:
        logger.info("webhook_logs_purged", count=count, older_than=older_than.isoformat())
    return count
