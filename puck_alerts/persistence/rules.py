"""Webhook rule persistence.

Point reads/writes back the management surface; the bulk reads are what the
event pipeline uses during a poll cycle.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from ..db.models import WebhookRule
from ..errors import RuleNotFoundError
from ..logging import logger
from ..models.events import EventType, PayloadFormat

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_EDITABLE_FIELDS = {
    "team_abbrev",
    "event_type",
    "target_url",
    "payload_format",
    "is_enabled",
    "name",
    "delay_seconds",
    "custom_payload_template",
}


def _coerce(field: str, value: Any) -> Any:
    if field == "event_type":
        return EventType(value).value
    if field == "payload_format":
        return PayloadFormat(value).value
    if field == "team_abbrev" and isinstance(value, str):
        return value.strip().upper()
    return value


async def list_rules(session: AsyncSession) -> list[WebhookRule]:
    result = await session.execute(select(WebhookRule).order_by(WebhookRule.event_type, WebhookRule.id))
    return list(result.scalars().all())


async def get_rule(session: AsyncSession, rule_id: int) -> WebhookRule | None:
    return await session.get(WebhookRule, rule_id)


async def create_rule(
    session: AsyncSession,
    *,
    team_abbrev: str,
    event_type: EventType | str,
    target_url: str,
    payload_format: PayloadFormat | str = PayloadFormat.Generic,
    is_enabled: bool = True,
    name: str | None = None,
    delay_seconds: int = 0,
    custom_payload_template: str | None = None,
) -> WebhookRule:
    rule = WebhookRule(
        team_abbrev=_coerce("team_abbrev", team_abbrev),
        event_type=_coerce("event_type", event_type),
        target_url=target_url,
        payload_format=_coerce("payload_format", payload_format),
        is_enabled=is_enabled,
        name=name,
        delay_seconds=max(0, delay_seconds),
        custom_payload_template=custom_payload_template,
    )
    session.add(rule)
    await session.flush()
    logger.info("webhook_rule_created", rule_id=rule.id, event_type=rule.event_type, team=rule.team_abbrev)
    return rule


async def update_rule(session: AsyncSession, rule_id: int, **changes: Any) -> WebhookRule:
    """Apply ``changes`` to a rule.

    Raises:
        RuleNotFoundError: no rule with ``rule_id``
        ValueError: a field is not editable or an enum value is unknown
    """
    rule = await session.get(WebhookRule, rule_id)
    if rule is None:
        raise RuleNotFoundError(f"Webhook rule {rule_id} not found")

    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")

    for field, value in changes.items():
        setattr(rule, field, _coerce(field, value))
    await session.flush()
    logger.info("webhook_rule_updated", rule_id=rule_id, fields=sorted(changes))
    return rule


async def delete_rule(session: AsyncSession, rule_id: int) -> bool:
    """Delete a rule and, by cascade, its logs. Returns False if it did not exist."""
    rule = await session.get(WebhookRule, rule_id)
    if rule is None:
        return False
    await session.delete(rule)
    await session.flush()
    logger.info("webhook_rule_deleted", rule_id=rule_id)
    return True


async def get_enabled_rules_by_event(
    session: AsyncSession,
    team_abbrev: str,
) -> dict[EventType, list[WebhookRule]]:
    """All enabled rules for one team, grouped by event type, in one query."""
    result = await session.execute(
        select(WebhookRule)
        .where(WebhookRule.is_enabled.is_(True), WebhookRule.team_abbrev == team_abbrev)
        .order_by(WebhookRule.id)
    )
    grouped: dict[EventType, list[WebhookRule]] = defaultdict(list)
    for rule in result.scalars().all():
        try:
            grouped[EventType(rule.event_type)].append(rule)
        except ValueError:
            logger.warning("webhook_rule_unknown_event_type", rule_id=rule.id, event_type=rule.event_type)
    return dict(grouped)


async def get_enabled_rules_for_event(
    session: AsyncSession,
    event_type: EventType,
    team_abbrev: str,
) -> list[WebhookRule]:
    result = await session.execute(
        select(WebhookRule)
        .where(
            WebhookRule.is_enabled.is_(True),
            WebhookRule.team_abbrev == team_abbrev,
            WebhookRule.event_type == event_type.value,
        )
        .order_by(WebhookRule.id)
    )
    return list(result.scalars().all())


async def get_teams_with_enabled_rules(session: AsyncSession) -> list[str]:
    result = await session.execute(
        select(WebhookRule.team_abbrev)
        .where(WebhookRule.is_enabled.is_(True))
        .distinct()
        .order_by(WebhookRule.team_abbrev)
    )
    return list(result.scalars().all())
