"""Webhook delivery.

Formats a domain event for one rule, POSTs it with bounded retry, records a
``WebhookLog`` row and announces the attempt on the audit channel. Delivery
is at-most-``max_retries``; there is no outbox, so a failure after the last
attempt is final.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

from ..config import WebhookConfig, settings
from ..db import session_scope
from ..db.models import WebhookRule
from ..errors import DeliveryError
from ..logging import logger
from ..models.events import DomainEvent, EventDetails, EventType, PayloadFormat, WebhookPayload
from ..persistence.webhook_logs import append_log
from ..utils.datetime_utils import now_utc
from .formatters import render_body
from .pubsub import Channel
from .team_colors import get_team_colors

Sleep = Callable[[float], Awaitable[None]]

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class DeliveryOutcome:
    success: bool
    status_code: int | None = None
    error: str | None = None
    attempts: int = 0


@dataclass(frozen=True)
class WebhookFired:
    """Audit notification published once per delivery call."""

    rule_id: int
    event_type: str
    game_id: int | None
    success: bool
    status_code: int | None
    description: str
    triggered_at: datetime = field(default_factory=now_utc)


def is_valid_webhook_url(url: str | None) -> bool:
    """Absolute http(s) URL with a host."""
    if not url or not url.strip():
        return False
    try:
        parsed = httpx.URL(url.strip())
    except (httpx.InvalidURL, TypeError):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


def _rule_format(rule: WebhookRule) -> PayloadFormat:
    try:
        return PayloadFormat(rule.payload_format)
    except ValueError:
        logger.warning("webhook_rule_unknown_format", rule_id=rule.id, payload_format=rule.payload_format)
        return PayloadFormat.Generic


def _rule_event_type(rule: WebhookRule) -> EventType:
    try:
        return EventType(rule.event_type)
    except ValueError:
        return EventType.GoalScored


class WebhookDispatcher:
    """Delivers events to webhook rules with tenacity-driven retry."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client: httpx.AsyncClient | None = None,
        config: WebhookConfig | None = None,
        audit: Channel[WebhookFired] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._session_factory = session_factory
        self._config = config or settings.webhooks
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self._config.timeout_seconds)
        self.audit: Channel[WebhookFired] = audit or Channel("webhook_fired", self._config.audit_queue_size)
        self._sleep = sleep

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def deliver(self, rule: WebhookRule, event: DomainEvent) -> DeliveryOutcome:
        """Send ``event`` to ``rule``'s destination.

        Only cancellation escapes; every other failure is reported through
        the returned outcome, the log row and the audit channel.
        """
        if rule.delay_seconds and rule.delay_seconds > 0:
            logger.debug("webhook_delayed", rule_id=rule.id, delay_seconds=rule.delay_seconds)
            await self._sleep(rule.delay_seconds)

        payload = WebhookPayload.from_event(event, team_colors=get_team_colors(rule.team_abbrev))
        body = render_body(payload, _rule_format(rule), rule.custom_payload_template)
        outcome = await self._send(rule, body)

        await self._record(rule, event.event_type.value, event.game_id, outcome, event.describe())
        if outcome.success:
            logger.info(
                "webhook_sent",
                rule_id=rule.id,
                rule=rule.display_name,
                event_type=event.event_type.value,
                game_id=event.game_id,
                attempts=outcome.attempts,
            )
        return outcome

    async def send_test(self, rule: WebhookRule) -> DeliveryOutcome:
        """Send a canned event through the rule's format and destination (no delay)."""
        event = DomainEvent(
            event_type=_rule_event_type(rule),
            game_id=0,
            event_key="test",
            period=1,
            time_in_period="20:00",
            home_team=rule.team_abbrev,
            away_team="OPP",
            home_score=1,
            away_score=0,
            teams=(rule.team_abbrev,),
            details=EventDetails(team=rule.team_abbrev, player="Test Player", jersey_number=99),
        )
        payload = WebhookPayload.from_event(event, team_colors=get_team_colors(rule.team_abbrev))
        body = render_body(payload, _rule_format(rule), rule.custom_payload_template)
        outcome = await self._send(rule, body)
        await self._record(rule, event.event_type.value, None, outcome, "Test webhook")
        return outcome

    def preview(self, rule: WebhookRule) -> str:
        """Body the rule would send for a representative event; nothing is sent."""
        event_type = _rule_event_type(rule)
        is_goal = event_type is EventType.GoalScored
        is_penalty = event_type is EventType.PenaltyCommitted
        event = DomainEvent(
            event_type=event_type,
            game_id=2024020001,
            event_key="preview",
            period=2,
            time_in_period="15:30",
            home_team=rule.team_abbrev,
            away_team="OPP",
            home_score=2,
            away_score=1,
            teams=(rule.team_abbrev,),
            details=EventDetails(
                team=rule.team_abbrev,
                player="Sample Player",
                jersey_number=91,
                assists=("Assist 1", "Assist 2") if is_goal else None,
                goal_type="ev" if is_goal else None,
                penalty_type="Hooking" if is_penalty else None,
                penalty_minutes=2 if is_penalty else None,
            ),
        )
        payload = WebhookPayload.from_event(event, team_colors=get_team_colors(rule.team_abbrev))
        return render_body(payload, _rule_format(rule), rule.custom_payload_template)

    async def _send(self, rule: WebhookRule, body: str) -> DeliveryOutcome:
        url = rule.target_url
        if not is_valid_webhook_url(url):
            logger.error("webhook_invalid_url", rule_id=rule.id, url=url)
            return DeliveryOutcome(success=False, error="Invalid webhook URL", attempts=0)

        max_retries = self._config.max_retries
        delay = self._config.retry_delay_seconds
        attempts = 0
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_retries),
                wait=wait_incrementing(start=delay, increment=delay),
                retry=retry_if_exception_type(DeliveryError),
                reraise=True,
                sleep=self._sleep,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    status = await self._post_once(url, body, attempts)
        except DeliveryError as exc:
            logger.error(
                "webhook_delivery_exhausted",
                rule_id=rule.id,
                url=url,
                attempts=attempts,
                status=exc.status_code,
                error=str(exc)[:200],
            )
            return DeliveryOutcome(success=False, status_code=exc.status_code, error=str(exc), attempts=attempts)

        return DeliveryOutcome(success=True, status_code=status, attempts=attempts)

    async def _post_once(self, url: str, body: str, attempt: int) -> int:
        try:
            response = await self.client.post(
                url,
                content=body.encode("utf-8"),
                headers=JSON_HEADERS,
                timeout=self._config.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "webhook_attempt_error",
                url=url,
                attempt=attempt,
                max_retries=self._config.max_retries,
                error=str(exc),
            )
            raise DeliveryError(f"{type(exc).__name__}: {exc}") from exc

        if response.is_success:
            return response.status_code

        logger.warning(
            "webhook_attempt_failed",
            url=url,
            attempt=attempt,
            max_retries=self._config.max_retries,
            status=response.status_code,
            body=response.text[:200] if response.text else "",
        )
        raise DeliveryError(
            f"HTTP {response.status_code}: {response.text[:500]}",
            status_code=response.status_code,
        )

    async def _record(
        self,
        rule: WebhookRule,
        event_type: str,
        game_id: int | None,
        outcome: DeliveryOutcome,
        description: str,
    ) -> None:
        triggered_at = now_utc()
        try:
            async with session_scope(self._session_factory) as session:
                await append_log(
                    session,
                    rule_id=rule.id,
                    event_type=event_type,
                    game_id=game_id,
                    success=outcome.success,
                    http_status_code=outcome.status_code,
                    error_message=outcome.error,
                    event_description=description,
                    triggered_at=triggered_at,
                )
        except SQLAlchemyError as exc:
            logger.error("webhook_log_write_failed", rule_id=rule.id, error=str(exc))

        self.audit.publish(
            WebhookFired(
                rule_id=rule.id,
                event_type=event_type,
                game_id=game_id,
                success=outcome.success,
                status_code=outcome.status_code,
                description=description,
                triggered_at=triggered_at,
            )
        )
