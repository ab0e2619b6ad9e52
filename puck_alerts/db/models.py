"""Webhook rules, audit logs and the processed-event ledger."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..models.events import EventType, PayloadFormat
from ..utils.datetime_utils import now_utc
from .base import Base


class WebhookRule(Base):
    """User subscription: team + event type -> destination, format and delay."""

    __tablename__ = "webhook_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_abbrev: Mapped[str] = mapped_column(String(10), nullable=False)
    event_type: Mapped[str] = mapped_column(String(40), nullable=False)
    target_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    payload_format: Mapped[str] = mapped_column(
        String(20), default=PayloadFormat.Generic.value, nullable=False
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    delay_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    custom_payload_template: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=func.now(),
        onupdate=now_utc,
        nullable=False,
    )

    logs: Mapped[list["WebhookLog"]] = relationship(
        "WebhookLog",
        back_populates="rule",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_webhook_rules_enabled_team_event", "is_enabled", "team_abbrev", "event_type"),
    )

    @property
    def event(self) -> EventType:
        return EventType(self.event_type)

    @property
    def format(self) -> PayloadFormat:
        return PayloadFormat(self.payload_format)

    @property
    def display_name(self) -> str:
        return self.name or f"{self.team_abbrev} webhook"


class WebhookLog(Base):
    """Append-only audit row, one per dispatch call."""

    __tablename__ = "webhook_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    webhook_rule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("webhook_rules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_type: Mapped[str] = mapped_column(String(40), nullable=False)
    game_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    http_status_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    triggered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, nullable=False, index=True
    )
    event_description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    rule: Mapped[WebhookRule] = relationship("WebhookRule", back_populates="logs")


class ProcessedEvent(Base):
    """Ledger of (game, event) pairs already acted upon."""

    __tablename__ = "processed_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    game_id: Mapped[int] = mapped_column(Integer, nullable=False)
    event_id: Mapped[str] = mapped_column(String(100), nullable=False)
    event_type: Mapped[str] = mapped_column(String(40), nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("game_id", "event_id", name="uq_processed_events_game_event"),
    )
