"""Snapshot (upstream) and domain (outbound) models."""

from .events import (
    DomainEvent,
    EventDetails,
    EventType,
    PayloadFormat,
    RgbColor,
    WebhookEventDetails,
    WebhookPayload,
)
from .snapshots import (
    LIVE_STATES,
    TERMINAL_STATES,
    UPCOMING_STATES,
    Boxscore,
    GameLanding,
    PlayByPlay,
    Play,
    ScheduleGame,
    ShiftChart,
    TeamSchedule,
)

__all__ = [
    "Boxscore",
    "DomainEvent",
    "EventDetails",
    "EventType",
    "GameLanding",
    "LIVE_STATES",
    "PayloadFormat",
    "Play",
    "PlayByPlay",
    "RgbColor",
    "ScheduleGame",
    "ShiftChart",
    "TERMINAL_STATES",
    "TeamSchedule",
    "UPCOMING_STATES",
    "WebhookEventDetails",
    "WebhookPayload",
]
