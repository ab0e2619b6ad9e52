"""Destination-specific webhook body rendering.

Every format starts from the canonical ``WebhookPayload``. Renderers return
the request body as a JSON string; custom templates are plain text with
literal ``{{placeholder}}`` substitution and are sent as written.
"""

from __future__ import annotations

import json

from ..models.events import EventType, PayloadFormat, WebhookPayload

DISCORD_FOOTER = "NHL Monitor"
DEFAULT_DISCORD_COLOR = 0x808080

DISCORD_TITLES: dict[str, str] = {
    EventType.GoalScored.value: "GOAL!",
    EventType.PenaltyCommitted.value: "Penalty",
    EventType.PowerPlayStart.value: "Power Play",
    EventType.PowerPlayEnd.value: "Power Play Over",
    EventType.GoaliePulled.value: "Goalie Pulled",
    EventType.GoalieReturned.value: "Goalie Returned",
    EventType.PeriodStart.value: "Period Started",
    EventType.PeriodEnd.value: "Period Ended",
    EventType.GameStart.value: "Game Starting",
    EventType.GameEnd.value: "Game Over",
    EventType.TeamWin.value: "Victory!",
    EventType.TeamLoss.value: "Final",
    EventType.OvertimeStart.value: "Overtime",
    EventType.ShootoutStart.value: "Shootout",
    EventType.GameStartingSoon.value: "Game Starting Soon",
}

DISCORD_COLORS: dict[str, int] = {
    EventType.GoalScored.value: 0x00FF00,
    EventType.PenaltyCommitted.value: 0xFF0000,
    EventType.PowerPlayStart.value: 0xFFFF00,
    EventType.PowerPlayEnd.value: 0x808080,
    EventType.GoaliePulled.value: 0xFF9800,
    EventType.GoalieReturned.value: 0x2196F3,
    EventType.PeriodStart.value: 0x2196F3,
    EventType.PeriodEnd.value: 0x808080,
    EventType.GameStart.value: 0x4CAF50,
    EventType.GameEnd.value: 0x9C27B0,
    EventType.TeamWin.value: 0x4CAF50,
    EventType.OvertimeStart.value: 0xFF9800,
    EventType.ShootoutStart.value: 0xFF9800,
    EventType.GameStartingSoon.value: 0x2196F3,
}


def _dumps(body: object) -> str:
    return json.dumps(body, separators=(",", ":"))


def discord_description(payload: WebhookPayload) -> str:
    d = payload.details
    if d is None:
        return ""
    event_type = payload.event_type
    if event_type == EventType.GoalScored.value:
        text = f"#{d.jersey_number if d.jersey_number is not None else ''} {d.player or ''} ({d.team or ''})"
        if d.assists:
            text += f"\nAssists: {', '.join(d.assists)}"
        return text
    if event_type == EventType.PenaltyCommitted.value:
        minutes = d.penalty_minutes if d.penalty_minutes is not None else ""
        return f"{d.penalty_type or ''} - {minutes} min\n{d.player or ''} ({d.team or ''})"
    if event_type == EventType.PowerPlayStart.value:
        return f"{d.team} Power Play ({d.strength})"
    if event_type == EventType.GoaliePulled.value:
        return f"{d.team} has pulled their goalie"
    if event_type == EventType.GoalieReturned.value:
        return f"{d.team} goalie has returned"
    if event_type == EventType.TeamWin.value:
        return f"{d.team} win!"
    if event_type == EventType.TeamLoss.value:
        return f"{d.team} lose"
    if event_type == EventType.GameStartingSoon.value:
        return f"{payload.away_team} @ {payload.home_team} starts soon"
    return ""


def format_generic(payload: WebhookPayload) -> str:
    return _dumps(payload.to_json_dict())


def format_discord(payload: WebhookPayload) -> str:
    embed = {
        "title": DISCORD_TITLES.get(payload.event_type, payload.event_type),
        "description": discord_description(payload),
        "color": DISCORD_COLORS.get(payload.event_type, DEFAULT_DISCORD_COLOR),
        "fields": [
            {
                "name": "Score",
                "value": f"{payload.away_team} {payload.away_score} - {payload.home_score} {payload.home_team}",
                "inline": True,
            },
            {"name": "Period", "value": f"P{payload.period}", "inline": True},
            {"name": "Time", "value": payload.time_in_period or "00:00", "inline": True},
        ],
        "footer": {"text": DISCORD_FOOTER},
        "timestamp": payload.timestamp.isoformat(),
    }
    return _dumps({"embeds": [embed]})


def format_home_assistant(payload: WebhookPayload) -> str:
    data: dict[str, object] = {
        "game_id": payload.game_id,
        "home_team": payload.home_team,
        "away_team": payload.away_team,
        "home_score": payload.home_score,
        "away_score": payload.away_score,
        "period": payload.period,
        "time_in_period": payload.time_in_period or "00:00",
    }
    if payload.team_colors is not None:
        data["team_colors"] = [c.model_dump() for c in payload.team_colors]
    if payload.details is not None:
        if payload.details.team:
            data["team"] = payload.details.team
        if payload.details.player:
            data["player"] = payload.details.player
    return _dumps({"event_type": f"nhl_{payload.event_type.lower()}", "data": data})


def apply_custom_template(template: str, payload: WebhookPayload) -> str:
    """Literal ``{{name}}`` substitution; unknown placeholders are left as written."""
    d = payload.details
    colors = [c.model_dump() for c in payload.team_colors or []]
    replacements = {
        "{{eventType}}": payload.event_type,
        "{{timestamp}}": payload.timestamp.isoformat(),
        "{{gameId}}": str(payload.game_id),
        "{{period}}": str(payload.period),
        "{{timeInPeriod}}": payload.time_in_period or "",
        "{{homeTeam}}": payload.home_team,
        "{{awayTeam}}": payload.away_team,
        "{{homeScore}}": str(payload.home_score),
        "{{awayScore}}": str(payload.away_score),
        "{{team}}": (d.team if d else None) or "",
        "{{player}}": (d.player if d else None) or "",
        "{{jerseyNumber}}": str(d.jersey_number) if d and d.jersey_number is not None else "",
        "{{team_colors}}": _dumps(colors),
        "{{payload}}": format_generic(payload),
    }
    result = template
    for placeholder, value in replacements.items():
        result = result.replace(placeholder, value)
    return result


_RENDERERS = {
    PayloadFormat.Generic: format_generic,
    PayloadFormat.Discord: format_discord,
    PayloadFormat.HomeAssistant: format_home_assistant,
}


def render_body(
    payload: WebhookPayload,
    payload_format: PayloadFormat = PayloadFormat.Generic,
    custom_template: str | None = None,
) -> str:
    """Request body for a rule: its custom template if set, else its format."""
    if custom_template:
        return apply_custom_template(custom_template, payload)
    return _RENDERERS.get(payload_format, format_generic)(payload)
