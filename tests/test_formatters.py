"""Tests for services/formatters.py and services/team_colors.py."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from puck_alerts.models.events import DomainEvent, EventDetails, EventType, PayloadFormat, WebhookPayload
from puck_alerts.services.formatters import (
    DEFAULT_DISCORD_COLOR,
    apply_custom_template,
    format_discord,
    format_generic,
    format_home_assistant,
    render_body,
)
from puck_alerts.services.team_colors import (
    DEFAULT_COLORS,
    get_team_colors,
    primary_color_hex,
    primary_color_int,
)

TIMESTAMP = datetime(2024, 12, 15, 1, 2, 3, tzinfo=timezone.utc)


def _goal_payload(**overrides) -> WebhookPayload:
    fields = dict(
        event_type=EventType.GoalScored,
        game_id=2024020500,
        event_key="55_505",
        period=2,
        time_in_period="15:30",
        home_team="TOR",
        away_team="BOS",
        home_score=3,
        away_score=1,
        teams=("TOR", "BOS"),
        details=EventDetails(
            team="TOR",
            player="Auston Matthews",
            jersey_number=34,
            assists=("Mitch Marner", "William Nylander"),
            goal_type="wrist",
        ),
        occurred_at=TIMESTAMP,
    )
    fields.update(overrides)
    return WebhookPayload.from_event(DomainEvent(**fields), team_colors=get_team_colors("TOR"))


class TestGeneric:
    """Tests for the canonical JSON body."""

    def test_camel_case_fields(self):
        """Generic body uses camelCase keys."""
        body = json.loads(format_generic(_goal_payload()))

        assert body["eventType"] == "GoalScored"
        assert body["gameId"] == 2024020500
        assert body["timeInPeriod"] == "15:30"
        assert body["homeScore"] == 3
        assert body["details"]["jerseyNumber"] == 34
        assert body["details"]["assists"] == ["Mitch Marner", "William Nylander"]
        assert body["team_colors"][0] == {"r": 0, "g": 32, "b": 91}

    def test_compact_output(self):
        """No whitespace between separators."""
        assert ": " not in format_generic(_goal_payload())


class TestDiscord:
    """Tests for Discord embeds."""

    def test_goal_embed(self):
        """Goal embed has title, color, description and score fields."""
        embed = json.loads(format_discord(_goal_payload()))["embeds"][0]

        assert embed["title"] == "GOAL!"
        assert embed["color"] == 0x00FF00
        assert embed["description"] == "#34 Auston Matthews (TOR)\nAssists: Mitch Marner, William Nylander"
        assert embed["fields"][0]["value"] == "BOS 1 - 3 TOR"
        assert embed["fields"][1]["value"] == "P2"
        assert embed["footer"] == {"text": "NHL Monitor"}

    def test_penalty_description(self):
        """Penalty embed names the infraction and minutes."""
        payload = _goal_payload(
            event_type=EventType.PenaltyCommitted,
            details=EventDetails(team="BOS", player="Brad Marchand", penalty_type="tripping", penalty_minutes=2),
        )
        embed = json.loads(format_discord(payload))["embeds"][0]

        assert embed["title"] == "Penalty"
        assert embed["description"] == "tripping - 2 min\nBrad Marchand (BOS)"

    def test_team_loss_uses_default_color(self):
        """Event types without a color fall back to grey."""
        payload = _goal_payload(event_type=EventType.TeamLoss, details=EventDetails(team="BOS"))
        embed = json.loads(format_discord(payload))["embeds"][0]

        assert embed["color"] == DEFAULT_DISCORD_COLOR
        assert embed["description"] == "BOS lose"


class TestHomeAssistant:
    """Tests for Home Assistant events."""

    def test_event_name_and_data(self):
        """Event name is nhl_ + lower-cased type, data flattened."""
        body = json.loads(format_home_assistant(_goal_payload()))

        assert body["event_type"] == "nhl_goalscored"
        assert body["data"]["team"] == "TOR"
        assert body["data"]["player"] == "Auston Matthews"
        assert body["data"]["home_score"] == 3
        assert len(body["data"]["team_colors"]) == 3


class TestCustomTemplate:
    """Tests for placeholder substitution."""

    def test_placeholders_replaced(self):
        """Known placeholders are substituted literally."""
        text = apply_custom_template(
            "{{player}} #{{jerseyNumber}} scores for {{team}}: {{awayTeam}} {{awayScore}}-{{homeScore}} {{homeTeam}}",
            _goal_payload(),
        )
        assert text == "Auston Matthews #34 scores for TOR: BOS 1-3 TOR"

    def test_unknown_placeholder_left_alone(self):
        """Unrecognised placeholders stay in the output."""
        assert apply_custom_template("{{nope}} {{period}}", _goal_payload()) == "{{nope}} 2"

    def test_payload_placeholder_embeds_generic_json(self):
        """{{payload}} inserts the Generic body."""
        payload = _goal_payload()
        assert apply_custom_template("{{payload}}", payload) == format_generic(payload)

    def test_template_overrides_format(self):
        """A custom template wins over the rule's format."""
        body = render_body(_goal_payload(), PayloadFormat.Discord, "goal {{gameId}}")
        assert body == "goal 2024020500"


class TestTeamColors:
    """Tests for the color lookup."""

    def test_known_team_case_insensitive(self):
        """Lookup ignores case."""
        colors = get_team_colors("tor")
        assert (colors[0].r, colors[0].g, colors[0].b) == (0, 32, 91)

    def test_unknown_team_gets_default(self):
        """Unknown teams use the neutral palette."""
        colors = get_team_colors("XYZ")
        assert [(c.r, c.g, c.b) for c in colors] == list(DEFAULT_COLORS)

    def test_primary_color_conversions(self):
        """Hex and int forms of the primary color agree."""
        assert primary_color_hex("BOS") == "FCB514"
        assert primary_color_int("BOS") == 0xFCB514
