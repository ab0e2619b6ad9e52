"""Team color palettes for webhook payloads.

RGB triples (primary, secondary, tertiary) suitable for LED lights and
smart-home integrations; the primary color also tints Discord embeds.
Pure lookup module with no I/O.
"""

from __future__ import annotations

from ..models.events import RgbColor

RGB = tuple[int, int, int]

DEFAULT_COLORS: tuple[RGB, ...] = ((255, 255, 255), (200, 200, 200), (255, 255, 255))

TEAM_COLORS: dict[str, tuple[RGB, ...]] = {
    "ANA": ((252, 76, 2), (177, 152, 113), (0, 0, 0)),
    "ARI": ((140, 38, 51), (226, 214, 181), (0, 0, 0)),
    "UTA": ((140, 38, 51), (226, 214, 181), (0, 0, 0)),
    "BOS": ((252, 181, 20), (0, 0, 0), (255, 255, 255)),
    "BUF": ((0, 38, 84), (252, 181, 20), (255, 255, 255)),
    "CGY": ((210, 0, 28), (250, 175, 25), (255, 255, 255)),
    "CAR": ((206, 17, 38), (0, 0, 0), (255, 255, 255)),
    "CHI": ((207, 10, 44), (0, 0, 0), (255, 255, 255)),
    "COL": ((111, 38, 61), (35, 97, 146), (255, 255, 255)),
    "CBJ": ((0, 38, 84), (206, 17, 38), (255, 255, 255)),
    "DAL": ((0, 104, 71), (0, 0, 0), (255, 255, 255)),
    "DET": ((206, 17, 38), (255, 255, 255), (206, 17, 38)),
    "EDM": ((4, 30, 66), (252, 76, 2), (255, 255, 255)),
    "FLA": ((200, 16, 46), (4, 30, 66), (185, 151, 91)),
    "LAK": ((162, 170, 173), (0, 0, 0), (255, 255, 255)),
    "MIN": ((2, 73, 48), (175, 35, 36), (237, 170, 0)),
    "MTL": ((175, 30, 45), (25, 33, 104), (255, 255, 255)),
    "NSH": ((255, 184, 28), (4, 30, 66), (255, 255, 255)),
    "NJD": ((206, 17, 38), (0, 0, 0), (255, 255, 255)),
    "NYI": ((0, 83, 155), (244, 125, 48), (255, 255, 255)),
    "NYR": ((0, 56, 168), (206, 17, 38), (255, 255, 255)),
    "OTT": ((200, 16, 46), (198, 146, 20), (0, 0, 0)),
    "PHI": ((247, 73, 2), (0, 0, 0), (255, 255, 255)),
    "PIT": ((252, 181, 20), (0, 0, 0), (255, 255, 255)),
    "SJS": ((0, 109, 117), (0, 0, 0), (255, 255, 255)),
    "SEA": ((0, 22, 40), (153, 217, 217), (227, 79, 65)),
    "STL": ((0, 47, 135), (252, 181, 20), (255, 255, 255)),
    "TBL": ((0, 40, 104), (255, 255, 255), (0, 40, 104)),
    "TOR": ((0, 32, 91), (255, 255, 255), (0, 32, 91)),
    "VAN": ((0, 32, 91), (10, 134, 61), (255, 255, 255)),
    "VGK": ((185, 151, 91), (51, 63, 72), (0, 0, 0)),
    "WSH": ((200, 16, 46), (4, 30, 66), (255, 255, 255)),
    "WPG": ((4, 30, 66), (0, 76, 151), (255, 255, 255)),
}


def get_team_colors(team_abbrev: str | None) -> list[RgbColor]:
    """Palette for a team; unknown teams get a white flash."""
    triples = TEAM_COLORS.get((team_abbrev or "").upper(), DEFAULT_COLORS)
    return [RgbColor(r=r, g=g, b=b) for r, g, b in triples]


def rgb_to_hex(color: RgbColor) -> str:
    """'RRGGBB' without the leading '#'."""
    return f"{color.r:02X}{color.g:02X}{color.b:02X}"


def primary_color_hex(team_abbrev: str | None) -> str:
    return rgb_to_hex(get_team_colors(team_abbrev)[0])


def primary_color_int(team_abbrev: str | None) -> int:
    primary = get_team_colors(team_abbrev)[0]
    return (primary.r << 16) | (primary.g << 8) | primary.b
