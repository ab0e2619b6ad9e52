"""
Low-level timezone and timestamp utilities.

Domain-agnostic helpers for timezone-aware UTC datetimes plus the NHL
season identifier used by the schedule endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def current_season(now: datetime | None = None) -> int:
    """Return the NHL season id for ``now``, e.g. 20252026.

    The season starts in the fall; anything before September belongs to the
    season that started the previous year.
    """
    anchor = now or now_utc()
    year = anchor.year if anchor.month >= 9 else anchor.year - 1
    return year * 10000 + (year + 1)
