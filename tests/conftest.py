"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import os

# Set required environment variables before any imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from puck_alerts.db import Base
from puck_alerts.db import models  # noqa: F401  register tables with Base.metadata


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """File-backed SQLite database with all tables, one per test.

    A file (rather than ``:memory:``) gives each session its own connection,
    so concurrent passes behave like separate writers.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'puck_alerts.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield factory
    await engine.dispose()


@pytest.fixture
def sample_nhl_goal_play():
    """Goal by Matthews (TOR, home) assisted by Marner, 15:30 into the 2nd."""
    return {
        "eventId": 55,
        "typeCode": 505,
        "typeDescKey": "goal",
        "periodDescriptor": {"number": 2, "periodType": "REG"},
        "timeInPeriod": "15:30",
        "timeRemaining": "04:30",
        "situationCode": "1551",
        "sortOrder": 301,
        "details": {
            "eventOwnerTeamId": 10,
            "scoringPlayerId": 8479318,
            "assist1PlayerId": 8478483,
            "shotType": "wrist",
            "homeScore": 3,
            "awayScore": 1,
        },
    }
