from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from sowcal.db.base import Base
from sowcal.schemas.schedule import DailyMinTemperature
from sowcal.services.store import SqlRecordStore


class FakeWeatherSource:
    """Serves canned (date, min °C) series keyed by year and records every request."""

    def __init__(self, by_year: dict[int, list[tuple[str, object]]] | None = None, error: Exception | None = None):
        self.by_year = by_year or {}
        self.error = error
        self.calls: list[tuple[float, float, date, date]] = []

    async def fetch_daily_min_temperatures(self, lat, lon, date_from, date_to):
        self.calls.append((lat, lon, date_from, date_to))
        if self.error is not None:
            raise self.error
        return [
            DailyMinTemperature(date=date.fromisoformat(d), min_temp_c=v)
            for d, v in self.by_year.get(date_from.year, [])
        ]


class FakeRedis:
    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl


# One database file per test. NullPool gives each session its own connection,
# so concurrent writers lock and retry as they would against a server.
@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def store(session_factory):
    return SqlRecordStore(session_factory)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def tomato_roma():
    return {
        "slug": "tomato-roma",
        "commonName": "Tomato",
        "startOffsetDays": -56,
        "transplantFrom": 14,
        "transplantTo": 28,
        "daysToMaturity": 75,
    }


@pytest.fixture
def weather_source():
    return FakeWeatherSource
