"""Shared fixtures: an in-memory SQLite database seeded with guides and stores."""

import fnmatch

import pytest
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from tourism_api.models import SponsorStore, TourismGuide
from tourism_api.services.access import Actor, AdminRole
from tourism_api.services.payout_service import PayoutService
from tourism_api.stores.postgres import Database


@pytest.fixture
async def db():
    """Fresh schema per test, seeded with marketplace guides and stores."""
    database = Database.from_url(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(database.engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await database.create_tables()

    async with database.session() as session:
        session.add_all(
            [
                TourismGuide(id="g1", guide_name="Aiko", dashboard_key="key-g1", status="active"),
                TourismGuide(id="g2", guide_name="Ben", dashboard_key="key-g2", status="active"),
                TourismGuide(
                    id="g3",
                    guide_name="Chen",
                    dashboard_key="key-g3",
                    status="inactive",
                    is_available=False,
                ),
                SponsorStore(id="s1", store_name="Harbor Cafe", status="active"),
                SponsorStore(id="s2", store_name="Kimono Rental", status="active"),
                SponsorStore(id="s3", store_name="Onsen Inn", status="pending", is_active=True),
                SponsorStore(id="s4", store_name="Closed Shop", status="suspended", is_active=False),
            ]
        )

    yield database
    await database.dispose()


@pytest.fixture
async def session(db: Database):
    async with db.session() as s:
        yield s


@pytest.fixture
def service(db: Database) -> PayoutService:
    return PayoutService(db)


@pytest.fixture
def support() -> Actor:
    return Actor(user="help@example.com", role=AdminRole.SUPPORT)


@pytest.fixture
def operator() -> Actor:
    return Actor(user="ops@example.com", role=AdminRole.OPERATOR)


@pytest.fixture
def admin() -> Actor:
    return Actor(user="root@example.com", role=AdminRole.ADMIN)


class FakeRedis:
    """In-process stand-in for the redis.asyncio client calls RedisStore makes."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.data.pop(key, None) is not None else 0

    async def scan_iter(self, match: str = "*", count: int | None = None):
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
