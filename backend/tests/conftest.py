"""
Pytest fixtures for test database, client, and authenticated actors.

Runs against an in-memory SQLite database (aiosqlite). Tables are created
and dropped per test. Every HTTP request gets its own session that commits
or rolls back, like production; fixtures seed data through `db_session`.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("SESSION_STORE", "memory")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, datetime, timedelta
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from facility_booking.main import app
from facility_booking.db.base import Base
from facility_booking.db.session import get_db
from facility_booking.core.security import hash_password
from facility_booking.models.facility import Facility
from facility_booking.models.group import Group
from facility_booking.models.user import User, UserRole
from facility_booking.services import cache_service
from facility_booking.services.cache_service import discard_stale_calendars, invalidate_stale_calendars
from facility_booking.services.session_service import start_session

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "testpassword123"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

BOOKING_DAY = date.today() + timedelta(days=14)


def slot(start_hour: int, end_hour: int, day: date = BOOKING_DAY, title: str = "Team sync") -> dict:
    """Booking request body for [start_hour, end_hour) on `day`."""
    start = datetime(day.year, day.month, day.day, start_hour)
    end = datetime(day.year, day.month, day.day, end_hour)
    return {
        "title": title,
        "purpose": "Weekly planning",
        "date": day.isoformat(),
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
        "color": "#3b82f6",
    }


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each run in a fresh session on the test database."""

    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                discard_stale_calendars(session)
                await session.rollback()
                raise
            await invalidate_stale_calendars(session)

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(
        employee_id: int,
        name: str,
        role: UserRole = UserRole.EMPLOYEE,
        group: Optional[Group] = None,
    ) -> User:
        user = User(
            employee_id=employee_id,
            name=name,
            hashed_password=hash_password(TEST_PASSWORD),
            role=role,
            group_id=group.id if group else None,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def make_facility(db_session: AsyncSession) -> Callable[..., Awaitable[Facility]]:
    async def _make(slug: str, name: str, manager: Optional[User] = None, is_active: bool = True) -> Facility:
        facility = Facility(
            name=name,
            slug=slug,
            icon=f"/icons/{slug}.svg",
            is_active=is_active,
            manager_id=manager.id if manager else None,
        )
        db_session.add(facility)
        await db_session.commit()
        await db_session.refresh(facility)
        return facility

    return _make


@pytest_asyncio.fixture
async def engineering(db_session: AsyncSession) -> Group:
    group = Group(name="Engineering")
    db_session.add(group)
    await db_session.commit()
    await db_session.refresh(group)
    return group


@pytest_asyncio.fixture
async def marketing(db_session: AsyncSession) -> Group:
    group = Group(name="Marketing")
    db_session.add(group)
    await db_session.commit()
    await db_session.refresh(group)
    return group


@pytest_asyncio.fixture
async def employee(make_user, engineering) -> User:
    return await make_user(1001, "Ada Employee", group=engineering)


@pytest_asyncio.fixture
async def colleague(make_user, engineering) -> User:
    return await make_user(1002, "Grace Colleague", group=engineering)


@pytest_asyncio.fixture
async def outsider(make_user, marketing) -> User:
    return await make_user(2001, "Max Outsider", group=marketing)


@pytest_asyncio.fixture
async def group_director(make_user, engineering) -> User:
    return await make_user(1100, "Linus Director", role=UserRole.GROUP_DIRECTOR, group=engineering)


@pytest_asyncio.fixture
async def other_director(make_user, marketing) -> User:
    return await make_user(2100, "Mona Director", role=UserRole.GROUP_DIRECTOR, group=marketing)


@pytest_asyncio.fixture
async def facility_manager(make_user) -> User:
    return await make_user(3001, "Fay Manager", role=UserRole.FACILITY_MANAGER)


@pytest_asyncio.fixture
async def other_manager(make_user) -> User:
    return await make_user(3002, "Gil Manager", role=UserRole.FACILITY_MANAGER)


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(9001, "Root Admin", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def auditorium(make_facility, facility_manager) -> Facility:
    return await make_facility("auditorium", "Auditorium", manager=facility_manager)


@pytest_asyncio.fixture
async def gym(make_facility, other_manager) -> Facility:
    return await make_facility("gym", "Gym", manager=other_manager)


@pytest_asyncio.fixture
async def headers_for() -> Callable[[User], Awaitable[dict]]:
    """Session cookie headers for a user, as issued by a successful login."""

    async def _headers(user: User) -> dict:
        session_id = await start_session(user.employee_id)
        return {"Cookie": f"sid={session_id}"}

    return _headers


@pytest_asyncio.fixture
async def create_booking(client: AsyncClient, headers_for):
    """POST a booking request as `user` and return its JSON."""

    async def _create(user: User, facility_slug: str, body: Optional[dict] = None) -> dict:
        response = await client.post(
            f"/api/v1/facility/{facility_slug}",
            json=body or slot(9, 10),
            headers=await headers_for(user),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


class RecordingRedis:
    """
    Dict-backed stand-in for the few redis.asyncio calls the calendar cache
    makes. `calls` keeps (command, key) pairs in order.
    """

    def __init__(self):
        self.store: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    async def get(self, key):
        self.calls.append(("get", key))
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.calls.append(("setex", key))
        self.store[key] = value

    async def delete(self, key):
        self.calls.append(("delete", key))
        return 1 if self.store.pop(key, None) is not None else 0

    async def info(self, section=None):
        return {"keyspace_hits": 0, "keyspace_misses": 0}


@pytest.fixture
def calendar_cache(monkeypatch) -> RecordingRedis:
    """Route the calendar cache to an in-process RecordingRedis."""
    fake = RecordingRedis()

    async def _get_redis():
        return fake

    monkeypatch.setattr(cache_service, "get_redis", _get_redis)
    return fake
