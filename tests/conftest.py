"""Pytest configuration and fixtures."""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from festival_scheduling.core.database import Base, get_db_session
from festival_scheduling.core.settings import get_settings
from festival_scheduling.main import app
from festival_scheduling.models import (
    Artist,
    Festival,
    FestivalEdition,
    FestivalPermission,
    FestivalRole,
    PermissionScope,
    Stage,
    User,
    Venue,
)
from festival_scheduling.models.base import utcnow

# Test database URL (using SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


def utc(hour: int, minute: int = 0, day: int = 1) -> datetime:
    """A UTC timestamp on the test edition's first day."""
    return datetime(2026, 7, day, hour, minute, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_session():
    """Create a test database session on a fresh schema."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


def _user(name: str) -> User:
    email = f"{name}@example.com"
    return User(
        id=uuid.uuid4(),
        email=email,
        email_normalized=User.normalize_email(email),
        display_name=name.replace("_", " ").title(),
    )


def _active_permission(festival_id, user_id, role, scope=PermissionScope.ALL) -> FestivalPermission:
    return FestivalPermission(
        festival_id=festival_id,
        user_id=user_id,
        role=role,
        scope=scope,
        is_pending=False,
        is_revoked=False,
        accepted_at=utcnow(),
    )


@pytest_asyncio.fixture
async def seed(db_session):
    """
    One festival with an edition, a venue with two stages, and a team.

    Only ids are handed out; tests load whatever rows they need.
    """
    users = {
        name: _user(name)
        for name in (
            "owner",
            "admin",
            "manager_schedule",
            "manager_artists",
            "viewer_schedule",
            "outsider",
            "invitee",
        )
    }
    db_session.add_all(users.values())
    await db_session.flush()

    festival = Festival(id=uuid.uuid4(), name="Lakeside Sounds", owner_user_id=users["owner"].id)
    other_festival = Festival(id=uuid.uuid4(), name="Harbour Nights", owner_user_id=users["outsider"].id)
    db_session.add_all([festival, other_festival])
    await db_session.flush()

    edition = FestivalEdition(id=uuid.uuid4(), festival_id=festival.id, name="Summer 2026")
    other_edition = FestivalEdition(id=uuid.uuid4(), festival_id=other_festival.id, name="Winter 2026")
    venue = Venue(id=uuid.uuid4(), festival_id=festival.id, name="Lakeside Park")
    db_session.add_all([edition, other_edition, venue])
    await db_session.flush()

    main_stage = Stage(id=uuid.uuid4(), venue_id=venue.id, name="Main Stage", sort_order=0)
    tent_stage = Stage(id=uuid.uuid4(), venue_id=venue.id, name="Big Tent", sort_order=1)
    headliner = Artist(id=uuid.uuid4(), festival_id=festival.id, name="The Headliners", genre="Rock")
    opener = Artist(id=uuid.uuid4(), festival_id=festival.id, name="Opening Act", genre="Folk")
    foreign_artist = Artist(id=uuid.uuid4(), festival_id=other_festival.id, name="Harbour Band")
    db_session.add_all([main_stage, tent_stage, headliner, opener, foreign_artist])
    await db_session.flush()

    db_session.add_all([
        _active_permission(festival.id, users["owner"].id, FestivalRole.OWNER),
        _active_permission(festival.id, users["admin"].id, FestivalRole.ADMINISTRATOR),
        _active_permission(festival.id, users["manager_schedule"].id, FestivalRole.MANAGER, PermissionScope.SCHEDULE),
        _active_permission(festival.id, users["manager_artists"].id, FestivalRole.MANAGER, PermissionScope.ARTISTS),
        _active_permission(festival.id, users["viewer_schedule"].id, FestivalRole.VIEWER, PermissionScope.SCHEDULE),
        _active_permission(other_festival.id, users["outsider"].id, FestivalRole.OWNER),
    ])
    await db_session.commit()

    return SimpleNamespace(
        festival_id=festival.id,
        other_festival_id=other_festival.id,
        edition_id=edition.id,
        other_edition_id=other_edition.id,
        venue_id=venue.id,
        main_stage_id=main_stage.id,
        tent_stage_id=tent_stage.id,
        headliner_id=headliner.id,
        opener_id=opener.id,
        foreign_artist_id=foreign_artist.id,
        **{f"{name}_id": user.id for name, user in users.items()},
    )


@pytest_asyncio.fixture
async def client(db_session):
    """Create a test client with database dependency override."""

    async def get_test_db():
        yield db_session

    app.dependency_overrides[get_db_session] = get_test_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def make_token(user_id) -> str:
    """Mint a bearer token the way the identity service does."""
    settings = get_settings()
    return jwt.encode(
        {"sub": str(user_id), "email": "tester@example.com"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a given user id."""

    def _headers(user_id) -> dict:
        return {
            "Authorization": f"Bearer {make_token(user_id)}",
            "Content-Type": "application/json",
        }

    return _headers
