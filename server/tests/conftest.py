"""Test configuration and fixtures."""

import os

# Must be set before tours_api builds its global engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tours_api.core.database import Base, build_engine, build_session_factory, get_db
from tours_api.models import *  # noqa: F403 - Import all models

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine with the query hooks attached."""
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async with build_session_factory(test_engine)() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create the application with its database dependency bound to the test session."""
    from tours_api.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_tour_data():
    """A valid tour as sent over the API (camelCase)."""
    return {
        "name": "The Forest Hiker",
        "duration": 5,
        "maxGroupSize": 25,
        "difficulty": "easy",
        "price": 397,
        "summary": "  Breathtaking hike through the Canadian Banff National Park  ",
        "description": "A long walk in the woods.",
        "imageCover": "tour-1-cover.jpg",
        "images": ["tour-1-1.jpg", "tour-1-2.jpg"],
        "startDates": ["2026-04-25T09:00:00Z", "2026-07-20T09:00:00Z"],
    }


@pytest.fixture
def tour_values():
    """Factory of valid tour values keyed by model attribute."""
    def make(**overrides):
        values = {
            "name": "The Sea Explorer",
            "duration": 7,
            "max_group_size": 15,
            "difficulty": "medium",
            "price": 497,
            "summary": "Exploring the jaw-dropping US east coast",
            "image_cover": "tour-2-cover.jpg",
        }
        values.update(overrides)
        return values

    return make
