"""Pytest configuration and shared fixtures.

This module provides:
- Settings pointing at an in-memory SQLite database
- Async session fixtures for repository tests (fresh schema per test)
- Mocked collaborators (object store, notifier) for service tests
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

from collections.abc import AsyncGenerator
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import app.domain  # noqa: F401
from app.core.config import Settings
from app.db.base import Base
from app.repositories.object_store import UploadInfo

TEST_DATABASE_URL = "sqlite+aiosqlite://"
SIGNED_URL_HOST = "https://signed.test"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        s3_bucket_name="hewpao-s3",
        s3_expiration="15m",
        notification_webhook_url=None,
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


# =============================================================================
# Collaborator Mocks
# =============================================================================


def fake_signed_url(bucket: str, object_name: str, expires: timedelta) -> str:
    return f"{SIGNED_URL_HOST}/{bucket}/{object_name}?expires={int(expires.total_seconds())}"


@pytest.fixture
def object_store() -> AsyncMock:
    """Object store that echoes uploads back and signs deterministic URLs."""
    store = AsyncMock()
    store.upload_file.side_effect = (
        lambda filename, reader, size, content_type, folder: UploadInfo(
            bucket="hewpao-s3", key=f"{folder}/{filename}", size=size
        )
    )
    store.get_signed_url.side_effect = fake_signed_url
    return store


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()
