from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fakes import FakeScheduleStore
from schedule_assistant.db.base import Base
from schedule_assistant.db.session import build_engine, build_session_factory
from schedule_assistant.main import app
from schedule_assistant.models import *  # noqa: F401,F403

TEST_DB_URL = os.getenv("TEST_DATABASE_URL")


@pytest.fixture()
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture()
def store() -> FakeScheduleStore:
    return FakeScheduleStore()


@pytest.fixture()
async def app_client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    if not TEST_DB_URL:
        pytest.skip("TEST_DATABASE_URL is not set")

    engine = build_engine(TEST_DB_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    try:
        async with build_session_factory(engine)() as session:
            yield session
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()
