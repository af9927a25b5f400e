"""
CV Site Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets a fresh in-memory SQLite database (aiosqlite, one
       connection shared through StaticPool) with every table created from
       Base.metadata. HTTP tests talk to the ASGI app through httpx's
       ASGITransport with get_db_session overridden to use that database.

Fixture Hierarchy:
    db_engine          in-memory engine + schema
    └── session_factory
        ├── db_session     one session for repository-level tests
        ├── seed           commits ORM records before a request runs
        └── app_client     AsyncClient factory for any FastAPI app
            └── client     AsyncClient for cvsite.main.app
"""

import json
import os

# Override settings for testing BEFORE any cvsite imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MAX_PAGE_SIZE"] = "50"
os.environ["INITIAL_STATE"] = json.dumps(
    {"cv": {"summary": "Backend engineer", "skills": None, "education": [{"school": "MIT"}]}}
)

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cvsite.database import Base, get_db_session
import cvsite.models  # noqa: F401


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed(session_factory) -> Callable:
    """
    Inserts records and commits them.

    Usage:
        python, go = await seed(Skill(name="Python"), Skill(name="Go"))
    """

    async def _seed(*records):
        async with session_factory() as session:
            session.add_all(records)
            await session.commit()
        return records

    return _seed


@pytest.fixture
def app_client(session_factory) -> Callable[[FastAPI], AsyncClient]:
    """
    Returns a factory producing an AsyncClient bound to the test database.

    Usage:
        async with app_client(app) as client:
            response = await client.get("/things/")
    """

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _client(app: FastAPI) -> AsyncClient:
        app.dependency_overrides[get_db_session] = override_db_session
        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://test")

    return _client


@pytest_asyncio.fixture
async def client(app_client):
    """AsyncClient for the real application (skills and projects routers)."""
    from cvsite.main import app

    async with app_client(app) as client:
        yield client
    app.dependency_overrides.clear()
