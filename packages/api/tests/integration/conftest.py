# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container provides PostgreSQL; the schema is built by
running the Alembic migrations. Each test gets a session factory on the
migrated database and every table is truncated afterwards.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from db import User
from db.enums import UserRole
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

_DB_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "..", "db")

# ---------------------------------------------------------------------------
# Session-scoped: container + migrations + engine
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_container():
    """Start postgres:16 via testcontainers."""
    with PostgresContainer(
        image="postgres:16-alpine",
        username="test",
        password="test",
        dbname="test",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def _run_migrations(db_url):
    """Run alembic upgrade head against the container."""
    from alembic import command
    from alembic.config import Config

    os.environ["DATABASE_URL"] = db_url
    alembic_cfg = Config(os.path.join(_DB_DIR, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(_DB_DIR, "alembic"))
    command.upgrade(alembic_cfg, "head")


@pytest.fixture(scope="session")
def async_engine(db_url, _run_migrations):
    """Async engine pointing at the test container.

    NullPool keeps connections from outliving the per-test event loop.
    """
    return create_async_engine(db_url, echo=False, poolclass=NullPool)


# ---------------------------------------------------------------------------
# Function-scoped
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def session_factory(async_engine):
    yield async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_engine.begin() as conn:
        await conn.execute(
            text(
                "TRUNCATE audit_events, kyc_references, kyc_documents, kyc_status, users "
                "RESTART IDENTITY CASCADE"
            )
        )


@pytest_asyncio.fixture
async def driver(session_factory):
    """A registered, not yet verified driver."""
    async with session_factory() as session:
        user = User(
            id="driver-1",
            phone="+221770000001",
            full_name="Awa Diallo",
            user_type=UserRole.DRIVER,
            is_driver=True,
            driver_verified=False,
        )
        session.add(user)
        await session.commit()
    return user


@pytest.fixture
def storage():
    """Artifact store double: every key exists."""
    fake = MagicMock()
    fake.exists = AsyncMock(return_value=True)
    return fake
