"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool remains valid across the entire test session.
Requires DATABASE_URL; skipped when it is unset.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    if settings.use_in_memory_store:
        pytest.skip("DATABASE_URL not set; skipping PostgreSQL integration tests")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
