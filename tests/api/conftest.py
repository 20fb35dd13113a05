"""Fixtures for API tests."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from partsledger.api.main import app


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1", "X-User-Role": "user"}


@pytest.fixture
def manager_headers() -> dict[str, str]:
    return {"X-User-Id": "manager-1", "X-User-Role": "manager"}
