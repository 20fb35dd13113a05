"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio

import partsledger.infrastructure.storage.sqlite as sqlite_module
import partsledger.infrastructure.storage.sqlite.connection as conn_module
from partsledger.core.entities.user import AuthenticatedUser, Role
from partsledger.infrastructure.storage.sqlite.connection import close_pool
from partsledger.infrastructure.storage.sqlite.migrations.migrator import run_migrations


@pytest.fixture
def requester() -> AuthenticatedUser:
    return AuthenticatedUser(id="user-1", role=Role.USER, name="Requester")


@pytest.fixture
def other_user() -> AuthenticatedUser:
    return AuthenticatedUser(id="user-2", role=Role.USER, name="Someone Else")


@pytest.fixture
def manager() -> AuthenticatedUser:
    return AuthenticatedUser(id="manager-1", role=Role.MANAGER, name="Manager")


@pytest.fixture
def admin() -> AuthenticatedUser:
    return AuthenticatedUser(id="admin-1", role=Role.ADMIN, name="Admin")


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 3
    mock.storage.busy_timeout = 5000
    return mock


@pytest_asyncio.fixture
async def ledger_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """
    Temporary database with the real schema applied and the global pool
    pointed at it. Store singletons are reset around each test.
    """
    await run_migrations(temp_db_path)

    conn_module._pool = None
    sqlite_module._part_store = None
    sqlite_module._ledger_store = None
    sqlite_module._order_store = None

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await close_pool()
            sqlite_module._part_store = None
            sqlite_module._ledger_store = None
            sqlite_module._order_store = None
