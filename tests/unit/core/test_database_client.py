"""Tests for the database client used by the lifespan and /health."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from documents_view.core import database
from documents_view.core.database import DatabaseClient


@pytest.fixture
def client():
    engine = MagicMock()
    engine.pool.status.return_value = "Pool size: 10  Connections in pool: 1"
    return DatabaseClient(engine)


@pytest.mark.asyncio
async def test_health_reports_pool(client):
    client._ping = AsyncMock(return_value=True)

    health = await client.health_check()

    assert health["status"] == "healthy"
    assert health["connected"] is True
    assert health["pool"].startswith("Pool size")


@pytest.mark.asyncio
async def test_health_when_database_unreachable(client):
    client._ping = AsyncMock(side_effect=OperationalError("SELECT 1", {}, ConnectionRefusedError()))

    health = await client.health_check()

    assert health["status"] == "unhealthy"
    assert health["connected"] is False
    assert "error" in health


@pytest.mark.asyncio
async def test_init_without_table_creation(monkeypatch):
    connect = AsyncMock()
    create_tables = AsyncMock()
    monkeypatch.setattr(database.db_client, "connect", connect)
    monkeypatch.setattr(database.db_client, "create_tables", create_tables)

    await database.init_database(create_tables=False)

    connect.assert_awaited_once()
    create_tables.assert_not_awaited()


@pytest.mark.asyncio
async def test_close_disposes_engine(client):
    client.engine.dispose = AsyncMock()

    await client.disconnect()

    client.engine.dispose.assert_awaited_once()
