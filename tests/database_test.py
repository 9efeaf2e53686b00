from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from fastapi import HTTPException, status
from src.fuel_ledger.database.database import Base, DatabaseManager
from src.fuel_ledger.database.dependencies import verify_database

pytestmark = pytest.mark.asyncio(loop_scope="module")


# Test connect method
@patch("src.fuel_ledger.database.database.engine")
async def test_connect_success(mock_engine):
    DatabaseManager.is_connected = False
    mock_engine.connect.return_value.__aenter__.return_value = AsyncMock()
    await DatabaseManager.connect()
    assert DatabaseManager.is_connected is True


@patch("sqlalchemy.ext.asyncio.engine.AsyncEngine.connect")
async def test_connect_failure(mock_connect):
    DatabaseManager.is_connected = False
    mock_connect.side_effect = SQLAlchemyError("Connection error")
    with pytest.raises(SQLAlchemyError):
        await DatabaseManager.connect()
    assert DatabaseManager.is_connected is False


@patch("sqlalchemy.ext.asyncio.engine.AsyncEngine.connect")
async def test_connect_already_connected(mock_connect, caplog):
    DatabaseManager.is_connected = True
    with caplog.at_level("INFO"):
        await DatabaseManager.connect()
        assert DatabaseManager.is_connected is True
        assert "Already connected to the database" in caplog.text
    mock_connect.assert_not_called()


async def test_disconnect_success():
    DatabaseManager.is_connected = True
    await DatabaseManager.disconnect()
    assert DatabaseManager.is_connected is False


@patch("sqlalchemy.ext.asyncio.engine.AsyncEngine.dispose")
async def test_disconnect_failure(mock_dispose):
    DatabaseManager.is_connected = True
    mock_dispose.side_effect = SQLAlchemyError("Disconnection error")
    with pytest.raises(SQLAlchemyError):
        await DatabaseManager.disconnect()
    assert DatabaseManager.is_connected is True


@patch("src.fuel_ledger.database.database.engine")
async def test_reconnect_success(mock_engine):
    DatabaseManager.is_connected = False
    mock_engine.connect.return_value.__aenter__.return_value = AsyncMock()
    await DatabaseManager.reconnect()
    assert DatabaseManager.is_connected is True


@patch("sqlalchemy.ext.asyncio.engine.AsyncEngine.connect")
async def test_reconnect_failure(mock_connect):
    DatabaseManager.is_connected = False
    with patch.object(DatabaseManager, "retry_interval", 0):
        mock_connect.side_effect = SQLAlchemyError("Reconnection error")
        with pytest.raises(SQLAlchemyError):
            await DatabaseManager.reconnect(max_attempts=2)
    assert mock_connect.call_count == 2


@patch("src.fuel_ledger.database.database.SessionLocal")
async def test_get_client_success(mock_session):
    mock_session.return_value = AsyncMock()
    DatabaseManager.is_connected = True
    session = await DatabaseManager.get_client()
    assert isinstance(session, AsyncMock)


async def test_get_client_failure():
    DatabaseManager.is_connected = False
    with pytest.raises(RuntimeError):
        await DatabaseManager.get_client()


@patch("src.fuel_ledger.database.database.engine")
async def test_create_tables(mock_engine):
    conn = AsyncMock()
    mock_engine.begin.return_value.__aenter__.return_value = conn

    await DatabaseManager.create_tables()

    conn.run_sync.assert_awaited_once_with(Base.metadata.create_all)
    assert {"vehicles", "refuelings"} <= set(Base.metadata.tables)


@patch("src.fuel_ledger.database.dependencies.db.get_client")
async def test_verify_database_yields_and_closes_session(mock_get_client):
    session = AsyncMock()
    mock_get_client.return_value = session
    DatabaseManager.is_connected = True

    dependency = verify_database()
    assert await dependency.__anext__() is session
    await dependency.aclose()

    session.close.assert_awaited_once()


@patch("src.fuel_ledger.database.dependencies.db.get_client")
@patch("src.fuel_ledger.database.dependencies.db.reconnect")
async def test_verify_database_reconnect_success(mock_reconnect, mock_get_client):
    DatabaseManager.is_connected = False
    mock_get_client.return_value = AsyncMock()

    dependency = verify_database()
    session = await dependency.__anext__()

    assert isinstance(session, AsyncMock)
    mock_reconnect.assert_awaited_once()
    await dependency.aclose()


@patch("src.fuel_ledger.database.dependencies.db.reconnect")
async def test_verify_database_reconnect_failure(mock_reconnect):
    DatabaseManager.is_connected = False
    mock_reconnect.side_effect = SQLAlchemyError("Reconnection error")
    with pytest.raises(HTTPException) as exc_info:
        await verify_database().__anext__()
    assert exc_info.value.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
