from contextlib import asynccontextmanager
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from tenacity import wait_none

from src.fuel_ledger.cache.redis import redis_manager
from src.fuel_ledger.database.database import Base
from src.fuel_ledger.database.dependencies import verify_database
from src.fuel_ledger.main import app
from src.fuel_ledger.refuelings.dependencies import get_ledger_service
from src.fuel_ledger.refuelings.enums import FuelType
from src.fuel_ledger.refuelings.schemas import RefuelingCreate
from src.fuel_ledger.refuelings.services import LedgerService
from src.fuel_ledger.statistics.dependencies import get_statistics_service
from src.fuel_ledger.statistics.services import StatisticsService
from src.fuel_ledger.vehicles.dependencies import get_vehicle_service
from src.fuel_ledger.vehicles.models import VehicleModel
from src.fuel_ledger.vehicles.services import VehicleService
from tests.mocks.config_mocks import mock_get_settings  # noqa: F401
from tests.mocks.fake_repositories import (
    InMemoryRefuelingRepository,
    InMemoryVehicleRepository,
)

# -----------------------------------------------------------------------------
# LEDGER FIXTURES
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def no_redis():
    redis_manager.redis_client = None
    yield
    redis_manager.redis_client = None


@pytest.fixture
def db_session():
    return AsyncMock()


@pytest.fixture
def refueling_repo():
    return InMemoryRefuelingRepository()


@pytest.fixture
def vehicle_repo():
    return InMemoryVehicleRepository()


@pytest.fixture
def vehicle(vehicle_repo):
    return vehicle_repo.add("ABC1D23", vehicle_id="vehicle-v")


@pytest.fixture
def on_change():
    return AsyncMock()


@pytest.fixture
def ledger(refueling_repo, vehicle_repo, on_change):
    return LedgerService(
        refueling_repo, vehicle_repo, on_change=on_change, retry_wait=wait_none()
    )


@pytest.fixture
def statistics(refueling_repo, vehicle_repo):
    return StatisticsService(refueling_repo, vehicle_repo)


@pytest.fixture
def refueling_payload():
    def _payload(
        odometer: float,
        liters: float,
        vehicle_id: str = "vehicle-v",
        date: datetime | None = None,
        cost_per_liter: float = 5.5,
        total_cost: float | None = None,
        fuel_type: FuelType = FuelType.GASOLINE,
    ) -> RefuelingCreate:
        return RefuelingCreate(
            vehicle_id=vehicle_id,
            date=date or datetime(2025, 3, 1, 9, 0),
            odometer=odometer,
            liters=liters,
            cost_per_liter=cost_per_liter,
            total_cost=total_cost if total_cost is not None else liters * cost_per_liter,
            fuel_type=fuel_type,
            driver="Ana Souza",
        )

    return _payload


# -----------------------------------------------------------------------------
# SQLITE DATABASE FOR REPOSITORY TESTING
# -----------------------------------------------------------------------------


@pytest.fixture
async def sqlite_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def sessions(sqlite_engine):
    """Session factory on a file database so two sessions can interleave."""
    factory = async_sessionmaker(
        sqlite_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with factory() as session:
        session.add(VehicleModel(id="vehicle-v", plate="ABC1D23"))
        session.add(VehicleModel(id="vehicle-w", plate="XYZ9K88"))
        await session.commit()
    return factory


# -----------------------------------------------------------------------------
# FASTAPI CLIENT FOR API TESTING
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_openapi_schema():
    app.openapi_schema = None
    yield
    app.openapi_schema = None


@pytest.fixture(scope="function")
async def async_client(ledger, statistics, vehicle_repo, db_session):
    """
    Async client with the lifespan stubbed out and services backed by the
    in-memory repositories.
    """

    @asynccontextmanager
    async def test_lifespan(_):
        yield

    async def override_database():
        yield db_session

    app.router.lifespan_context = test_lifespan
    app.dependency_overrides[verify_database] = override_database
    app.dependency_overrides[get_ledger_service] = lambda: ledger
    app.dependency_overrides[get_statistics_service] = lambda: statistics
    app.dependency_overrides[get_vehicle_service] = lambda: VehicleService(
        vehicle_repo, on_change=AsyncMock()
    )
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    app.dependency_overrides.clear()
