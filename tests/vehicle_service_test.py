from unittest.mock import AsyncMock

import pytest

from src.fuel_ledger.vehicles.exceptions import (
    DuplicatePlateException,
    VehicleValidationException,
)
from src.fuel_ledger.vehicles.schemas import VehicleCreate, VehicleUpdate
from src.fuel_ledger.vehicles.services import VehicleService


@pytest.fixture
def vehicle_changes():
    return AsyncMock()


@pytest.fixture
def vehicles(vehicle_repo, vehicle_changes):
    return VehicleService(vehicle_repo, on_change=vehicle_changes)


async def test_concurrent_registration_maps_to_duplicate_plate(
    vehicles, vehicle_repo, db_session
):
    vehicle_repo.racing_plates.add("QRS4T56")

    with pytest.raises(DuplicatePlateException) as exc:
        await vehicles.create_vehicle(db_session, VehicleCreate(plate="QRS4T56"))
    assert exc.value.status_code == 409


async def test_concurrent_plate_change_maps_to_duplicate_plate(
    vehicles, vehicle_repo, vehicle, db_session, vehicle_changes
):
    vehicle_repo.racing_plates.add("QRS4T56")

    with pytest.raises(DuplicatePlateException):
        await vehicles.update_vehicle(
            db_session, vehicle.id, VehicleUpdate(plate="QRS4T56")
        )
    vehicle_changes.assert_not_awaited()


async def test_null_for_required_field_rejected(vehicles, vehicle, db_session):
    with pytest.raises(VehicleValidationException) as exc:
        await vehicles.update_vehicle(
            db_session, vehicle.id, VehicleUpdate(plate=None, status=None)
        )
    assert exc.value.status_code == 400
    assert vehicle.plate == "ABC1D23"


async def test_plate_change_invalidates_summaries(
    vehicles, vehicle, db_session, vehicle_changes
):
    updated = await vehicles.update_vehicle(
        db_session, vehicle.id, VehicleUpdate(plate="QRS4T56")
    )

    assert updated.plate == "QRS4T56"
    vehicle_changes.assert_awaited_once_with(vehicle.id)


async def test_other_changes_keep_summaries(
    vehicles, vehicle, db_session, vehicle_changes
):
    await vehicles.update_vehicle(
        db_session, vehicle.id, VehicleUpdate(km=1500, plate="ABC1D23")
    )
    vehicle_changes.assert_not_awaited()


async def test_delete_invalidates_summaries(
    vehicles, vehicle, vehicle_repo, db_session, vehicle_changes
):
    await vehicles.delete_vehicle(db_session, vehicle.id)

    assert vehicle.id not in vehicle_repo.vehicles
    vehicle_changes.assert_awaited_once_with(vehicle.id)
