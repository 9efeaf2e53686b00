import logging
from typing import Awaitable, Callable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fuel_ledger.cache.decorators import invalidate_vehicle_summaries
from src.fuel_ledger.vehicles.exceptions import (
    DuplicatePlateException,
    VehicleNotFoundException,
    VehicleValidationException,
)
from src.fuel_ledger.vehicles.models import VehicleModel
from src.fuel_ledger.vehicles.repositories import IVehicleRepository
from src.fuel_ledger.vehicles.schemas import VehicleCreate, VehicleUpdate

logger = logging.getLogger(__name__)

# Fields a partial update may explicitly set to null.
NULLABLE_FIELDS = {"model", "brand", "year", "km"}


class VehicleService:
    def __init__(
        self,
        vehicle_repo: IVehicleRepository,
        on_change: Callable[[str], Awaitable[object]] = invalidate_vehicle_summaries,
    ):
        self._repo = vehicle_repo
        self._on_change = on_change

    async def list_vehicles(self, db: AsyncSession) -> List[VehicleModel]:
        return await self._repo.list_all(db)

    async def get_vehicle(self, db: AsyncSession, vehicle_id: str) -> VehicleModel:
        vehicle = await self._repo.get(db, vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundException(vehicle_id)
        return vehicle

    async def create_vehicle(
        self, db: AsyncSession, payload: VehicleCreate
    ) -> VehicleModel:
        if await self._repo.get_by_plate(db, payload.plate):
            raise DuplicatePlateException(payload.plate)
        try:
            vehicle = await self._repo.create(db, VehicleModel(**payload.model_dump()))
        except IntegrityError as e:
            # Plate taken by a concurrent registration
            logger.warning("Integrity error registering %s: %s", payload.plate, e)
            raise DuplicatePlateException(payload.plate) from e
        logger.info("Registered vehicle %s (%s)", vehicle.id, vehicle.plate)
        return vehicle

    async def update_vehicle(
        self, db: AsyncSession, vehicle_id: str, payload: VehicleUpdate
    ) -> VehicleModel:
        values = payload.model_dump(exclude_unset=True)
        nulls = sorted(
            field
            for field, value in values.items()
            if value is None and field not in NULLABLE_FIELDS
        )
        if nulls:
            raise VehicleValidationException(f"{', '.join(nulls)} cannot be null")

        vehicle = await self.get_vehicle(db, vehicle_id)
        plate = values.get("plate")
        plate_changed = plate is not None and plate != vehicle.plate
        if plate_changed:
            other = await self._repo.get_by_plate(db, plate)
            if other is not None and other.id != vehicle.id:
                raise DuplicatePlateException(plate)

        try:
            vehicle = await self._repo.update(db, vehicle, values)
        except IntegrityError as e:
            logger.warning("Integrity error updating vehicle %s: %s", vehicle_id, e)
            raise DuplicatePlateException(plate or "") from e

        # Cached summaries carry the plate
        if plate_changed:
            await self._on_change(vehicle_id)
        return vehicle

    async def delete_vehicle(self, db: AsyncSession, vehicle_id: str) -> None:
        vehicle = await self.get_vehicle(db, vehicle_id)
        await self._repo.delete(db, vehicle)
        logger.info("Deleted vehicle %s and its refuelings", vehicle_id)
        await self._on_change(vehicle_id)
