from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fuel_ledger.vehicles.models import VehicleModel


class IVehicleRepository(ABC):
    @abstractmethod
    async def exists(self, db: AsyncSession, vehicle_id: str) -> bool:
        pass

    @abstractmethod
    async def get(self, db: AsyncSession, vehicle_id: str) -> Optional[VehicleModel]:
        pass

    @abstractmethod
    async def get_by_plate(self, db: AsyncSession, plate: str) -> Optional[VehicleModel]:
        pass

    @abstractmethod
    async def get_plates(
        self, db: AsyncSession, vehicle_ids: Iterable[str]
    ) -> Dict[str, str]:
        pass

    @abstractmethod
    async def list_all(self, db: AsyncSession) -> List[VehicleModel]:
        pass

    @abstractmethod
    async def create(self, db: AsyncSession, vehicle: VehicleModel) -> VehicleModel:
        pass

    @abstractmethod
    async def update(
        self, db: AsyncSession, vehicle: VehicleModel, values: Dict[str, Any]
    ) -> VehicleModel:
        pass

    @abstractmethod
    async def delete(self, db: AsyncSession, vehicle: VehicleModel) -> None:
        pass


class VehicleRepository(IVehicleRepository):
    async def exists(self, db: AsyncSession, vehicle_id: str) -> bool:
        q = await db.execute(
            select(VehicleModel.id).where(VehicleModel.id == vehicle_id).limit(1)
        )
        return q.scalars().first() is not None

    async def get(self, db: AsyncSession, vehicle_id: str) -> Optional[VehicleModel]:
        q = await db.execute(select(VehicleModel).where(VehicleModel.id == vehicle_id))
        return q.scalar_one_or_none()

    async def get_by_plate(self, db: AsyncSession, plate: str) -> Optional[VehicleModel]:
        q = await db.execute(select(VehicleModel).where(VehicleModel.plate == plate))
        return q.scalar_one_or_none()

    async def get_plates(
        self, db: AsyncSession, vehicle_ids: Iterable[str]
    ) -> Dict[str, str]:
        ids = list(vehicle_ids)
        if not ids:
            return {}
        q = await db.execute(
            select(VehicleModel.id, VehicleModel.plate).where(VehicleModel.id.in_(ids))
        )
        return {row.id: row.plate for row in q.all()}

    async def list_all(self, db: AsyncSession) -> List[VehicleModel]:
        q = await db.execute(
            select(VehicleModel).order_by(VehicleModel.created_at.desc())
        )
        return list(q.scalars().all())

    async def create(self, db: AsyncSession, vehicle: VehicleModel) -> VehicleModel:
        db.add(vehicle)
        await self._commit(db)
        await db.refresh(vehicle)
        return vehicle

    async def update(
        self, db: AsyncSession, vehicle: VehicleModel, values: Dict[str, Any]
    ) -> VehicleModel:
        for field, value in values.items():
            setattr(vehicle, field, value)
        await self._commit(db)
        await db.refresh(vehicle)
        return vehicle

    async def delete(self, db: AsyncSession, vehicle: VehicleModel) -> None:
        await db.delete(vehicle)
        await db.commit()

    async def _commit(self, db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise
