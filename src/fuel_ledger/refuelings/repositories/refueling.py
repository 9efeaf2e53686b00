import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.fuel_ledger.refuelings.models import RefuelingModel
from src.fuel_ledger.refuelings.repositories.interface import IRefuelingRepository
from src.fuel_ledger.refuelings.schemas import RefuelingFilter
from src.fuel_ledger.vehicles.models import VehicleModel

logger = logging.getLogger(__name__)


class RefuelingRepository(IRefuelingRepository):
    @asynccontextmanager
    async def transaction(self, db: AsyncSession) -> AsyncIterator[None]:
        try:
            yield
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def lock_vehicle(self, db: AsyncSession, vehicle_id: str) -> None:
        await db.execute(
            select(VehicleModel.id)
            .where(VehicleModel.id == vehicle_id)
            .with_for_update()
        )

    async def get(self, db: AsyncSession, refueling_id: str) -> Optional[RefuelingModel]:
        q = await db.execute(
            select(RefuelingModel)
            .where(RefuelingModel.id == refueling_id)
            .execution_options(populate_existing=True)
        )
        return q.scalar_one_or_none()

    async def find_preceding(
        self,
        db: AsyncSession,
        vehicle_id: str,
        odometer: float,
        exclude_id: Optional[str] = None,
    ) -> Optional[RefuelingModel]:
        stmt = select(RefuelingModel).where(
            RefuelingModel.vehicle_id == vehicle_id,
            RefuelingModel.odometer < odometer,
        )
        if exclude_id:
            stmt = stmt.where(RefuelingModel.id != exclude_id)
        q = await db.execute(
            stmt.order_by(RefuelingModel.odometer.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return q.scalars().first()

    async def find_succeeding(
        self,
        db: AsyncSession,
        vehicle_id: str,
        odometer: float,
        exclude_id: Optional[str] = None,
    ) -> Optional[RefuelingModel]:
        stmt = select(RefuelingModel).where(
            RefuelingModel.vehicle_id == vehicle_id,
            RefuelingModel.odometer > odometer,
        )
        if exclude_id:
            stmt = stmt.where(RefuelingModel.id != exclude_id)
        q = await db.execute(
            stmt.order_by(RefuelingModel.odometer.asc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return q.scalars().first()

    async def find_by_odometer(
        self,
        db: AsyncSession,
        vehicle_id: str,
        odometer: float,
        exclude_id: Optional[str] = None,
    ) -> Optional[RefuelingModel]:
        stmt = select(RefuelingModel).where(
            RefuelingModel.vehicle_id == vehicle_id,
            RefuelingModel.odometer == odometer,
        )
        if exclude_id:
            stmt = stmt.where(RefuelingModel.id != exclude_id)
        q = await db.execute(stmt.limit(1).execution_options(populate_existing=True))
        return q.scalars().first()

    async def insert(self, db: AsyncSession, event: RefuelingModel) -> RefuelingModel:
        db.add(event)
        await db.flush()
        logger.debug("Inserted refueling %s for vehicle %s", event.id, event.vehicle_id)
        return event

    async def update(
        self, db: AsyncSession, event: RefuelingModel, values: Dict[str, Any]
    ) -> RefuelingModel:
        for field, value in values.items():
            setattr(event, field, value)
        await db.flush()
        return event

    async def delete(self, db: AsyncSession, event: RefuelingModel) -> None:
        await db.delete(event)
        await db.flush()
        logger.debug("Deleted refueling %s for vehicle %s", event.id, event.vehicle_id)

    async def reload(self, db: AsyncSession, event: RefuelingModel) -> None:
        await db.refresh(event)

    async def list_by_vehicle(
        self, db: AsyncSession, vehicle_id: str
    ) -> List[RefuelingModel]:
        q = await db.execute(
            select(RefuelingModel)
            .where(RefuelingModel.vehicle_id == vehicle_id)
            .order_by(RefuelingModel.odometer.asc())
        )
        return list(q.scalars().all())

    async def list_all(
        self, db: AsyncSession, filters: RefuelingFilter
    ) -> List[RefuelingModel]:
        stmt = select(RefuelingModel)

        if filters.vehicle_id:
            stmt = stmt.where(RefuelingModel.vehicle_id == filters.vehicle_id)
        if filters.start_date:
            start = datetime.combine(filters.start_date, datetime.min.time())
            stmt = stmt.where(RefuelingModel.date >= start)
        if filters.end_date:
            end = datetime.combine(filters.end_date, datetime.min.time())
            stmt = stmt.where(RefuelingModel.date < end + timedelta(days=1))

        q = await db.execute(stmt.order_by(RefuelingModel.date.desc()))
        return list(q.scalars().all())
