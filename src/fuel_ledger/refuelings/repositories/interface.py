from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.fuel_ledger.refuelings.models import RefuelingModel
from src.fuel_ledger.refuelings.schemas import RefuelingFilter


class IRefuelingRepository(ABC):
    @abstractmethod
    def transaction(self, db: AsyncSession) -> AsyncContextManager[None]:
        """One atomic unit: commit on clean exit, rollback on any exception."""
        ...

    @abstractmethod
    async def lock_vehicle(self, db: AsyncSession, vehicle_id: str) -> None:
        """Serialize writers of one vehicle until the transaction ends."""
        ...

    @abstractmethod
    async def get(self, db: AsyncSession, refueling_id: str) -> Optional[RefuelingModel]:
        """Load the stored row, overwriting any copy already held by the session."""
        ...

    @abstractmethod
    async def find_preceding(
        self,
        db: AsyncSession,
        vehicle_id: str,
        odometer: float,
        exclude_id: Optional[str] = None,
    ) -> Optional[RefuelingModel]:
        ...

    @abstractmethod
    async def find_succeeding(
        self,
        db: AsyncSession,
        vehicle_id: str,
        odometer: float,
        exclude_id: Optional[str] = None,
    ) -> Optional[RefuelingModel]:
        ...

    @abstractmethod
    async def find_by_odometer(
        self,
        db: AsyncSession,
        vehicle_id: str,
        odometer: float,
        exclude_id: Optional[str] = None,
    ) -> Optional[RefuelingModel]:
        ...

    @abstractmethod
    async def insert(self, db: AsyncSession, event: RefuelingModel) -> RefuelingModel:
        ...

    @abstractmethod
    async def update(
        self, db: AsyncSession, event: RefuelingModel, values: Dict[str, Any]
    ) -> RefuelingModel:
        ...

    @abstractmethod
    async def delete(self, db: AsyncSession, event: RefuelingModel) -> None:
        ...

    @abstractmethod
    async def reload(self, db: AsyncSession, event: RefuelingModel) -> None:
        """Refresh server-generated columns after commit."""
        ...

    @abstractmethod
    async def list_by_vehicle(
        self, db: AsyncSession, vehicle_id: str
    ) -> List[RefuelingModel]:
        """Events of one vehicle in odometer order."""
        ...

    @abstractmethod
    async def list_all(
        self, db: AsyncSession, filters: RefuelingFilter
    ) -> List[RefuelingModel]:
        """Filtered events, most recent date first."""
        ...
