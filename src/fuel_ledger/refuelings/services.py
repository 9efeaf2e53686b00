import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.fuel_ledger.cache.decorators import invalidate_vehicle_summaries
from src.fuel_ledger.config import get_settings
from src.fuel_ledger.refuelings.calculator import compute_consumption
from src.fuel_ledger.refuelings.exceptions import (
    ConcurrencyConflictException,
    DuplicateOdometerReadingException,
    InvalidVehicleReferenceException,
    RefuelingNotFoundException,
    RefuelingValidationException,
)
from src.fuel_ledger.refuelings.models import RefuelingModel
from src.fuel_ledger.refuelings.repositories.interface import IRefuelingRepository
from src.fuel_ledger.refuelings.schemas import (
    RefuelingCreate,
    RefuelingFilter,
    RefuelingUpdate,
)
from src.fuel_ledger.vehicles.repositories import IVehicleRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fields a partial update may explicitly set to null.
NULLABLE_FIELDS = {"notes"}


@dataclass
class _WriteScope:
    vehicle_id: str = ""
    odometer: Optional[float] = None


class LedgerService:
    """Owns every write to a vehicle's refueling sequence.

    Each write runs in one transaction under the vehicle's lock and recomputes
    consumption for the touched event and for whichever neighbours lost or
    gained a predecessor. Lock contention surfacing as ``OperationalError`` is
    retried a bounded number of times before ``ConcurrencyConflictException``.
    """

    def __init__(
        self,
        refueling_repo: IRefuelingRepository,
        vehicle_directory: IVehicleRepository,
        on_change: Callable[[str], Awaitable[object]] = invalidate_vehicle_summaries,
        max_retries: Optional[int] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self.refueling_repo = refueling_repo
        self.vehicle_directory = vehicle_directory
        self.on_change = on_change
        self.max_retries = max_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.05, max=1)

    # region Reads
    async def get(self, db: AsyncSession, refueling_id: str) -> RefuelingModel:
        event = await self.refueling_repo.get(db, refueling_id)
        if event is None:
            logger.warning("Refueling %s not found", refueling_id)
            raise RefuelingNotFoundException(refueling_id)
        return event

    async def list(
        self, db: AsyncSession, filters: RefuelingFilter
    ) -> List[RefuelingModel]:
        return await self.refueling_repo.list_all(db, filters)

    async def list_by_vehicle(
        self, db: AsyncSession, vehicle_id: str
    ) -> List[RefuelingModel]:
        return await self.refueling_repo.list_by_vehicle(db, vehicle_id)

    # endregion

    # region Writes
    async def create(self, db: AsyncSession, payload: RefuelingCreate) -> RefuelingModel:
        repo = self.refueling_repo
        vehicle_id = payload.vehicle_id
        scope = _WriteScope(vehicle_id=vehicle_id, odometer=payload.odometer)

        async def operation() -> RefuelingModel:
            await repo.lock_vehicle(db, vehicle_id)
            if not await self.vehicle_directory.exists(db, vehicle_id):
                raise InvalidVehicleReferenceException(vehicle_id)

            if await repo.find_by_odometer(db, vehicle_id, payload.odometer):
                raise DuplicateOdometerReadingException(vehicle_id, payload.odometer)

            preceding = await repo.find_preceding(db, vehicle_id, payload.odometer)
            succeeding = await repo.find_succeeding(db, vehicle_id, payload.odometer)

            event = RefuelingModel(
                **payload.model_dump(),
                consumption=compute_consumption(
                    preceding.odometer if preceding else None,
                    payload.odometer,
                    payload.liters,
                ),
            )
            event = await repo.insert(db, event)

            # Back-fill: the successor now measures from the new event
            if succeeding is not None:
                await self._recompute(db, succeeding)
            return event

        event = await self._run_atomic(db, operation, scope)
        await repo.reload(db, event)
        logger.info(
            "Created refueling %s for vehicle %s at odometer %s",
            event.id,
            vehicle_id,
            event.odometer,
        )
        await self.on_change(vehicle_id)
        return event

    async def update(
        self, db: AsyncSession, refueling_id: str, patch: RefuelingUpdate
    ) -> RefuelingModel:
        repo = self.refueling_repo
        values = patch.model_dump(exclude_unset=True)
        nulls = sorted(
            field
            for field, value in values.items()
            if value is None and field not in NULLABLE_FIELDS
        )
        if nulls:
            raise RefuelingValidationException(f"{', '.join(nulls)} cannot be null")

        scope = _WriteScope(odometer=values.get("odometer"))

        async def operation() -> RefuelingModel:
            current = await self._get_locked(db, refueling_id, scope)
            vehicle_id = current.vehicle_id
            old_odometer = current.odometer

            odometer_changed = (
                "odometer" in values and values["odometer"] != old_odometer
            )
            liters_changed = "liters" in values and values["liters"] != current.liters

            old_successor = None
            if odometer_changed:
                if await repo.find_by_odometer(
                    db, vehicle_id, values["odometer"], exclude_id=current.id
                ):
                    raise DuplicateOdometerReadingException(
                        vehicle_id, values["odometer"]
                    )
                old_successor = await repo.find_succeeding(
                    db, vehicle_id, old_odometer, exclude_id=current.id
                )

            current = await repo.update(db, current, values)

            if odometer_changed or liters_changed:
                await self._recompute(db, current)

            if odometer_changed:
                new_successor = await repo.find_succeeding(
                    db, vehicle_id, current.odometer, exclude_id=current.id
                )
                touched = {current.id}
                for neighbour in (old_successor, new_successor):
                    if neighbour is not None and neighbour.id not in touched:
                        await self._recompute(db, neighbour)
                        touched.add(neighbour.id)
            return current

        event = await self._run_atomic(db, operation, scope)
        await repo.reload(db, event)
        logger.info("Updated refueling %s (%s)", event.id, ", ".join(values) or "none")
        await self.on_change(event.vehicle_id)
        return event

    async def delete(self, db: AsyncSession, refueling_id: str) -> None:
        repo = self.refueling_repo
        scope = _WriteScope()

        async def operation() -> str:
            event = await self._get_locked(db, refueling_id, scope)
            successor = await repo.find_succeeding(
                db, event.vehicle_id, event.odometer, exclude_id=event.id
            )
            await repo.delete(db, event)
            if successor is not None:
                await self._recompute(db, successor)
            return event.vehicle_id

        vehicle_id = await self._run_atomic(db, operation, scope)
        logger.info("Deleted refueling %s of vehicle %s", refueling_id, vehicle_id)
        await self.on_change(vehicle_id)

    # endregion

    async def _get_locked(
        self, db: AsyncSession, refueling_id: str, scope: _WriteScope
    ) -> RefuelingModel:
        event = await self.refueling_repo.get(db, refueling_id)
        if event is None:
            raise RefuelingNotFoundException(refueling_id)
        scope.vehicle_id = event.vehicle_id
        await self.refueling_repo.lock_vehicle(db, event.vehicle_id)

        # Re-read: another writer may have moved or removed it before the lock
        event = await self.refueling_repo.get(db, refueling_id)
        if event is None:
            raise RefuelingNotFoundException(refueling_id)
        return event

    async def _recompute(self, db: AsyncSession, event: RefuelingModel) -> None:
        preceding = await self.refueling_repo.find_preceding(
            db, event.vehicle_id, event.odometer, exclude_id=event.id
        )
        consumption = compute_consumption(
            preceding.odometer if preceding else None, event.odometer, event.liters
        )
        if consumption != event.consumption:
            logger.debug(
                "Consumption of refueling %s: %s -> %s",
                event.id,
                event.consumption,
                consumption,
            )
            await self.refueling_repo.update(db, event, {"consumption": consumption})

    async def _run_atomic(
        self,
        db: AsyncSession,
        operation: Callable[[], Awaitable[T]],
        scope: _WriteScope,
    ) -> T:
        attempts = self.max_retries or get_settings().LEDGER_MAX_RETRIES
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(OperationalError),
            ):
                with attempt:
                    async with self.refueling_repo.transaction(db):
                        return await operation()
        except RetryError as e:
            logger.error(
                "Giving up on vehicle %s after %d attempts: %s",
                scope.vehicle_id,
                attempts,
                e.last_attempt.exception(),
            )
            raise ConcurrencyConflictException(scope.vehicle_id, attempts) from e
        except IntegrityError as e:
            # Unique (vehicle_id, odometer) caught a write that got past the lock
            logger.warning("Integrity error on vehicle %s: %s", scope.vehicle_id, e)
            raise DuplicateOdometerReadingException(
                scope.vehicle_id, scope.odometer if scope.odometer is not None else -1
            ) from e
        raise RuntimeError("Retry loop exited without a result")
