import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fuel_ledger.cache.decorators import cache_summary
from src.fuel_ledger.refuelings.calculator import round_half_away
from src.fuel_ledger.refuelings.models import RefuelingModel
from src.fuel_ledger.refuelings.repositories.interface import IRefuelingRepository
from src.fuel_ledger.refuelings.schemas import RefuelingFilter
from src.fuel_ledger.statistics.schemas import SummaryView, VehicleStatsDTO
from src.fuel_ledger.vehicles.repositories import IVehicleRepository

logger = logging.getLogger(__name__)


class _Totals:
    def __init__(self):
        self.count = 0
        self.total_cost = 0.0
        self.total_liters = 0.0
        self.consumptions: List[float] = []

    def add(self, event: RefuelingModel):
        self.count += 1
        self.total_cost += event.total_cost
        self.total_liters += event.liters
        if event.consumption is not None:
            self.consumptions.append(event.consumption)

    @property
    def avg_consumption(self) -> Optional[float]:
        if not self.consumptions:
            return None
        return sum(self.consumptions) / len(self.consumptions)


def _present(value: Optional[float]) -> Optional[float]:
    return None if value is None else round_half_away(value)


class StatisticsService:
    """Read-only summaries over the refueling ledger."""

    def __init__(
        self,
        refueling_repo: IRefuelingRepository,
        vehicle_repo: IVehicleRepository,
    ):
        self.refueling_repo = refueling_repo
        self.vehicle_repo = vehicle_repo

    @cache_summary()
    async def get_summary(
        self, db_session: AsyncSession, filters: RefuelingFilter
    ) -> SummaryView:
        try:
            events = await self.refueling_repo.list_all(db_session, filters)

            fleet = _Totals()
            by_vehicle: Dict[str, _Totals] = defaultdict(_Totals)
            for event in events:
                fleet.add(event)
                by_vehicle[event.vehicle_id].add(event)

            plates = await self.vehicle_repo.get_plates(db_session, by_vehicle.keys())

            # Sums stay unrounded until here
            vehicle_stats = [
                VehicleStatsDTO(
                    vehicle_id=vehicle_id,
                    plate=plates.get(vehicle_id),
                    count=totals.count,
                    total_cost=round_half_away(totals.total_cost),
                    total_liters=round_half_away(totals.total_liters),
                    avg_consumption=_present(totals.avg_consumption),
                )
                for vehicle_id, totals in by_vehicle.items()
            ]

            return SummaryView(
                total_refuelings=fleet.count,
                total_cost=round_half_away(fleet.total_cost),
                total_liters=round_half_away(fleet.total_liters),
                avg_consumption=_present(fleet.avg_consumption) or 0.0,
                vehicle_stats=vehicle_stats,
            )

        except SQLAlchemyError as e:
            logger.error(
                "Database error while building refueling summary: %s",
                str(e),
                exc_info=True,
            )
            raise
