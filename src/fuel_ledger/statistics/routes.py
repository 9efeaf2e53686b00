from sqlalchemy.ext.asyncio import AsyncSession

from fastapi import APIRouter, Depends
from src.fuel_ledger.database.dependencies import verify_database
from src.fuel_ledger.middleware.auth import validate_api_key
from src.fuel_ledger.refuelings.schemas import RefuelingFilter
from src.fuel_ledger.statistics.dependencies import get_statistics_service
from src.fuel_ledger.statistics.schemas import SummaryView
from src.fuel_ledger.statistics.services import StatisticsService

statistics_router = APIRouter(
    prefix="/refuelings/stats",
    tags=["Refueling Statistics"],
    dependencies=[Depends(validate_api_key)],
)


@statistics_router.get("/summary", response_model=SummaryView)
async def get_summary(
    params: RefuelingFilter = Depends(),
    db_session: AsyncSession = Depends(verify_database),
    service: StatisticsService = Depends(get_statistics_service),
):
    return await service.get_summary(db_session, params)
