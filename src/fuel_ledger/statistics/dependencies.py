from src.fuel_ledger.refuelings.dependencies import refueling_repo
from src.fuel_ledger.statistics.services import StatisticsService
from src.fuel_ledger.vehicles.dependencies import vehicle_repo

service = StatisticsService(refueling_repo, vehicle_repo)


def get_statistics_service() -> StatisticsService:
    return service
