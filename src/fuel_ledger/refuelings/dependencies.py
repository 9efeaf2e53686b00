from src.fuel_ledger.refuelings.repositories.refueling import RefuelingRepository
from src.fuel_ledger.refuelings.services import LedgerService
from src.fuel_ledger.vehicles.dependencies import vehicle_repo

refueling_repo = RefuelingRepository()
service = LedgerService(refueling_repo, vehicle_repo)


def get_ledger_service() -> LedgerService:
    return service
