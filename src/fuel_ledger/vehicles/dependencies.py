from src.fuel_ledger.vehicles.repositories import VehicleRepository
from src.fuel_ledger.vehicles.services import VehicleService

vehicle_repo = VehicleRepository()
service = VehicleService(vehicle_repo)


def get_vehicle_service() -> VehicleService:
    return service
