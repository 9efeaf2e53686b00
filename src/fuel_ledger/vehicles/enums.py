from enum import Enum


class VehicleStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    maintenance = "maintenance"
