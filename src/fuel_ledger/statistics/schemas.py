from typing import List, Optional

from pydantic import BaseModel


class VehicleStatsDTO(BaseModel):
    vehicle_id: str
    plate: Optional[str] = None
    count: int
    total_cost: float
    total_liters: float
    avg_consumption: Optional[float] = None


class SummaryView(BaseModel):
    total_refuelings: int
    total_cost: float
    total_liters: float
    avg_consumption: float
    vehicle_stats: List[VehicleStatsDTO]
