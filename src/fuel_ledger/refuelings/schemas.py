from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.fuel_ledger.refuelings.enums import FuelType


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Dates are stored as UTC without an offset."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class RefuelingCreate(BaseModel):
    """Payload for a new refueling. Consumption is derived, never accepted."""

    vehicle_id: str = Field(..., min_length=1, max_length=36)
    date: datetime
    odometer: float = Field(..., ge=0)
    liters: float = Field(..., gt=0)
    cost_per_liter: float = Field(..., gt=0)
    total_cost: float = Field(..., gt=0)
    fuel_type: FuelType
    driver: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class RefuelingUpdate(BaseModel):
    """Partial update; only the fields present in the request are applied."""

    date: Optional[datetime] = None
    odometer: Optional[float] = Field(None, ge=0)
    liters: Optional[float] = Field(None, gt=0)
    cost_per_liter: Optional[float] = Field(None, gt=0)
    total_cost: Optional[float] = Field(None, gt=0)
    fuel_type: Optional[FuelType] = None
    driver: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class RefuelingResponse(BaseModel):
    id: str
    vehicle_id: str
    date: datetime
    odometer: float
    liters: float
    cost_per_liter: float
    total_cost: float
    fuel_type: FuelType
    consumption: Optional[float] = None
    driver: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RefuelingFilter(BaseModel):
    vehicle_id: Optional[str] = Field(None, description="Restrict to one vehicle")
    start_date: Optional[date] = Field(None, description="Start date in YYYY-MM-DD")
    end_date: Optional[date] = Field(None, description="End date in YYYY-MM-DD")

    @field_validator("end_date")
    @classmethod
    def validate_date_range(cls, end: Optional[date], info: ValidationInfo):
        start = info.data.get("start_date")
        if start and end and end < start:
            raise ValueError("end_date must be after or equal to start_date")
        return end
