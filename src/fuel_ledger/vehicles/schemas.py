from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.fuel_ledger.vehicles.enums import VehicleStatus


class VehicleCreate(BaseModel):
    plate: str = Field(..., min_length=1, max_length=10)
    model: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    km: Optional[float] = Field(None, ge=0)
    status: VehicleStatus = VehicleStatus.active


class VehicleUpdate(BaseModel):
    plate: Optional[str] = Field(None, min_length=1, max_length=10)
    model: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    km: Optional[float] = Field(None, ge=0)
    status: Optional[VehicleStatus] = None


class VehicleResponse(BaseModel):
    id: str
    plate: str
    model: Optional[str] = None
    brand: Optional[str] = None
    year: Optional[int] = None
    km: Optional[float] = None
    status: VehicleStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
