import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, Enum, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.fuel_ledger.database.database import Base
from src.fuel_ledger.vehicles.enums import VehicleStatus


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    plate: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    km: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[VehicleStatus] = mapped_column(
        Enum(VehicleStatus, name="vehicle_status"),
        nullable=False,
        default=VehicleStatus.active,
    )
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, server_default=func.now(), onupdate=func.now()
    )
