import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    TIMESTAMP,
    Enum,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.fuel_ledger.database.database import Base
from src.fuel_ledger.refuelings.enums import FuelType


class RefuelingModel(Base):
    __tablename__ = "refuelings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vehicle_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    date: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, index=True)
    odometer: Mapped[float] = mapped_column(Float, nullable=False)
    liters: Mapped[float] = mapped_column(Float, nullable=False)
    cost_per_liter: Mapped[float] = mapped_column(Float, nullable=False)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)
    fuel_type: Mapped[FuelType] = mapped_column(
        Enum(FuelType, name="fuel_type"), nullable=False
    )
    consumption: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    driver: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("vehicle_id", "odometer", name="uq_refueling_odometer"),
    )
