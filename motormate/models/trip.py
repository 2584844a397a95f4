"""Modele Trajet / Trip model."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from motormate.database import Base


class TripPurpose(str, enum.Enum):
    """Motif du trajet / Trip purpose."""
    BUSINESS = "Business"
    PERSONAL = "Personal"
    COMMUTE = "Commute"
    LEISURE = "Leisure"
    EMERGENCY = "Emergency"
    OTHER = "Other"


class Trip(Base):
    """Trajet effectue avec un vehicule / Trip driven with a vehicle."""
    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)

    start_location: Mapped[str] = mapped_column(String(200), nullable=False)
    end_location: Mapped[str] = mapped_column(String(200), nullable=False)
    distance: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)  # km
    total_cost: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    start_odometer: Mapped[int | None] = mapped_column(Integer)
    end_odometer: Mapped[int | None] = mapped_column(Integer)
    purpose: Mapped[TripPurpose] = mapped_column(Enum(TripPurpose), default=TripPurpose.PERSONAL)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    notes: Mapped[str | None] = mapped_column(String(500))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def cost_per_km(self) -> float:
        if not self.distance or self.distance <= 0:
            return 0.0
        return round(self.total_cost / self.distance, 2)

    def __repr__(self) -> str:
        return f"<Trip {self.start_location} -> {self.end_location} {self.date}>"
