"""Modele Vehicule / Vehicle model.

Vehicule personnel d'un utilisateur, reference par les depenses et trajets.
A user's personal vehicle, referenced by expenses and trips.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from motormate.database import Base


class FuelType(str, enum.Enum):
    """Type de carburant / Fuel type."""
    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    CNG = "CNG"
    LPG = "LPG"


class Vehicle(Base):
    """Vehicule d'un utilisateur / User vehicle."""
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # --- Identification ---
    vehicle_name: Mapped[str] = mapped_column(String(100), nullable=False)
    company: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    fuel_type: Mapped[FuelType] = mapped_column(Enum(FuelType), nullable=False)
    vehicle_registration_number: Mapped[str] = mapped_column(String(20), nullable=False)

    # --- Achat / Purchase ---
    purchased_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    vehicle_cost: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    odometer_reading: Mapped[int] = mapped_column(Integer, default=0)

    # --- Echeances / Due dates ---
    insurance_number: Mapped[str | None] = mapped_column(String(50))
    insurance_expiry: Mapped[str | None] = mapped_column(String(10))
    emission_test_expiry: Mapped[str | None] = mapped_column(String(10))
    next_service_due: Mapped[str | None] = mapped_column(String(10))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return f"{self.vehicle_name} ({self.company} {self.model})"

    def __repr__(self) -> str:
        return f"<Vehicle {self.vehicle_registration_number}>"
