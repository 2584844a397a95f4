"""Modele Depense / Expense model.

Trois variantes (Fuel, Service, Other) partagent une meme table.
Les depenses carburant portent le pointeur next_fueling_odometer vers le plein suivant.
Three variants share one table. Fuel expenses carry the next_fueling_odometer
pointer to the following fill-up of the same vehicle.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from motormate.database import Base


class ExpenseType(str, enum.Enum):
    """Type de depense / Expense type."""
    FUEL = "Fuel"
    SERVICE = "Service"
    OTHER = "Other"


class ServiceType(str, enum.Enum):
    """Type d'entretien / Service type."""
    OIL_CHANGE = "Oil Change"
    TIRE_SERVICE = "Tire Service"
    BRAKE_SERVICE = "Brake Service"
    ENGINE_SERVICE = "Engine Service"
    TRANSMISSION_SERVICE = "Transmission Service"
    BATTERY_SERVICE = "Battery Service"
    AC_SERVICE = "AC Service"
    GENERAL_MAINTENANCE = "General Maintenance"
    REPAIR = "Repair"
    INSPECTION = "Inspection"
    OTHER = "Other"


class OtherCategory(str, enum.Enum):
    """Categorie de depense diverse / Miscellaneous expense category."""
    PARKING = "Parking"
    TOLL = "Toll"
    CAR_WASH = "Car Wash"
    INSURANCE = "Insurance"
    REGISTRATION = "Registration"
    TAX = "Tax"
    FINE = "Fine"
    ACCESSORIES = "Accessories"
    OTHER = "Other"


class PaymentMethod(str, enum.Enum):
    """Moyen de paiement / Payment method."""
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    DIGITAL_WALLET = "Digital Wallet"
    BANK_TRANSFER = "Bank Transfer"
    OTHER = "Other"


class Expense(Base):
    """Depense liee a un vehicule / Vehicle expense."""
    __tablename__ = "expenses"
    __table_args__ = (
        Index("ix_expenses_vehicle_type_odometer", "vehicle_id", "expense_type", "odometer_reading"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)

    expense_type: Mapped[ExpenseType] = mapped_column(Enum(ExpenseType), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    receipt_number: Mapped[str | None] = mapped_column(String(50))
    odometer_reading: Mapped[int | None] = mapped_column(Integer)

    # --- Carburant / Fuel ---
    fuel_added: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    total_fuel: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    total_cost: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    price_per_unit: Mapped[float | None] = mapped_column(Numeric(10, 3, asdecimal=False))
    next_fueling_odometer: Mapped[int | None] = mapped_column(Integer)
    mileage: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))

    # --- Entretien / Service ---
    service_description: Mapped[str | None] = mapped_column(String(500))
    service_type: Mapped[ServiceType | None] = mapped_column(Enum(ServiceType))

    # --- Divers / Other ---
    other_expense_type: Mapped[str | None] = mapped_column(String(100))
    category: Mapped[OtherCategory | None] = mapped_column(Enum(OtherCategory))

    # --- Commun / Common ---
    notes: Mapped[str | None] = mapped_column(String(1000))
    location: Mapped[str | None] = mapped_column(String(200))
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod), default=PaymentMethod.CASH)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_fuel(self) -> bool:
        return self.expense_type == ExpenseType.FUEL

    @property
    def distance_to_next_fueling(self) -> int | None:
        """Distance jusqu'au plein suivant / Distance to the next fill-up."""
        if not self.is_fuel or self.next_fueling_odometer is None or self.odometer_reading is None:
            return None
        distance = self.next_fueling_odometer - self.odometer_reading
        return distance if distance > 0 else None

    @property
    def mileage_info(self) -> str:
        if not self.is_fuel:
            return ""
        if self.mileage:
            return f"{self.mileage:.2f} km/l"
        return "Mileage calculation pending next fuel entry"

    def __repr__(self) -> str:
        return f"<Expense {self.expense_type.value} {self.amount} {self.date}>"
