"""Schémas Dépense / Expense schemas.

La creation valide une union discriminee par expense_type: chaque variante
porte ses champs obligatoires au niveau du type.
Creation validates a union discriminated by expense_type: each variant
declares its required fields at the type level.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

from motormate.models.expense import ExpenseType, OtherCategory, PaymentMethod, ServiceType
from motormate.schemas.common import check_past_date

MAX_ODOMETER = 10_000_000


class ExpenseCommon(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    vehicle_id: int
    amount: float = Field(..., gt=0)
    date: str
    description: str = Field(..., min_length=1, max_length=500)
    receipt_number: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=1000)
    location: str | None = Field(None, max_length=200)
    payment_method: PaymentMethod = PaymentMethod.CASH

    @field_validator("date")
    @classmethod
    def _date_not_far_future(cls, v: str) -> str:
        return check_past_date(v, "Expense date", grace_days=1)


class FuelExpenseCreate(ExpenseCommon):
    expense_type: Literal["Fuel"]
    odometer_reading: int = Field(..., ge=0, le=MAX_ODOMETER)
    fuel_added: float = Field(..., gt=0)
    total_fuel: float = Field(..., gt=0)
    total_cost: float = Field(..., gt=0)
    next_fueling_odometer: int | None = Field(None, ge=0, le=MAX_ODOMETER)


class ServiceExpenseCreate(ExpenseCommon):
    expense_type: Literal["Service"]
    odometer_reading: int = Field(..., ge=0, le=MAX_ODOMETER)
    service_description: str = Field(..., min_length=1, max_length=500)
    service_type: ServiceType


class OtherExpenseCreate(ExpenseCommon):
    expense_type: Literal["Other"]
    odometer_reading: int | None = Field(None, ge=0, le=MAX_ODOMETER)
    other_expense_type: str = Field(..., min_length=1, max_length=100)
    category: OtherCategory | None = None


ExpenseCreate = Annotated[
    Union[FuelExpenseCreate, ServiceExpenseCreate, OtherExpenseCreate],
    Field(discriminator="expense_type"),
]


class ExpenseCreateRequest(RootModel[ExpenseCreate]):
    """Corps de creation, une variante par type / Creation body, one variant per type."""

# Colonnes propres a une variante / Variant-specific columns
VARIANT_FIELDS = (
    "odometer_reading",
    "fuel_added",
    "total_fuel",
    "total_cost",
    "next_fueling_odometer",
    "service_description",
    "service_type",
    "other_expense_type",
    "category",
)


class ExpenseUpdate(BaseModel):
    """Mise a jour partielle, revalidee apres fusion / Partial update, revalidated after merge."""

    expense_type: Literal["Fuel", "Service", "Other"] | None = None
    amount: float | None = None
    date: str | None = None
    description: str | None = None
    receipt_number: str | None = None
    notes: str | None = None
    location: str | None = None
    payment_method: PaymentMethod | None = None
    odometer_reading: int | None = None
    fuel_added: float | None = None
    total_fuel: float | None = None
    total_cost: float | None = None
    next_fueling_odometer: int | None = None
    service_description: str | None = None
    service_type: ServiceType | None = None
    other_expense_type: str | None = None
    category: OtherCategory | None = None


class ExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    vehicle_id: int
    expense_type: ExpenseType
    amount: float
    date: str
    description: str
    receipt_number: str | None = None
    odometer_reading: int | None = None
    fuel_added: float | None = None
    total_fuel: float | None = None
    total_cost: float | None = None
    price_per_unit: float | None = None
    next_fueling_odometer: int | None = None
    mileage: float | None = None
    mileage_info: str = ""
    distance_to_next_fueling: int | None = None
    service_description: str | None = None
    service_type: ServiceType | None = None
    other_expense_type: str | None = None
    category: OtherCategory | None = None
    notes: str | None = None
    location: str | None = None
    payment_method: PaymentMethod
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ExpenseTypeStat(BaseModel):
    type: ExpenseType
    total: float
    count: int
    average: float


class ExpenseStats(BaseModel):
    vehicle_id: int
    total_expenses: float = 0.0
    total_count: int = 0
    breakdown: list[ExpenseTypeStat] = []
    recent_expenses: list[ExpenseRead] = []


class MileageUpdate(BaseModel):
    """Resultat du recalcul de chaine / Chain recompute result."""

    expense_id: int
    date: str
    odometer_start: int
    odometer_end: int
    distance_traveled: int
    fuel_used: float
    mileage: float
