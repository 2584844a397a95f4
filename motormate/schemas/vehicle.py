"""Schémas Véhicule / Vehicle schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from motormate.models.vehicle import FuelType
from motormate.schemas.common import check_future_date, check_past_date


class VehicleBase(BaseModel):
    vehicle_name: str = Field(..., min_length=1, max_length=100)
    company: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    fuel_type: FuelType
    purchased_date: str
    vehicle_cost: float = Field(..., ge=0)
    insurance_number: str | None = Field(None, max_length=50)
    insurance_expiry: str | None = None
    emission_test_expiry: str | None = None
    next_service_due: str | None = None
    odometer_reading: int = Field(0, ge=0)
    vehicle_registration_number: str = Field(..., min_length=1, max_length=20)


class VehicleCreate(VehicleBase):
    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("purchased_date")
    @classmethod
    def _purchased_not_future(cls, v: str) -> str:
        return check_past_date(v, "Purchase date")

    @field_validator("insurance_expiry", "emission_test_expiry", "next_service_due")
    @classmethod
    def _due_dates_future(cls, v: str | None, info) -> str | None:
        return check_future_date(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("vehicle_registration_number")
    @classmethod
    def _registration_upper(cls, v: str) -> str:
        return v.upper()


class VehicleUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    vehicle_name: str | None = Field(None, min_length=1, max_length=100)
    company: str | None = Field(None, min_length=1, max_length=50)
    model: str | None = Field(None, min_length=1, max_length=50)
    fuel_type: FuelType | None = None
    purchased_date: str | None = None
    vehicle_cost: float | None = Field(None, ge=0)
    insurance_number: str | None = Field(None, max_length=50)
    insurance_expiry: str | None = None
    emission_test_expiry: str | None = None
    next_service_due: str | None = None
    odometer_reading: int | None = Field(None, ge=0)
    vehicle_registration_number: str | None = Field(None, min_length=1, max_length=20)

    @field_validator("purchased_date")
    @classmethod
    def _purchased_not_future(cls, v: str | None) -> str | None:
        return check_past_date(v, "Purchase date")

    @field_validator("insurance_expiry", "emission_test_expiry", "next_service_due")
    @classmethod
    def _due_dates_future(cls, v: str | None, info) -> str | None:
        return check_future_date(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("vehicle_registration_number")
    @classmethod
    def _registration_upper(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class VehicleRead(VehicleBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VehicleStats(BaseModel):
    total_vehicles: int = 0
    average_odometer: float = 0.0
    total_cost: float = 0.0
    newest_vehicle: VehicleRead | None = None
    oldest_vehicle: VehicleRead | None = None
    insurance_expiring_soon: list[VehicleRead] = []
