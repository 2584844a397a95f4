"""Schémas Trajet / Trip schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from motormate.models.trip import TripPurpose
from motormate.schemas.common import check_past_date


class TripCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    vehicle_id: int
    start_location: str = Field(..., min_length=1, max_length=200)
    end_location: str = Field(..., min_length=1, max_length=200)
    distance: float | None = Field(None, gt=0)
    total_cost: float = Field(..., gt=0)
    start_odometer: int | None = Field(None, ge=0)
    end_odometer: int | None = Field(None, ge=0)
    purpose: TripPurpose = TripPurpose.PERSONAL
    date: str
    notes: str | None = Field(None, max_length=500)

    @field_validator("date")
    @classmethod
    def _date_not_future(cls, v: str) -> str:
        return check_past_date(v, "Trip date")

    @model_validator(mode="after")
    def _odometers_and_distance(self):
        if self.start_odometer is not None and self.end_odometer is not None:
            if self.end_odometer <= self.start_odometer:
                raise ValueError("End odometer must be greater than start odometer")
            if self.distance is None:
                self.distance = float(self.end_odometer - self.start_odometer)
        if self.distance is None:
            raise ValueError("Distance is required when odometer readings are not provided")
        return self


class TripUpdate(BaseModel):
    """Mise a jour partielle, revalidee apres fusion / Partial update, revalidated after merge."""

    start_location: str | None = None
    end_location: str | None = None
    distance: float | None = None
    total_cost: float | None = None
    start_odometer: int | None = None
    end_odometer: int | None = None
    purpose: TripPurpose | None = None
    date: str | None = None
    notes: str | None = None


class TripRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    vehicle_id: int
    start_location: str
    end_location: str
    distance: float
    total_cost: float
    cost_per_km: float
    start_odometer: int | None = None
    end_odometer: int | None = None
    purpose: TripPurpose
    date: str
    notes: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TripStats(BaseModel):
    vehicle_id: int
    total_trips: int = 0
    total_distance: float = 0.0
    total_cost: float = 0.0
    average_distance: float = 0.0
    average_cost: float = 0.0
    earliest_trip: str | None = None
    latest_trip: str | None = None
