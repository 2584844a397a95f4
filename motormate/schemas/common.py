"""Schémas communs / Common schemas.

Enveloppe de reponse {success, data, message, errors} et validateurs de dates partages.
Response envelope and shared date validators.
"""

from datetime import date, timedelta
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from motormate.utils.dates import parse_iso_date

T = TypeVar("T")


class ErrorDetail(BaseModel):
    field: str
    message: str
    value: Any = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    data: list[T]
    page: int
    pages: int
    total: int
    limit: int
    count: int


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: list[ErrorDetail] | None = None


def check_past_date(value: str | None, label: str, grace_days: int = 0) -> str | None:
    """Date pas dans le futur (tolerance en jours) / Date not in the future (with grace days)."""
    if value is None:
        return None
    parsed = parse_iso_date(value)
    if parsed > date.today() + timedelta(days=grace_days):
        if grace_days:
            raise ValueError(f"{label} cannot be more than {grace_days} day in the future")
        raise ValueError(f"{label} cannot be in the future")
    return parsed.isoformat()


def check_future_date(value: str | None, label: str) -> str | None:
    """Date strictement future / Strictly future date."""
    if value is None:
        return None
    parsed = parse_iso_date(value)
    if parsed <= date.today():
        raise ValueError(f"{label} must be in the future")
    return parsed.isoformat()
