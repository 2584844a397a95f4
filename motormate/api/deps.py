"""
Dépendances d'authentification et de propriete / Authentication and ownership dependencies.
Injectées dans les routes via Depends().

Un enregistrement d'un autre utilisateur est signale comme introuvable (404).
A record owned by another user is reported as not found (404).
"""

from datetime import date

from fastapi import Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.database import get_db
from motormate.models.expense import Expense
from motormate.models.trip import Trip
from motormate.models.user import User
from motormate.models.vehicle import Vehicle
from motormate.utils.auth import decode_token
from motormate.utils.dates import check_range

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extraire et valider l'utilisateur depuis le JWT / Extract and validate user from JWT."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user_id = int(payload["sub"])
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")

    return user


async def get_owned_vehicle(db: AsyncSession, vehicle_id: int, user: User) -> Vehicle:
    """Vehicule actif de l'utilisateur ou 404 / User's active vehicle or 404."""
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.user_id == user.id, Vehicle.is_active == True)
    )
    vehicle = result.scalar_one_or_none()
    if vehicle is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


async def get_owned_expense(db: AsyncSession, expense_id: int, user: User) -> Expense:
    """Depense active de l'utilisateur ou 404 / User's active expense or 404."""
    result = await db.execute(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user.id, Expense.is_active == True)
    )
    expense = result.scalar_one_or_none()
    if expense is None:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


async def get_owned_trip(db: AsyncSession, trip_id: int, user: User) -> Trip:
    """Trajet actif de l'utilisateur ou 404 / User's active trip or 404."""
    result = await db.execute(
        select(Trip).where(Trip.id == trip_id, Trip.user_id == user.id, Trip.is_active == True)
    )
    trip = result.scalar_one_or_none()
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip


def raise_validation_error(field: str, message: str, value=None, location: str = "query"):
    """Erreur de validation champ par champ (400) / Field-level validation error (400)."""
    raise RequestValidationError([{"type": "value_error", "loc": (location, field), "msg": message, "input": value}])


def checked_range(start: date | None, end: date | None) -> None:
    """Valider un filtre de dates / Validate a date filter."""
    try:
        check_range(start, end)
    except ValueError as e:
        raise_validation_error("start_date", str(e), start.isoformat() if start else None)
