"""
Routes Analytique / Analytics API routes.
Lecture seule: les calculs sont faits par les services d'analyse.
Read-only: computations live in the analytics services.

Fenetre par defaut: 12 mois glissants (6 pour les comparaisons), bornes incluses.
Default window: trailing 12 months (6 for comparisons), inclusive bounds.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.api.deps import get_current_user, get_owned_vehicle, raise_validation_error
from motormate.database import get_db
from motormate.models.expense import Expense, ExpenseType
from motormate.models.trip import Trip
from motormate.models.user import User
from motormate.models.vehicle import Vehicle
from motormate.schemas.analytics import (
    ComparativeAnalytics,
    ComparativeTripAnalytics,
    FuelPriceAnalytics,
    TotalExpenseAnalytics,
    TotalTripAnalytics,
    VehicleExpenseAnalytics,
    VehicleTripAnalytics,
)
from motormate.schemas.common import ApiResponse
from motormate.services.analytics_service import ExpenseAnalyticsService
from motormate.services.trip_analytics import TripAnalyticsService
from motormate.utils.dates import resolve_window

router = APIRouter()

DEFAULT_WINDOW_MONTHS = 12
COMPARATIVE_WINDOW_MONTHS = 6


def _window(start_date: date | None, end_date: date | None, months: int) -> tuple[date, date]:
    try:
        return resolve_window(start_date, end_date, months)
    except ValueError as e:
        raise_validation_error("start_date", str(e), start_date.isoformat() if start_date else None)


async def _vehicles(db: AsyncSession, user: User, active_only: bool = True) -> list[Vehicle]:
    query = select(Vehicle).where(Vehicle.user_id == user.id)
    if active_only:
        query = query.where(Vehicle.is_active == True)
    result = await db.execute(query.order_by(Vehicle.id))
    return list(result.scalars().all())


async def _expenses(
    db: AsyncSession,
    user: User,
    start: date,
    end: date,
    vehicle_id: int | None = None,
    expense_type: ExpenseType | None = None,
) -> list[Expense]:
    query = select(Expense).where(
        Expense.user_id == user.id,
        Expense.is_active == True,
        Expense.date >= start.isoformat(),
        Expense.date <= end.isoformat(),
    )
    if vehicle_id is not None:
        query = query.where(Expense.vehicle_id == vehicle_id)
    if expense_type is not None:
        query = query.where(Expense.expense_type == expense_type)
    result = await db.execute(query.order_by(Expense.date, Expense.id))
    return list(result.scalars().all())


async def _trips(db: AsyncSession, user: User, start: date, end: date, vehicle_id: int | None = None) -> list[Trip]:
    query = select(Trip).where(
        Trip.user_id == user.id,
        Trip.is_active == True,
        Trip.date >= start.isoformat(),
        Trip.date <= end.isoformat(),
    )
    if vehicle_id is not None:
        query = query.where(Trip.vehicle_id == vehicle_id)
    result = await db.execute(query.order_by(Trip.date, Trip.id))
    return list(result.scalars().all())


# --- Depenses / Expenses ---


@router.get("/total", response_model=ApiResponse[TotalExpenseAnalytics])
async def total_analytics(
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Analyse globale des depenses / Overall expense analytics."""
    start, end = _window(start_date, end_date, DEFAULT_WINDOW_MONTHS)
    vehicles = {v.id: v for v in await _vehicles(db, user, active_only=False)}
    expenses = await _expenses(db, user, start, end)
    return ApiResponse(data=ExpenseAnalyticsService.total_report(expenses, vehicles, start, end))


@router.get("/vehicle/{vehicle_id}", response_model=ApiResponse[VehicleExpenseAnalytics])
async def vehicle_analytics(
    vehicle_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Analyse des depenses d'un vehicule / Single-vehicle expense analytics."""
    vehicle = await get_owned_vehicle(db, vehicle_id, user)
    start, end = _window(start_date, end_date, DEFAULT_WINDOW_MONTHS)
    expenses = await _expenses(db, user, start, end, vehicle_id=vehicle.id)
    return ApiResponse(data=ExpenseAnalyticsService.vehicle_report(vehicle, expenses, start, end))


@router.get("/comparative", response_model=ApiResponse[ComparativeAnalytics])
async def comparative_analytics(
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Comparaison des vehicules / Vehicle comparison."""
    start, end = _window(start_date, end_date, COMPARATIVE_WINDOW_MONTHS)
    vehicles = await _vehicles(db, user)
    expenses = await _expenses(db, user, start, end)
    return ApiResponse(data=ExpenseAnalyticsService.comparative_report(vehicles, expenses, start, end))


@router.get("/fuel-prices", response_model=ApiResponse[FuelPriceAnalytics])
async def fuel_price_trends(
    vehicle_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Evolution du prix du carburant / Fuel price trends."""
    if vehicle_id is not None:
        await get_owned_vehicle(db, vehicle_id, user)
    start, end = _window(start_date, end_date, DEFAULT_WINDOW_MONTHS)
    vehicles = {v.id: v for v in await _vehicles(db, user, active_only=False)}
    expenses = await _expenses(db, user, start, end, vehicle_id=vehicle_id, expense_type=ExpenseType.FUEL)
    return ApiResponse(data=ExpenseAnalyticsService.fuel_price_report(expenses, vehicles, start, end))


# --- Trajets / Trips ---


@router.get("/trips", response_model=ApiResponse[TotalTripAnalytics])
async def total_trip_analytics(
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Analyse globale des trajets / Overall trip analytics."""
    start, end = _window(start_date, end_date, DEFAULT_WINDOW_MONTHS)
    vehicles = await _vehicles(db, user, active_only=False)
    trips = await _trips(db, user, start, end)
    return ApiResponse(data=TripAnalyticsService.total_report(trips, vehicles, start, end))


@router.get("/trips/vehicle/{vehicle_id}", response_model=ApiResponse[VehicleTripAnalytics])
async def vehicle_trip_analytics(
    vehicle_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Analyse des trajets d'un vehicule / Single-vehicle trip analytics."""
    vehicle = await get_owned_vehicle(db, vehicle_id, user)
    start, end = _window(start_date, end_date, DEFAULT_WINDOW_MONTHS)
    trips = await _trips(db, user, start, end, vehicle_id=vehicle.id)
    return ApiResponse(data=TripAnalyticsService.vehicle_report(vehicle, trips, start, end))


@router.get("/trips/comparative", response_model=ApiResponse[ComparativeTripAnalytics])
async def comparative_trip_analytics(
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Comparaison des trajets entre vehicules / Cross-vehicle trip comparison."""
    start, end = _window(start_date, end_date, COMPARATIVE_WINDOW_MONTHS)
    vehicles = await _vehicles(db, user)
    trips = await _trips(db, user, start, end)
    return ApiResponse(data=TripAnalyticsService.comparative_report(trips, vehicles, start, end))
