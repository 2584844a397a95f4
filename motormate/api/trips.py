"""Routes Trajets / Trip API routes."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.api.deps import checked_range, get_current_user, get_owned_trip, get_owned_vehicle
from motormate.database import get_db
from motormate.models.trip import Trip, TripPurpose
from motormate.models.user import User
from motormate.schemas.common import ApiResponse, PaginatedResponse
from motormate.schemas.trip import TripCreate, TripRead, TripStats, TripUpdate
from motormate.utils.pagination import paginate

router = APIRouter()

_MERGE_FIELDS = (
    "vehicle_id", "start_location", "end_location", "distance", "total_cost",
    "start_odometer", "end_odometer", "purpose", "date", "notes",
)


def _active_trips(user: User):
    return select(Trip).where(Trip.user_id == user.id, Trip.is_active == True)


@router.get("/", response_model=PaginatedResponse[TripRead])
async def list_trips(
    vehicle_id: int | None = None,
    purpose: TripPurpose | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Lister mes trajets / List my trips."""
    checked_range(start_date, end_date)
    query = _active_trips(user)
    if vehicle_id is not None:
        await get_owned_vehicle(db, vehicle_id, user)
        query = query.where(Trip.vehicle_id == vehicle_id)
    if purpose:
        query = query.where(Trip.purpose == purpose)
    if start_date:
        query = query.where(Trip.date >= start_date.isoformat())
    if end_date:
        query = query.where(Trip.date <= end_date.isoformat())
    query = query.order_by(Trip.date.desc(), Trip.id.desc())

    trips, total, pages = await paginate(db, query, page, limit)
    return PaginatedResponse(
        data=[TripRead.model_validate(t) for t in trips],
        page=page, pages=pages, total=total, limit=limit, count=len(trips),
    )


@router.get("/stats/{vehicle_id}", response_model=ApiResponse[TripStats])
async def trip_stats(vehicle_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Statistiques des trajets d'un vehicule / Vehicle trip statistics."""
    await get_owned_vehicle(db, vehicle_id, user)
    result = await db.execute(_active_trips(user).where(Trip.vehicle_id == vehicle_id).order_by(Trip.date, Trip.id))
    trips = result.scalars().all()
    if not trips:
        return ApiResponse(data=TripStats(vehicle_id=vehicle_id))

    distance = sum(float(t.distance) for t in trips)
    cost = sum(float(t.total_cost) for t in trips)
    return ApiResponse(data=TripStats(
        vehicle_id=vehicle_id,
        total_trips=len(trips),
        total_distance=round(distance, 2),
        total_cost=round(cost, 2),
        average_distance=round(distance / len(trips), 2),
        average_cost=round(cost / len(trips), 2),
        earliest_trip=trips[0].date,
        latest_trip=trips[-1].date,
    ))


@router.get("/recent/{vehicle_id}", response_model=ApiResponse[list[TripRead]])
async def recent_trips(
    vehicle_id: int,
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Derniers trajets d'un vehicule / Latest trips of a vehicle."""
    await get_owned_vehicle(db, vehicle_id, user)
    result = await db.execute(
        _active_trips(user).where(Trip.vehicle_id == vehicle_id).order_by(Trip.date.desc(), Trip.id.desc()).limit(limit)
    )
    return ApiResponse(data=[TripRead.model_validate(t) for t in result.scalars().all()])


@router.get("/{trip_id}", response_model=ApiResponse[TripRead])
async def get_trip(trip_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Obtenir un trajet / Get a trip."""
    trip = await get_owned_trip(db, trip_id, user)
    return ApiResponse(data=TripRead.model_validate(trip))


@router.post("/", response_model=ApiResponse[TripRead], status_code=201)
async def create_trip(data: TripCreate, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Enregistrer un trajet / Record a trip."""
    await get_owned_vehicle(db, data.vehicle_id, user)
    trip = Trip(**data.model_dump(), user_id=user.id)
    db.add(trip)
    await db.flush()
    await db.refresh(trip)
    return ApiResponse(message="Trip created successfully", data=TripRead.model_validate(trip))


@router.put("/{trip_id}", response_model=ApiResponse[TripRead])
async def update_trip(
    trip_id: int,
    data: TripUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Modifier un trajet / Update a trip."""
    trip = await get_owned_trip(db, trip_id, user)
    merged = {field: getattr(trip, field) for field in _MERGE_FIELDS}
    changes = data.model_dump(exclude_unset=True)
    merged.update(changes)
    # Distance re-derivee si les compteurs changent / Distance re-derived when odometers change
    if (
        "distance" not in changes
        and changes.keys() & {"start_odometer", "end_odometer"}
        and merged["start_odometer"] is not None
        and merged["end_odometer"] is not None
    ):
        merged["distance"] = None
    try:
        validated = TripCreate.model_validate(merged)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e

    for key, value in validated.model_dump().items():
        setattr(trip, key, value)
    await db.flush()
    await db.refresh(trip)
    return ApiResponse(message="Trip updated successfully", data=TripRead.model_validate(trip))


@router.delete("/{trip_id}", response_model=ApiResponse[None])
async def delete_trip(trip_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Supprimer un trajet (desactivation) / Delete a trip (soft delete)."""
    trip = await get_owned_trip(db, trip_id, user)
    trip.is_active = False
    await db.flush()
    return ApiResponse(message="Trip deleted successfully")
