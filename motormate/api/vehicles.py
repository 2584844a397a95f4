"""Routes Vehicules / Vehicle API routes."""

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.api.deps import get_current_user, get_owned_vehicle
from motormate.database import get_db
from motormate.models.user import User
from motormate.models.vehicle import Vehicle
from motormate.schemas.common import ApiResponse, PaginatedResponse
from motormate.schemas.vehicle import VehicleCreate, VehicleRead, VehicleStats, VehicleUpdate
from motormate.utils.pagination import paginate

router = APIRouter()

INSURANCE_WARNING_DAYS = 30
_REQUIRED_FIELDS = {
    "vehicle_name", "company", "model", "fuel_type", "purchased_date",
    "vehicle_cost", "odometer_reading", "vehicle_registration_number",
}


async def _check_registration_unique(db: AsyncSession, user: User, registration: str, exclude_id: int | None = None):
    """Immatriculation unique parmi les vehicules actifs / Registration unique among active vehicles."""
    query = select(Vehicle.id).where(
        Vehicle.user_id == user.id,
        Vehicle.is_active == True,
        Vehicle.vehicle_registration_number == registration,
    )
    if exclude_id is not None:
        query = query.where(Vehicle.id != exclude_id)
    if (await db.execute(query)).first():
        raise HTTPException(status_code=400, detail="Vehicle with this registration number already exists")


@router.get("/", response_model=PaginatedResponse[VehicleRead])
async def list_vehicles(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Lister mes vehicules / List my vehicles."""
    query = select(Vehicle).where(Vehicle.user_id == user.id, Vehicle.is_active == True)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Vehicle.vehicle_name.ilike(pattern),
            Vehicle.company.ilike(pattern),
            Vehicle.model.ilike(pattern),
            Vehicle.vehicle_registration_number.ilike(pattern),
        ))
    query = query.order_by(Vehicle.created_at.desc(), Vehicle.id.desc())

    vehicles, total, pages = await paginate(db, query, page, limit)
    return PaginatedResponse(
        data=[VehicleRead.model_validate(v) for v in vehicles],
        page=page, pages=pages, total=total, limit=limit, count=len(vehicles),
    )


@router.get("/stats", response_model=ApiResponse[VehicleStats])
async def vehicle_stats(db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Statistiques du garage / Garage statistics."""
    result = await db.execute(
        select(Vehicle).where(Vehicle.user_id == user.id, Vehicle.is_active == True).order_by(Vehicle.id)
    )
    vehicles = result.scalars().all()
    if not vehicles:
        return ApiResponse(data=VehicleStats())

    by_purchase = sorted(vehicles, key=lambda v: (v.purchased_date, v.id))
    today = date.today()
    horizon = (today + timedelta(days=INSURANCE_WARNING_DAYS)).isoformat()
    expiring = [
        v for v in vehicles
        if v.insurance_expiry and today.isoformat() <= v.insurance_expiry <= horizon
    ]

    return ApiResponse(data=VehicleStats(
        total_vehicles=len(vehicles),
        average_odometer=round(sum(v.odometer_reading or 0 for v in vehicles) / len(vehicles), 2),
        total_cost=round(sum(float(v.vehicle_cost) for v in vehicles), 2),
        newest_vehicle=VehicleRead.model_validate(by_purchase[-1]),
        oldest_vehicle=VehicleRead.model_validate(by_purchase[0]),
        insurance_expiring_soon=[VehicleRead.model_validate(v) for v in expiring],
    ))


@router.get("/{vehicle_id}", response_model=ApiResponse[VehicleRead])
async def get_vehicle(vehicle_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Obtenir un vehicule / Get a vehicle."""
    vehicle = await get_owned_vehicle(db, vehicle_id, user)
    return ApiResponse(data=VehicleRead.model_validate(vehicle))


@router.post("/", response_model=ApiResponse[VehicleRead], status_code=201)
async def create_vehicle(data: VehicleCreate, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Ajouter un vehicule / Add a vehicle."""
    await _check_registration_unique(db, user, data.vehicle_registration_number)
    vehicle = Vehicle(**data.model_dump(), user_id=user.id)
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)
    return ApiResponse(message="Vehicle added successfully", data=VehicleRead.model_validate(vehicle))


@router.put("/{vehicle_id}", response_model=ApiResponse[VehicleRead])
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Modifier un vehicule / Update a vehicle."""
    vehicle = await get_owned_vehicle(db, vehicle_id, user)
    updates = data.model_dump(exclude_unset=True)
    if updates.get("vehicle_registration_number"):
        await _check_registration_unique(db, user, updates["vehicle_registration_number"], exclude_id=vehicle.id)
    for key, value in updates.items():
        if value is None and key in _REQUIRED_FIELDS:
            continue
        setattr(vehicle, key, value)
    await db.flush()
    await db.refresh(vehicle)
    return ApiResponse(message="Vehicle updated successfully", data=VehicleRead.model_validate(vehicle))


@router.delete("/{vehicle_id}", response_model=ApiResponse[None])
async def delete_vehicle(vehicle_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Supprimer un vehicule (desactivation) / Delete a vehicle (soft delete)."""
    vehicle = await get_owned_vehicle(db, vehicle_id, user)
    vehicle.is_active = False
    await db.flush()
    return ApiResponse(message="Vehicle deleted successfully")
