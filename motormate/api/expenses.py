"""
Routes Depenses / Expense API routes.
CRUD, statistiques par vehicule et chaine des pleins.
CRUD, per-vehicle statistics and fuel chain.
"""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.api.deps import checked_range, get_current_user, get_owned_expense, get_owned_vehicle
from motormate.database import get_db
from motormate.models.expense import Expense, ExpenseType
from motormate.models.user import User
from motormate.schemas.analytics import MileageReport
from motormate.schemas.common import ApiResponse, PaginatedResponse
from motormate.schemas.expense import (
    VARIANT_FIELDS,
    ExpenseCreateRequest,
    ExpenseRead,
    ExpenseStats,
    ExpenseTypeStat,
    ExpenseUpdate,
    MileageUpdate,
)
from motormate.services.analytics_service import ExpenseAnalyticsService
from motormate.services.efficiency_calculator import EfficiencyCalculatorService
from motormate.services.mileage_linker import MileageLinker
from motormate.utils.pagination import paginate

router = APIRouter()

SORT_FIELDS = {
    "date": Expense.date,
    "amount": Expense.amount,
    "expense_type": Expense.expense_type,
    "created_at": Expense.created_at,
}
RECENT_STATS_EXPENSES = 5

# Champs fusionnes lors d'une mise a jour / Fields merged on update
_MERGE_FIELDS = (
    "vehicle_id", "amount", "date", "description", "receipt_number",
    "notes", "location", "payment_method",
) + VARIANT_FIELDS


def _expense_columns(data) -> dict:
    """Colonnes a ecrire pour une variante validee / Columns to write for a validated variant."""
    values = data.model_dump()
    values["expense_type"] = ExpenseType(values["expense_type"])
    for field in VARIANT_FIELDS:
        values.setdefault(field, None)
    if values["expense_type"] == ExpenseType.FUEL:
        price = EfficiencyCalculatorService.price_per_unit(values["amount"], values["total_fuel"])
        values["price_per_unit"] = round(price, 3)
    else:
        values["price_per_unit"] = None
        values["mileage"] = None
    return values


def _active_expenses(user: User):
    return select(Expense).where(Expense.user_id == user.id, Expense.is_active == True)


@router.get("/", response_model=PaginatedResponse[ExpenseRead])
async def list_expenses(
    vehicle_id: int | None = None,
    expense_type: ExpenseType | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Literal["date", "amount", "expense_type", "created_at"] = "date",
    sort_order: Literal["asc", "desc"] = "desc",
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Lister mes depenses / List my expenses."""
    checked_range(start_date, end_date)
    query = _active_expenses(user)
    if vehicle_id is not None:
        await get_owned_vehicle(db, vehicle_id, user)
        query = query.where(Expense.vehicle_id == vehicle_id)
    if expense_type:
        query = query.where(Expense.expense_type == expense_type)
    if start_date:
        query = query.where(Expense.date >= start_date.isoformat())
    if end_date:
        query = query.where(Expense.date <= end_date.isoformat())

    column = SORT_FIELDS[sort_by]
    query = query.order_by(column.desc() if sort_order == "desc" else column.asc(), Expense.id.desc())

    expenses, total, pages = await paginate(db, query, page, limit)
    return PaginatedResponse(
        data=[ExpenseRead.model_validate(e) for e in expenses],
        page=page, pages=pages, total=total, limit=limit, count=len(expenses),
    )


@router.get("/stats/{vehicle_id}", response_model=ApiResponse[ExpenseStats])
async def expense_stats(
    vehicle_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Statistiques des depenses d'un vehicule / Vehicle expense statistics."""
    checked_range(start_date, end_date)
    await get_owned_vehicle(db, vehicle_id, user)
    query = _active_expenses(user).where(Expense.vehicle_id == vehicle_id)
    if start_date:
        query = query.where(Expense.date >= start_date.isoformat())
    if end_date:
        query = query.where(Expense.date <= end_date.isoformat())
    expenses = (await db.execute(query.order_by(Expense.date.desc(), Expense.id.desc()))).scalars().all()

    breakdown = [
        ExpenseTypeStat(type=item.type, total=item.total, count=item.count, average=item.average)
        for item in ExpenseAnalyticsService.type_breakdown(expenses)
        if item.count
    ]
    return ApiResponse(data=ExpenseStats(
        vehicle_id=vehicle_id,
        total_expenses=round(sum(item.total for item in breakdown), 2),
        total_count=len(expenses),
        breakdown=breakdown,
        recent_expenses=[ExpenseRead.model_validate(e) for e in expenses[:RECENT_STATS_EXPENSES]],
    ))


@router.get("/fuel/{vehicle_id}", response_model=ApiResponse[list[ExpenseRead]])
async def fuel_expenses(
    vehicle_id: int,
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Historique des pleins / Fill-up history."""
    await get_owned_vehicle(db, vehicle_id, user)
    result = await db.execute(
        _active_expenses(user)
        .where(
            Expense.vehicle_id == vehicle_id,
            Expense.expense_type == ExpenseType.FUEL,
            Expense.odometer_reading > 0,
        )
        .order_by(Expense.date.desc(), Expense.odometer_reading.desc())
        .limit(limit)
    )
    return ApiResponse(data=[ExpenseRead.model_validate(e) for e in result.scalars().all()])


@router.post("/calculate-mileage/{vehicle_id}", response_model=ApiResponse[list[MileageUpdate]])
async def calculate_mileage(vehicle_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Recalculer toute la chaine des pleins / Recompute the whole fuel chain."""
    await get_owned_vehicle(db, vehicle_id, user)
    updates = await MileageLinker(db).relink_vehicle(vehicle_id)
    return ApiResponse(message=f"Mileage calculated for {len(updates)} fuel entries", data=updates)


@router.get("/mileage-stats/{vehicle_id}", response_model=ApiResponse[MileageReport])
async def mileage_stats(vehicle_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Rendement carburant du vehicule / Vehicle fuel efficiency."""
    await get_owned_vehicle(db, vehicle_id, user)
    result = await db.execute(
        _active_expenses(user).where(Expense.vehicle_id == vehicle_id, Expense.expense_type == ExpenseType.FUEL)
    )
    return ApiResponse(data=EfficiencyCalculatorService.report(result.scalars().all()))


@router.get("/{expense_id}", response_model=ApiResponse[ExpenseRead])
async def get_expense(expense_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Obtenir une depense / Get an expense."""
    expense = await get_owned_expense(db, expense_id, user)
    return ApiResponse(data=ExpenseRead.model_validate(expense))


@router.post("/", response_model=ApiResponse[ExpenseRead], status_code=201)
async def create_expense(data: ExpenseCreateRequest, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Enregistrer une depense / Record an expense."""
    payload = data.root
    await get_owned_vehicle(db, payload.vehicle_id, user)
    expense = Expense(**_expense_columns(payload), user_id=user.id)
    db.add(expense)
    await db.flush()
    linker = MileageLinker(db)
    if expense.expense_type == ExpenseType.FUEL:
        expense.mileage = await linker.pointer_mileage(expense)
    # Enregistrement principal valide avant le chainage / Primary record committed before chaining
    await db.commit()

    await linker.on_create(expense)
    await db.refresh(expense)
    return ApiResponse(message="Expense created successfully", data=ExpenseRead.model_validate(expense))


@router.put("/{expense_id}", response_model=ApiResponse[ExpenseRead])
async def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Modifier une depense / Update an expense."""
    expense = await get_owned_expense(db, expense_id, user)
    old_type = expense.expense_type
    old_odometer = expense.odometer_reading
    old_fuel = expense.fuel_added

    merged = {field: getattr(expense, field) for field in _MERGE_FIELDS}
    merged["expense_type"] = expense.expense_type.value
    merged.update(data.model_dump(exclude_unset=True))
    try:
        validated = ExpenseCreateRequest.model_validate(merged).root
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e

    for key, value in _expense_columns(validated).items():
        setattr(expense, key, value)
    linker = MileageLinker(db)
    if expense.expense_type == ExpenseType.FUEL:
        expense.mileage = await linker.pointer_mileage(expense)
    await db.flush()
    await db.commit()

    if expense.expense_type == ExpenseType.FUEL:
        if old_type != ExpenseType.FUEL:
            await linker.on_create(expense)
        elif old_odometer != expense.odometer_reading:
            await linker.on_odometer_change(expense, old_odometer)
        elif old_fuel != expense.fuel_added:
            await linker.on_fuel_change(expense)

    await db.refresh(expense)
    return ApiResponse(message="Expense updated successfully", data=ExpenseRead.model_validate(expense))


@router.delete("/{expense_id}", response_model=ApiResponse[None])
async def delete_expense(expense_id: int, db: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)):
    """Supprimer une depense (desactivation) / Delete an expense (soft delete)."""
    expense = await get_owned_expense(db, expense_id, user)
    expense.is_active = False
    await db.flush()
    return ApiResponse(message="Expense deleted successfully")
