"""Tests du chainage des pleins / Fuel chain tests."""

import pytest

from motormate.models.expense import Expense, ExpenseType
from motormate.models.vehicle import FuelType, Vehicle
from motormate.services.mileage_linker import MileageLinker


@pytest.fixture
async def vehicle(db, user):
    vehicle = Vehicle(
        user_id=user.id, vehicle_name="City Car", company="Maruti", model="Swift",
        fuel_type=FuelType.PETROL, vehicle_registration_number="KA01AB1234",
        purchased_date="2022-01-15", vehicle_cost=650000,
    )
    db.add(vehicle)
    await db.commit()
    return vehicle


async def _fuel(db, vehicle, odometer, day, fuel_added=30.0, **fields):
    expense = Expense(
        user_id=vehicle.user_id, vehicle_id=vehicle.id, expense_type=ExpenseType.FUEL,
        amount=3000, date=day, description="Fill-up", odometer_reading=odometer,
        fuel_added=fuel_added, **fields,
    )
    db.add(expense)
    await db.commit()
    return expense


@pytest.mark.asyncio
async def test_first_fillup_has_no_predecessor(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    assert await MileageLinker(db).link_predecessor(first) is None


@pytest.mark.asyncio
async def test_create_links_predecessor(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    second = await _fuel(db, vehicle, 1400, "2024-01-15", fuel_added=30.0)

    await MileageLinker(db).on_create(second)
    await db.refresh(first)

    assert first.next_fueling_odometer == 1400
    assert first.mileage == 13.33
    assert first.distance_to_next_fueling == 400
    assert second.next_fueling_odometer is None


@pytest.mark.asyncio
async def test_first_write_wins(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    second = await _fuel(db, vehicle, 1400, "2024-01-15")
    linker = MileageLinker(db)
    await linker.on_create(second)

    # Saisie tardive entre deux pleins / Late entry between two fill-ups
    late = await _fuel(db, vehicle, 1200, "2024-01-10")
    assert await linker.link_predecessor(late) is None
    await db.refresh(first)
    assert first.next_fueling_odometer == 1400


@pytest.mark.asyncio
async def test_odometer_change_retargets_pointer(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    second = await _fuel(db, vehicle, 1400, "2024-01-15", fuel_added=25.0)
    linker = MileageLinker(db)
    await linker.on_create(second)

    second.odometer_reading = 1500
    await db.commit()
    await linker.on_odometer_change(second, 1400)
    await db.refresh(first)

    assert first.next_fueling_odometer == 1500
    assert first.mileage == 20.0


@pytest.mark.asyncio
async def test_non_fuel_expense_is_ignored(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    service = Expense(
        user_id=vehicle.user_id, vehicle_id=vehicle.id, expense_type=ExpenseType.SERVICE,
        amount=1500, date="2024-01-05", description="Oil change", odometer_reading=1100,
    )
    db.add(service)
    await db.commit()

    await MileageLinker(db).on_create(service)
    await db.refresh(first)
    assert first.next_fueling_odometer is None


@pytest.mark.asyncio
async def test_chain_failure_is_swallowed(db, vehicle, monkeypatch):
    await _fuel(db, vehicle, 1000, "2024-01-01")
    second = await _fuel(db, vehicle, 1400, "2024-01-15")

    async def _broken(self, expense):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(MileageLinker, "link_predecessor", _broken)
    await MileageLinker(db).on_create(second)

    assert second.id is not None
    assert second.odometer_reading == 1400


@pytest.mark.asyncio
async def test_relink_vehicle_overwrites_pointers(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01", next_fueling_odometer=9999, mileage=1.0)
    second = await _fuel(db, vehicle, 1400, "2024-01-15", fuel_added=40.0)
    third = await _fuel(db, vehicle, 1800, "2024-02-01", fuel_added=50.0)

    updates = await MileageLinker(db).relink_vehicle(vehicle.id)
    await db.commit()

    assert [u.expense_id for u in updates] == [first.id, second.id]
    assert first.next_fueling_odometer == 1400
    assert first.mileage == 10.0
    assert second.next_fueling_odometer == 1800
    assert second.mileage == 8.0
    assert third.next_fueling_odometer is None


@pytest.mark.asyncio
async def test_relink_clears_pointer_to_deleted_fillup(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    second = await _fuel(db, vehicle, 1400, "2024-01-15")
    linker = MileageLinker(db)
    await linker.on_create(second)

    second.is_active = False
    await db.commit()
    assert await linker.relink_vehicle(vehicle.id) == []
    await db.commit()

    assert first.next_fueling_odometer is None
    assert first.mileage is None


@pytest.mark.asyncio
async def test_pointer_mileage_uses_pointed_fillup(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01", fuel_added=30.0, next_fueling_odometer=1400)
    linker = MileageLinker(db)
    assert await linker.pointer_mileage(first) == 13.33

    await _fuel(db, vehicle, 1400, "2024-01-15", fuel_added=40.0)
    assert await linker.pointer_mileage(first) == 10.0


@pytest.mark.asyncio
async def test_fuel_change_refreshes_predecessor(db, vehicle):
    first = await _fuel(db, vehicle, 1000, "2024-01-01")
    second = await _fuel(db, vehicle, 1400, "2024-01-15", fuel_added=40.0)
    linker = MileageLinker(db)
    await linker.on_create(second)

    second.fuel_added = 50.0
    await db.commit()
    await linker.on_fuel_change(second)
    await db.refresh(first)

    assert first.next_fueling_odometer == 1400
    assert first.mileage == 8.0
