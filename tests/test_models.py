"""Tests des modèles / Model tests."""

from motormate.models.expense import Expense, ExpenseType, OtherCategory, ServiceType
from motormate.models.post import ReactionKind, ReportReason
from motormate.models.trip import Trip, TripPurpose
from motormate.models.user import User
from motormate.models.vehicle import FuelType, Vehicle


def test_vehicle_display_name():
    v = Vehicle(vehicle_name="City Car", company="Maruti", model="Swift")
    assert v.display_name == "City Car (Maruti Swift)"


def test_fuel_expense_mileage_info():
    e = Expense(expense_type=ExpenseType.FUEL, odometer_reading=1000, amount=3000, date="2024-01-01")
    assert e.mileage_info == "Mileage calculation pending next fuel entry"
    assert e.distance_to_next_fueling is None

    e.next_fueling_odometer = 1400
    e.mileage = 13.333
    assert e.mileage_info == "13.33 km/l"
    assert e.distance_to_next_fueling == 400


def test_non_fuel_expense_has_no_mileage():
    e = Expense(expense_type=ExpenseType.SERVICE, odometer_reading=1000, next_fueling_odometer=1400)
    assert e.mileage_info == ""
    assert e.distance_to_next_fueling is None


def test_trip_cost_per_km():
    assert Trip(distance=25, total_cost=250).cost_per_km == 10.0
    assert Trip(distance=0, total_cost=250).cost_per_km == 0.0


def test_user_address():
    u = User(email="alice@example.com", city="Pune", country="India")
    assert u.address["city"] == "Pune"
    assert u.address["street"] is None


def test_enums():
    assert FuelType.CNG.value == "CNG"
    assert ExpenseType.FUEL.value == "Fuel"
    assert ServiceType.OIL_CHANGE.value == "Oil Change"
    assert OtherCategory.CAR_WASH.value == "Car Wash"
    assert TripPurpose.COMMUTE.value == "Commute"
    assert ReactionKind.LIKE.value == "like"
    assert ReportReason.SPAM.value == "spam"
