"""Tests des services / Service tests."""

from datetime import date
from types import SimpleNamespace

from motormate.models.expense import ExpenseType
from motormate.models.trip import TripPurpose
from motormate.services.analytics_service import (
    EXPENSE_TREND_THRESHOLD,
    FUEL_PRICE_TREND_THRESHOLD,
    TRIP_TREND_THRESHOLD,
    ExpenseAnalyticsService,
    classify_trend,
    month_over_month,
)
from motormate.services.efficiency_calculator import EfficiencyCalculatorService
from motormate.services.trip_analytics import TripAnalyticsService
from motormate.utils.dates import months_back, resolve_window

START = date(2024, 1, 1)
END = date(2024, 12, 31)


def _vehicle(vehicle_id=1, name="City Car"):
    return SimpleNamespace(
        id=vehicle_id, vehicle_name=name, company="Maruti", model="Swift",
        vehicle_registration_number=f"KA01AB{vehicle_id:04d}",
    )


def _expense(expense_id, day, amount, expense_type=ExpenseType.FUEL, vehicle_id=1, odometer=None,
             fuel_added=None, total_fuel=None, total_cost=None):
    return SimpleNamespace(
        id=expense_id, vehicle_id=vehicle_id, expense_type=expense_type, date=day, amount=amount,
        odometer_reading=odometer, fuel_added=fuel_added, total_fuel=total_fuel, total_cost=total_cost,
        description=f"{expense_type.value} expense",
    )


def _trip(trip_id, day, distance, cost, purpose=TripPurpose.PERSONAL, vehicle_id=1):
    return SimpleNamespace(
        id=trip_id, vehicle_id=vehicle_id, date=day, distance=distance, total_cost=cost, purpose=purpose,
        start_location="Home", end_location="Office",
    )


# --- Rendement / Efficiency ---


def test_mileage_between_two_fillups():
    history = [
        _expense(1, "2024-01-01", 2500.0, odometer=1000),
        _expense(2, "2024-01-15", 3000.0, odometer=1400, fuel_added=30),
    ]
    points = EfficiencyCalculatorService.data_points(history)
    assert len(points) == 1
    assert points[0].distance == 400
    assert points[0].fuel == 30
    assert points[0].mileage == 13.33

    report = EfficiencyCalculatorService.report(history)
    assert report.average_mileage == 13.33
    assert report.total_distance == 400
    assert report.total_fuel == 30
    assert report.cost_per_km == 13.75
    assert report.avg_fuel_price == 183.33


def test_mileage_aggregates():
    history = [
        _expense(1, "2024-01-01", 100.0, odometer=1000, fuel_added=20),
        _expense(2, "2024-01-10", 100.0, odometer=1300, fuel_added=20),
        _expense(3, "2024-01-20", 100.0, odometer=1500, fuel_added=20),
    ]
    report = EfficiencyCalculatorService.report(history)
    assert report.data_points == 2
    assert report.best_mileage == 15.0
    assert report.worst_mileage == 10.0
    assert report.average_mileage == 12.5
    assert [p.odometer_end for p in report.points] == [1300, 1500]


def test_mileage_zero_guards():
    single = [_expense(1, "2024-01-01", 500.0, odometer=1000)]
    report = EfficiencyCalculatorService.report(single)
    assert report.data_points == 0
    assert report.average_mileage == 0.0
    assert report.cost_per_km == 0.0
    assert report.avg_fuel_price == 0.0

    empty = EfficiencyCalculatorService.report([])
    assert empty.total_distance == 0.0
    assert empty.recent_mileage == []


def test_mileage_skips_non_increasing_odometer():
    history = [
        _expense(1, "2024-01-01", 100.0, odometer=1000, fuel_added=20),
        _expense(2, "2024-01-10", 100.0, odometer=900, fuel_added=20),
    ]
    assert EfficiencyCalculatorService.data_points(history) == []


def test_safe_divide():
    assert EfficiencyCalculatorService.safe_divide(10, 0) == 0.0
    assert EfficiencyCalculatorService.safe_divide(10, None) == 0.0
    assert EfficiencyCalculatorService.safe_divide(10, 4) == 2.5


def test_chain_links_ascending_odometer():
    history = [
        _expense(3, "2024-01-20", 100.0, odometer=1800, fuel_added=50),
        _expense(1, "2024-01-01", 100.0, odometer=1000, fuel_added=30),
        _expense(2, "2024-01-10", 100.0, odometer=1400, fuel_added=40),
    ]
    links = EfficiencyCalculatorService.chain_links(history)
    assert [(link.expense.id, link.next_odometer) for link in links] == [(1, 1400), (2, 1800)]
    assert links[0].mileage == 10.0
    assert links[1].mileage == 8.0


# --- Agregation / Aggregation ---


def test_monthly_buckets():
    expenses = [
        _expense(1, "2024-01-05", 100.0),
        _expense(2, "2024-01-20", 50.0, ExpenseType.SERVICE),
        _expense(3, "2024-02-10", 25.5, ExpenseType.OTHER),
        _expense(4, "2024-03-01", 80.0),
        _expense(5, "2024-03-02", 20.0),
    ]
    buckets = ExpenseAnalyticsService.monthly_buckets(expenses)
    assert [b.month for b in buckets] == ["2024-01", "2024-02", "2024-03"]
    assert [b.count for b in buckets] == [2, 1, 2]
    assert buckets[0].total == 150.0
    assert buckets[0].fuel == 100.0
    assert buckets[0].service == 50.0
    assert buckets[0].average == 75.0
    assert sum(b.total for b in buckets) == sum(e.amount for e in expenses)


def test_type_breakdown_percentages():
    expenses = [
        _expense(1, "2024-01-05", 75.0),
        _expense(2, "2024-01-20", 25.0, ExpenseType.SERVICE),
    ]
    breakdown = {item.type: item for item in ExpenseAnalyticsService.type_breakdown(expenses)}
    assert breakdown[ExpenseType.FUEL].percentage == 75.0
    assert breakdown[ExpenseType.SERVICE].percentage == 25.0
    assert breakdown[ExpenseType.OTHER].count == 0


def test_trend_increasing():
    trend = classify_trend([100, 100, 100, 100, 100, 150], EXPENSE_TREND_THRESHOLD)
    assert trend.trend == "increasing"
    assert trend.change_percent == 16.67
    assert trend.recent_average == 116.67
    assert trend.previous_average == 100.0


def test_trend_decreasing_and_stable():
    assert classify_trend([200, 200, 200, 100, 100, 100], EXPENSE_TREND_THRESHOLD).trend == "decreasing"
    assert classify_trend([100, 100, 100, 103, 103, 103], EXPENSE_TREND_THRESHOLD).trend == "stable"
    # 3% sort de la bande carburant / 3% leaves the fuel price band
    assert classify_trend([100, 100, 100, 103, 103, 103], FUEL_PRICE_TREND_THRESHOLD).trend == "increasing"


def test_trend_with_few_months():
    assert classify_trend([], EXPENSE_TREND_THRESHOLD).change_percent == 0.0
    assert classify_trend([100], EXPENSE_TREND_THRESHOLD).trend == "stable"
    # Pas de fenetre precedente / No previous window
    assert classify_trend([100, 200], EXPENSE_TREND_THRESHOLD).change_percent == 0.0


def test_month_over_month():
    buckets = ExpenseAnalyticsService.monthly_buckets([
        _expense(1, "2024-01-05", 100.0),
        _expense(2, "2024-02-05", 150.0),
    ])
    growth = month_over_month(buckets)
    assert [g.growth_percent for g in growth] == [0.0, 50.0]


def test_total_report_empty():
    report = ExpenseAnalyticsService.total_report([], {}, START, END)
    assert report.summary.total_expenses == 0.0
    assert report.summary.total_transactions == 0
    assert report.summary.date_range.start_date == "2024-01-01"
    assert report.monthly_expenses == []
    assert report.trend.trend == "stable"
    assert report.highest_expense_vehicle is None
    assert len(report.type_breakdown) == 3


def test_total_report_vehicle_ranking():
    vehicles = {1: _vehicle(1, "City Car"), 2: _vehicle(2, "Bike")}
    expenses = [
        _expense(1, "2024-01-05", 100.0, vehicle_id=1),
        _expense(2, "2024-01-06", 300.0, vehicle_id=2),
    ]
    report = ExpenseAnalyticsService.total_report(expenses, vehicles, START, END)
    assert report.highest_expense_vehicle.vehicle_name == "Bike"
    assert report.lowest_expense_vehicle.vehicle_name == "City Car"
    assert report.summary.avg_monthly_expense == 400.0


def test_comparative_rankings():
    v1, v2 = _vehicle(1, "Van"), _vehicle(2, "Sedan")
    expenses = [
        _expense(1, "2024-01-05", 1500.0, ExpenseType.SERVICE, vehicle_id=1, odometer=5000),
        _expense(2, "2024-01-01", 500.0, vehicle_id=2, odometer=1000, fuel_added=20),
        _expense(3, "2024-01-20", 500.0, vehicle_id=2, odometer=1300, fuel_added=20),
    ]
    report = ExpenseAnalyticsService.comparative_report([v1, v2], expenses, START, END)
    assert [r.vehicle.id for r in report.rankings.by_expense] == [1, 2]
    assert [r.vehicle.id for r in report.rankings.by_mileage] == [2]
    assert [r.vehicle.id for r in report.rankings.by_distance] == [2, 1]
    assert report.summary.most_expensive.vehicle.id == 1
    assert report.summary.least_expensive.vehicle.id == 2
    assert report.summary.best_mileage.avg_mileage == 15.0
    assert report.summary.most_used.total_distance == 300.0
    assert report.summary.least_used.vehicle.id == 1


def test_fuel_price_report():
    expenses = [
        _expense(1, "2024-01-05", 100.0, total_fuel=50, total_cost=100),
        _expense(2, "2024-02-05", 110.0, total_fuel=50, total_cost=110),
        _expense(3, "2024-02-06", 10.0, ExpenseType.OTHER),
    ]
    report = ExpenseAnalyticsService.fuel_price_report(expenses, {1: _vehicle()}, START, END)
    assert [m.average_price for m in report.monthly] == [2.0, 2.2]
    assert report.overall.count == 2
    assert report.overall.min_price == 2.0
    assert report.overall.max_price == 2.2
    assert report.by_vehicle[0].vehicle_name == "City Car"


def test_vehicle_report_recent_expenses():
    expenses = [_expense(i, f"2024-01-{i:02d}", 10.0) for i in range(1, 13)]
    report = ExpenseAnalyticsService.vehicle_report(_vehicle(), expenses, START, END)
    assert len(report.recent_expenses) == 10
    assert report.recent_expenses[0].id == 12


def test_analytics_idempotent():
    vehicles = {1: _vehicle()}
    expenses = [
        _expense(1, "2024-03-05", 10.1),
        _expense(2, "2024-01-05", 20.2, ExpenseType.SERVICE),
        _expense(3, "2024-02-05", 30.3, ExpenseType.OTHER),
    ]
    first = ExpenseAnalyticsService.total_report(expenses, vehicles, START, END).model_dump_json()
    second = ExpenseAnalyticsService.total_report(list(reversed(expenses)), vehicles, START, END).model_dump_json()
    assert first == second



def test_fuel_price_trend_uses_unrounded_means():
    # 0.2549 et 0.2551 s'arrondissent a 0.25 et 0.26 / 0.2549 and 0.2551 round to 0.25 and 0.26
    expenses = [
        _expense(month, f"2024-{month:02d}-05", 25.0, total_fuel=100, total_cost=25.49 if month <= 3 else 25.51)
        for month in range(1, 7)
    ]
    report = ExpenseAnalyticsService.fuel_price_report(expenses, {1: _vehicle()}, START, END)
    assert [m.average_price for m in report.monthly] == [0.25, 0.25, 0.25, 0.26, 0.26, 0.26]
    assert report.trend.trend == "stable"


# --- Trajets / Trips ---


def test_trip_monthly_and_purpose():
    trips = [
        _trip(1, "2024-01-05", 10.0, 100.0, TripPurpose.COMMUTE),
        _trip(2, "2024-01-06", 30.0, 300.0, TripPurpose.COMMUTE),
        _trip(3, "2024-02-01", 120.0, 900.0, TripPurpose.LEISURE),
    ]
    monthly = TripAnalyticsService.monthly_buckets(trips)
    assert [(m.month, m.trip_count) for m in monthly] == [("2024-01", 2), ("2024-02", 1)]
    assert monthly[0].average_distance == 20.0

    purposes = TripAnalyticsService.purpose_breakdown(trips)
    assert purposes[0].purpose == TripPurpose.COMMUTE
    assert purposes[0].percentage == 66.7


def test_trip_reports():
    vehicles = [_vehicle(1, "Van"), _vehicle(2, "Sedan")]
    trips = [
        _trip(1, "2024-01-05", 10.0, 100.0, vehicle_id=1),
        _trip(2, "2024-01-06", 30.0, 300.0, vehicle_id=1),
        _trip(3, "2024-02-01", 120.0, 900.0, vehicle_id=2),
    ]
    total = TripAnalyticsService.total_report(trips, vehicles, START, END)
    assert total.summary.total_trips == 3
    assert total.summary.total_distance == 160.0
    assert total.most_used_vehicle.vehicle.id == 1
    assert total.longest_trip.id == 3

    comparative = TripAnalyticsService.comparative_report(trips, vehicles, START, END)
    assert comparative.summary.longest_distance.vehicle.id == 2
    assert comparative.summary.most_used.vehicle.id == 1


def test_trip_report_empty():
    report = TripAnalyticsService.total_report([], [], START, END)
    assert report.summary.total_trips == 0
    assert report.summary.cost_per_km == 0.0
    assert report.longest_trip is None


# --- Fenetres / Windows ---


def test_default_windows():
    today = date(2024, 5, 17)
    assert resolve_window(None, None, 12, today=today) == (date(2023, 5, 1), today)
    assert resolve_window(None, None, 6, today=today) == (date(2023, 11, 1), today)
    assert months_back(date(2024, 3, 10), 6) == date(2023, 9, 1)


def _monthly_trips(counts):
    trips = []
    for month, count in enumerate(counts, start=1):
        for day in range(1, count + 1):
            trips.append(_trip(len(trips) + 1, f"2024-{month:02d}-{day:02d}", 10.0, 50.0))
    return trips


def test_trip_trend_above_threshold():
    report = TripAnalyticsService.total_report(_monthly_trips([3, 3, 3, 3, 3, 4]), [_vehicle()], START, END)
    assert TRIP_TREND_THRESHOLD == 10.0
    assert report.trend.trend == "increasing"
    assert report.trend.change_percent == 11.11

    report = TripAnalyticsService.total_report(_monthly_trips([4, 4, 4, 3, 3, 4]), [_vehicle()], START, END)
    assert report.trend.trend == "decreasing"
    assert report.trend.change_percent == -16.67


def test_trip_trend_inside_threshold():
    # +6.67%: hors de la bande depenses, dans la bande trajets / outside the expense band, inside the trip band
    report = TripAnalyticsService.total_report(_monthly_trips([10, 10, 10, 10, 10, 12]), [_vehicle()], START, END)
    assert report.trend.change_percent == 6.67
    assert report.trend.trend == "stable"
    assert classify_trend([10, 10, 10, 10, 10, 12], EXPENSE_TREND_THRESHOLD).trend == "increasing"
