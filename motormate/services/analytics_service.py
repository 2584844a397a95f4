"""
Service d'analyse des depenses / Expense analytics service.

Agregations mensuelles, par type et par vehicule, tendance et classements.
Monthly, per-type and per-vehicle aggregations, trend and rankings.

Chaque agregation fait une seule passe avec totaux et compteurs; les moyennes
sont calculees apres la passe.
Each aggregation is a single pass accumulating totals and counts; averages
are derived after the pass.
"""

from collections import defaultdict
from datetime import date

from motormate.models.expense import ExpenseType
from motormate.schemas.analytics import (
    ComparativeAnalytics,
    ComparativeRankings,
    ComparativeSummary,
    ComparativeVehicle,
    DateRange,
    ExpenseSummary,
    FuelPriceAnalytics,
    FuelPriceMonth,
    FuelPriceStats,
    FuelPriceVehicle,
    MonthlyExpenseBucket,
    MonthlyGrowth,
    RecentExpense,
    TotalExpenseAnalytics,
    TrendAnalysis,
    TypeBreakdownItem,
    VehicleBrief,
    VehicleExpenseAnalytics,
    VehicleExpenseBucket,
)
from motormate.services.efficiency_calculator import EfficiencyCalculatorService
from motormate.utils.dates import month_key

# Seuils de tendance en % / Trend thresholds in %
EXPENSE_TREND_THRESHOLD = 5.0
TRIP_TREND_THRESHOLD = 10.0
FUEL_PRICE_TREND_THRESHOLD = 2.0
TREND_WINDOW = 3
RECENT_EXPENSES = 10

_TYPE_KEYS = {
    ExpenseType.FUEL: "fuel",
    ExpenseType.SERVICE: "service",
    ExpenseType.OTHER: "other",
}


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def ordered_records(records) -> list:
    """Ordre stable (date, id) / Stable (date, id) order."""
    return sorted(records, key=lambda r: (r.date, r.id))


def date_range(start: date, end: date) -> DateRange:
    return DateRange(start_date=start.isoformat(), end_date=end.isoformat())


def classify_trend(values: list[float], threshold: float) -> TrendAnalysis:
    """Tendance: moyenne des 3 derniers mois contre les 3 precedents.

    Trend: mean of the last 3 monthly values against the 3 before them.
    `values` must be sorted by ascending month.
    """
    if len(values) < 2:
        return TrendAnalysis()

    recent = values[-TREND_WINDOW:]
    previous = values[-2 * TREND_WINDOW:-TREND_WINDOW]
    recent_avg = _mean(recent)
    previous_avg = _mean(previous)
    change = (recent_avg - previous_avg) / previous_avg * 100 if previous_avg else 0.0

    trend = "stable"
    if change > threshold:
        trend = "increasing"
    elif change < -threshold:
        trend = "decreasing"

    return TrendAnalysis(
        trend=trend,
        change_percent=round(change, 2),
        recent_average=round(recent_avg, 2),
        previous_average=round(previous_avg, 2),
    )


def month_over_month(monthly: list[MonthlyExpenseBucket]) -> list[MonthlyGrowth]:
    """Croissance d'un mois sur l'autre / Month-over-month growth."""
    growth = []
    previous = None
    for bucket in monthly:
        percent = 0.0
        if previous:
            percent = (bucket.total - previous) / previous * 100
        growth.append(MonthlyGrowth(month=bucket.month, total=bucket.total, growth_percent=round(percent, 2)))
        previous = bucket.total
    return growth


def vehicle_brief(vehicle) -> VehicleBrief:
    return VehicleBrief(
        id=vehicle.id,
        vehicle_name=vehicle.vehicle_name,
        company=vehicle.company,
        model=vehicle.model,
        registration_number=vehicle.vehicle_registration_number,
    )


def rank(items: list, key, exclude_zero: bool = False) -> list:
    """Classement decroissant stable / Stable descending ranking."""
    candidates = [item for item in items if not exclude_zero or key(item) > 0]
    return sorted(candidates, key=key, reverse=True)


class ExpenseAnalyticsService:
    """Agregations sur les depenses / Expense aggregations."""

    @staticmethod
    def monthly_buckets(expenses) -> list[MonthlyExpenseBucket]:
        totals: dict[str, dict] = defaultdict(lambda: {"fuel": 0.0, "service": 0.0, "other": 0.0, "total": 0.0, "count": 0})
        for expense in ordered_records(expenses):
            bucket = totals[month_key(expense.date)]
            amount = float(expense.amount)
            bucket[_TYPE_KEYS[ExpenseType(expense.expense_type)]] += amount
            bucket["total"] += amount
            bucket["count"] += 1

        return [
            MonthlyExpenseBucket(
                month=month,
                fuel=round(b["fuel"], 2),
                service=round(b["service"], 2),
                other=round(b["other"], 2),
                total=round(b["total"], 2),
                count=b["count"],
                average=round(b["total"] / b["count"], 2),
            )
            for month, b in sorted(totals.items())
        ]

    @staticmethod
    def type_breakdown(expenses) -> list[TypeBreakdownItem]:
        totals = {t: 0.0 for t in ExpenseType}
        counts = {t: 0 for t in ExpenseType}
        for expense in ordered_records(expenses):
            expense_type = ExpenseType(expense.expense_type)
            totals[expense_type] += float(expense.amount)
            counts[expense_type] += 1

        grand_total = sum(totals.values())
        return [
            TypeBreakdownItem(
                type=t,
                total=round(totals[t], 2),
                count=counts[t],
                average=round(totals[t] / counts[t], 2) if counts[t] else 0.0,
                percentage=round(totals[t] / grand_total * 100, 1) if grand_total else 0.0,
            )
            for t in ExpenseType
        ]

    @staticmethod
    def vehicle_buckets(expenses, vehicles: dict) -> list[VehicleExpenseBucket]:
        """Totaux par vehicule, du plus cher au moins cher / Per-vehicle totals, most expensive first."""
        totals: dict[int, dict] = defaultdict(lambda: {"fuel": 0.0, "service": 0.0, "other": 0.0, "total": 0.0, "count": 0})
        for expense in ordered_records(expenses):
            bucket = totals[expense.vehicle_id]
            amount = float(expense.amount)
            bucket[_TYPE_KEYS[ExpenseType(expense.expense_type)]] += amount
            bucket["total"] += amount
            bucket["count"] += 1

        buckets = []
        for vehicle_id in sorted(totals):
            b = totals[vehicle_id]
            vehicle = vehicles.get(vehicle_id)
            buckets.append(VehicleExpenseBucket(
                vehicle_id=vehicle_id,
                vehicle_name=vehicle.vehicle_name if vehicle else "Unknown",
                registration_number=vehicle.vehicle_registration_number if vehicle else "",
                fuel=round(b["fuel"], 2),
                service=round(b["service"], 2),
                other=round(b["other"], 2),
                total=round(b["total"], 2),
                count=b["count"],
                average=round(b["total"] / b["count"], 2),
            ))
        return rank(buckets, key=lambda b: b.total)

    @staticmethod
    def summary(expenses, monthly: list[MonthlyExpenseBucket], start: date, end: date) -> ExpenseSummary:
        total = sum(float(e.amount) for e in ordered_records(expenses))
        count = len(expenses)
        return ExpenseSummary(
            total_expenses=round(total, 2),
            total_transactions=count,
            average_expense=round(total / count, 2) if count else 0.0,
            avg_monthly_expense=round(total / len(monthly), 2) if monthly else 0.0,
            date_range=date_range(start, end),
        )

    @classmethod
    def total_report(cls, expenses, vehicles: dict, start: date, end: date) -> TotalExpenseAnalytics:
        """Analyse globale de l'utilisateur / User-wide analytics."""
        monthly = cls.monthly_buckets(expenses)
        by_vehicle = cls.vehicle_buckets(expenses, vehicles)
        return TotalExpenseAnalytics(
            summary=cls.summary(expenses, monthly, start, end),
            monthly_expenses=monthly,
            vehicle_expenses=by_vehicle,
            type_breakdown=cls.type_breakdown(expenses),
            monthly_growth=month_over_month(monthly),
            trend=classify_trend([m.total for m in monthly], EXPENSE_TREND_THRESHOLD),
            highest_expense_vehicle=by_vehicle[0] if by_vehicle else None,
            lowest_expense_vehicle=by_vehicle[-1] if by_vehicle else None,
        )

    @classmethod
    def vehicle_report(cls, vehicle, expenses, start: date, end: date) -> VehicleExpenseAnalytics:
        """Analyse d'un vehicule / Single-vehicle analytics."""
        ordered = ordered_records(expenses)
        monthly = cls.monthly_buckets(ordered)
        fuel = [e for e in ordered if ExpenseType(e.expense_type) == ExpenseType.FUEL]
        recent = ordered[-RECENT_EXPENSES:][::-1]
        return VehicleExpenseAnalytics(
            vehicle=vehicle_brief(vehicle),
            summary=cls.summary(ordered, monthly, start, end),
            expense_breakdown=cls.type_breakdown(ordered),
            monthly_expenses=monthly,
            mileage=EfficiencyCalculatorService.report(fuel),
            monthly_mileage_trends=EfficiencyCalculatorService.monthly_trends(fuel),
            fuel_efficiency=EfficiencyCalculatorService.fuel_efficiency(fuel),
            trend=classify_trend([m.total for m in monthly], EXPENSE_TREND_THRESHOLD),
            recent_expenses=[
                RecentExpense(
                    id=e.id,
                    date=e.date,
                    expense_type=ExpenseType(e.expense_type),
                    amount=round(float(e.amount), 2),
                    description=e.description,
                )
                for e in recent
            ],
        )

    @staticmethod
    def comparative_vehicle(vehicle, expenses) -> ComparativeVehicle:
        totals = {"fuel": 0.0, "service": 0.0, "other": 0.0}
        for expense in ordered_records(expenses):
            totals[_TYPE_KEYS[ExpenseType(expense.expense_type)]] += float(expense.amount)

        fuel = [e for e in expenses if ExpenseType(e.expense_type) == ExpenseType.FUEL]
        mileage = EfficiencyCalculatorService.report(fuel)
        return ComparativeVehicle(
            vehicle=vehicle_brief(vehicle),
            total_expense=round(sum(totals.values()), 2),
            transaction_count=len(expenses),
            fuel_cost=round(totals["fuel"], 2),
            service_cost=round(totals["service"], 2),
            other_cost=round(totals["other"], 2),
            avg_mileage=mileage.average_mileage,
            cost_per_km=mileage.cost_per_km,
            total_distance=mileage.total_distance,
            fuel_consumed=mileage.total_fuel_quantity,
        )

    @classmethod
    def comparative_report(cls, vehicles: list, expenses, start: date, end: date) -> ComparativeAnalytics:
        """Comparaison entre vehicules / Cross-vehicle comparison."""
        by_vehicle: dict[int, list] = defaultdict(list)
        for expense in expenses:
            by_vehicle[expense.vehicle_id].append(expense)

        rows = [cls.comparative_vehicle(v, by_vehicle.get(v.id, [])) for v in sorted(vehicles, key=lambda v: v.id)]
        by_expense = rank(rows, key=lambda r: r.total_expense)
        by_mileage = rank(rows, key=lambda r: r.avg_mileage, exclude_zero=True)
        by_distance = rank(rows, key=lambda r: r.total_distance)

        return ComparativeAnalytics(
            date_range=date_range(start, end),
            vehicles=rows,
            rankings=ComparativeRankings(by_expense=by_expense, by_mileage=by_mileage, by_distance=by_distance),
            summary=ComparativeSummary(
                total_vehicles=len(rows),
                most_expensive=by_expense[0] if by_expense else None,
                least_expensive=by_expense[-1] if by_expense else None,
                best_mileage=by_mileage[0] if by_mileage else None,
                worst_mileage=by_mileage[-1] if by_mileage else None,
                most_used=by_distance[0] if by_distance else None,
                least_used=by_distance[-1] if by_distance else None,
            ),
        )

    @staticmethod
    def _price_stats(prices: list[float], fuel: float, cost: float) -> dict:
        return {
            "average_price": round(_mean(prices), 2),
            "min_price": round(min(prices), 2) if prices else 0.0,
            "max_price": round(max(prices), 2) if prices else 0.0,
            "total_fuel": round(fuel, 2),
            "total_cost": round(cost, 2),
            "count": len(prices),
        }

    @classmethod
    def fuel_price_report(cls, expenses, vehicles: dict, start: date, end: date) -> FuelPriceAnalytics:
        """Evolution du prix du carburant / Fuel price evolution.

        Seuls les pleins avec quantite et cout positifs comptent.
        Only fill-ups with a positive quantity and cost are counted.
        """
        samples = [
            e for e in ordered_records(expenses)
            if ExpenseType(e.expense_type) == ExpenseType.FUEL and (e.total_fuel or 0) > 0 and (e.total_cost or 0) > 0
        ]

        monthly: dict[str, dict] = defaultdict(lambda: {"prices": [], "fuel": 0.0, "cost": 0.0})
        per_vehicle: dict[int, dict] = defaultdict(lambda: {"prices": [], "fuel": 0.0, "cost": 0.0})
        prices = []
        for expense in samples:
            price = EfficiencyCalculatorService.price_per_unit(expense.total_cost, expense.total_fuel)
            prices.append(price)
            for bucket in (monthly[month_key(expense.date)], per_vehicle[expense.vehicle_id]):
                bucket["prices"].append(price)
                bucket["fuel"] += float(expense.total_fuel)
                bucket["cost"] += float(expense.total_cost)

        months = [
            FuelPriceMonth(month=month, **cls._price_stats(b["prices"], b["fuel"], b["cost"]))
            for month, b in sorted(monthly.items())
        ]
        by_vehicle = [
            FuelPriceVehicle(
                vehicle_id=vehicle_id,
                vehicle_name=vehicles[vehicle_id].vehicle_name if vehicle_id in vehicles else "Unknown",
                **cls._price_stats(b["prices"], b["fuel"], b["cost"]),
            )
            for vehicle_id, b in sorted(per_vehicle.items())
        ]

        return FuelPriceAnalytics(
            date_range=date_range(start, end),
            overall=FuelPriceStats(**cls._price_stats(
                prices,
                sum(float(e.total_fuel) for e in samples),
                sum(float(e.total_cost) for e in samples),
            )),
            monthly=months,
            by_vehicle=by_vehicle,
            # Moyennes non arrondies / Unrounded monthly means
            trend=classify_trend([_mean(b["prices"]) for _, b in sorted(monthly.items())], FUEL_PRICE_TREND_THRESHOLD),
        )
