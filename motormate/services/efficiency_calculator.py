"""
Service de rendement carburant / Fuel efficiency service.

Transforme l'historique des pleins d'un vehicule en points de consommation
(distance / carburant) entre deux pleins consecutifs.
Turns a vehicle's fill-up history into mileage data points
(distance / fuel) between consecutive fill-ups.

Toute division par zero renvoie 0: les donnees clairsemees sont normales.
Every division by zero returns 0: sparse data is expected.
"""

from collections import defaultdict
from dataclasses import dataclass

from motormate.schemas.analytics import (
    FuelEfficiency,
    MileageDataPoint,
    MileageReport,
    MonthlyMileage,
)
from motormate.utils.dates import month_key

RECENT_POINTS = 5


@dataclass
class ChainLink:
    """Lien entre un plein et le suivant / Link between a fill-up and the next one."""

    expense: object
    next_odometer: int
    distance: int
    fuel: float

    @property
    def mileage(self) -> float:
        return self.distance / self.fuel


class EfficiencyCalculatorService:
    """Calculs de rendement / Efficiency calculations."""

    @staticmethod
    def safe_divide(numerator: float, denominator: float | None) -> float:
        if not denominator or denominator <= 0:
            return 0.0
        return numerator / denominator

    @staticmethod
    def price_per_unit(total_cost: float | None, total_fuel: float | None) -> float:
        """Prix unitaire du carburant / Fuel unit price."""
        if not total_cost or not total_fuel or total_fuel <= 0:
            return 0.0
        return total_cost / total_fuel

    @staticmethod
    def sort_fuel_history(expenses) -> list:
        """Tri decroissant (date, compteur) / Descending (date, odometer) sort."""
        return sorted(
            expenses,
            key=lambda e: (e.date, e.odometer_reading if e.odometer_reading is not None else -1),
            reverse=True,
        )

    @classmethod
    def _intervals(cls, expenses) -> list[tuple]:
        """Intervalles valides (recent, ancien, distance, carburant) / Valid (newer, older, distance, fuel) intervals.

        Le carburant est celui du plein le plus recent / Fuel is the newer fill-up's fuel_added.
        """
        ordered = cls.sort_fuel_history(expenses)
        intervals = []
        for current, older in zip(ordered, ordered[1:]):
            if current.odometer_reading is None or older.odometer_reading is None:
                continue
            fuel = float(current.fuel_added or 0)
            if fuel <= 0:
                continue
            distance = current.odometer_reading - older.odometer_reading
            if distance <= 0:
                continue
            intervals.append((current, older, distance, fuel))
        # Ordre chronologique / Chronological order
        intervals.reverse()
        return intervals

    @classmethod
    def data_points(cls, expenses) -> list[MileageDataPoint]:
        """Points de consommation chronologiques / Chronological mileage data points."""
        return [
            MileageDataPoint(
                date=current.date,
                odometer_start=older.odometer_reading,
                odometer_end=current.odometer_reading,
                distance=distance,
                fuel=round(fuel, 2),
                mileage=round(distance / fuel, 2),
            )
            for current, older, distance, fuel in cls._intervals(expenses)
        ]

    @classmethod
    def report(cls, expenses) -> MileageReport:
        """Rapport de rendement complet / Full mileage report."""
        intervals = cls._intervals(expenses)
        mileages = [distance / fuel for _, _, distance, fuel in intervals]
        total_distance = float(sum(distance for _, _, distance, _ in intervals))
        total_fuel = sum(fuel for _, _, _, fuel in intervals)
        total_fuel_cost = sum(float(e.amount or 0) for e in expenses)
        total_fuel_quantity = sum(float(e.fuel_added or 0) for e in expenses)
        points = cls.data_points(expenses)

        return MileageReport(
            average_mileage=round(cls.safe_divide(sum(mileages), len(mileages)), 2),
            best_mileage=round(max(mileages), 2) if mileages else 0.0,
            worst_mileage=round(min(mileages), 2) if mileages else 0.0,
            total_distance=round(total_distance, 2),
            total_fuel=round(total_fuel, 2),
            total_fuel_cost=round(total_fuel_cost, 2),
            total_fuel_quantity=round(total_fuel_quantity, 2),
            cost_per_km=round(cls.safe_divide(total_fuel_cost, total_distance), 2),
            avg_fuel_price=round(cls.safe_divide(total_fuel_cost, total_fuel_quantity), 2),
            data_points=len(points),
            points=points,
            recent_mileage=points[-RECENT_POINTS:],
        )

    @classmethod
    def monthly_trends(cls, expenses) -> list[MonthlyMileage]:
        """Rendement moyen par mois / Average mileage per month."""
        buckets: dict[str, dict] = defaultdict(lambda: {"mileage": 0.0, "distance": 0.0, "fuel": 0.0, "count": 0})
        for current, _, distance, fuel in cls._intervals(expenses):
            bucket = buckets[month_key(current.date)]
            bucket["mileage"] += distance / fuel
            bucket["distance"] += distance
            bucket["fuel"] += fuel
            bucket["count"] += 1

        return [
            MonthlyMileage(
                month=month,
                average_mileage=round(b["mileage"] / b["count"], 2),
                total_distance=round(b["distance"], 2),
                total_fuel=round(b["fuel"], 2),
                data_points=b["count"],
            )
            for month, b in sorted(buckets.items())
        ]

    @classmethod
    def fuel_efficiency(cls, expenses) -> FuelEfficiency:
        """Rendement global distance / carburant / Overall distance over fuel."""
        intervals = cls._intervals(expenses)
        total_distance = float(sum(distance for _, _, distance, _ in intervals))
        total_fuel = sum(fuel for _, _, _, fuel in intervals)
        return FuelEfficiency(
            total_distance=round(total_distance, 2),
            total_fuel=round(total_fuel, 2),
            efficiency=round(cls.safe_divide(total_distance, total_fuel), 2),
        )

    @staticmethod
    def chain_links(expenses) -> list[ChainLink]:
        """Liens consecutifs par compteur croissant / Consecutive links by ascending odometer.

        Utilise par le recalcul explicite de la chaine / Used by the explicit chain recompute.
        """
        ordered = sorted(
            (e for e in expenses if e.odometer_reading is not None),
            key=lambda e: (e.odometer_reading, e.date),
        )
        links = []
        for current, following in zip(ordered, ordered[1:]):
            distance = following.odometer_reading - current.odometer_reading
            fuel = float(following.fuel_added or 0)
            if distance > 0 and fuel > 0:
                links.append(ChainLink(current, following.odometer_reading, distance, fuel))
        return links
