"""
Service d'analyse des trajets / Trip analytics service.
Meme structure que l'analyse des depenses, regroupee par motif au lieu du type.
Same structure as expense analytics, grouped by purpose instead of type.
"""

from collections import defaultdict
from datetime import date

from motormate.models.trip import TripPurpose
from motormate.schemas.analytics import (
    ComparativeTripAnalytics,
    MonthlyTripBucket,
    TotalTripAnalytics,
    TripBrief,
    TripComparativeSummary,
    TripPurposeBucket,
    TripRankings,
    TripSummary,
    VehicleTripAnalytics,
    VehicleTripBucket,
)
from motormate.services.analytics_service import (
    TRIP_TREND_THRESHOLD,
    ordered_records,
    classify_trend,
    date_range,
    rank,
    vehicle_brief,
)
from motormate.utils.dates import month_key

RECENT_TRIPS = 10


def _trip_brief(trip) -> TripBrief:
    return TripBrief(
        id=trip.id,
        vehicle_id=trip.vehicle_id,
        date=trip.date,
        start_location=trip.start_location,
        end_location=trip.end_location,
        distance=round(float(trip.distance), 2),
        total_cost=round(float(trip.total_cost), 2),
        purpose=TripPurpose(trip.purpose),
    )


def _longest(trips) -> TripBrief | None:
    longest = None
    for trip in ordered_records(trips):
        if longest is None or float(trip.distance) > float(longest.distance):
            longest = trip
    return _trip_brief(longest) if longest else None


class TripAnalyticsService:
    """Agregations sur les trajets / Trip aggregations."""

    @staticmethod
    def monthly_buckets(trips) -> list[MonthlyTripBucket]:
        totals: dict[str, dict] = defaultdict(lambda: {"distance": 0.0, "cost": 0.0, "count": 0})
        for trip in ordered_records(trips):
            bucket = totals[month_key(trip.date)]
            bucket["distance"] += float(trip.distance)
            bucket["cost"] += float(trip.total_cost)
            bucket["count"] += 1

        return [
            MonthlyTripBucket(
                month=month,
                trip_count=b["count"],
                total_distance=round(b["distance"], 2),
                total_cost=round(b["cost"], 2),
                average_distance=round(b["distance"] / b["count"], 2),
                average_cost=round(b["cost"] / b["count"], 2),
            )
            for month, b in sorted(totals.items())
        ]

    @staticmethod
    def purpose_breakdown(trips) -> list[TripPurposeBucket]:
        """Repartition par motif, motifs vides exclus / Per-purpose split, empty purposes excluded."""
        totals: dict[TripPurpose, dict] = defaultdict(lambda: {"distance": 0.0, "cost": 0.0, "count": 0})
        for trip in ordered_records(trips):
            bucket = totals[TripPurpose(trip.purpose)]
            bucket["distance"] += float(trip.distance)
            bucket["cost"] += float(trip.total_cost)
            bucket["count"] += 1

        total_trips = len(trips)
        buckets = [
            TripPurposeBucket(
                purpose=purpose,
                trip_count=b["count"],
                total_distance=round(b["distance"], 2),
                total_cost=round(b["cost"], 2),
                average_distance=round(b["distance"] / b["count"], 2),
                percentage=round(b["count"] / total_trips * 100, 1),
            )
            for purpose in TripPurpose
            if (b := totals.get(purpose))
        ]
        return rank(buckets, key=lambda b: b.trip_count)

    @staticmethod
    def vehicle_bucket(vehicle, trips) -> VehicleTripBucket:
        distance = sum(float(t.distance) for t in ordered_records(trips))
        cost = sum(float(t.total_cost) for t in ordered_records(trips))
        count = len(trips)
        return VehicleTripBucket(
            vehicle=vehicle_brief(vehicle),
            trip_count=count,
            total_distance=round(distance, 2),
            total_cost=round(cost, 2),
            average_distance=round(distance / count, 2) if count else 0.0,
            cost_per_km=round(cost / distance, 2) if distance > 0 else 0.0,
        )

    @classmethod
    def vehicle_buckets(cls, trips, vehicles: list) -> list[VehicleTripBucket]:
        by_vehicle: dict[int, list] = defaultdict(list)
        for trip in trips:
            by_vehicle[trip.vehicle_id].append(trip)
        return [cls.vehicle_bucket(v, by_vehicle.get(v.id, [])) for v in sorted(vehicles, key=lambda v: v.id)]

    @staticmethod
    def summary(trips, monthly: list[MonthlyTripBucket], start: date, end: date) -> TripSummary:
        distance = sum(float(t.distance) for t in ordered_records(trips))
        cost = sum(float(t.total_cost) for t in ordered_records(trips))
        count = len(trips)
        return TripSummary(
            total_trips=count,
            total_distance=round(distance, 2),
            total_cost=round(cost, 2),
            average_distance=round(distance / count, 2) if count else 0.0,
            average_cost=round(cost / count, 2) if count else 0.0,
            cost_per_km=round(cost / distance, 2) if distance > 0 else 0.0,
            avg_monthly_trips=round(count / len(monthly), 2) if monthly else 0.0,
            date_range=date_range(start, end),
        )

    @classmethod
    def total_report(cls, trips, vehicles: list, start: date, end: date) -> TotalTripAnalytics:
        """Analyse globale des trajets / User-wide trip analytics."""
        monthly = cls.monthly_buckets(trips)
        per_vehicle = rank(
            [b for b in cls.vehicle_buckets(trips, vehicles) if b.trip_count],
            key=lambda b: b.trip_count,
        )
        return TotalTripAnalytics(
            summary=cls.summary(trips, monthly, start, end),
            monthly_trips=monthly,
            purpose_breakdown=cls.purpose_breakdown(trips),
            vehicle_breakdown=per_vehicle,
            trend=classify_trend([float(m.trip_count) for m in monthly], TRIP_TREND_THRESHOLD),
            most_used_vehicle=per_vehicle[0] if per_vehicle else None,
            longest_trip=_longest(trips),
        )

    @classmethod
    def vehicle_report(cls, vehicle, trips, start: date, end: date) -> VehicleTripAnalytics:
        """Analyse des trajets d'un vehicule / Single-vehicle trip analytics."""
        ordered = ordered_records(trips)
        monthly = cls.monthly_buckets(ordered)
        return VehicleTripAnalytics(
            vehicle=vehicle_brief(vehicle),
            summary=cls.summary(ordered, monthly, start, end),
            monthly_trips=monthly,
            purpose_breakdown=cls.purpose_breakdown(ordered),
            trend=classify_trend([float(m.trip_count) for m in monthly], TRIP_TREND_THRESHOLD),
            longest_trip=_longest(ordered),
            recent_trips=[_trip_brief(t) for t in ordered[-RECENT_TRIPS:][::-1]],
        )

    @classmethod
    def comparative_report(cls, trips, vehicles: list, start: date, end: date) -> ComparativeTripAnalytics:
        """Comparaison des trajets entre vehicules / Cross-vehicle trip comparison."""
        rows = cls.vehicle_buckets(trips, vehicles)
        by_count = rank(rows, key=lambda r: r.trip_count)
        by_distance = rank(rows, key=lambda r: r.total_distance)
        by_cost = rank(rows, key=lambda r: r.total_cost)
        return ComparativeTripAnalytics(
            date_range=date_range(start, end),
            vehicles=rows,
            rankings=TripRankings(by_trip_count=by_count, by_distance=by_distance, by_cost=by_cost),
            summary=TripComparativeSummary(
                total_vehicles=len(rows),
                most_used=by_count[0] if by_count else None,
                least_used=by_count[-1] if by_count else None,
                longest_distance=by_distance[0] if by_distance else None,
                shortest_distance=by_distance[-1] if by_distance else None,
                highest_cost=by_cost[0] if by_cost else None,
                lowest_cost=by_cost[-1] if by_cost else None,
            ),
        )
