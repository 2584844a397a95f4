"""
Schémas Analytique / Analytics schemas.
Toutes les valeurs par defaut sont nulles: un ensemble vide donne un resume complet a zero.
Every default is zero-valued: an empty record set yields a fully populated zero summary.
"""

from pydantic import BaseModel

from motormate.models.expense import ExpenseType
from motormate.models.trip import TripPurpose


class DateRange(BaseModel):
    start_date: str
    end_date: str


class TrendAnalysis(BaseModel):
    trend: str = "stable"  # increasing, decreasing, stable
    change_percent: float = 0.0
    recent_average: float = 0.0
    previous_average: float = 0.0


class VehicleBrief(BaseModel):
    id: int
    vehicle_name: str
    company: str
    model: str
    registration_number: str


# --- Rendement carburant / Fuel efficiency ---


class MileageDataPoint(BaseModel):
    date: str
    odometer_start: int
    odometer_end: int
    distance: float
    fuel: float
    mileage: float


class MileageReport(BaseModel):
    average_mileage: float = 0.0
    best_mileage: float = 0.0
    worst_mileage: float = 0.0
    total_distance: float = 0.0
    total_fuel: float = 0.0
    total_fuel_cost: float = 0.0
    total_fuel_quantity: float = 0.0
    cost_per_km: float = 0.0
    avg_fuel_price: float = 0.0
    data_points: int = 0
    points: list[MileageDataPoint] = []
    recent_mileage: list[MileageDataPoint] = []


class MonthlyMileage(BaseModel):
    month: str
    average_mileage: float
    total_distance: float
    total_fuel: float
    data_points: int


class FuelEfficiency(BaseModel):
    total_distance: float = 0.0
    total_fuel: float = 0.0
    efficiency: float = 0.0


# --- Depenses / Expenses ---


class MonthlyExpenseBucket(BaseModel):
    month: str
    fuel: float = 0.0
    service: float = 0.0
    other: float = 0.0
    total: float = 0.0
    count: int = 0
    average: float = 0.0


class VehicleExpenseBucket(BaseModel):
    vehicle_id: int
    vehicle_name: str
    registration_number: str
    fuel: float = 0.0
    service: float = 0.0
    other: float = 0.0
    total: float = 0.0
    count: int = 0
    average: float = 0.0


class TypeBreakdownItem(BaseModel):
    type: ExpenseType
    total: float = 0.0
    count: int = 0
    average: float = 0.0
    percentage: float = 0.0


class MonthlyGrowth(BaseModel):
    month: str
    total: float
    growth_percent: float


class ExpenseSummary(BaseModel):
    total_expenses: float = 0.0
    total_transactions: int = 0
    average_expense: float = 0.0
    avg_monthly_expense: float = 0.0
    date_range: DateRange


class RecentExpense(BaseModel):
    id: int
    date: str
    expense_type: ExpenseType
    amount: float
    description: str


class TotalExpenseAnalytics(BaseModel):
    summary: ExpenseSummary
    monthly_expenses: list[MonthlyExpenseBucket] = []
    vehicle_expenses: list[VehicleExpenseBucket] = []
    type_breakdown: list[TypeBreakdownItem] = []
    monthly_growth: list[MonthlyGrowth] = []
    trend: TrendAnalysis = TrendAnalysis()
    highest_expense_vehicle: VehicleExpenseBucket | None = None
    lowest_expense_vehicle: VehicleExpenseBucket | None = None


class VehicleExpenseAnalytics(BaseModel):
    vehicle: VehicleBrief
    summary: ExpenseSummary
    expense_breakdown: list[TypeBreakdownItem] = []
    monthly_expenses: list[MonthlyExpenseBucket] = []
    mileage: MileageReport = MileageReport()
    monthly_mileage_trends: list[MonthlyMileage] = []
    fuel_efficiency: FuelEfficiency = FuelEfficiency()
    trend: TrendAnalysis = TrendAnalysis()
    recent_expenses: list[RecentExpense] = []


class ComparativeVehicle(BaseModel):
    vehicle: VehicleBrief
    total_expense: float = 0.0
    transaction_count: int = 0
    fuel_cost: float = 0.0
    service_cost: float = 0.0
    other_cost: float = 0.0
    avg_mileage: float = 0.0
    cost_per_km: float = 0.0
    total_distance: float = 0.0
    fuel_consumed: float = 0.0


class ComparativeRankings(BaseModel):
    by_expense: list[ComparativeVehicle] = []
    by_mileage: list[ComparativeVehicle] = []
    by_distance: list[ComparativeVehicle] = []


class ComparativeSummary(BaseModel):
    total_vehicles: int = 0
    most_expensive: ComparativeVehicle | None = None
    least_expensive: ComparativeVehicle | None = None
    best_mileage: ComparativeVehicle | None = None
    worst_mileage: ComparativeVehicle | None = None
    most_used: ComparativeVehicle | None = None
    least_used: ComparativeVehicle | None = None


class ComparativeAnalytics(BaseModel):
    date_range: DateRange
    vehicles: list[ComparativeVehicle] = []
    rankings: ComparativeRankings = ComparativeRankings()
    summary: ComparativeSummary = ComparativeSummary()


# --- Prix carburant / Fuel prices ---


class FuelPriceStats(BaseModel):
    average_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    total_fuel: float = 0.0
    total_cost: float = 0.0
    count: int = 0


class FuelPriceMonth(FuelPriceStats):
    month: str


class FuelPriceVehicle(FuelPriceStats):
    vehicle_id: int
    vehicle_name: str


class FuelPriceAnalytics(BaseModel):
    date_range: DateRange
    overall: FuelPriceStats = FuelPriceStats()
    monthly: list[FuelPriceMonth] = []
    by_vehicle: list[FuelPriceVehicle] = []
    trend: TrendAnalysis = TrendAnalysis()


# --- Trajets / Trips ---


class MonthlyTripBucket(BaseModel):
    month: str
    trip_count: int = 0
    total_distance: float = 0.0
    total_cost: float = 0.0
    average_distance: float = 0.0
    average_cost: float = 0.0


class TripPurposeBucket(BaseModel):
    purpose: TripPurpose
    trip_count: int = 0
    total_distance: float = 0.0
    total_cost: float = 0.0
    average_distance: float = 0.0
    percentage: float = 0.0


class VehicleTripBucket(BaseModel):
    vehicle: VehicleBrief
    trip_count: int = 0
    total_distance: float = 0.0
    total_cost: float = 0.0
    average_distance: float = 0.0
    cost_per_km: float = 0.0


class TripSummary(BaseModel):
    total_trips: int = 0
    total_distance: float = 0.0
    total_cost: float = 0.0
    average_distance: float = 0.0
    average_cost: float = 0.0
    cost_per_km: float = 0.0
    avg_monthly_trips: float = 0.0
    date_range: DateRange


class TripBrief(BaseModel):
    id: int
    vehicle_id: int
    date: str
    start_location: str
    end_location: str
    distance: float
    total_cost: float
    purpose: TripPurpose


class TotalTripAnalytics(BaseModel):
    summary: TripSummary
    monthly_trips: list[MonthlyTripBucket] = []
    purpose_breakdown: list[TripPurposeBucket] = []
    vehicle_breakdown: list[VehicleTripBucket] = []
    trend: TrendAnalysis = TrendAnalysis()
    most_used_vehicle: VehicleTripBucket | None = None
    longest_trip: TripBrief | None = None


class VehicleTripAnalytics(BaseModel):
    vehicle: VehicleBrief
    summary: TripSummary
    monthly_trips: list[MonthlyTripBucket] = []
    purpose_breakdown: list[TripPurposeBucket] = []
    trend: TrendAnalysis = TrendAnalysis()
    longest_trip: TripBrief | None = None
    recent_trips: list[TripBrief] = []


class TripRankings(BaseModel):
    by_trip_count: list[VehicleTripBucket] = []
    by_distance: list[VehicleTripBucket] = []
    by_cost: list[VehicleTripBucket] = []


class TripComparativeSummary(BaseModel):
    total_vehicles: int = 0
    most_used: VehicleTripBucket | None = None
    least_used: VehicleTripBucket | None = None
    longest_distance: VehicleTripBucket | None = None
    shortest_distance: VehicleTripBucket | None = None
    highest_cost: VehicleTripBucket | None = None
    lowest_cost: VehicleTripBucket | None = None


class ComparativeTripAnalytics(BaseModel):
    date_range: DateRange
    vehicles: list[VehicleTripBucket] = []
    rankings: TripRankings = TripRankings()
    summary: TripComparativeSummary = TripComparativeSummary()
