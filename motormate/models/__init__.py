"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from motormate.models.user import User
from motormate.models.vehicle import FuelType, Vehicle
from motormate.models.expense import Expense, ExpenseType, OtherCategory, PaymentMethod, ServiceType
from motormate.models.trip import Trip, TripPurpose
from motormate.models.post import Post, PostReaction, PostReport, ReactionKind, ReportReason

__all__ = [
    "User",
    "FuelType",
    "Vehicle",
    "Expense",
    "ExpenseType",
    "OtherCategory",
    "PaymentMethod",
    "ServiceType",
    "Trip",
    "TripPurpose",
    "Post",
    "PostReaction",
    "PostReport",
    "ReactionKind",
    "ReportReason",
]
