"""Routes API / API routes."""

from fastapi import APIRouter

from motormate.api import (
    analytics,
    auth,
    expenses,
    posts,
    trips,
    vehicles,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(trips.router, prefix="/trips", tags=["trips"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
