"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from facility_booking.api.routes import auth, dashboard, facilities, bookings, approvals, cancellations, admin

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(dashboard.router)
api_router.include_router(facilities.router)
api_router.include_router(bookings.router)
api_router.include_router(approvals.router)
api_router.include_router(cancellations.router)
api_router.include_router(admin.router)
