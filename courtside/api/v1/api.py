from fastapi import APIRouter
from courtside.api.v1.routes.auth import router as auth_router
from courtside.api.v1.routes.clubs import router as clubs_router
from courtside.api.v1.routes.bookings import router as bookings_router
from courtside.api.v1.routes.payments import router as payments_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(clubs_router)
api_router.include_router(bookings_router)
api_router.include_router(payments_router)
