from fastapi import APIRouter
from skyjourney.api.routes.auth import router as auth_router
from skyjourney.api.routes.flights import router as flights_router
from skyjourney.api.routes.bookings import router as bookings_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(flights_router)
api_router.include_router(bookings_router)
