"""HTTP routes for the Rental Wheels API."""

from fastapi import APIRouter

from rentalwheels.routes import bookings, cars, users

router = APIRouter()
router.include_router(users.router)
router.include_router(cars.router)
router.include_router(bookings.router)
