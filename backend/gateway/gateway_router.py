# backend/gateway/gateway_router.py
from fastapi import APIRouter

from routers.auth_router import router as auth_router
from routers.users_router import router as users_router
from routers.listings_router import router as listings_router
from routers.bookings_router import router as bookings_router

gateway_router = APIRouter(prefix="/gateway", tags=["gateway"])

gateway_router.include_router(auth_router)        # /gateway/auth/...
gateway_router.include_router(users_router)       # /gateway/users/...
gateway_router.include_router(listings_router)    # /gateway/listings/...
gateway_router.include_router(bookings_router)    # /gateway/bookings/...
