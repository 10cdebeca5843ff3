# backend/routers/deps.py
from functools import lru_cache

from fastapi import Request
from fastapi.responses import JSONResponse

from database.session import SessionLocal
from schemas.common import StoreResult
from services.booking_store import BookingStore
from services.errors import NotAuthenticated, PermissionDenied
from services.listing_store import ListingStore
from services.user_store import UserStore

# failed result kind -> HTTP status
ERROR_STATUS = {
    "validation": 400,
    "invalid_credentials": 401,
    "unauthenticated": 401,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "storage": 500,
}


@lru_cache()
def get_user_store() -> UserStore:
    return UserStore(SessionLocal)


@lru_cache()
def get_listing_store() -> ListingStore:
    return ListingStore(SessionLocal)


@lru_cache()
def get_booking_store() -> BookingStore:
    return BookingStore(SessionLocal)


def respond(result: StoreResult, success_status: int = 200) -> JSONResponse:
    status = success_status if result.success else ERROR_STATUS.get(result.error, 400)
    return JSONResponse(status_code=status, content=result.model_dump(mode="json"))


def require_session(request: Request) -> int:
    user_id = request.session.get("user_id")
    if not user_id:
        raise NotAuthenticated()
    return int(user_id)


def require_admin(request: Request) -> int:
    user_id = require_session(request)
    if request.session.get("role") != "Admin":
        raise PermissionDenied("Administrator access required.")
    return user_id
