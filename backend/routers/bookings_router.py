# backend/routers/bookings_router.py
from fastapi import APIRouter, Depends

from routers.deps import get_booking_store, get_listing_store, respond, require_session
from schemas.bookings import BookingCreate, BookingRequest, BookingStatusUpdate
from schemas.common import StoreResult
from services.booking_store import BookingStore
from services.listing_store import ListingStore

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/")
def create_booking(
    body: BookingRequest,
    seeker_id: int = Depends(require_session),
    store: BookingStore = Depends(get_booking_store),
):
    payload = BookingCreate(seeker_id=seeker_id, **body.model_dump())
    return respond(store.create_booking(payload), success_status=201)


@router.get("/seeker/me")
def my_bookings(seeker_id: int = Depends(require_session), store: BookingStore = Depends(get_booking_store)):
    return respond(store.get_bookings_for_seeker(seeker_id))


@router.get("/listing/{listing_id}")
def listing_bookings(
    listing_id: int,
    user_id: int = Depends(require_session),
    store: BookingStore = Depends(get_booking_store),
    listings: ListingStore = Depends(get_listing_store),
):
    listing = listings.get_listing_by_id(listing_id)
    if not listing.success:
        return respond(listing)
    if listing.data.provider_id != user_id:
        return respond(StoreResult.fail("forbidden", "Only the listing provider can view its bookings."))
    return respond(store.get_bookings_for_listing(listing_id))


@router.get("/{booking_id}")
def get_booking(
    booking_id: int,
    user_id: int = Depends(require_session),
    store: BookingStore = Depends(get_booking_store),
    listings: ListingStore = Depends(get_listing_store),
):
    result = store.get_booking_by_id(booking_id)
    if not result.success or result.data.seeker_id == user_id:
        return respond(result)
    listing = listings.get_listing_by_id(result.data.listing_id)
    if listing.success and listing.data.provider_id == user_id:
        return respond(result)
    return respond(StoreResult.fail("forbidden", "You cannot view this booking."))


@router.put("/{booking_id}/status")
def update_status(
    booking_id: int,
    body: BookingStatusUpdate,
    user_id: int = Depends(require_session),
    store: BookingStore = Depends(get_booking_store),
):
    return respond(store.update_booking_status(booking_id, user_id, body.status))
