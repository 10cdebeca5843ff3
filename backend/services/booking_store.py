# backend/services/booking_store.py
import logging
import math
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session, sessionmaker, selectinload

from models.booking_model import Booking, BookingItem
from models.listing_model import Listing
from models.user_model import User
from schemas.bookings import BookingCreate, BookingOut, BookingItemOut
from schemas.common import StoreResult
from services.base import TransactionalStore
from services.errors import ValidationError, ConflictError, NotFoundError, PermissionDenied

logger = logging.getLogger(__name__)

# target status -> who may move a Pending booking there
TRANSITIONS = {
    "Accepted": "provider",
    "Rejected": "provider",
    "Cancelled": "seeker",
}


def _naive_utc(value: datetime) -> datetime:
    """Booking dates are stored as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _to_out(b: Booking) -> BookingOut:
    return BookingOut(
        id=b.id,
        listing_id=b.listing_id,
        seeker_id=b.seeker_id,
        start_date=b.start_date,
        end_date=b.end_date,
        total_cost=b.total_cost,
        request_date=b.request_date,
        booking_status=b.booking_status,
        requested_capacity_sqm=b.requested_capacity_sqm,
        items=[BookingItemOut(id=i.id, category_id=i.category_id, quantity=i.quantity) for i in b.items],
    )


class BookingStore(TransactionalStore):
    """Booking creation, status transitions and booking queries."""

    def __init__(self, session_factory: sessionmaker):
        super().__init__(session_factory)

    # ---------- creation ----------

    @staticmethod
    def _validate_item_slots(payload: BookingCreate, listing: Listing) -> None:
        if not payload.items:
            raise ValidationError("At least one item is required for slot bookings.")
        if any(item.quantity <= 0 for item in payload.items):
            raise ValidationError("Item quantities must be greater than zero.")
        if payload.requested_sqm is not None:
            raise ValidationError("Slot bookings cannot request square meters.")
        requested = sum(item.quantity for item in payload.items)
        if listing.total_capacity_slots is not None and requested > listing.total_capacity_slots:
            raise ValidationError("Requested slots exceed the listing capacity.")

    @staticmethod
    def _validate_area(payload: BookingCreate, listing: Listing) -> None:
        if payload.items:
            raise ValidationError("Area bookings cannot contain items.")
        if payload.requested_sqm is None or not math.isfinite(payload.requested_sqm) or payload.requested_sqm <= 0:
            raise ValidationError("Requested square meters must be greater than zero.")
        if listing.capacity_sqm is not None and payload.requested_sqm > listing.capacity_sqm:
            raise ValidationError("Requested area exceeds the listing capacity.")

    def _insert_items(self, db: Session, booking_id: int, payload: BookingCreate) -> None:
        db.bulk_save_objects([
            BookingItem(booking_id=booking_id, category_id=item.category_id, quantity=item.quantity)
            for item in payload.items
        ])
        db.flush()

    def _set_requested_area(self, db: Session, booking_id: int, requested_sqm: float) -> None:
        db.query(Booking).filter(Booking.id == booking_id).update(
            {Booking.requested_capacity_sqm: float(requested_sqm)}, synchronize_session=False
        )

    def create_booking(self, payload: BookingCreate) -> StoreResult:
        """
        Insert a Pending booking, then either its items (ItemSlot listings)
        or its requested area (SquareMeter listings). The branch follows the
        listing's storage type. All writes commit together or not at all.
        """
        start_date, end_date = _naive_utc(payload.start_date), _naive_utc(payload.end_date)
        if end_date <= start_date:
            return StoreResult.fail("validation", "End date must be after start date.")
        if payload.total_cost is None or not math.isfinite(payload.total_cost) or payload.total_cost < 0:
            return StoreResult.fail("validation", "Total cost must not be negative.")

        def work(db: Session) -> StoreResult:
            listing = db.get(Listing, payload.listing_id)
            if not listing:
                raise NotFoundError("Listing not found.")
            if listing.status != "Active":
                raise ValidationError("Listing is not available for booking.")
            if not db.get(User, payload.seeker_id):
                raise NotFoundError("Seeker not found.")
            if payload.storage_type and payload.storage_type != listing.storage_type:
                raise ValidationError("Storage type does not match the listing.")

            storage_type = listing.storage_type
            if storage_type == "ItemSlot":
                self._validate_item_slots(payload, listing)
            else:
                self._validate_area(payload, listing)

            booking = Booking(
                listing_id=listing.id,
                seeker_id=payload.seeker_id,
                start_date=start_date,
                end_date=end_date,
                total_cost=float(payload.total_cost),
                request_date=datetime.utcnow(),
                booking_status="Pending",
            )
            db.add(booking)
            db.flush()

            if storage_type == "ItemSlot":
                self._insert_items(db, booking.id, payload)
            else:
                self._set_requested_area(db, booking.id, payload.requested_sqm)

            logger.info(f"Booking {booking.id} ({storage_type}) requested on listing {listing.id} by seeker {payload.seeker_id}")
            return StoreResult.ok("Booking created successfully!", {"booking_id": booking.id})

        return self._run("create_booking", work, failure_message="DB error on booking creation.")

    # ---------- status ----------

    def update_booking_status(self, booking_id: int, actor_id: int, new_status: str) -> StoreResult:
        """
        Move a Pending booking to Accepted or Rejected (listing provider) or
        to Cancelled (booking seeker). Resolved bookings never move again.
        """
        party = TRANSITIONS.get(new_status)
        if party is None:
            return StoreResult.fail("validation", f"Cannot move a booking to {new_status}.")

        def work(db: Session) -> StoreResult:
            booking = db.get(Booking, booking_id)
            if not booking:
                raise NotFoundError("Booking not found.")

            allowed = booking.listing.provider_id if party == "provider" else booking.seeker_id
            if actor_id != allowed:
                raise PermissionDenied(f"Only the {party} of this booking can set it to {new_status}.")
            if booking.booking_status != "Pending":
                raise ConflictError(f"Booking is already {booking.booking_status}.")

            updated = (
                db.query(Booking)
                .filter(Booking.id == booking_id, Booking.booking_status == "Pending")
                .update({Booking.booking_status: new_status}, synchronize_session=False)
            )
            if not updated:
                raise ConflictError("Booking was updated concurrently.")

            logger.info(f"Booking {booking_id} -> {new_status} by user {actor_id}")
            return StoreResult.ok("Booking status updated.", {"booking_id": booking_id, "status": new_status})

        return self._run("update_booking_status", work, failure_message="DB error updating booking status.")

    # ---------- queries ----------

    def get_booking_by_id(self, booking_id: int) -> StoreResult:
        def work(db: Session) -> StoreResult:
            booking = (
                db.query(Booking)
                .options(selectinload(Booking.items))
                .filter(Booking.id == booking_id)
                .first()
            )
            if not booking:
                raise NotFoundError("Booking not found.")
            return StoreResult.ok("Booking found.", _to_out(booking))

        return self._run("get_booking_by_id", work, failure_message="Failed to fetch booking.")

    def _list(self, operation: str, criterion) -> StoreResult:
        def work(db: Session) -> StoreResult:
            bookings: List[Booking] = (
                db.query(Booking)
                .options(selectinload(Booking.items))
                .filter(criterion)
                .order_by(Booking.request_date.desc(), Booking.id.desc())
                .all()
            )
            return StoreResult.ok("Bookings fetched.", [_to_out(b) for b in bookings])

        return self._run(operation, work, failure_message="Failed to fetch bookings.")

    def get_bookings_for_listing(self, listing_id: int) -> StoreResult:
        return self._list("get_bookings_for_listing", Booking.listing_id == listing_id)

    def get_bookings_for_seeker(self, seeker_id: int) -> StoreResult:
        return self._list("get_bookings_for_seeker", Booking.seeker_id == seeker_id)
