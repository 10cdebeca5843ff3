# backend/tests/test_booking_store.py
from datetime import timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from models.booking_model import Booking, BookingItem
from schemas.bookings import BookingCreate, BookingItemIn
from tests.factories import register_payload


def _slot_booking(listing_id, seeker_id, dates, **overrides):
    start, end = dates
    data = dict(
        listing_id=listing_id, seeker_id=seeker_id, start_date=start, end_date=end,
        total_cost=30.0,
        items=[BookingItemIn(category_id=1, quantity=2), BookingItemIn(category_id=3, quantity=1)],
    )
    data.update(overrides)
    return BookingCreate(**data)


def _area_booking(listing_id, seeker_id, dates, **overrides):
    start, end = dates
    data = dict(
        listing_id=listing_id, seeker_id=seeker_id, start_date=start, end_date=end,
        total_cost=120.0, requested_sqm=25,
    )
    data.update(overrides)
    return BookingCreate(**data)


def test_slot_booking_creates_one_row_per_item(booking_store, slot_listing_id, seeker_id, dates, session_factory):
    result = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, dates))

    assert result.success
    assert result.message == "Booking created successfully!"
    with session_factory() as db:
        booking = db.get(Booking, result.data["booking_id"])
        assert booking.booking_status == "Pending"
        assert booking.requested_capacity_sqm is None
        assert db.query(BookingItem).filter(BookingItem.booking_id == booking.id).count() == 2


def test_area_booking_sets_capacity_and_no_items(booking_store, area_listing_id, seeker_id, dates, session_factory):
    result = booking_store.create_booking(_area_booking(area_listing_id, seeker_id, dates))

    assert result.success
    with session_factory() as db:
        booking = db.get(Booking, result.data["booking_id"])
        assert booking.requested_capacity_sqm == 25
        assert db.query(BookingItem).count() == 0


def test_branch_follows_listing_not_caller(booking_store, area_listing_id, seeker_id, dates):
    result = booking_store.create_booking(
        _area_booking(area_listing_id, seeker_id, dates, storage_type="ItemSlot")
    )

    assert result.error == "validation"
    assert result.message == "Storage type does not match the listing."


def test_item_failure_rolls_back_booking(booking_store, slot_listing_id, seeker_id, dates, session_factory, monkeypatch):
    def broken(db, booking_id, payload):
        raise OperationalError("INSERT INTO booking_items", {}, Exception("lock timeout"))

    monkeypatch.setattr(booking_store, "_insert_items", broken)

    result = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, dates))

    assert result.error == "storage"
    assert result.message == "DB error on booking creation."
    with session_factory() as db:
        assert db.query(Booking).count() == 0
        assert db.query(BookingItem).count() == 0


def test_area_update_failure_rolls_back_booking(booking_store, area_listing_id, seeker_id, dates, session_factory, monkeypatch):
    def broken(db, booking_id, requested_sqm):
        raise OperationalError("UPDATE bookings", {}, Exception("lock timeout"))

    monkeypatch.setattr(booking_store, "_set_requested_area", broken)

    result = booking_store.create_booking(_area_booking(area_listing_id, seeker_id, dates))

    assert not result.success
    with session_factory() as db:
        assert db.query(Booking).count() == 0


def test_booking_validation(booking_store, slot_listing_id, area_listing_id, seeker_id, dates):
    start, end = dates
    failures = [
        _slot_booking(slot_listing_id, seeker_id, dates, end_date=start - timedelta(days=1)),
        _slot_booking(slot_listing_id, seeker_id, dates, total_cost=-5),
        _slot_booking(slot_listing_id, seeker_id, dates, items=[]),
        _slot_booking(slot_listing_id, seeker_id, dates, items=[BookingItemIn(category_id=1, quantity=0)]),
        _slot_booking(slot_listing_id, seeker_id, dates, items=[BookingItemIn(category_id=1, quantity=11)]),
        _area_booking(area_listing_id, seeker_id, dates, requested_sqm=None),
        _area_booking(area_listing_id, seeker_id, dates, requested_sqm=41),
    ]
    for payload in failures:
        result = booking_store.create_booking(payload)
        assert result.error == "validation", result.message


def test_unknown_listing_or_seeker(booking_store, slot_listing_id, seeker_id, dates):
    assert booking_store.create_booking(_slot_booking(999, seeker_id, dates)).error == "not_found"
    assert booking_store.create_booking(_slot_booking(slot_listing_id, 999, dates)).error == "not_found"


def test_provider_accepts_pending_booking(booking_store, slot_listing_id, seeker_id, provider_id, dates):
    booking_id = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, dates)).data["booking_id"]

    result = booking_store.update_booking_status(booking_id, provider_id, "Accepted")

    assert result.success
    assert booking_store.get_booking_by_id(booking_id).data.booking_status == "Accepted"


def test_resolved_booking_cannot_transition_again(booking_store, slot_listing_id, seeker_id, provider_id, dates):
    booking_id = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, dates)).data["booking_id"]
    booking_store.update_booking_status(booking_id, provider_id, "Rejected")

    again = booking_store.update_booking_status(booking_id, provider_id, "Accepted")
    cancel = booking_store.update_booking_status(booking_id, seeker_id, "Cancelled")

    assert again.error == "conflict"
    assert cancel.error == "conflict"
    assert booking_store.get_booking_by_id(booking_id).data.booking_status == "Rejected"


def test_transition_permissions(booking_store, slot_listing_id, seeker_id, provider_id, dates):
    booking_id = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, dates)).data["booking_id"]

    assert booking_store.update_booking_status(booking_id, seeker_id, "Accepted").error == "forbidden"
    assert booking_store.update_booking_status(booking_id, provider_id, "Cancelled").error == "forbidden"
    assert booking_store.update_booking_status(booking_id, provider_id, "Pending").error == "validation"
    assert booking_store.update_booking_status(booking_id, seeker_id, "Cancelled").success


def test_booking_queries(booking_store, user_store, slot_listing_id, seeker_id, dates):
    other = user_store.create_user(register_payload(username="olga", email="olga@x.com")).data["user_id"]
    first = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, dates)).data["booking_id"]
    second = booking_store.create_booking(_slot_booking(slot_listing_id, other, dates)).data["booking_id"]

    for_listing = booking_store.get_bookings_for_listing(slot_listing_id).data
    for_seeker = booking_store.get_bookings_for_seeker(seeker_id).data

    assert [b.id for b in for_listing] == [second, first]
    assert [b.id for b in for_seeker] == [first]
    assert len(for_seeker[0].items) == 2
    assert booking_store.get_booking_by_id(12345).error == "not_found"


@pytest.mark.parametrize("overrides", [
    {"total_cost": float("nan")},
    {"total_cost": float("inf")},
    {"requested_sqm": float("nan")},
    {"requested_sqm": float("inf")},
])
def test_non_finite_amounts_are_validation_failures(booking_store, area_listing_id, seeker_id, dates,
                                                    session_factory, overrides):
    payload = _area_booking(area_listing_id, seeker_id, dates).model_copy(update=overrides)

    result = booking_store.create_booking(payload)

    assert result.error == "validation"
    with session_factory() as db:
        assert db.query(Booking).count() == 0


def test_aware_dates_are_stored_as_utc(booking_store, slot_listing_id, seeker_id, dates):
    start, end = dates
    aware_start = start.replace(tzinfo=timezone(timedelta(hours=2)))

    result = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, (aware_start, end)))

    assert result.success, result.message
    booking = booking_store.get_booking_by_id(result.data["booking_id"]).data
    assert booking.start_date == start - timedelta(hours=2)
    assert booking.end_date == end


def test_mixed_aware_and_naive_dates_are_compared(booking_store, slot_listing_id, seeker_id, dates):
    start, end = dates
    late_start = (end + timedelta(hours=1)).replace(tzinfo=timezone.utc)

    result = booking_store.create_booking(_slot_booking(slot_listing_id, seeker_id, (late_start, end)))

    assert result.error == "validation"
    assert result.message == "End date must be after start date."
