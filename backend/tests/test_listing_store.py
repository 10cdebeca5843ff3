# backend/tests/test_listing_store.py
import pytest
from pydantic import ValidationError as PayloadError
from sqlalchemy.exc import OperationalError

from models.address_model import Address
from models.listing_model import Listing, Attachment
from tests.factories import listing_payload, images, register_payload


def test_item_slot_listing_round_trip(listing_store, slot_listing_id):
    result = listing_store.get_listing_by_id(slot_listing_id)

    assert result.success
    listing = result.data
    assert listing.storage_type == "ItemSlot"
    assert listing.capacity == 10
    assert listing.total_capacity_slots == 10
    assert listing.capacity_sqm is None
    assert listing.status == "Active"
    assert listing.street_name == "3 Harbour Road"


def test_square_meter_listing_fills_only_area_column(listing_store, area_listing_id):
    listing = listing_store.get_listing_by_id(area_listing_id).data

    assert listing.capacity_sqm == 40.5
    assert listing.total_capacity_slots is None


def test_images_come_back_primary_first(listing_store, provider_id):
    created = listing_store.create_listing(
        listing_payload(provider_id), images("one.jpg", "two.jpg", "three.jpg", primary="three.jpg")
    )

    listing = listing_store.get_listing_by_id(created.data["listing_id"]).data

    assert [img.file_url for img in listing.images] == [
        "uploads/three.jpg", "uploads/one.jpg", "uploads/two.jpg",
    ]
    assert [img.is_primary for img in listing.images] == [True, False, False]


def test_attachment_failure_rolls_back_listing(listing_store, provider_id, session_factory, monkeypatch):
    def broken(db, listing_id, imgs):
        raise OperationalError("INSERT INTO attachments", {}, Exception("disk I/O error"))

    monkeypatch.setattr(listing_store, "_insert_attachments", broken)

    result = listing_store.create_listing(listing_payload(provider_id), images("a.jpg"))

    assert not result.success
    assert result.error == "storage"
    assert result.message == "DB error on listing creation."
    with session_factory() as db:
        assert db.query(Listing).count() == 0
        assert db.query(Attachment).count() == 0
        assert db.query(Address).filter(Address.city == "Koper").count() == 0


def test_listing_requires_an_image(listing_store, provider_id, session_factory):
    result = listing_store.create_listing(listing_payload(provider_id), [])

    assert result.error == "validation"
    with session_factory() as db:
        assert db.query(Listing).count() == 0


@pytest.mark.parametrize("overrides", [
    {"capacity": 0},
    {"capacity": 2.5},
    {"price": -1},
    {"title": "  "},
    {"city": ""},
])
def test_invalid_listing_fields(listing_store, provider_id, overrides):
    result = listing_store.create_listing(listing_payload(provider_id, **overrides), images("a.jpg"))

    assert not result.success
    assert result.error == "validation"


def test_seekers_cannot_create_listings(listing_store, user_store):
    seeker = user_store.create_user(register_payload()).data["user_id"]

    result = listing_store.create_listing(listing_payload(seeker), images("a.jpg"))

    assert result.error == "forbidden"


def test_unknown_provider(listing_store):
    result = listing_store.create_listing(listing_payload(4242), images("a.jpg"))

    assert result.error == "not_found"


def test_all_listings_newest_first_with_primary_image(listing_store, provider_id):
    first = listing_store.create_listing(listing_payload(provider_id, title="First"), images("f.jpg", primary="f.jpg"))
    second = listing_store.create_listing(listing_payload(provider_id, title="Second"), images("s.jpg"))

    listings = listing_store.get_all_listings().data

    assert [l.id for l in listings] == [second.data["listing_id"], first.data["listing_id"]]
    assert listings[0].primary_image is None
    assert listings[1].primary_image == "uploads/f.jpg"
    assert listings[1].city == "Koper"


def test_search_matches_city_or_street(listing_store, provider_id):
    listing_store.create_listing(listing_payload(provider_id, title="Coast"), images("c.jpg"))
    listing_store.create_listing(
        listing_payload(provider_id, title="Capital", city="Ljubljana", street_name="Slovenska cesta", postal_code="1000"),
        images("l.jpg"),
    )

    by_city = listing_store.search_listings("Ljub").data
    by_street = listing_store.search_listings("Harbour").data
    nothing = listing_store.search_listings("Maribor").data

    assert [l.title for l in by_city] == ["Capital"]
    assert [l.title for l in by_street] == ["Coast"]
    assert nothing == []


def test_blank_search_is_rejected(listing_store):
    assert listing_store.search_listings("  ").error == "validation"


def test_listings_by_provider(listing_store, provider_id, user_store):
    other = user_store.create_user(
        register_payload(username="otto", email="otto@x.com", role="Provider")
    ).data["user_id"]
    listing_store.create_listing(listing_payload(provider_id), images("a.jpg"))
    listing_store.create_listing(listing_payload(other), images("b.jpg"))

    mine = listing_store.get_listings_by_provider(provider_id).data

    assert len(mine) == 1


def test_missing_listing(listing_store):
    assert listing_store.get_listing_by_id(777).error == "not_found"


@pytest.mark.parametrize("storage_type", ["ItemSlot", "SquareMeter"])
@pytest.mark.parametrize("field", ["capacity", "price"])
@pytest.mark.parametrize("value", [float("inf"), float("nan")])
def test_non_finite_numbers_are_validation_failures(listing_store, provider_id, session_factory,
                                                    storage_type, field, value):
    payload = listing_payload(provider_id, storage_type=storage_type).model_copy(update={field: value})

    result = listing_store.create_listing(payload, images("a.jpg"))

    assert result.error == "validation"
    with session_factory() as db:
        assert db.query(Listing).count() == 0


def test_listing_payload_refuses_non_finite_numbers(provider_id):
    with pytest.raises(PayloadError):
        listing_payload(provider_id, capacity=float("inf"))
    with pytest.raises(PayloadError):
        listing_payload(provider_id, price=float("nan"))
