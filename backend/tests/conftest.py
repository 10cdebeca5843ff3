# backend/tests/conftest.py
import os
import tempfile

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="storage-market-uploads-"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.pop("CLOUDINARY_CLOUD_NAME", None)

from datetime import datetime, timedelta

import pytest

from database.session import build_engine, build_session_factory, init_db
from services.booking_store import BookingStore
from services.listing_store import ListingStore
from services.user_store import UserStore
from tests.factories import register_payload, listing_payload, images


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def user_store(session_factory):
    return UserStore(session_factory, bcrypt_rounds=4)


@pytest.fixture
def listing_store(session_factory):
    return ListingStore(session_factory)


@pytest.fixture
def booking_store(session_factory):
    return BookingStore(session_factory)


@pytest.fixture
def provider_id(user_store):
    result = user_store.create_user(
        register_payload(username="paula", email="paula@x.com", role="Provider")
    )
    assert result.success, result.message
    return result.data["user_id"]


@pytest.fixture
def seeker_id(user_store):
    result = user_store.create_user(register_payload(username="sam", email="sam@x.com"))
    assert result.success, result.message
    return result.data["user_id"]


@pytest.fixture
def slot_listing_id(listing_store, provider_id):
    result = listing_store.create_listing(listing_payload(provider_id), images("a.jpg", primary="a.jpg"))
    assert result.success, result.message
    return result.data["listing_id"]


@pytest.fixture
def area_listing_id(listing_store, provider_id):
    result = listing_store.create_listing(
        listing_payload(provider_id, storage_type="SquareMeter", capacity=40.5, title="Basement room"),
        images("b.jpg", primary="b.jpg"),
    )
    assert result.success, result.message
    return result.data["listing_id"]


@pytest.fixture
def dates():
    start = datetime(2026, 11, 1, 10, 0)
    return start, start + timedelta(days=30)
