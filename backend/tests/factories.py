# backend/tests/factories.py
from schemas.listings import ListingCreate, ListingImage
from schemas.users import RegisterPayload

PASSWORD = "Secret123"


def register_payload(**overrides) -> RegisterPayload:
    data = dict(
        username="alice",
        password=PASSWORD,
        email="alice@x.com",
        street_name="Main Street",
        number="12",
        city="Ljubljana",
        postal_code="1000",
    )
    data.update(overrides)
    return RegisterPayload(**data)


def listing_payload(provider_id: int, **overrides) -> ListingCreate:
    data = dict(
        provider_id=provider_id,
        title="Dry garage corner",
        description="Ground floor, easy access",
        storage_type="ItemSlot",
        capacity=10,
        price=15.0,
        price_unit="month",
        street_name="Harbour Road",
        number="3",
        city="Koper",
        postal_code="6000",
    )
    data.update(overrides)
    return ListingCreate(**data)


def images(*names, primary=None):
    return [ListingImage(file_url=f"uploads/{n}", is_primary=(n == primary)) for n in names]
