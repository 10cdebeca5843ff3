# backend/services/listing_store.py
import logging
import math
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session, sessionmaker

from models.listing_model import Listing, Attachment, STORAGE_TYPES, CAPACITY_COLUMNS
from models.user_model import User
from queries.listing_queries import listing_queries
from schemas.common import StoreResult
from schemas.listings import ListingCreate, ListingImage
from services.address_resolver import get_or_create_address
from services.base import TransactionalStore
from services.errors import ValidationError, NotFoundError, PermissionDenied

logger = logging.getLogger(__name__)

LISTING_ROLES = ("Provider", "Admin")


class ListingStore(TransactionalStore):
    """Listing creation with attachments, and listing queries."""

    def __init__(self, session_factory: sessionmaker, queries=listing_queries):
        super().__init__(session_factory)
        self._queries = queries

    @staticmethod
    def _validate(payload: ListingCreate, images: List[ListingImage]) -> None:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Title is required.")
        if payload.storage_type not in STORAGE_TYPES:
            raise ValidationError("Storage type must be ItemSlot or SquareMeter.")
        if payload.capacity is None or not math.isfinite(payload.capacity) or payload.capacity <= 0:
            raise ValidationError("Capacity must be greater than zero.")
        if payload.storage_type == "ItemSlot" and int(payload.capacity) != payload.capacity:
            raise ValidationError("Slot capacity must be a whole number.")
        if payload.price is None or not math.isfinite(payload.price) or payload.price < 0:
            raise ValidationError("Price must not be negative.")
        for field in ("street_name", "city", "postal_code"):
            if not (getattr(payload, field) or "").strip():
                raise ValidationError("Street name, city and postal code are required.")
        if not images:
            raise ValidationError("At least one image is required.")
        if any(not (img.file_url or "").strip() for img in images):
            raise ValidationError("Image path is missing.")

    def _insert_attachments(self, db: Session, listing_id: int, images: List[ListingImage]) -> None:
        uploaded_at = datetime.utcnow()
        db.bulk_save_objects([
            Attachment(
                listing_id=listing_id,
                file_url=img.file_url,
                file_type="Image",
                upload_timestamp=uploaded_at,
                is_primary=bool(img.is_primary),
            )
            for img in images
        ])
        db.flush()

    def create_listing(self, payload: ListingCreate, images: List[ListingImage]) -> StoreResult:
        """
        Insert the listing and one attachment per image in a single
        transaction. The capacity goes to the column matching the storage
        type; the other capacity column stays NULL. Primary flags are stored
        as given.
        """
        def work(db: Session) -> StoreResult:
            self._validate(payload, images)

            provider = db.get(User, payload.provider_id)
            if not provider:
                raise NotFoundError("Provider not found.")
            if provider.role not in LISTING_ROLES:
                raise PermissionDenied("Only providers can create listings.")

            address_id = get_or_create_address(
                db, payload.street_name.strip(), payload.city.strip(),
                payload.postal_code.strip(), payload.number,
            )
            capacity = int(payload.capacity) if payload.storage_type == "ItemSlot" else float(payload.capacity)
            listing = Listing(
                provider_id=payload.provider_id,
                address_id=address_id,
                title=payload.title.strip(),
                description=payload.description,
                storage_type=payload.storage_type,
                price_per_unit=float(payload.price),
                price_unit=payload.price_unit,
                status="Active",
                creation_date=datetime.utcnow(),
                **{CAPACITY_COLUMNS[payload.storage_type]: capacity},
            )
            db.add(listing)
            db.flush()

            self._insert_attachments(db, listing.id, images)
            logger.info(f"Listing {listing.id} created by provider {payload.provider_id} with {len(images)} image(s)")
            return StoreResult.ok("Listing created successfully!", {"listing_id": listing.id})

        return self._run("create_listing", work, failure_message="DB error on listing creation.")

    def get_listing_by_id(self, listing_id: int) -> StoreResult:
        def work(db: Session) -> StoreResult:
            listing = self._queries.detail(db, listing_id)
            if not listing:
                raise NotFoundError("Listing not found.")
            return StoreResult.ok("Listing found.", listing)

        return self._run("get_listing_by_id", work, failure_message="Failed to fetch listing.")

    def get_all_listings(self) -> StoreResult:
        def work(db: Session) -> StoreResult:
            return StoreResult.ok("Listings fetched.", self._queries.all_listings(db))

        return self._run("get_all_listings", work, failure_message="Failed to fetch listings.")

    def search_listings(self, term: str) -> StoreResult:
        if not term or not term.strip():
            return StoreResult.fail("validation", "Search query is required.")

        def work(db: Session) -> StoreResult:
            return StoreResult.ok("Listings fetched.", self._queries.search(db, term.strip()))

        return self._run("search_listings", work, failure_message="Failed to search listings.")

    def get_listings_by_provider(self, provider_id: int) -> StoreResult:
        def work(db: Session) -> StoreResult:
            return StoreResult.ok("Listings fetched.", self._queries.by_provider(db, provider_id))

        return self._run("get_listings_by_provider", work, failure_message="Failed to fetch listings.")
