# backend/queries/listing_queries.py
from typing import List, Optional

from sqlalchemy import and_, or_, true
from sqlalchemy.orm import Session, joinedload

from models.address_model import Address
from models.listing_model import Listing, Attachment
from schemas.listings import ListingSummary, ListingDetail, ImageOut


class ListingQueries:
    """Read-side projections over listings, addresses and attachments."""

    def _summary_query(self, db: Session):
        return (
            db.query(
                Listing.id,
                Listing.title,
                Listing.description,
                Listing.price_per_unit,
                Listing.price_unit,
                Listing.storage_type,
                Listing.total_capacity_slots,
                Listing.capacity_sqm,
                Address.city,
                Address.street_name,
                Attachment.file_url.label("primary_image"),
            )
            .join(Address, Listing.address_id == Address.id)
            # a listing with two primary attachments yields two rows
            .outerjoin(
                Attachment,
                and_(Attachment.listing_id == Listing.id, Attachment.is_primary == true()),
            )
            .order_by(Listing.creation_date.desc(), Listing.id.desc())
        )

    @staticmethod
    def _to_summaries(rows) -> List[ListingSummary]:
        return [ListingSummary(**row._mapping) for row in rows]

    def all_listings(self, db: Session) -> List[ListingSummary]:
        return self._to_summaries(self._summary_query(db).all())

    def search(self, db: Session, term: str) -> List[ListingSummary]:
        """Substring match on city or street; case handling is up to the collation."""
        pattern = f"%{term}%"
        rows = (
            self._summary_query(db)
            .filter(or_(Address.city.like(pattern), Address.street_name.like(pattern)))
            .all()
        )
        return self._to_summaries(rows)

    def by_provider(self, db: Session, provider_id: int) -> List[ListingSummary]:
        rows = self._summary_query(db).filter(Listing.provider_id == provider_id).all()
        return self._to_summaries(rows)

    def detail(self, db: Session, listing_id: int) -> Optional[ListingDetail]:
        listing = (
            db.query(Listing)
            .options(joinedload(Listing.address), joinedload(Listing.attachments))
            .filter(Listing.id == listing_id)
            .first()
        )
        if not listing:
            return None

        # primary first; upload order otherwise
        attachments = sorted(listing.attachments, key=lambda a: (not a.is_primary, a.id))
        return ListingDetail(
            id=listing.id,
            provider_id=listing.provider_id,
            title=listing.title,
            description=listing.description,
            storage_type=listing.storage_type,
            capacity=listing.capacity,
            total_capacity_slots=listing.total_capacity_slots,
            capacity_sqm=listing.capacity_sqm,
            price_per_unit=listing.price_per_unit,
            price_unit=listing.price_unit,
            status=listing.status,
            creation_date=listing.creation_date,
            city=listing.address.city,
            street_name=listing.address.street_name,
            postal_code=listing.address.postal_code,
            images=[ImageOut(file_url=a.file_url, is_primary=a.is_primary) for a in attachments],
        )


listing_queries = ListingQueries()
