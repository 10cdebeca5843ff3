# backend/models/listing_model.py
from sqlalchemy import Column, Integer, Float, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode, UnicodeText
from sqlalchemy.orm import relationship

from database.session import Base

STORAGE_TYPES = ("ItemSlot", "SquareMeter")

# storage type -> the only capacity column it may fill
CAPACITY_COLUMNS = {
    "ItemSlot": "total_capacity_slots",
    "SquareMeter": "capacity_sqm",
}


class Listing(Base):
    __tablename__ = "listings"

    id                   = Column(Integer, primary_key=True, index=True)
    provider_id          = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    address_id           = Column(Integer, ForeignKey("addresses.id"), nullable=False)
    title                = Column(Unicode(200), nullable=False)
    description          = Column(UnicodeText)
    storage_type         = Column(Unicode(20), nullable=False)
    total_capacity_slots = Column(Integer)
    capacity_sqm         = Column(Float)
    price_per_unit       = Column(Float, nullable=False)
    price_unit           = Column(Unicode(32))
    status               = Column(Unicode(20), nullable=False, default="Active")
    creation_date        = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("storage_type in ('ItemSlot','SquareMeter')", name="ck_listings_storage_type"),
    )

    provider    = relationship("User", back_populates="listings")
    address     = relationship("Address")
    attachments = relationship("Attachment", back_populates="listing", cascade="all, delete-orphan")
    bookings    = relationship("Booking", back_populates="listing")

    @property
    def capacity(self):
        return getattr(self, CAPACITY_COLUMNS[self.storage_type])


class Attachment(Base):
    __tablename__ = "attachments"

    id               = Column(Integer, primary_key=True, index=True)
    listing_id       = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True)
    file_url         = Column(Unicode(500), nullable=False)
    file_type        = Column(Unicode(20), nullable=False, default="Image")
    upload_timestamp = Column(DateTime, nullable=False)
    is_primary       = Column(Boolean, nullable=False, default=False)  # not unique per listing

    listing = relationship("Listing", back_populates="attachments")
