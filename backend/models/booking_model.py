# backend/models/booking_model.py
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode
from sqlalchemy.orm import relationship

from database.session import Base


class Booking(Base):
    __tablename__ = "bookings"

    id                     = Column(Integer, primary_key=True, index=True)
    listing_id             = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    seeker_id              = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_date             = Column(DateTime, nullable=False)
    end_date               = Column(DateTime, nullable=False)
    total_cost             = Column(Float, nullable=False)
    request_date           = Column(DateTime, nullable=False)
    booking_status         = Column(Unicode(20), nullable=False, default="Pending")
    requested_capacity_sqm = Column(Float)

    __table_args__ = (
        CheckConstraint(
            "booking_status in ('Pending','Accepted','Rejected','Cancelled')",
            name="ck_bookings_status",
        ),
    )

    listing = relationship("Listing", back_populates="bookings")
    seeker  = relationship("User", back_populates="bookings")
    items   = relationship("BookingItem", cascade="all, delete-orphan", back_populates="booking")


class BookingItem(Base):
    __tablename__ = "booking_items"

    id          = Column(Integer, primary_key=True, index=True)
    booking_id  = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, nullable=False)
    quantity    = Column(Integer, nullable=False)

    booking = relationship("Booking", back_populates="items")
