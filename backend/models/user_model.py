# backend/models/user_model.py
from sqlalchemy import Column, Integer, Boolean, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode
from sqlalchemy.orm import relationship

from database.session import Base

ROLES = ("Admin", "Provider", "Seeker")


class User(Base):
    __tablename__ = "users"

    id                      = Column(Integer, primary_key=True, index=True)
    username                = Column(Unicode(64), unique=True, nullable=False)
    email                   = Column(Unicode(255), unique=True, nullable=False)
    password_hash           = Column(Unicode(255), nullable=False)
    role                    = Column(Unicode(20), nullable=False, default="Seeker")
    first_name              = Column(Unicode(100))
    last_name               = Column(Unicode(100))
    phone_number            = Column(Unicode(32))
    profile_picture_url     = Column(Unicode(500))
    address_id              = Column(Integer, ForeignKey("addresses.id"))
    is_verified             = Column(Boolean, nullable=False, default=False)
    registration_date       = Column(DateTime, nullable=False)
    last_login_date         = Column(DateTime)
    average_provider_rating = Column(Float)
    average_seeker_rating   = Column(Float)

    __table_args__ = (
        CheckConstraint("role in ('Admin','Provider','Seeker')", name="ck_users_role"),
    )

    address  = relationship("Address")
    listings = relationship("Listing", back_populates="provider")
    bookings = relationship("Booking", back_populates="seeker")
