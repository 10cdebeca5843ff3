# backend/models/address_model.py
from sqlalchemy import Column, Integer, Index
from sqlalchemy.types import Unicode

from database.session import Base


class Address(Base):
    __tablename__ = "addresses"

    id          = Column(Integer, primary_key=True, index=True)
    street_name = Column(Unicode(255), nullable=False)
    city        = Column(Unicode(120), nullable=False)
    postal_code = Column(Unicode(20), nullable=False)

    # lookup index only; duplicates are not rejected at the table level
    __table_args__ = (
        Index("ix_addresses_street_city_postal", "street_name", "city", "postal_code"),
    )
