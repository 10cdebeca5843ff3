# backend/services/address_resolver.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from models.address_model import Address

logger = logging.getLogger(__name__)


def full_street_name(street: str, number: Optional[str] = None) -> str:
    return f"{number or ''} {street}".strip()


def get_or_create_address(
    db: Session,
    street: str,
    city: str,
    postal_code: str,
    number: Optional[str] = None,
) -> int:
    """
    Return the id of the address matching (street, city, postal code),
    inserting it first if it does not exist yet.

    Runs inside the caller's transaction and never commits. Two concurrent
    callers resolving the same new address can still both insert it; there
    is no unique constraint on the triple.
    """
    street_name = full_street_name(street, number)

    existing = (
        db.query(Address.id)
        .filter(
            Address.street_name == street_name,
            Address.city == city,
            Address.postal_code == postal_code,
        )
        .first()
    )
    if existing:
        return existing.id

    address = Address(street_name=street_name, city=city, postal_code=postal_code)
    db.add(address)
    db.flush()
    logger.debug(f"Created address {address.id}: {street_name}, {city} {postal_code}")
    return address.id
