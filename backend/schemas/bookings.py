# backend/schemas/bookings.py
from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, Field

from .listings import StorageType

BookingStatus = Literal["Pending", "Accepted", "Rejected", "Cancelled"]


class BookingItemIn(BaseModel):
    category_id: int = Field(gt=0)
    quantity: int


class BookingCreate(BaseModel):
    listing_id: int = Field(gt=0)
    seeker_id: int = Field(gt=0)
    start_date: datetime
    end_date: datetime
    total_cost: float = Field(allow_inf_nan=False)
    storage_type: Optional[StorageType] = None   # optional hint; must match the listing
    items: List[BookingItemIn] = []
    requested_sqm: Optional[float] = Field(default=None, allow_inf_nan=False)


class BookingRequest(BaseModel):
    """Booking body as sent over HTTP; the seeker comes from the session."""
    listing_id: int = Field(gt=0)
    start_date: datetime
    end_date: datetime
    total_cost: float = Field(allow_inf_nan=False)
    storage_type: Optional[StorageType] = None
    items: List[BookingItemIn] = []
    requested_sqm: Optional[float] = Field(default=None, allow_inf_nan=False)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingItemOut(BaseModel):
    id: int
    category_id: int
    quantity: int


class BookingOut(BaseModel):
    id: int
    listing_id: int
    seeker_id: int
    start_date: datetime
    end_date: datetime
    total_cost: float
    request_date: datetime
    booking_status: BookingStatus
    requested_capacity_sqm: Optional[float] = None
    items: List[BookingItemOut] = []
