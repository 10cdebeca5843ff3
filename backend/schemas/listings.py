# backend/schemas/listings.py
from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, Field

StorageType = Literal["ItemSlot", "SquareMeter"]


class ListingCreate(BaseModel):
    provider_id: int = Field(gt=0)
    title: str = Field(max_length=200)
    description: Optional[str] = None
    storage_type: StorageType
    capacity: float = Field(allow_inf_nan=False)
    price: float = Field(allow_inf_nan=False)
    price_unit: Optional[str] = None

    # address
    street_name: str
    number: Optional[str] = None
    city: str
    postal_code: str


class ListingImage(BaseModel):
    file_url: str
    is_primary: bool = False


class ImageOut(BaseModel):
    file_url: str
    is_primary: bool


class ListingSummary(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    price_per_unit: float
    price_unit: Optional[str] = None
    storage_type: StorageType
    total_capacity_slots: Optional[int] = None
    capacity_sqm: Optional[float] = None
    city: str
    street_name: str
    primary_image: Optional[str] = None


class ListingDetail(BaseModel):
    id: int
    provider_id: int
    title: str
    description: Optional[str] = None
    storage_type: StorageType
    capacity: float
    total_capacity_slots: Optional[int] = None
    capacity_sqm: Optional[float] = None
    price_per_unit: float
    price_unit: Optional[str] = None
    status: str
    creation_date: datetime
    city: str
    street_name: str
    postal_code: str
    images: List[ImageOut] = []
