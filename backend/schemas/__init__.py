# backend/schemas/__init__.py

from .common import StoreResult, ErrorKind

# users
from .users import (
    RegisterPayload, LoginPayload, PasswordUpdate, UserDetailsUpdate,
    VerificationUpdate, UserOut, UserProfile,
)

# listings
from .listings import (
    StorageType, ListingCreate, ListingImage, ImageOut, ListingSummary, ListingDetail,
)

# bookings
from .bookings import (
    BookingStatus, BookingItemIn, BookingCreate, BookingRequest,
    BookingStatusUpdate, BookingItemOut, BookingOut,
)

__all__ = [
    "StoreResult", "ErrorKind",
    # users
    "RegisterPayload", "LoginPayload", "PasswordUpdate", "UserDetailsUpdate",
    "VerificationUpdate", "UserOut", "UserProfile",
    # listings
    "StorageType", "ListingCreate", "ListingImage", "ImageOut", "ListingSummary", "ListingDetail",
    # bookings
    "BookingStatus", "BookingItemIn", "BookingCreate", "BookingRequest",
    "BookingStatusUpdate", "BookingItemOut", "BookingOut",
]
