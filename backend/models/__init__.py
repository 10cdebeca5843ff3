# backend/models/__init__.py
from .address_model import Address
from .user_model import User, ROLES
from .listing_model import Listing, Attachment, STORAGE_TYPES, CAPACITY_COLUMNS
from .booking_model import Booking, BookingItem
