# backend/schemas/users.py
from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field

RegisterRole = Literal["Provider", "Seeker"]


class RegisterPayload(BaseModel):
    username: str = Field(max_length=64)
    password: str = Field(max_length=128)
    email: str = Field(max_length=255)
    role: Optional[RegisterRole] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None

    # address
    street_name: str
    number: Optional[str] = None
    city: str
    postal_code: str


class LoginPayload(BaseModel):
    identifier: str   # username or email
    password: str


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str


class UserDetailsUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    phone_number: Optional[str] = None
    current_password: str


class VerificationUpdate(BaseModel):
    is_verified: bool


class UserOut(BaseModel):
    """User row without the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture_url: Optional[str] = None
    address_id: Optional[int] = None
    is_verified: bool
    registration_date: datetime
    last_login_date: Optional[datetime] = None
    average_provider_rating: Optional[float] = None
    average_seeker_rating: Optional[float] = None


class UserProfile(UserOut):
    street_name: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
