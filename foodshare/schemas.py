# foodshare/schemas.py
from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, EmailStr, Field, field_validator, model_validator

from foodshare.core.states import PickupStatus
from foodshare.models import Organization, Role
from foodshare.models.base import CamelModel, as_utc

MIN_PASSWORD_LENGTH = 8


def _normalize_email(value: str) -> str:
    return value.strip().lower()


NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]
# login answers 401 for any bad credential, so a malformed address is not a 400
LoginEmail = Annotated[str, AfterValidator(_normalize_email)]


# --------------------------
# Auth
# --------------------------
class RegisterIn(CamelModel):
    email: NormalizedEmail
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str
    role: Literal["volunteer", "ngo"]
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    availability: Optional[str] = None
    # ngo only
    organization_name: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None

    @model_validator(mode="after")
    def check_consistency(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if self.role == "ngo" and not (self.organization_name or "").strip():
            raise ValueError("Organization name is required for NGO accounts")
        return self


class LoginIn(CamelModel):
    email: LoginEmail
    password: str


class ForgotPasswordIn(CamelModel):
    email: NormalizedEmail


class ResetPasswordIn(CamelModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: Optional[str] = None

    @model_validator(mode="after")
    def check_match(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords don't match")
        return self


class MessageOut(CamelModel):
    message: str


class UserOut(CamelModel):
    """Public view of a user; credentials and tokens never leave the server."""

    id: int
    email: str
    role: Role
    first_name: str
    last_name: str
    phone: str
    is_verified: bool
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    availability: Optional[str] = None
    created_at: datetime
    ngo: Optional[Organization] = None


# --------------------------
# Pickups
# --------------------------
class PickupIn(CamelModel):
    ngo_id: int
    title: str
    description: str
    address: str
    city: str
    state: str
    zip_code: str
    food_items: str
    quantity: str
    pickup_time: datetime
    pickup_end_time: datetime
    destination: str
    additional_notes: Optional[str] = None
    distance: Optional[str] = None

    @field_validator("pickup_time", "pickup_end_time")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def check_window(self):
        if self.pickup_end_time <= self.pickup_time:
            raise ValueError("Pickup end time must be after pickup time")
        return self


class StatusIn(CamelModel):
    status: PickupStatus


# --------------------------
# Stats
# --------------------------
class StatsOverview(CamelModel):
    total_meals_saved: int
    active_volunteers: int
    partner_ngos: int = Field(alias="partnerNGOs")
