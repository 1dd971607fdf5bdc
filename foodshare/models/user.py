"""Stored user record."""

from datetime import datetime
from typing import Literal, Optional

from .base import CamelModel

Role = Literal["volunteer", "ngo", "admin"]


class User(CamelModel):
    id: int
    email: str
    password_hash: str
    role: Role
    first_name: str
    last_name: str
    phone: str
    is_verified: bool = False
    verification_token: Optional[str] = None
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    availability: Optional[str] = None
    created_at: datetime
