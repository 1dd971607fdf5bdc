"""Stored NGO record, one-to-one with an ``ngo`` user."""

from typing import Optional

from .base import CamelModel


class Organization(CamelModel):
    id: int
    user_id: int
    organization_name: str
    description: Optional[str] = None
    website: Optional[str] = None
    is_approved: bool = False
