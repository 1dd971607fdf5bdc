"""Stored food pickup record.

Only ``status`` and ``volunteer_id`` change after creation, and
``status == "pending"`` holds exactly when ``volunteer_id`` is None.
"""

from datetime import datetime
from typing import Optional

from foodshare.core.states import PickupStatus

from .base import CamelModel


class Pickup(CamelModel):
    id: int
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
    status: PickupStatus = "pending"
    volunteer_id: Optional[int] = None
    distance: Optional[str] = None
    created_at: datetime
