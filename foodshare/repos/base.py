"""Store contract for users, organizations and pickups.

Implementations must make ``assign_pickup`` and the conditional form of
``set_pickup_status`` a single atomic compare-and-set on ``status``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from foodshare.core.states import PickupStatus
from foodshare.models import Organization, Pickup, User


class Repository(ABC):
    # Users
    @abstractmethod
    async def create_user(self, data: dict) -> User:
        """Insert with ``is_verified=False``; ConflictError on a duplicate email (any case)."""

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def update_user(self, user_id: int, fields: dict) -> User:
        """Merge ``fields`` into the record; NotFoundError for an unknown id."""

    @abstractmethod
    async def get_user_by_verification_token(self, token: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_reset_token(self, token: str, now: Optional[datetime] = None) -> Optional[User]:
        """Only matches while ``reset_token_expiry > now``."""

    # Organizations
    @abstractmethod
    async def create_organization(self, data: dict) -> Organization: ...

    @abstractmethod
    async def get_organization(self, org_id: int) -> Optional[Organization]: ...

    @abstractmethod
    async def get_organization_by_user(self, user_id: int) -> Optional[Organization]: ...

    @abstractmethod
    async def list_organizations(self) -> List[Organization]: ...

    @abstractmethod
    async def approve_organization(self, org_id: int) -> Organization:
        """Idempotent; NotFoundError for an unknown id."""

    # Pickups
    @abstractmethod
    async def create_pickup(self, data: dict) -> Pickup:
        """Insert as ``pending`` with no volunteer; NotFoundError if the organization is unknown."""

    @abstractmethod
    async def get_pickup(self, pickup_id: int) -> Optional[Pickup]: ...

    @abstractmethod
    async def list_pickups(
        self,
        ngo_id: Optional[int] = None,
        volunteer_id: Optional[int] = None,
        available: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Pickup]:
        """``available`` means pending with a pickup time still in the future."""

    @abstractmethod
    async def assign_pickup(self, pickup_id: int, volunteer_id: int) -> Optional[Pickup]:
        """pending -> assigned. None when the pickup is missing or no longer pending."""

    @abstractmethod
    async def set_pickup_status(
        self,
        pickup_id: int,
        status: PickupStatus,
        expected: Optional[PickupStatus] = None,
    ) -> Optional[Pickup]:
        """Write ``status``. With ``expected`` the write only happens if the current
        status still equals it, otherwise None. NotFoundError for an unknown id."""
