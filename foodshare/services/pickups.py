# foodshare/services/pickups.py
import logging
from typing import List, Optional

from foodshare.core import policy
from foodshare.core.config import Settings
from foodshare.core.errors import (
    EmailDeliveryError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
)
from foodshare.core.states import PickupStatus, can_transition
from foodshare.models import Organization, Pickup, User
from foodshare.repos.base import Repository
from foodshare.schemas import PickupIn

from . import emails
from .mailer import Mailer

logger = logging.getLogger(__name__)


class PickupService:
    """Pickup lifecycle: pending -> assigned -> completed | cancelled, and pending -> cancelled."""

    def __init__(self, repo: Repository, mailer: Mailer, settings: Settings):
        self.repo = repo
        self.mailer = mailer
        self.settings = settings

    async def _own_org(self, user: User) -> Optional[Organization]:
        if user.role != "ngo":
            return None
        return await self.repo.get_organization_by_user(user.id)

    async def create(self, user: User, data: PickupIn) -> Pickup:
        org = await self.repo.get_organization(data.ngo_id)
        if org is None:
            raise NotFoundError("NGO not found")
        if not policy.can_act_for_organization(user, org.id, await self._own_org(user)):
            raise ForbiddenError("Not authorized to create pickups for this NGO")
        pickup = await self.repo.create_pickup(data.model_dump())
        logger.info("Pickup %s created for NGO %s by user %s", pickup.id, org.id, user.id)
        return pickup

    async def get(self, pickup_id: int) -> Pickup:
        pickup = await self.repo.get_pickup(pickup_id)
        if pickup is None:
            raise NotFoundError("Food pickup not found")
        return pickup

    async def list_all(self) -> List[Pickup]:
        return await self.repo.list_pickups()

    async def list_available(self) -> List[Pickup]:
        return await self.repo.list_pickups(available=True)

    async def list_for_ngo(self, ngo_id: int) -> List[Pickup]:
        return await self.repo.list_pickups(ngo_id=ngo_id)

    async def list_for_volunteer(self, user: User) -> List[Pickup]:
        return await self.repo.list_pickups(volunteer_id=user.id)

    async def assign(self, user: User, pickup_id: int) -> Pickup:
        if not policy.can_assign(user):
            raise ForbiddenError("Only volunteers can assign pickups")
        pickup = await self.repo.assign_pickup(pickup_id, user.id)
        if pickup is None:
            raise NotFoundError("Food pickup not found or already assigned")
        logger.info("Pickup %s assigned to volunteer %s", pickup.id, user.id)
        await self._notify_assignment(pickup, user)
        return pickup

    async def set_status(self, user: User, pickup_id: int, status: PickupStatus) -> Pickup:
        pickup = await self.get(pickup_id)
        if not policy.can_act_on_pickup(user, pickup, await self._own_org(user)):
            raise ForbiddenError("Not authorized to update this pickup")
        if not can_transition(pickup.status, status):
            raise InvalidTransitionError(f"Cannot change status from {pickup.status} to {status}")

        updated = await self.repo.set_pickup_status(pickup_id, status, expected=pickup.status)
        if updated is None:
            raise InvalidTransitionError("Pickup status changed concurrently, refresh and retry")
        logger.info("Pickup %s: %s -> %s by user %s", pickup_id, pickup.status, status, user.id)
        return updated

    async def _notify_assignment(self, pickup: Pickup, volunteer: User) -> None:
        # the assignment is already stored; mail problems are logged, not surfaced
        base_url = self.settings.base_url
        try:
            subject, html = emails.pickup_confirmation_email(base_url, pickup)
            await self.mailer.send(volunteer.email, subject, html)

            org = await self.repo.get_organization(pickup.ngo_id)
            owner = await self.repo.get_user_by_id(org.user_id) if org else None
            if owner is not None:
                subject, html = emails.ngo_assignment_email(base_url, pickup, volunteer, org)
                await self.mailer.send(owner.email, subject, html)
        except EmailDeliveryError:
            logger.warning("Assignment notification for pickup %s not delivered", pickup.id)
