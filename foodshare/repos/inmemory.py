# foodshare/repos/inmemory.py
import asyncio
import itertools
from datetime import datetime
from typing import Dict, List, Optional

from foodshare.core.errors import ConflictError, NotFoundError
from foodshare.models import Organization, Pickup, User, utcnow

from .base import Repository

_PROTECTED_USER_FIELDS = ("id", "is_verified", "created_at")
_PROTECTED_PICKUP_FIELDS = ("id", "status", "volunteer_id", "created_at")


class InMemoryRepo(Repository):
    """Process-local store. Mutations are serialised by a single lock."""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.users_by_email: Dict[str, int] = {}
        self.organizations: Dict[int, Organization] = {}
        self.pickups: Dict[int, Pickup] = {}
        self._user_seq = itertools.count(1)
        self._org_seq = itertools.count(1)
        self._pickup_seq = itertools.count(1)
        self._lock = asyncio.Lock()

    # Users
    async def create_user(self, data: dict) -> User:
        key = data["email"].strip().lower()
        async with self._lock:
            if key in self.users_by_email:
                raise ConflictError("Email already registered")
            fields = {k: v for k, v in data.items() if k not in _PROTECTED_USER_FIELDS}
            user = User(id=next(self._user_seq), is_verified=False, created_at=utcnow(), **fields)
            self.users[user.id] = user
            self.users_by_email[key] = user.id
        return user.model_copy()

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        user = self.users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        uid = self.users_by_email.get(email.strip().lower())
        return await self.get_user_by_id(uid) if uid else None

    async def update_user(self, user_id: int, fields: dict) -> User:
        async with self._lock:
            user = self.users.get(user_id)
            if user is None:
                raise NotFoundError("User not found")
            updated = user.model_copy(update={k: v for k, v in fields.items() if k != "id"})
            if updated.email.lower() != user.email.lower():
                if updated.email.lower() in self.users_by_email:
                    raise ConflictError("Email already registered")
                del self.users_by_email[user.email.lower()]
                self.users_by_email[updated.email.lower()] = user_id
            self.users[user_id] = updated
        return updated.model_copy()

    async def get_user_by_verification_token(self, token: str) -> Optional[User]:
        for u in self.users.values():
            if u.verification_token is not None and u.verification_token == token:
                return u.model_copy()
        return None

    async def get_user_by_reset_token(self, token: str, now: Optional[datetime] = None) -> Optional[User]:
        now = now or utcnow()
        for u in self.users.values():
            if (
                u.reset_token is not None
                and u.reset_token == token
                and u.reset_token_expiry is not None
                and u.reset_token_expiry > now
            ):
                return u.model_copy()
        return None

    # Organizations
    async def create_organization(self, data: dict) -> Organization:
        async with self._lock:
            fields = {k: v for k, v in data.items() if k not in ("id", "is_approved")}
            org = Organization(id=next(self._org_seq), is_approved=False, **fields)
            self.organizations[org.id] = org
        return org.model_copy()

    async def get_organization(self, org_id: int) -> Optional[Organization]:
        org = self.organizations.get(org_id)
        return org.model_copy() if org else None

    async def get_organization_by_user(self, user_id: int) -> Optional[Organization]:
        for o in self.organizations.values():
            if o.user_id == user_id:
                return o.model_copy()
        return None

    async def list_organizations(self) -> List[Organization]:
        return [o.model_copy() for o in self.organizations.values()]

    async def approve_organization(self, org_id: int) -> Organization:
        async with self._lock:
            org = self.organizations.get(org_id)
            if org is None:
                raise NotFoundError("NGO not found")
            if not org.is_approved:
                org = org.model_copy(update={"is_approved": True})
                self.organizations[org_id] = org
        return org.model_copy()

    # Pickups
    async def create_pickup(self, data: dict) -> Pickup:
        async with self._lock:
            if data.get("ngo_id") not in self.organizations:
                raise NotFoundError("NGO not found")
            fields = {k: v for k, v in data.items() if k not in _PROTECTED_PICKUP_FIELDS}
            pickup = Pickup(
                id=next(self._pickup_seq),
                status="pending",
                volunteer_id=None,
                created_at=utcnow(),
                **fields,
            )
            self.pickups[pickup.id] = pickup
        return pickup.model_copy()

    async def get_pickup(self, pickup_id: int) -> Optional[Pickup]:
        p = self.pickups.get(pickup_id)
        return p.model_copy() if p else None

    async def list_pickups(
        self,
        ngo_id: Optional[int] = None,
        volunteer_id: Optional[int] = None,
        available: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Pickup]:
        now = now or utcnow()
        out: List[Pickup] = []
        for p in self.pickups.values():
            if ngo_id is not None and p.ngo_id != ngo_id:
                continue
            if volunteer_id is not None and p.volunteer_id != volunteer_id:
                continue
            if available and not (p.status == "pending" and p.pickup_time > now):
                continue
            out.append(p.model_copy())
        return out

    async def assign_pickup(self, pickup_id: int, volunteer_id: int) -> Optional[Pickup]:
        async with self._lock:
            p = self.pickups.get(pickup_id)
            if p is None or p.status != "pending":
                return None
            p = p.model_copy(update={"status": "assigned", "volunteer_id": volunteer_id})
            self.pickups[pickup_id] = p
        return p.model_copy()

    async def set_pickup_status(self, pickup_id: int, status, expected=None) -> Optional[Pickup]:
        async with self._lock:
            p = self.pickups.get(pickup_id)
            if p is None:
                raise NotFoundError("Food pickup not found")
            if expected is not None and p.status != expected:
                return None
            p = p.model_copy(update={"status": status})
            self.pickups[pickup_id] = p
        return p.model_copy()
