# foodshare/repos/mongo.py
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from foodshare.core.errors import ConflictError, NotFoundError
from foodshare.models import Organization, Pickup, User, utcnow

from .base import Repository


def _from_doc(model, doc: Optional[dict]):
    if not doc:
        return None
    doc = dict(doc)
    doc["id"] = doc.pop("_id")
    doc.pop("email_key", None)
    return model.model_validate(doc)


class MongoRepo(Repository):
    """MongoDB-backed store with integer ids drawn from a ``counters`` collection.

    The client must be created with ``tz_aware=True`` so timestamps come back
    comparable with ``utcnow()``.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def ensure_indexes(self):
        async def ensure_index(col, keys, name: str, **kwargs):
            existing = [ix["name"] async for ix in col.list_indexes()]
            if name in existing:
                return
            await col.create_index(keys, name=name, **kwargs)

        await ensure_index(self.db.users, [("email_key", ASCENDING)], "email_key_1", unique=True)
        await ensure_index(self.db.users, [("verification_token", ASCENDING)], "verification_token_1", sparse=True)
        await ensure_index(self.db.users, [("reset_token", ASCENDING)], "reset_token_1", sparse=True)
        await ensure_index(self.db.organizations, [("user_id", ASCENDING)], "user_id_1")
        await ensure_index(self.db.pickups, [("ngo_id", ASCENDING)], "ngo_id_1")
        await ensure_index(self.db.pickups, [("volunteer_id", ASCENDING)], "volunteer_id_1")
        await ensure_index(
            self.db.pickups, [("status", ASCENDING), ("pickup_time", ASCENDING)], "status_1_pickup_time_1"
        )

    async def _next_id(self, name: str) -> int:
        doc = await self.db.counters.find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return doc["seq"]

    # Users
    async def create_user(self, data: dict) -> User:
        fields = {k: v for k, v in data.items() if k not in ("id", "is_verified", "created_at")}
        user = User(id=await self._next_id("users"), is_verified=False, created_at=utcnow(), **fields)
        doc = user.model_dump(exclude={"id"})
        doc["_id"] = user.id
        doc["email_key"] = user.email.strip().lower()
        try:
            await self.db.users.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError("Email already registered")
        return user

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return _from_doc(User, await self.db.users.find_one({"_id": user_id}))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return _from_doc(User, await self.db.users.find_one({"email_key": email.strip().lower()}))

    async def update_user(self, user_id: int, fields: dict) -> User:
        fields = {k: v for k, v in fields.items() if k != "id"}
        if "email" in fields:
            fields["email_key"] = fields["email"].strip().lower()
        try:
            doc = await self.db.users.find_one_and_update(
                {"_id": user_id}, {"$set": fields}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            raise ConflictError("Email already registered")
        if doc is None:
            raise NotFoundError("User not found")
        return _from_doc(User, doc)

    async def get_user_by_verification_token(self, token: str) -> Optional[User]:
        return _from_doc(User, await self.db.users.find_one({"verification_token": token}))

    async def get_user_by_reset_token(self, token: str, now: Optional[datetime] = None) -> Optional[User]:
        doc = await self.db.users.find_one({
            "reset_token": token,
            "reset_token_expiry": {"$gt": now or utcnow()},
        })
        return _from_doc(User, doc)

    # Organizations
    async def create_organization(self, data: dict) -> Organization:
        fields = {k: v for k, v in data.items() if k not in ("id", "is_approved")}
        org = Organization(id=await self._next_id("organizations"), is_approved=False, **fields)
        doc = org.model_dump(exclude={"id"})
        doc["_id"] = org.id
        await self.db.organizations.insert_one(doc)
        return org

    async def get_organization(self, org_id: int) -> Optional[Organization]:
        return _from_doc(Organization, await self.db.organizations.find_one({"_id": org_id}))

    async def get_organization_by_user(self, user_id: int) -> Optional[Organization]:
        return _from_doc(Organization, await self.db.organizations.find_one({"user_id": user_id}))

    async def list_organizations(self) -> List[Organization]:
        cur = self.db.organizations.find().sort("_id", ASCENDING)
        return [_from_doc(Organization, d) async for d in cur]

    async def approve_organization(self, org_id: int) -> Organization:
        doc = await self.db.organizations.find_one_and_update(
            {"_id": org_id}, {"$set": {"is_approved": True}}, return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise NotFoundError("NGO not found")
        return _from_doc(Organization, doc)

    # Pickups
    async def create_pickup(self, data: dict) -> Pickup:
        if await self.db.organizations.find_one({"_id": data.get("ngo_id")}, {"_id": 1}) is None:
            raise NotFoundError("NGO not found")
        fields = {k: v for k, v in data.items() if k not in ("id", "status", "volunteer_id", "created_at")}
        pickup = Pickup(
            id=await self._next_id("pickups"),
            status="pending",
            volunteer_id=None,
            created_at=utcnow(),
            **fields,
        )
        doc = pickup.model_dump(exclude={"id"})
        doc["_id"] = pickup.id
        await self.db.pickups.insert_one(doc)
        return pickup

    async def get_pickup(self, pickup_id: int) -> Optional[Pickup]:
        return _from_doc(Pickup, await self.db.pickups.find_one({"_id": pickup_id}))

    async def list_pickups(
        self,
        ngo_id: Optional[int] = None,
        volunteer_id: Optional[int] = None,
        available: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Pickup]:
        q: dict = {}
        if ngo_id is not None:
            q["ngo_id"] = ngo_id
        if volunteer_id is not None:
            q["volunteer_id"] = volunteer_id
        if available:
            q["status"] = "pending"
            q["pickup_time"] = {"$gt": now or utcnow()}
        cur = self.db.pickups.find(q).sort("_id", ASCENDING)
        return [_from_doc(Pickup, d) async for d in cur]

    async def assign_pickup(self, pickup_id: int, volunteer_id: int) -> Optional[Pickup]:
        # filter on status makes this the compare-and-set
        doc = await self.db.pickups.find_one_and_update(
            {"_id": pickup_id, "status": "pending"},
            {"$set": {"status": "assigned", "volunteer_id": volunteer_id}},
            return_document=ReturnDocument.AFTER,
        )
        return _from_doc(Pickup, doc)

    async def set_pickup_status(self, pickup_id: int, status, expected=None) -> Optional[Pickup]:
        q: dict = {"_id": pickup_id}
        if expected is not None:
            q["status"] = expected
        doc = await self.db.pickups.find_one_and_update(
            q, {"$set": {"status": status}}, return_document=ReturnDocument.AFTER
        )
        if doc is not None:
            return _from_doc(Pickup, doc)
        if expected is not None and await self.db.pickups.find_one({"_id": pickup_id}, {"_id": 1}):
            return None
        raise NotFoundError("Food pickup not found")
