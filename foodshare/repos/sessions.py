"""Server-side session stores. A session maps an opaque id to a user id only."""

import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from foodshare.models import utcnow


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class InMemorySessionStore:
    def __init__(self, ttl: timedelta):
        self.ttl = ttl
        self._sessions: Dict[str, Tuple[int, datetime]] = {}

    async def create(self, user_id: int) -> str:
        self.prune()
        sid = new_session_id()
        self._sessions[sid] = (user_id, utcnow() + self.ttl)
        return sid

    async def get(self, sid: str) -> Optional[int]:
        entry = self._sessions.get(sid)
        if entry is None:
            return None
        user_id, expires_at = entry
        if expires_at <= utcnow():
            self._sessions.pop(sid, None)
            return None
        return user_id

    async def destroy(self, sid: str) -> None:
        self._sessions.pop(sid, None)

    def prune(self) -> None:
        now = utcnow()
        for sid in [s for s, (_, exp) in self._sessions.items() if exp <= now]:
            del self._sessions[sid]


class MongoSessionStore:
    def __init__(self, db: AsyncIOMotorDatabase, ttl: timedelta):
        self.col = db.sessions
        self.ttl = ttl

    async def ensure_indexes(self):
        existing = [ix["name"] async for ix in self.col.list_indexes()]
        if "expires_at_ttl" not in existing:
            # mongod removes expired sessions on its own
            await self.col.create_index([("expires_at", ASCENDING)], name="expires_at_ttl", expireAfterSeconds=0)

    async def create(self, user_id: int) -> str:
        sid = new_session_id()
        await self.col.insert_one({"_id": sid, "user_id": user_id, "expires_at": utcnow() + self.ttl})
        return sid

    async def get(self, sid: str) -> Optional[int]:
        doc = await self.col.find_one({"_id": sid, "expires_at": {"$gt": utcnow()}})
        return doc["user_id"] if doc else None

    async def destroy(self, sid: str) -> None:
        await self.col.delete_one({"_id": sid})
