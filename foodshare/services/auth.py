# foodshare/services/auth.py
import logging
from datetime import timedelta
from typing import Optional, Tuple

from passlib.context import CryptContext

from foodshare.core.config import Settings
from foodshare.core.errors import AuthError, ConflictError, InvalidTokenError
from foodshare.core.security import hash_password, new_token, verify_password
from foodshare.models import User, utcnow
from foodshare.repos.base import Repository
from foodshare.schemas import RegisterIn, UserOut

from . import emails
from .mailer import Mailer

logger = logging.getLogger(__name__)


class AuthService:
    """Credentials, email verification, password reset and session binding."""

    def __init__(self, repo: Repository, sessions, mailer: Mailer, settings: Settings, pwd_context: CryptContext):
        self.repo = repo
        self.sessions = sessions
        self.mailer = mailer
        self.settings = settings
        self.pwd_context = pwd_context

    async def register(self, data: RegisterIn) -> User:
        if await self.repo.get_user_by_email(data.email):
            raise ConflictError("Email already registered")

        # mail goes out before anything is stored, so a delivery failure leaves the address free
        token = new_token()
        subject, html = emails.verification_email(self.settings.base_url, token)
        await self.mailer.send(data.email, subject, html)

        fields = data.model_dump(exclude={"password", "confirm_password", "organization_name", "description", "website"})
        fields["password_hash"] = hash_password(self.pwd_context, data.password)
        fields["verification_token"] = token
        user = await self.repo.create_user(fields)

        if user.role == "ngo":
            await self.repo.create_organization({
                "user_id": user.id,
                "organization_name": data.organization_name.strip(),
                "description": data.description or "",
                "website": data.website or "",
            })
        logger.info("Registered %s user %s (id=%s)", user.role, user.email, user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.repo.get_user_by_email(email)
        if user is None or not verify_password(self.pwd_context, password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise AuthError("Incorrect email or password")
        if not user.is_verified:
            raise AuthError("Please verify your email before logging in")
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Returns the user and the id of a new server-side session."""
        user = await self.authenticate(email, password)
        sid = await self.sessions.create(user.id)
        return user, sid

    async def logout(self, sid: Optional[str]) -> None:
        if sid:
            await self.sessions.destroy(sid)

    async def resolve_session(self, sid: str) -> Optional[User]:
        # always re-read the user so role and verification changes apply immediately
        user_id = await self.sessions.get(sid)
        if user_id is None:
            return None
        return await self.repo.get_user_by_id(user_id)

    async def verify_email(self, token: str) -> User:
        user = await self.repo.get_user_by_verification_token(token)
        if user is None:
            raise InvalidTokenError()
        return await self.repo.update_user(user.id, {"is_verified": True, "verification_token": None})

    async def request_password_reset(self, email: str) -> None:
        user = await self.repo.get_user_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return
        token = new_token()
        expiry = utcnow() + timedelta(minutes=self.settings.reset_token_ttl_minutes)
        await self.repo.update_user(user.id, {"reset_token": token, "reset_token_expiry": expiry})
        subject, html = emails.password_reset_email(self.settings.base_url, token)
        await self.mailer.send(user.email, subject, html)

    async def reset_password(self, token: str, password: str) -> User:
        user = await self.repo.get_user_by_reset_token(token, utcnow())
        if user is None:
            raise InvalidTokenError()
        logger.info("Password reset for user id=%s", user.id)
        return await self.repo.update_user(user.id, {
            "password_hash": hash_password(self.pwd_context, password),
            "reset_token": None,
            "reset_token_expiry": None,
        })

    async def describe(self, user: User) -> UserOut:
        out = UserOut.model_validate(user)
        if user.role == "ngo":
            out.ngo = await self.repo.get_organization_by_user(user.id)
        return out

    async def ensure_admin(self, email: str, password: str) -> User:
        existing = await self.repo.get_user_by_email(email)
        if existing is not None:
            return existing
        user = await self.repo.create_user({
            "email": email.strip().lower(),
            "password_hash": hash_password(self.pwd_context, password),
            "role": "admin",
            "first_name": "Admin",
            "last_name": "User",
            "phone": "",
        })
        logger.info("Seeded admin user %s", user.email)
        return await self.repo.update_user(user.id, {"is_verified": True})
