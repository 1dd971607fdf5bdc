import secrets
from datetime import timedelta
from typing import Optional

import jwt
from fastapi import Response
from passlib.context import CryptContext

from foodshare.core.config import Settings
from foodshare.models import utcnow


def build_pwd_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def _bcrypt_secret(password: Optional[str]) -> bytes:
    # bcrypt only reads the first 72 bytes
    return (password or "").encode("utf-8")[:72]


def hash_password(ctx: CryptContext, password: str) -> str:
    return ctx.hash(_bcrypt_secret(password))


def verify_password(ctx: CryptContext, password: str, hashed: str) -> bool:
    try:
        return ctx.verify(_bcrypt_secret(password), hashed)
    except ValueError:
        # empty or unrecognised hash
        return False


def new_token() -> str:
    """Unguessable one-time token for email verification and password reset."""
    return secrets.token_urlsafe(32)


# ---------- session cookie ----------
def create_session_token(sid: str, settings: Settings) -> str:
    now = utcnow()
    payload = {"sid": sid, "iat": now, "exp": now + timedelta(days=settings.session_ttl_days)}
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_alg)


def decode_session_token(token: str, settings: Settings) -> Optional[str]:
    try:
        data = jwt.decode(token, settings.session_secret, algorithms=[settings.session_alg])
    except jwt.InvalidTokenError:
        return None
    sid = data.get("sid")
    return sid if isinstance(sid, str) else None


def set_session_cookie(response: Response, sid: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(sid, settings),
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
