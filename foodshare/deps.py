# foodshare/deps.py
from typing import Optional

from fastapi import Depends, Request

from foodshare.core.config import Settings
from foodshare.core.errors import AuthError
from foodshare.core.security import decode_session_token
from foodshare.models import User
from foodshare.repos.base import Repository
from foodshare.services.auth import AuthService
from foodshare.services.pickups import PickupService

# Services are built once in the app lifespan and kept on app.state.


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repo(request: Request) -> Repository:
    return request.app.state.repo


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def get_pickup_service(request: Request) -> PickupService:
    return request.app.state.pickups


def get_session_id(request: Request, settings: Settings = Depends(get_settings)) -> Optional[str]:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return decode_session_token(token, settings)


async def get_optional_user(
    sid: Optional[str] = Depends(get_session_id),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    if sid is None:
        return None
    return await auth.resolve_session(sid)


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthError("Not authenticated")
    return user
