# foodshare/routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from foodshare.core.config import Settings
from foodshare.core.errors import ValidationError
from foodshare.core.security import clear_session_cookie, set_session_cookie
from foodshare.deps import get_auth_service, get_current_user, get_session_id, get_settings
from foodshare.models import User
from foodshare.schemas import ForgotPasswordIn, LoginIn, MessageOut, RegisterIn, ResetPasswordIn, UserOut
from foodshare.services.auth import AuthService

router = APIRouter(prefix="/api", tags=["auth"])

RESET_REQUESTED = "If your email is registered, you will receive a password reset link"


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, auth: AuthService = Depends(get_auth_service)):
    await auth.register(body)
    return {"message": "Registration successful. Please check your email to verify your account."}


@router.post("/login", response_model=UserOut)
async def login(
    body: LoginIn,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user, sid = await auth.login(body.email, body.password)
    set_session_cookie(response, sid, settings)
    return await auth.describe(user)


@router.post("/logout", response_model=MessageOut)
async def logout(
    response: Response,
    sid: Optional[str] = Depends(get_session_id),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    await auth.logout(sid)
    clear_session_cookie(response, settings)
    return {"message": "Logged out successfully"}


@router.get("/verify-email", response_model=MessageOut)
async def verify_email(token: Optional[str] = Query(None), auth: AuthService = Depends(get_auth_service)):
    if not token:
        raise ValidationError("Invalid token")
    await auth.verify_email(token)
    return {"message": "Email verified successfully"}


@router.post("/forgot-password", response_model=MessageOut)
async def forgot_password(body: ForgotPasswordIn, auth: AuthService = Depends(get_auth_service)):
    # same answer whether or not the address is registered
    await auth.request_password_reset(body.email)
    return {"message": RESET_REQUESTED}


@router.post("/reset-password", response_model=MessageOut)
async def reset_password(body: ResetPasswordIn, auth: AuthService = Depends(get_auth_service)):
    await auth.reset_password(body.token, body.password)
    return {"message": "Password reset successfully"}


@router.get("/user", response_model=UserOut)
async def current_user(user: User = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    return await auth.describe(user)
