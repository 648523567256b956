"""
Authentication endpoints: register, login, logout, password change.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.core.config import get_settings
from facility_booking.db.session import get_db
from facility_booking.schemas.user import (
    UserCreate, UserResponse, UserLogin, LoginResponse, PasswordChange, MessageResponse,
)
from facility_booking.services.auth_service import register_user, authenticate_user, change_password
from facility_booking.services.identity_service import Identity
from facility_booking.services.session_service import start_session, end_session

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new employee account."""
    user = await register_user(db, user_data)
    return user


@router.post("/login", response_model=LoginResponse)
async def login(login_data: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a server-held session cookie."""
    settings = get_settings()
    user = await authenticate_user(db, login_data)
    session_id = await start_session(user.employee_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return user


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response):
    """Destroy the server session and clear the cookie."""
    cookie_name = get_settings().SESSION_COOKIE_NAME
    session_id = request.cookies.get(cookie_name)
    if session_id:
        await end_session(session_id)
    response.delete_cookie(cookie_name)
    return MessageResponse(message="Log out successful.")


@router.post("/password", response_model=MessageResponse)
async def update_password(
    data: PasswordChange,
    identity: Identity = Depends(require("auth.change_password")),
    db: AsyncSession = Depends(get_db),
):
    """Change the caller's own password."""
    await change_password(db, identity.employee_id, data)
    return MessageResponse(message="Password updated.")
