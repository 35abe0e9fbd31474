"""
Authentication endpoints.

Register, login, logout, token refresh, me, and the public side of staff
invitations.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, HTTPException, Response, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.config import settings
from comanda.core.database import get_db
from comanda.core.dependencies import get_current_user, get_redis, get_session_token
from comanda.core.security import decode_access_token
from comanda.models.user import User
from comanda.schemas.auth import (
    InvitationAcceptResponse,
    InvitationInfoResponse,
    LoginRequest,
    LogoutRequest,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from comanda.services.auth_service import AuthService
from comanda.services.staff_service import StaffService

router = APIRouter()


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> AuthService:
    """Dependency that constructs AuthService."""
    return AuthService(db=db, redis=redis)


def get_staff_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> StaffService:
    return StaffService(db=db, redis=redis)


def _set_session_cookie(response: Response, tokens: TokenResponse) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=tokens.access_token,
        max_age=tokens.expires_in,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
    )


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    data: RegisterRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Create a new user account.

    - Email must be globally unique
    - Password must be min 8 chars and contain at least 1 number
    - Returns JWT access + refresh tokens on success
    """
    tokens = await service.register(data)
    _set_session_cookie(response, tokens)
    return tokens


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
)
async def login(
    data: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Authenticate with email and password.

    Returns JWT access + refresh tokens and sets the session cookie.
    """
    tokens = await service.login(data)
    _set_session_cookie(response, tokens)
    return tokens


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------

@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
)
async def refresh(
    data: RefreshRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Refresh tokens are rotated on every use."""
    tokens = await service.refresh(data.refresh_token)
    _set_session_cookie(response, tokens)
    return tokens


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------

@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Logout and revoke tokens",
)
async def logout(
    data: LogoutRequest,
    response: Response,
    token: str | None = Depends(get_session_token),
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """
    Logout the current user.

    - Blacklists the current access token JTI in Redis
    - Deletes the refresh token from Redis
    - Clears the session cookie
    """
    try:
        payload = decode_access_token(token or "")
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_TOKEN", "message": "Could not decode access token"},
        )

    await service.logout(
        access_token_jti=payload.get("jti", ""),
        refresh_token=data.refresh_token,
    )
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {}


# ---------------------------------------------------------------------------
# Me
# ---------------------------------------------------------------------------

@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user profile",
)
async def get_me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> MeResponse:
    return await service.get_me(current_user)


# ---------------------------------------------------------------------------
# Invitations (public side)
# ---------------------------------------------------------------------------

@router.get(
    "/invitations/{token}",
    response_model=InvitationInfoResponse,
    summary="Look up an invitation by token",
)
async def get_invitation(
    token: str,
    service: StaffService = Depends(get_staff_service),
) -> InvitationInfoResponse:
    """No authentication; used by the invite landing page."""
    return await service.get_invitation_info(token)


@router.post(
    "/invitations/{token}/accept",
    response_model=InvitationAcceptResponse,
    summary="Accept an invitation",
)
async def accept_invitation(
    token: str,
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
) -> InvitationAcceptResponse:
    """
    Join the inviting restaurant.

    - The signed-in email must match the invited email
    - Expired or already used invitations return 410
    - Seat limit of the restaurant's plan applies
    """
    return await service.accept_invitation(token, current_user)
