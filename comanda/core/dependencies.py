"""
FastAPI dependency injection functions.

Provides Redis connections, current user, tenant resolution and
permission enforcement.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.config import settings
from comanda.core.database import get_db
from comanda.core.permissions import Permission, has_permission, roles_for
from comanda.core.plans import PlanTier, is_plan_expired
from comanda.core.security import blacklist_redis_key, decode_access_token
from comanda.models.member import Membership
from comanda.models.organization import Organization
from comanda.models.user import User

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# HTTP Bearer scheme (auto_error=False so we can fall back to the cookie)
# ---------------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """
    Return a shared async Redis client.

    Uses a module-level pool so connections are reused across requests.
    """
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            str(settings.REDIS_URL),
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_pool


# ---------------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------------

def get_session_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Access token from the Bearer header, else from the session cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    token: str | None = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> User:
    """
    Validate the session JWT and return the authenticated User.

    Raises 401 if:
    - No token provided
    - Token is invalid or expired
    - JTI is blacklisted
    - User does not exist or is inactive
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "MISSING_TOKEN", "message": "Authentication required"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        user_id = UUID(payload.get("sub", ""))
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_TOKEN", "message": "Token is invalid or expired"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    jti: str = payload.get("jti", "")

    if await redis.exists(blacklist_redis_key(jti)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "TOKEN_REVOKED", "message": "Token has been revoked"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "USER_NOT_FOUND", "message": "User not found or inactive"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def is_admin_email(email: str | None) -> bool:
    if not email or not settings.ADMIN_EMAIL:
        return False
    return email.strip().lower() == settings.ADMIN_EMAIL.strip().lower()


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Only the configured platform admin passes."""
    if not is_admin_email(current_user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "NOT_ADMIN", "message": "Admin access required"},
        )
    return current_user


# ---------------------------------------------------------------------------
# Plan expiry
# ---------------------------------------------------------------------------

async def ensure_active_plan(db: AsyncSession, org: Organization) -> Organization:
    """Downgrade an org whose premium period has lapsed."""
    now = datetime.now(UTC)
    if is_plan_expired(org.plan, org.plan_expires_at, now):
        logger.info("Premium expired for org %s, downgrading to FREE", org.slug)
        org.plan = PlanTier.FREE
        org.plan_expires_at = None
        org.plan_updated_at = now
        await db.flush()
    return org


# ---------------------------------------------------------------------------
# Organization membership + permission enforcement
# ---------------------------------------------------------------------------

async def get_org_member(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> tuple[Organization, Membership]:
    """
    Resolve org by slug and verify current user is a member.

    Returns (organization, membership) tuple.
    Raises 404 if org not found, 403 if user is not a member.
    """
    result = await db.execute(
        select(Organization).where(Organization.slug == slug)
    )
    org = result.scalar_one_or_none()

    if org is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "ORG_NOT_FOUND", "message": "Organization not found"},
        )

    member_result = await db.execute(
        select(Membership).where(
            Membership.org_id == org.id,
            Membership.user_id == current_user.id,
        )
    )
    member = member_result.scalar_one_or_none()

    if member is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "NOT_A_MEMBER", "message": "You are not a member of this organization"},
        )

    await ensure_active_plan(db, org)
    return org, member


def require_permission(permission: Permission):
    """
    Dependency factory that enforces a permission from the role matrix.

    Usage:
        @router.post("/...")
        async def endpoint(
            org_and_member: tuple = Depends(require_permission(Permission.MENU_EDIT)),
        ):
            org, member = org_and_member
    """
    async def permission_checker(
        org_and_member: tuple[Organization, Membership] = Depends(get_org_member),
    ) -> tuple[Organization, Membership]:
        _, member = org_and_member
        if not has_permission(member.role, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "INSUFFICIENT_ROLE",
                    "message": f"Required role: {[r.value for r in roles_for(permission)]}",
                },
            )
        return org_and_member

    return permission_checker


async def require_owner(
    org_and_member: tuple[Organization, Membership] = Depends(get_org_member),
) -> tuple[Organization, Membership]:
    """Only the organization's owner passes."""
    org, member = org_and_member
    if org.owner_id != member.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "NOT_OWNER", "message": "Only the owner can do this"},
        )
    return org_and_member
