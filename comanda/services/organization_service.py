"""
Organization business logic.

Handles restaurant creation, listing, renaming, plan changes and admin
premium trials.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from datetime import UTC, datetime

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.plans import PlanTier, add_months, enforce_limit, is_plan_expired
from comanda.models.member import Membership, OrgRole
from comanda.models.organization import Organization
from comanda.models.user import User
from comanda.schemas.organization import (
    MyOrganizationResponse,
    MyOrganizationsListResponse,
    OrganizationCreateRequest,
    OrganizationResponse,
    OrganizationUpdateRequest,
    PremiumTrialRequest,
    PremiumTrialResponse,
)

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    """ASCII, lowercase, hyphen-separated version of a restaurant name."""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug[:64].strip("-")


class OrganizationService:
    """Handles all organization operations."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # Create Organization
    # -----------------------------------------------------------------------

    async def create_organization(
        self, data: OrganizationCreateRequest, owner: User
    ) -> OrganizationResponse:
        """
        Create a new restaurant.

        - Enforces the FREE restaurant limit unless the user already owns
          an active premium restaurant
        - Validates slug uniqueness
        - Assigns creator as owner (owner_id + owner membership)
        """
        slug = data.slug or slugify(data.name)
        if len(slug) < 2:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "INVALID_SLUG", "message": "Could not derive a slug from the name"},
            )

        owned_result = await self.db.execute(
            select(Organization).where(Organization.owner_id == owner.id)
        )
        owned = list(owned_result.scalars().all())
        has_premium = any(
            org.plan == PlanTier.PREMIUM and not is_plan_expired(org.plan, org.plan_expires_at)
            for org in owned
        )
        if not has_premium:
            enforce_limit(
                PlanTier.FREE,
                "restaurants",
                len(owned),
                "The Free plan allows a single restaurant. Upgrade to add more.",
            )

        await self._ensure_slug_available(slug)

        org = Organization(name=data.name.strip(), slug=slug, owner_id=owner.id)
        self.db.add(org)
        await self.db.flush()

        self.db.add(Membership(org_id=org.id, user_id=owner.id, role=OrgRole.owner))
        await self.db.flush()

        logger.info("Organization %s created by user %s", org.slug, owner.id)
        return OrganizationResponse.model_validate(org)

    # -----------------------------------------------------------------------
    # List my organizations
    # -----------------------------------------------------------------------

    async def list_for_user(self, user: User) -> MyOrganizationsListResponse:
        result = await self.db.execute(
            select(Membership, Organization)
            .join(Organization, Membership.org_id == Organization.id)
            .where(Membership.user_id == user.id)
            .order_by(Organization.name)
        )
        items = [
            MyOrganizationResponse(
                organization=OrganizationResponse.model_validate(org),
                role=member.role.value,
                is_owner=org.owner_id == user.id,
            )
            for member, org in result.all()
        ]
        return MyOrganizationsListResponse(organizations=items, total=len(items))

    # -----------------------------------------------------------------------
    # Update Organization
    # -----------------------------------------------------------------------

    async def update_organization(
        self, org: Organization, data: OrganizationUpdateRequest
    ) -> OrganizationResponse:
        if data.slug is not None and data.slug != org.slug:
            await self._ensure_slug_available(data.slug)
            org.slug = data.slug

        if data.name is not None:
            org.name = data.name.strip()

        await self.db.flush()
        return OrganizationResponse.model_validate(org)

    # -----------------------------------------------------------------------
    # Plan
    # -----------------------------------------------------------------------

    async def change_plan(self, org: Organization, plan: PlanTier) -> OrganizationResponse:
        """Switch plan. Same plan is a no-op; FREE clears any expiry."""
        if org.plan == plan:
            return OrganizationResponse.model_validate(org)

        org.plan = plan
        org.plan_updated_at = datetime.now(UTC)
        if plan == PlanTier.FREE:
            org.plan_expires_at = None
        await self.db.flush()

        logger.info("Organization %s switched to plan %s", org.slug, plan.value)
        return OrganizationResponse.model_validate(org)

    # -----------------------------------------------------------------------
    # Admin: premium trials
    # -----------------------------------------------------------------------

    async def grant_premium_trial(self, data: PremiumTrialRequest) -> PremiumTrialResponse:
        """Upgrade every restaurant owned by ``data.email`` for ``data.months``."""
        result = await self.db.execute(
            select(User).where(User.email == data.email.lower())
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "USER_NOT_FOUND", "message": "No user with that email"},
            )

        orgs_result = await self.db.execute(
            select(Organization)
            .where(Organization.owner_id == user.id)
            .order_by(Organization.created_at)
        )
        orgs = list(orgs_result.scalars().all())
        if not orgs:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "NO_ORGANIZATIONS", "message": "User does not own any restaurant"},
            )

        now = datetime.now(UTC)
        expires_at = add_months(now, data.months)
        for org in orgs:
            org.plan = PlanTier.PREMIUM
            org.plan_expires_at = expires_at
            org.plan_updated_at = now
        await self.db.flush()

        logger.info(
            "Premium trial granted to %s for %d month(s) on %d restaurant(s)",
            user.email, data.months, len(orgs),
        )
        return PremiumTrialResponse(
            user_id=user.id,
            email=user.email,
            plan_expires_at=expires_at,
            organizations=[OrganizationResponse.model_validate(o) for o in orgs],
        )

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _ensure_slug_available(self, slug: str) -> None:
        existing = await self.db.execute(
            select(Organization.id).where(Organization.slug == slug)
        )
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "SLUG_TAKEN", "message": "Organization slug is already taken"},
            )
