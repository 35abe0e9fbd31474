"""
Organization management endpoints.

Create, list, update, plan changes, public profile and branding.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import (
    get_current_user,
    get_org_member,
    get_redis,
    require_owner,
    require_permission,
)
from comanda.core.permissions import Permission
from comanda.models.member import Membership
from comanda.models.organization import Organization
from comanda.models.user import User
from comanda.schemas.organization import (
    BrandingResponse,
    BrandingUpdateRequest,
    MyOrganizationsListResponse,
    OrganizationCreateRequest,
    OrganizationResponse,
    OrganizationUpdateRequest,
    PlanUpdateRequest,
    ProfileResponse,
    ProfileUpdateRequest,
)
from comanda.services.organization_service import OrganizationService
from comanda.services.settings_service import SettingsService

router = APIRouter()


def get_org_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> OrganizationService:
    """Dependency that constructs OrganizationService."""
    return OrganizationService(db=db, redis=redis)


def get_settings_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> SettingsService:
    return SettingsService(db=db, redis=redis)


# ---------------------------------------------------------------------------
# Create Organization
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new restaurant",
)
async def create_organization(
    data: OrganizationCreateRequest,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    """
    Create a new restaurant.

    - Slug must be globally unique; derived from the name when omitted
    - Free accounts can own a single restaurant
    - Creator is automatically assigned the owner role
    """
    return await service.create_organization(data, current_user)


# ---------------------------------------------------------------------------
# List My Organizations
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=MyOrganizationsListResponse,
    summary="List restaurants the current user belongs to",
)
async def list_my_organizations(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_org_service),
) -> MyOrganizationsListResponse:
    return await service.list_for_user(current_user)


# ---------------------------------------------------------------------------
# Get Organization
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}",
    response_model=OrganizationResponse,
    summary="Get organization by slug",
)
async def get_organization(
    org_and_member: tuple[Organization, Membership] = Depends(get_org_member),
) -> OrganizationResponse:
    """Get organization details. Must be a member."""
    org, _ = org_and_member
    return OrganizationResponse.model_validate(org)


# ---------------------------------------------------------------------------
# Update Organization
# ---------------------------------------------------------------------------

@router.patch(
    "/{slug}",
    response_model=OrganizationResponse,
    summary="Update organization name or slug",
)
async def update_organization(
    data: OrganizationUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.SETTINGS)
    ),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    """Update organization name and/or slug. Owner only."""
    org, _ = org_and_member
    return await service.update_organization(org, data)


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------

@router.patch(
    "/{slug}/plan",
    response_model=OrganizationResponse,
    summary="Change the subscription plan",
)
async def change_plan(
    data: PlanUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(require_owner),
    service: OrganizationService = Depends(get_org_service),
) -> OrganizationResponse:
    org, _ = org_and_member
    return await service.change_plan(org, data.plan)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/profile",
    response_model=ProfileResponse,
    summary="Get the public profile",
)
async def get_profile(
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.PROFILE)
    ),
    service: SettingsService = Depends(get_settings_service),
) -> ProfileResponse:
    org, _ = org_and_member
    return await service.get_profile(org)


@router.patch(
    "/{slug}/profile",
    response_model=ProfileResponse,
    summary="Update the public profile and opening hours",
)
async def update_profile(
    data: ProfileUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.PROFILE)
    ),
    service: SettingsService = Depends(get_settings_service),
) -> ProfileResponse:
    """
    Partial update; only fields present in the body change.

    - WhatsApp ordering needs the Premium plan and a WhatsApp number
    - opening_hours, when sent, replaces the whole week
    """
    org, _ = org_and_member
    return await service.update_profile(org, data)


# ---------------------------------------------------------------------------
# Branding
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/branding",
    response_model=BrandingResponse,
    summary="Get branding colours and logo",
)
async def get_branding(
    org_and_member: tuple[Organization, Membership] = Depends(get_org_member),
    service: SettingsService = Depends(get_settings_service),
) -> BrandingResponse:
    org, _ = org_and_member
    return await service.get_branding(org)


@router.put(
    "/{slug}/branding",
    response_model=BrandingResponse,
    summary="Set branding colours and logo",
)
async def update_branding(
    data: BrandingUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.BRANDING)
    ),
    service: SettingsService = Depends(get_settings_service),
) -> BrandingResponse:
    """Premium only."""
    org, _ = org_and_member
    return await service.update_branding(org, data)


@router.delete(
    "/{slug}/branding",
    response_model=BrandingResponse,
    summary="Reset branding to the defaults",
)
async def reset_branding(
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.BRANDING)
    ),
    service: SettingsService = Depends(get_settings_service),
) -> BrandingResponse:
    org, _ = org_and_member
    return await service.reset_branding(org)
