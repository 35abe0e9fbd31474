"""
Staff endpoints: members and invitations of a restaurant.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import (
    get_current_user,
    get_org_member,
    get_redis,
    require_permission,
)
from comanda.core.permissions import Permission
from comanda.models.member import Membership
from comanda.models.organization import Organization
from comanda.models.user import User
from comanda.schemas.organization import (
    InvitationResponse,
    InvitationsListResponse,
    InviteRequest,
    MemberResponse,
    MemberRoleUpdateRequest,
    MembersListResponse,
)
from comanda.services.staff_service import StaffService

router = APIRouter()


def get_staff_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> StaffService:
    """Dependency that constructs StaffService."""
    return StaffService(db=db, redis=redis)


# ---------------------------------------------------------------------------
# List Members
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/members",
    response_model=MembersListResponse,
    summary="List staff members",
)
async def list_members(
    org_and_member: tuple[Organization, Membership] = Depends(get_org_member),
    service: StaffService = Depends(get_staff_service),
) -> MembersListResponse:
    org, _ = org_and_member
    return await service.list_members(org.id)


# ---------------------------------------------------------------------------
# Update Member Role
# ---------------------------------------------------------------------------

@router.patch(
    "/{slug}/members/{user_id}",
    response_model=MemberResponse,
    summary="Update a member's role",
)
async def update_member_role(
    user_id: UUID,
    data: MemberRoleUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.STAFF_MANAGE)
    ),
    service: StaffService = Depends(get_staff_service),
) -> MemberResponse:
    """
    Change a member's role.

    - The owner's role cannot be changed
    - Nobody can change their own role
    """
    org, acting_member = org_and_member
    return await service.update_member_role(org.id, user_id, data.role, acting_member)


# ---------------------------------------------------------------------------
# Remove Member
# ---------------------------------------------------------------------------

@router.delete(
    "/{slug}/members/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="Remove a member from the restaurant",
)
async def remove_member(
    user_id: UUID,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.STAFF_MANAGE)
    ),
    service: StaffService = Depends(get_staff_service),
) -> dict:
    org, acting_member = org_and_member
    await service.remove_member(org.id, user_id, acting_member)
    return {}


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/invitations",
    response_model=InvitationsListResponse,
    summary="List pending invitations",
)
async def list_invitations(
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.STAFF_MANAGE)
    ),
    service: StaffService = Depends(get_staff_service),
) -> InvitationsListResponse:
    org, _ = org_and_member
    return await service.list_invitations(org.id)


@router.post(
    "/{slug}/invite",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a new staff member",
)
async def invite_member(
    data: InviteRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.STAFF_MANAGE)
    ),
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
) -> InvitationResponse:
    """
    Invite a user to the restaurant by email.

    - Counts against the plan's staff seats
    - Sends the invitation email via Celery
    """
    org, _ = org_and_member
    return await service.invite_member(org, data, current_user)


@router.post(
    "/{slug}/invitations/{invitation_id}/resend",
    response_model=InvitationResponse,
    summary="Re-send an invitation with a fresh token",
)
async def resend_invitation(
    invitation_id: UUID,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.STAFF_MANAGE)
    ),
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
) -> InvitationResponse:
    org, _ = org_and_member
    return await service.resend_invitation(org, invitation_id, current_user)


@router.delete(
    "/{slug}/invitations/{invitation_id}",
    status_code=status.HTTP_200_OK,
    summary="Revoke a pending invitation",
)
async def revoke_invitation(
    invitation_id: UUID,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.STAFF_MANAGE)
    ),
    service: StaffService = Depends(get_staff_service),
) -> dict:
    org, _ = org_and_member
    await service.revoke_invitation(org.id, invitation_id)
    return {}
