"""
Staff business logic.

Member listing, role changes, removal and the invitation lifecycle.
All queries scoped by org_id.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.config import settings
from comanda.core.dependencies import ensure_active_plan
from comanda.core.plans import enforce_limit
from comanda.core.security import create_invitation_token
from comanda.models.invitation import Invitation
from comanda.models.member import Membership, OrgRole
from comanda.models.organization import Organization
from comanda.models.user import User
from comanda.schemas.auth import InvitationAcceptResponse, InvitationInfoResponse
from comanda.schemas.organization import (
    InvitationResponse,
    InvitationsListResponse,
    InviteRequest,
    MemberResponse,
    MembersListResponse,
)

logger = logging.getLogger(__name__)


def invite_url(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/invite/{token}"


def _invitation_response(invitation: Invitation) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        org_id=invitation.org_id,
        email=invitation.email,
        role=invitation.role.value,
        token=invitation.token,
        invite_url=invite_url(invitation.token),
        expires_at=invitation.expires_at,
        created_at=invitation.created_at,
        is_expired=invitation.is_expired,
    )


class StaffService:
    """Handles staff membership and invitations for one restaurant."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # List Members
    # -----------------------------------------------------------------------

    async def list_members(self, org_id: UUID) -> MembersListResponse:
        """List all members of an organization with user details."""
        result = await self.db.execute(
            select(Membership, User)
            .join(User, Membership.user_id == User.id)
            .where(Membership.org_id == org_id)
            .order_by(Membership.joined_at)
        )
        members = [
            MemberResponse(
                id=member.id,
                user_id=member.user_id,
                email=user.email,
                display_name=user.display_name,
                role=member.role.value,
                joined_at=member.joined_at,
            )
            for member, user in result.all()
        ]
        return MembersListResponse(members=members, total=len(members))

    # -----------------------------------------------------------------------
    # Update Member Role
    # -----------------------------------------------------------------------

    async def update_member_role(
        self,
        org_id: UUID,
        target_user_id: UUID,
        new_role: OrgRole,
        acting_member: Membership,
    ) -> MemberResponse:
        """
        Change a staff member's role.

        - The owner's role never changes
        - Managers cannot change their own role
        """
        result = await self.db.execute(
            select(Membership, User)
            .join(User, Membership.user_id == User.id)
            .where(
                Membership.org_id == org_id,
                Membership.user_id == target_user_id,
            )
        )
        row = result.one_or_none()

        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "MEMBER_NOT_FOUND", "message": "Member not found"},
            )

        target_member, target_user = row

        if target_member.role == OrgRole.owner:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "CANNOT_CHANGE_OWNER", "message": "Cannot change the owner's role"},
            )

        if target_member.user_id == acting_member.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "CANNOT_CHANGE_SELF", "message": "You cannot change your own role"},
            )

        target_member.role = new_role
        await self.db.flush()

        return MemberResponse(
            id=target_member.id,
            user_id=target_member.user_id,
            email=target_user.email,
            display_name=target_user.display_name,
            role=target_member.role.value,
            joined_at=target_member.joined_at,
        )

    # -----------------------------------------------------------------------
    # Remove Member
    # -----------------------------------------------------------------------

    async def remove_member(
        self,
        org_id: UUID,
        target_user_id: UUID,
        acting_member: Membership,
    ) -> None:
        """
        Remove a staff member.

        - Cannot remove the owner
        - Managers cannot remove themselves
        """
        result = await self.db.execute(
            select(Membership).where(
                Membership.org_id == org_id,
                Membership.user_id == target_user_id,
            )
        )
        target_member = result.scalar_one_or_none()

        if target_member is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "MEMBER_NOT_FOUND", "message": "Member not found"},
            )

        if target_member.role == OrgRole.owner:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "CANNOT_REMOVE_OWNER", "message": "Cannot remove the organization owner"},
            )

        if target_member.user_id == acting_member.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "CANNOT_REMOVE_SELF", "message": "You cannot remove yourself"},
            )

        await self.db.delete(target_member)
        await self.db.flush()
        logger.info("Removed user %s from org %s", target_user_id, org_id)

    # -----------------------------------------------------------------------
    # List pending invitations
    # -----------------------------------------------------------------------

    async def list_invitations(self, org_id: UUID) -> InvitationsListResponse:
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.org_id == org_id, Invitation.accepted_at.is_(None))
            .order_by(Invitation.created_at.desc())
        )
        invitations = [_invitation_response(i) for i in result.scalars().all()]
        return InvitationsListResponse(invitations=invitations, total=len(invitations))

    # -----------------------------------------------------------------------
    # Invite Member
    # -----------------------------------------------------------------------

    async def invite_member(
        self, org: Organization, data: InviteRequest, inviter: User
    ) -> InvitationResponse:
        """
        Create an invitation for a new staff member.

        - Enforces the plan's staff seat limit
        - Rejects existing members and duplicate pending invitations
        - Queues the invitation email; if queueing fails the invitation is dropped
        """
        email = data.email.lower()

        await self._enforce_seat_limit(org)

        existing_member = await self.db.execute(
            select(Membership.id)
            .join(User, Membership.user_id == User.id)
            .where(Membership.org_id == org.id, User.email == email)
        )
        if existing_member.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "ALREADY_MEMBER", "message": "User is already a member of this organization"},
            )

        existing_invite = await self.db.execute(
            select(Invitation.id).where(
                Invitation.org_id == org.id,
                Invitation.email == email,
                Invitation.accepted_at.is_(None),
                Invitation.expires_at > datetime.now(UTC),
            )
        )
        if existing_invite.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "INVITE_EXISTS", "message": "A pending invitation already exists for this email"},
            )

        invitation = Invitation(
            org_id=org.id,
            email=email,
            role=data.role,
            token=create_invitation_token(),
            expires_at=datetime.now(UTC) + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
            created_by=inviter.id,
        )
        self.db.add(invitation)
        await self.db.flush()

        try:
            self._queue_invitation_email(org, invitation, inviter)
        except Exception:
            logger.exception("Could not queue invitation email for %s", email)
            await self.db.delete(invitation)
            await self.db.flush()
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"code": "EMAIL_FAILED", "message": "Invitation email could not be sent"},
            )

        logger.info("Invitation %s sent to %s for org %s", invitation.id, email, org.slug)
        return _invitation_response(invitation)

    # -----------------------------------------------------------------------
    # Resend Invitation
    # -----------------------------------------------------------------------

    async def resend_invitation(
        self, org: Organization, invitation_id: UUID, inviter: User
    ) -> InvitationResponse:
        """Rotate token and expiry, then re-send. Restores both on email failure."""
        invitation = await self._get_invitation(org.id, invitation_id)

        if invitation.accepted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "INVITE_USED", "message": "Invitation has already been accepted"},
            )

        previous_token, previous_expiry = invitation.token, invitation.expires_at
        invitation.token = create_invitation_token()
        invitation.expires_at = datetime.now(UTC) + timedelta(days=settings.INVITATION_EXPIRE_DAYS)
        await self.db.flush()

        try:
            self._queue_invitation_email(org, invitation, inviter)
        except Exception:
            logger.exception("Could not re-send invitation %s", invitation.id)
            invitation.token = previous_token
            invitation.expires_at = previous_expiry
            await self.db.flush()
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"code": "EMAIL_FAILED", "message": "Invitation email could not be sent"},
            )

        return _invitation_response(invitation)

    # -----------------------------------------------------------------------
    # Revoke Invitation
    # -----------------------------------------------------------------------

    async def revoke_invitation(self, org_id: UUID, invitation_id: UUID) -> None:
        """Delete a pending invitation."""
        invitation = await self._get_invitation(org_id, invitation_id)

        if invitation.accepted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "INVITE_USED", "message": "Accepted invitations cannot be revoked"},
            )

        await self.db.delete(invitation)
        await self.db.flush()

    # -----------------------------------------------------------------------
    # Public invitation info
    # -----------------------------------------------------------------------

    async def get_invitation_info(self, token: str) -> InvitationInfoResponse:
        result = await self.db.execute(
            select(Invitation, Organization)
            .join(Organization, Invitation.org_id == Organization.id)
            .where(Invitation.token == token)
        )
        row = result.one_or_none()
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "INVITE_NOT_FOUND", "message": "Invitation not found"},
            )

        invitation, org = row
        return InvitationInfoResponse(
            id=invitation.id,
            email=invitation.email,
            org_name=org.name,
            org_slug=org.slug,
            role=invitation.role.value,
            expires_at=invitation.expires_at,
            is_expired=invitation.is_expired,
        )

    # -----------------------------------------------------------------------
    # Accept Invitation
    # -----------------------------------------------------------------------

    async def accept_invitation(
        self, token: str, current_user: User
    ) -> InvitationAcceptResponse:
        """
        Accept an invitation.

        The invitation row is locked for the rest of the request transaction,
        so membership check, seat check, insert and accepted_at stamp happen
        atomically.
        """
        result = await self.db.execute(
            select(Invitation).where(Invitation.token == token).with_for_update()
        )
        invitation = result.scalar_one_or_none()

        if invitation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "INVITE_NOT_FOUND", "message": "Invitation not found"},
            )

        if invitation.accepted_at is not None:
            raise HTTPException(
                status_code=status.HTTP_410_GONE,
                detail={"code": "INVITE_USED", "message": "Invitation has already been accepted"},
            )

        if invitation.is_expired:
            raise HTTPException(
                status_code=status.HTTP_410_GONE,
                detail={"code": "INVITE_EXPIRED", "message": "Invitation has expired"},
            )

        if invitation.email.lower() != current_user.email.lower():
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "EMAIL_MISMATCH", "message": "Invitation was sent to a different email address"},
            )

        org_result = await self.db.execute(
            select(Organization).where(Organization.id == invitation.org_id)
        )
        org = org_result.scalar_one()
        await ensure_active_plan(self.db, org)

        existing_member = await self.db.execute(
            select(Membership.id).where(
                Membership.org_id == invitation.org_id,
                Membership.user_id == current_user.id,
            )
        )
        if existing_member.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "ALREADY_MEMBER", "message": "You are already a member of this organization"},
            )

        await self._enforce_seat_limit(org)

        self.db.add(
            Membership(
                org_id=invitation.org_id,
                user_id=current_user.id,
                role=invitation.role,
            )
        )
        invitation.accepted_at = datetime.now(UTC)

        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent accept for the same user
            await self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "ALREADY_MEMBER", "message": "You are already a member of this organization"},
            )

        logger.info("User %s joined org %s as %s", current_user.id, org.slug, invitation.role.value)
        return InvitationAcceptResponse(
            org_id=org.id,
            org_name=org.name,
            org_slug=org.slug,
            role=invitation.role.value,
        )

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _enforce_seat_limit(self, org: Organization) -> None:
        seats_used = (
            await self.db.execute(
                select(func.count()).select_from(Membership).where(Membership.org_id == org.id)
            )
        ).scalar_one()
        enforce_limit(
            org.plan,
            "staff_seats",
            seats_used,
            "All staff seats of the current plan are in use. Upgrade to add more staff.",
        )

    async def _get_invitation(self, org_id: UUID, invitation_id: UUID) -> Invitation:
        result = await self.db.execute(
            select(Invitation).where(
                Invitation.id == invitation_id,
                Invitation.org_id == org_id,
            )
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "INVITE_NOT_FOUND", "message": "Invitation not found"},
            )
        return invitation

    def _queue_invitation_email(
        self, org: Organization, invitation: Invitation, inviter: User
    ) -> None:
        # Deferred import keeps Celery out of module import time
        from comanda.workers.email_tasks import send_invitation_email

        send_invitation_email.delay(
            to_email=invitation.email,
            org_name=org.name,
            inviter_name=inviter.display_name,
            role=invitation.role.value,
            invite_url=invite_url(invitation.token),
            expires_at=invitation.expires_at.isoformat(),
        )
