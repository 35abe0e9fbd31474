"""
Organization schemas.

Request/response models for restaurants, staff, invitations, profile,
branding and plan endpoints.
"""

from __future__ import annotations

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from comanda.core.plans import PlanTier
from comanda.models.member import ASSIGNABLE_ROLES, OrgRole

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_slug(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().lower()
    if not SLUG_PATTERN.match(v):
        raise ValueError(
            "Slug must be lowercase alphanumeric and hyphens only, "
            "and cannot start or end with a hyphen"
        )
    return v


def _validate_assignable_role(v: OrgRole) -> OrgRole:
    if v not in ASSIGNABLE_ROLES:
        raise ValueError(f"Role must be one of {[r.value for r in ASSIGNABLE_ROLES]}")
    return v


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------

class OrganizationCreateRequest(BaseModel):
    """Request body for POST /organizations. Slug is derived from name if omitted."""

    name: str = Field(min_length=2, max_length=64)
    slug: str | None = Field(default=None, min_length=3, max_length=64)

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _validate_slug(v)


class OrganizationUpdateRequest(BaseModel):
    """Request body for PATCH /organizations/{slug}."""

    name: str | None = Field(default=None, min_length=2, max_length=64)
    slug: str | None = Field(default=None, min_length=3, max_length=64)

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _validate_slug(v)


class OrganizationResponse(BaseModel):
    """Organization detail response."""

    id: UUID
    name: str
    slug: str
    owner_id: UUID
    plan: PlanTier
    plan_expires_at: datetime | None
    plan_updated_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MyOrganizationResponse(BaseModel):
    """An organization the current user belongs to, with their role."""

    organization: OrganizationResponse
    role: str
    is_owner: bool


class MyOrganizationsListResponse(BaseModel):
    organizations: list[MyOrganizationResponse]
    total: int


class PlanUpdateRequest(BaseModel):
    plan: PlanTier


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class MemberResponse(BaseModel):
    """Single staff member with user info and role."""

    id: UUID
    user_id: UUID
    email: str
    display_name: str
    role: str
    joined_at: datetime

    model_config = {"from_attributes": True}


class MemberRoleUpdateRequest(BaseModel):
    """Request body for PATCH /organizations/{slug}/members/{user_id}."""

    role: OrgRole

    @field_validator("role")
    @classmethod
    def role_must_be_assignable(cls, v: OrgRole) -> OrgRole:
        return _validate_assignable_role(v)


class MembersListResponse(BaseModel):
    members: list[MemberResponse]
    total: int


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

class InviteRequest(BaseModel):
    """Request body for POST /organizations/{slug}/invite."""

    email: EmailStr
    role: OrgRole = OrgRole.waiter

    @field_validator("role")
    @classmethod
    def role_must_be_assignable(cls, v: OrgRole) -> OrgRole:
        return _validate_assignable_role(v)


class InvitationResponse(BaseModel):
    """Invitation detail response."""

    id: UUID
    org_id: UUID
    email: str
    role: str
    token: str
    invite_url: str
    expires_at: datetime
    created_at: datetime
    is_expired: bool


class InvitationsListResponse(BaseModel):
    invitations: list[InvitationResponse]
    total: int


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

class OpeningHourSchema(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    is_open: bool = True
    open_time: str | None = None
    close_time: str | None = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def times_required_when_open(self) -> OpeningHourSchema:
        for value in (self.open_time, self.close_time):
            if value is not None and not TIME_PATTERN.match(value):
                raise ValueError("Times must use HH:MM format")
        if self.is_open and (self.open_time is None or self.close_time is None):
            raise ValueError("open_time and close_time are required when open")
        if not self.is_open:
            self.open_time = None
            self.close_time = None
        return self


class ProfileUpdateRequest(BaseModel):
    """PATCH /organizations/{slug}/profile. Only provided fields change."""

    name: str | None = Field(default=None, min_length=3, max_length=64)
    phone: str | None = Field(default=None, max_length=32)
    email: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=160)
    description: str | None = Field(default=None, max_length=800)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    whatsapp_number: str | None = Field(default=None, max_length=32)
    whatsapp_ordering_enabled: bool | None = None
    opening_hours: list[OpeningHourSchema] | None = None

    @field_validator("phone", "email", "address", "description", "whatsapp_number", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("email")
    @classmethod
    def email_shape(cls, v: str | None) -> str | None:
        if v is not None and not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("opening_hours")
    @classmethod
    def unique_days(cls, v: list[OpeningHourSchema] | None) -> list[OpeningHourSchema] | None:
        if v is not None:
            days = [h.day_of_week for h in v]
            if len(days) != len(set(days)):
                raise ValueError("Each day_of_week may appear only once")
        return v


class ProfileResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    phone: str | None
    email: str | None
    address: str | None
    description: str | None
    latitude: float | None
    longitude: float | None
    whatsapp_number: str | None
    whatsapp_ordering_enabled: bool
    opening_hours: list[OpeningHourSchema]


# ---------------------------------------------------------------------------
# Branding
# ---------------------------------------------------------------------------

class BrandingUpdateRequest(BaseModel):
    brand_color: str = Field(pattern=HEX_COLOR_PATTERN)
    accent_color: str = Field(pattern=HEX_COLOR_PATTERN)
    logo_url: str | None = Field(default=None, max_length=500)


class BrandingResponse(BaseModel):
    brand_color: str
    accent_color: str
    logo_url: str | None
    is_default: bool


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

class PremiumTrialRequest(BaseModel):
    email: EmailStr
    months: int = Field(default=1, ge=1, le=12)


class PremiumTrialResponse(BaseModel):
    user_id: UUID
    email: str
    plan_expires_at: datetime
    organizations: list[OrganizationResponse]
