"""
Organization (restaurant) ORM models.

Includes the per-restaurant branding row and weekly opening hours.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from comanda.core.plans import DEFAULT_PLAN, PlanTier
from comanda.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from comanda.models.invitation import Invitation
    from comanda.models.member import Membership

DEFAULT_BRAND_COLOR = "#146E37"
DEFAULT_ACCENT_COLOR = "#F9FAFB"


class Organization(Base, UUIDMixin, TimestampMixin):
    """A tenant restaurant."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Subscription
    plan: Mapped[PlanTier] = mapped_column(
        Enum(PlanTier, name="plan_tier", native_enum=False, length=16),
        nullable=False,
        default=DEFAULT_PLAN,
    )
    plan_expires_at: Mapped[datetime | None] = mapped_column(nullable=True)
    plan_updated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Public profile
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(160), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    whatsapp_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    whatsapp_ordering_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    # Relationships
    memberships: Mapped[list[Membership]] = relationship(
        "Membership", back_populates="organization", passive_deletes=True
    )
    invitations: Mapped[list[Invitation]] = relationship(
        "Invitation", back_populates="organization", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} slug={self.slug!r} plan={self.plan}>"


class Branding(Base, UUIDMixin, TimestampMixin):
    """Custom colours and logo for a restaurant's public pages."""

    __tablename__ = "branding"

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    brand_color: Mapped[str] = mapped_column(
        String(7), nullable=False, default=DEFAULT_BRAND_COLOR
    )
    accent_color: Mapped[str] = mapped_column(
        String(7), nullable=False, default=DEFAULT_ACCENT_COLOR
    )
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)


class OpeningHour(Base, UUIDMixin):
    """Opening window for one weekday (0 = Sunday)."""

    __tablename__ = "opening_hours"
    __table_args__ = (
        UniqueConstraint("org_id", "day_of_week", name="uq_opening_hours_org_day"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    open_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    close_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    def __repr__(self) -> str:
        return f"<OpeningHour org_id={self.org_id} day={self.day_of_week}>"
