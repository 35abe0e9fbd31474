"""
Membership ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from comanda.models.base import Base, UUIDMixin, utcnow

if TYPE_CHECKING:
    from comanda.models.organization import Organization
    from comanda.models.user import User


class OrgRole(str, enum.Enum):
    """Staff role inside a restaurant."""

    owner = "owner"
    manager = "manager"
    cashier = "cashier"
    waiter = "waiter"
    kitchen = "kitchen"


# Roles that can be granted through invitations or role changes.
ASSIGNABLE_ROLES = (OrgRole.manager, OrgRole.cashier, OrgRole.waiter, OrgRole.kitchen)


class Membership(Base, UUIDMixin):
    """Binds a user to an organization with a role."""

    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_memberships_org_user"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[OrgRole] = mapped_column(
        Enum(OrgRole, name="org_role", native_enum=False, length=16), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="memberships"
    )
    user: Mapped[User] = relationship(
        "User", back_populates="memberships"
    )

    def __repr__(self) -> str:
        return f"<Membership org_id={self.org_id} user_id={self.user_id} role={self.role}>"
