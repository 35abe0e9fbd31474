"""
Menu ORM models: categories and the items listed under them.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from comanda.models.base import Base, TimestampMixin, UUIDMixin


class MenuCategory(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "menu_categories"
    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_menu_categories_org_name"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<MenuCategory id={self.id} name={self.name!r}>"


class MenuItem(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "menu_items"

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[UUID] = mapped_column(
        ForeignKey("menu_categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<MenuItem id={self.id} name={self.name!r} price_cents={self.price_cents}>"
