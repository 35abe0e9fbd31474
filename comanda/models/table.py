"""
Dining table ORM model.
"""

from __future__ import annotations

import enum
from uuid import UUID

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from comanda.models.base import Base, TimestampMixin, UUIDMixin


class TableShape(str, enum.Enum):
    square = "square"
    round = "round"
    rectangle = "rectangle"


class DiningTable(Base, UUIDMixin, TimestampMixin):
    """A physical table with a QR token and floor-plan placement."""

    __tablename__ = "tables"
    __table_args__ = (
        UniqueConstraint("org_id", "number", name="uq_tables_org_number"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    qr_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Floor plan
    position_x: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    position_y: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    width: Mapped[float] = mapped_column(Float, nullable=False, default=80)
    height: Mapped[float] = mapped_column(Float, nullable=False, default=80)
    shape: Mapped[TableShape] = mapped_column(
        Enum(TableShape, name="table_shape", native_enum=False, length=16),
        nullable=False,
        default=TableShape.square,
    )
    rotation: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<DiningTable org_id={self.org_id} number={self.number}>"
