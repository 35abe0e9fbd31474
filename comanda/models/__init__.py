"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
"""

from comanda.models.base import Base, TimestampMixin, UUIDMixin
from comanda.models.member import Membership, OrgRole
from comanda.models.organization import Branding, OpeningHour, Organization
from comanda.models.user import User
from comanda.models.invitation import Invitation
from comanda.models.table import DiningTable, TableShape
from comanda.models.menu import MenuCategory, MenuItem
from comanda.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    OrgOrderCounter,
    Payment,
    PaymentMethod,
    PaymentStatus,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Organization",
    "Branding",
    "OpeningHour",
    "User",
    "Membership",
    "OrgRole",
    "Invitation",
    "DiningTable",
    "TableShape",
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrgOrderCounter",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
]
