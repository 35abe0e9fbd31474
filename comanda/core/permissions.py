"""
Role-based permission matrix for restaurant staff.
"""

from __future__ import annotations

import enum

from comanda.models.member import OrgRole


class Permission(str, enum.Enum):
    DASHBOARD = "dashboard"
    POS = "pos"
    TABLES = "tables"
    KITCHEN = "kitchen"
    MENU_VIEW = "menu_view"
    MENU_EDIT = "menu_edit"
    ORDERS_VIEW = "orders_view"
    ORDERS_CREATE = "orders_create"
    ORDERS_UPDATE = "orders_update"
    PAYMENTS = "payments"
    REPORTS = "reports"
    STAFF_MANAGE = "staff_manage"
    BRANDING = "branding"
    SETTINGS = "settings"
    PROFILE = "profile"
    PLAN = "plan"


_ALL = frozenset(OrgRole)
_FLOOR = frozenset({OrgRole.owner, OrgRole.manager, OrgRole.cashier, OrgRole.waiter})
_MANAGEMENT = frozenset({OrgRole.owner, OrgRole.manager})
_OWNER = frozenset({OrgRole.owner})

PERMISSIONS: dict[Permission, frozenset[OrgRole]] = {
    Permission.DASHBOARD: _ALL,
    Permission.MENU_VIEW: _ALL,
    Permission.ORDERS_VIEW: _ALL,
    Permission.ORDERS_UPDATE: _ALL,
    Permission.POS: _FLOOR,
    Permission.TABLES: _FLOOR,
    Permission.ORDERS_CREATE: _FLOOR,
    Permission.KITCHEN: frozenset(
        {OrgRole.owner, OrgRole.manager, OrgRole.cashier, OrgRole.kitchen}
    ),
    Permission.PAYMENTS: frozenset({OrgRole.owner, OrgRole.manager, OrgRole.cashier}),
    Permission.MENU_EDIT: _MANAGEMENT,
    Permission.REPORTS: _MANAGEMENT,
    Permission.STAFF_MANAGE: _MANAGEMENT,
    Permission.BRANDING: _MANAGEMENT,
    Permission.SETTINGS: _OWNER,
    Permission.PROFILE: _OWNER,
    Permission.PLAN: _OWNER,
}


def has_permission(role: OrgRole, permission: Permission) -> bool:
    return role in PERMISSIONS[permission]


def roles_for(permission: Permission) -> list[OrgRole]:
    return [role for role in OrgRole if role in PERMISSIONS[permission]]
