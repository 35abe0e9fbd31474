"""
Subscription plans.

Static catalog of plan limits and feature flags, plus helpers that turn a
limit or flag into a 402 response.
"""

from __future__ import annotations

import calendar
import enum
from datetime import UTC, datetime
from typing import Literal, NamedTuple, get_args

from fastapi import HTTPException, status
from pydantic import BaseModel


class PlanTier(str, enum.Enum):
    """Subscription tier stored on each organization."""

    FREE = "FREE"
    PREMIUM = "PREMIUM"


DEFAULT_PLAN = PlanTier.FREE

LimitKey = Literal[
    "restaurants",
    "staff_seats",
    "tables",
    "menu_items",
    "categories",
    "monthly_orders",
]

FeatureFlag = Literal[
    "allow_branding",
    "allow_qr_regeneration",
    "allow_batch_qr_print",
    "allow_image_upload",
    "allow_stock_management",
    "allow_pos",
    "allow_pos_cart_controls",
    "allow_pos_search",
    "allow_order_history",
    "allow_status_notifications",
    "allow_reports_advanced",
    "allow_cloud_storage",
    "allow_priority_support",
]


class PlanLimits(BaseModel):
    """Numeric limits. ``None`` means unlimited."""

    restaurants: int | None
    staff_seats: int | None
    tables: int | None
    menu_items: int | None
    categories: int | None
    monthly_orders: int | None

    allow_branding: bool
    allow_qr_regeneration: bool
    allow_batch_qr_print: bool
    allow_image_upload: bool
    allow_stock_management: bool
    allow_pos: bool
    allow_pos_cart_controls: bool
    allow_pos_search: bool
    allow_order_history: bool
    allow_status_notifications: bool
    allow_reports_advanced: bool
    allow_cloud_storage: bool
    allow_priority_support: bool

    model_config = {"frozen": True}


class PlanDefinition(BaseModel):
    """A plan card: pricing plus limits."""

    id: PlanTier
    name: str
    price: int
    currency: str = "PEN"
    currency_symbol: str = "S/"
    billing_period: str
    description: str
    limits: PlanLimits

    model_config = {"frozen": True}


def _flags(value: bool) -> dict[str, bool]:
    return {flag: value for flag in get_args(FeatureFlag)}


PLANS: dict[PlanTier, PlanDefinition] = {
    PlanTier.FREE: PlanDefinition(
        id=PlanTier.FREE,
        name="Free",
        price=0,
        billing_period="forever",
        description="Digital menu and QR ordering for a single small venue.",
        limits=PlanLimits(
            restaurants=1,
            staff_seats=1,
            tables=3,
            menu_items=10,
            categories=3,
            monthly_orders=50,
            **_flags(False),
        ),
    ),
    PlanTier.PREMIUM: PlanDefinition(
        id=PlanTier.PREMIUM,
        name="Premium",
        price=50,
        billing_period="month",
        description="Unlimited menu, tables and orders with POS, branding and reports.",
        limits=PlanLimits(
            restaurants=None,
            staff_seats=10,
            tables=None,
            menu_items=None,
            categories=None,
            monthly_orders=None,
            **_flags(True),
        ),
    ),
}


class LimitCheck(NamedTuple):
    allowed: bool
    limit: int | None


def normalize_plan(plan: PlanTier | str | None) -> PlanTier:
    """Coerce a stored value to a known tier, falling back to FREE."""
    if isinstance(plan, PlanTier):
        return plan
    try:
        return PlanTier(plan) if plan else DEFAULT_PLAN
    except ValueError:
        return DEFAULT_PLAN


def get_plan_limits(plan: PlanTier | str | None) -> PlanLimits:
    return PLANS[normalize_plan(plan)].limits


def check_numeric_limit(plan: PlanTier | str | None, key: LimitKey, current: int) -> LimitCheck:
    limit = getattr(get_plan_limits(plan), key)
    if limit is None:
        return LimitCheck(allowed=True, limit=None)
    return LimitCheck(allowed=current < limit, limit=limit)


def plan_allows(plan: PlanTier | str | None, flag: FeatureFlag) -> bool:
    return bool(getattr(get_plan_limits(plan), flag))


# ---------------------------------------------------------------------------
# Enforcement helpers (raise 402)
# ---------------------------------------------------------------------------

def enforce_limit(
    plan: PlanTier | str | None, key: LimitKey, current: int, message: str
) -> None:
    check = check_numeric_limit(plan, key, current)
    if not check.allowed:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "code": "PLAN_LIMIT_REACHED",
                "message": message,
                "limit": check.limit,
                "resource": key,
            },
        )


def enforce_feature(plan: PlanTier | str | None, flag: FeatureFlag, message: str) -> None:
    if not plan_allows(plan, flag):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={"code": "PLAN_UPGRADE_REQUIRED", "message": message, "feature": flag},
        )


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------

def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def is_plan_expired(plan: PlanTier | str | None, expires_at: datetime | None, now: datetime | None = None) -> bool:
    if normalize_plan(plan) != PlanTier.PREMIUM or expires_at is None:
        return False
    return expires_at <= (now or datetime.now(UTC))
