"""
Sales reports.

Aggregates orders, line items and payments of one restaurant over a date
window. Days are UTC calendar days.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.plans import enforce_feature
from comanda.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from comanda.models.organization import Organization
from comanda.schemas.report import (
    PaymentBreakdown,
    ReportHighlights,
    ReportRange,
    ReportResponse,
    ReportTotals,
    TimelineEntry,
    TopItem,
)

RANGE_DAYS = {"today": 1, "7d": 7, "30d": 30, "90d": 90}
MAX_CUSTOM_DAYS = 366
TOP_ITEMS_LIMIT = 5


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def resolve_range(
    key: str,
    date_from: date | None = None,
    date_to: date | None = None,
    now: datetime | None = None,
) -> ReportRange:
    """Turn a range key (or custom dates) into a [start, end) window."""
    now = now or datetime.now(UTC)

    if key == "custom":
        if date_from is None or date_to is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "INVALID_RANGE", "message": "Custom range needs both from and to dates"},
            )
        if date_from > date_to:
            date_from, date_to = date_to, date_from
        days = (date_to - date_from).days + 1
        if days > MAX_CUSTOM_DAYS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "INVALID_RANGE", "message": f"Custom range cannot exceed {MAX_CUSTOM_DAYS} days"},
            )
        return ReportRange(
            key=key,
            start=_start_of_day(date_from),
            end=_start_of_day(date_to + timedelta(days=1)),
            days=days,
        )

    if key not in RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_RANGE", "message": f"Unknown range {key!r}"},
        )

    days = RANGE_DAYS[key]
    first_day = now.date() - timedelta(days=days - 1)
    return ReportRange(key=key, start=_start_of_day(first_day), end=now, days=days)


class ReportService:
    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    async def build_report(self, org: Organization, window: ReportRange) -> ReportResponse:
        enforce_feature(
            org.plan,
            "allow_reports_advanced",
            "Advanced reports are available on the Premium plan",
        )
        orders = await self._load_orders(org.id, window)
        return aggregate(orders, window)

    async def _load_orders(self, org_id: UUID, window: ReportRange) -> list[Order]:
        result = await self.db.execute(
            select(Order)
            .where(
                Order.org_id == org_id,
                Order.created_at >= window.start,
                Order.created_at < window.end,
            )
            .order_by(Order.created_at)
        )
        return list(result.scalars().all())


def aggregate(orders: list[Order], window: ReportRange) -> ReportResponse:
    status_counts = {s.value: 0 for s in OrderStatus}
    payments = {m: [0, 0] for m in PaymentMethod}
    items: dict[UUID, dict] = {}

    first_day = window.start.date()
    timeline_days = [first_day + timedelta(days=i) for i in range(window.days)]
    per_day = {day: {"revenue": 0, "orders": 0, "served": 0} for day in timeline_days}

    revenue = 0
    for order in orders:
        status_counts[order.status.value] += 1
        bucket = per_day.get(order.created_at.astimezone(UTC).date())
        if bucket is not None:
            bucket["orders"] += 1

        for payment in order.payments:
            if payment.status == PaymentStatus.PAID:
                payments[payment.method][0] += 1
                payments[payment.method][1] += payment.amount_cents

        if order.status != OrderStatus.SERVED:
            continue

        revenue += order.total_cents
        if bucket is not None:
            bucket["revenue"] += order.total_cents
            bucket["served"] += 1
        for line in order.items:
            # Grouped by dish; names are not unique
            entry = items.setdefault(
                line.menu_item_id or line.id, {"name": line.name, "quantity": 0, "revenue": 0}
            )
            entry["name"] = line.name
            entry["quantity"] += line.quantity
            entry["revenue"] += line.total_cents

    total_orders = len(orders)
    served = status_counts[OrderStatus.SERVED.value]
    cancelled = status_counts[OrderStatus.CANCELLED.value]

    top_items = [
        TopItem(id=item_id, name=entry["name"], quantity=entry["quantity"], revenue_cents=entry["revenue"])
        for item_id, entry in sorted(
            items.items(), key=lambda kv: (-kv[1]["revenue"], -kv[1]["quantity"], kv[1]["name"])
        )[:TOP_ITEMS_LIMIT]
    ]

    timeline = [
        TimelineEntry(
            day=day,
            revenue_cents=per_day[day]["revenue"],
            orders=per_day[day]["orders"],
            average_ticket_cents=(
                round(per_day[day]["revenue"] / per_day[day]["served"]) if per_day[day]["served"] else 0
            ),
        )
        for day in timeline_days
    ]

    best_day = max(timeline, key=lambda e: e.revenue_cents, default=None)
    if best_day is not None and best_day.revenue_cents == 0:
        best_day = None

    return ReportResponse(
        range=window,
        totals=ReportTotals(
            revenue_cents=revenue,
            total_orders=total_orders,
            served_orders=served,
            cancelled_orders=cancelled,
            average_ticket_cents=round(revenue / served) if served else 0,
            cancellation_rate=round(cancelled / total_orders, 4) if total_orders else 0.0,
        ),
        status_counts=status_counts,
        payment_breakdown=[
            PaymentBreakdown(method=method.value, count=count, amount_cents=amount)
            for method, (count, amount) in payments.items()
        ],
        top_items=top_items,
        timeline=timeline,
        highlights=ReportHighlights(
            best_day=best_day,
            top_item=top_items[0] if top_items else None,
        ),
    )
