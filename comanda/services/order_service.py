"""
Order business logic.

Guest (table QR) and POS order creation, kitchen status transitions,
payments and order listing with dashboard metrics. All queries scoped by
org_id.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.plans import add_months, enforce_feature, enforce_limit
from comanda.models.menu import MenuItem
from comanda.models.order import (
    ACTIVE_ORDER_STATUSES,
    ORDER_TRANSITIONS,
    Order,
    OrderItem,
    OrderStatus,
    OrgOrderCounter,
    Payment,
    PaymentStatus,
)
from comanda.models.organization import Organization
from comanda.models.table import DiningTable
from comanda.schemas.order import (
    OrderCreateRequest,
    OrderItemRequest,
    OrderItemResponse,
    OrderListResponse,
    OrderMetrics,
    OrderResponse,
    OrderTableSummary,
    PaymentRequest,
    PaymentResponse,
    PosOrderCreateRequest,
)

logger = logging.getLogger(__name__)


def current_month_range(now: datetime | None = None) -> tuple[datetime, datetime]:
    """[first instant of this UTC month, first instant of next month)."""
    now = now or datetime.now(UTC)
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return start, add_months(start, 1)


def order_response(order: Order, table: DiningTable | None) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        org_id=order.org_id,
        number=order.number,
        status=order.status,
        notes=order.notes,
        total_cents=order.total_cents,
        paid_cents=order.paid_cents,
        is_paid=order.is_paid,
        table=OrderTableSummary(id=table.id, number=table.number) if table else None,
        items=[OrderItemResponse.model_validate(i) for i in order.items],
        payments=[PaymentResponse.model_validate(p) for p in order.payments],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


class OrderService:
    """Handles all order operations."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # List Orders (staff)
    # -----------------------------------------------------------------------

    async def list_orders(
        self,
        org_id: UUID,
        statuses: Sequence[OrderStatus] | None = None,
        limit: int = 25,
    ) -> OrderListResponse:
        """Newest orders first, plus counts across all of the org's orders."""
        stmt = select(Order).where(Order.org_id == org_id)
        if statuses:
            stmt = stmt.where(Order.status.in_(list(statuses)))
        stmt = stmt.order_by(Order.created_at.desc(), Order.number.desc()).limit(limit)

        orders = list((await self.db.execute(stmt)).scalars().all())
        return OrderListResponse(
            orders=await self._responses(orders),
            metrics=await self._metrics(org_id),
        )

    # -----------------------------------------------------------------------
    # Create Order (guest, via table QR)
    # -----------------------------------------------------------------------

    async def create_table_order(
        self, table: DiningTable, org: Organization, data: OrderCreateRequest
    ) -> OrderResponse:
        """
        Place an order from a table's QR page.

        - Disabled tables reject orders (409)
        - Enforces the plan's monthly order limit (402)
        - Every item must be an active item of this restaurant (400)
        """
        if not table.is_enabled:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "TABLE_DISABLED", "message": "This table is not taking orders right now"},
            )

        order = await self._create_order(org, table, data)
        logger.info("Table order #%d placed for org %s (table %d)", order.number, org.slug, table.number)
        return order_response(order, table)

    # -----------------------------------------------------------------------
    # Create Order (POS)
    # -----------------------------------------------------------------------

    async def create_pos_order(
        self, org: Organization, data: PosOrderCreateRequest
    ) -> OrderResponse:
        enforce_feature(org.plan, "allow_pos", "The POS is available on the Premium plan")

        table: DiningTable | None = None
        if data.table_id is not None:
            result = await self.db.execute(
                select(DiningTable).where(
                    DiningTable.id == data.table_id,
                    DiningTable.org_id == org.id,
                )
            )
            table = result.scalar_one_or_none()
            if table is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail={"code": "TABLE_NOT_FOUND", "message": "Table not found"},
                )

        order = await self._create_order(org, table, data)
        logger.info("POS order #%d placed for org %s", order.number, org.slug)
        return order_response(order, table)

    # -----------------------------------------------------------------------
    # Update Status
    # -----------------------------------------------------------------------

    async def update_status(
        self, org_id: UUID, order_id: UUID, new_status: OrderStatus
    ) -> OrderResponse:
        """Move an order along the kitchen flow; terminal states are final."""
        order = await self._get_order(org_id, order_id)

        if new_status != order.status:
            if new_status not in ORDER_TRANSITIONS[order.status]:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail={
                        "code": "INVALID_TRANSITION",
                        "message": f"Cannot move order from {order.status.value} to {new_status.value}",
                    },
                )
            order.status = new_status
            await self.db.flush()

        return (await self._responses([order]))[0]

    # -----------------------------------------------------------------------
    # Pay
    # -----------------------------------------------------------------------

    async def pay(self, org_id: UUID, order_id: UUID, data: PaymentRequest) -> OrderResponse:
        """
        Register a payment against the outstanding balance.

        Completes a pending payment when one exists, otherwise records a new
        paid payment. Omitting the amount settles the whole balance.
        """
        order = await self._get_order(org_id, order_id)

        remaining = order.total_cents - order.paid_cents
        if remaining <= 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "ALREADY_PAID", "message": "Order is already paid"},
            )

        amount = data.amount_cents if data.amount_cents is not None else remaining
        if amount > remaining:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "code": "AMOUNT_EXCEEDS_BALANCE",
                    "message": f"Amount exceeds the outstanding balance of {remaining} cents",
                },
            )

        now = datetime.now(UTC)
        pending = next((p for p in order.payments if p.status == PaymentStatus.PENDING), None)
        if pending is not None:
            pending.method = data.method
            pending.amount_cents = amount
            pending.status = PaymentStatus.PAID
            pending.paid_at = now
        else:
            order.payments.append(
                Payment(
                    org_id=order.org_id,
                    method=data.method,
                    status=PaymentStatus.PAID,
                    amount_cents=amount,
                    paid_at=now,
                )
            )
        await self.db.flush()

        logger.info("Payment of %d cents (%s) on order %s", amount, data.method.value, order.id)
        return (await self._responses([order]))[0]

    # -----------------------------------------------------------------------
    # Table order history (guest)
    # -----------------------------------------------------------------------

    async def list_table_orders(self, table: DiningTable, limit: int = 1) -> list[OrderResponse]:
        result = await self.db.execute(
            select(Order)
            .where(Order.table_id == table.id, Order.org_id == table.org_id)
            .order_by(Order.created_at.desc(), Order.number.desc())
            .limit(limit)
        )
        return [order_response(o, table) for o in result.scalars().all()]

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _create_order(
        self,
        org: Organization,
        table: DiningTable | None,
        data: OrderCreateRequest,
    ) -> Order:
        start, end = current_month_range()
        orders_this_month = (
            await self.db.execute(
                select(func.count()).select_from(Order).where(
                    Order.org_id == org.id,
                    Order.created_at >= start,
                    Order.created_at < end,
                )
            )
        ).scalar_one()
        enforce_limit(
            org.plan,
            "monthly_orders",
            orders_this_month,
            "The restaurant reached its monthly order limit. Please ask the staff.",
        )

        lines = await self._build_lines(org.id, data.items)

        order = Order(
            org_id=org.id,
            table_id=table.id if table else None,
            number=await self._next_order_number(org.id),
            status=OrderStatus.PLACED,
            notes=data.notes,
            total_cents=sum(line.total_cents for line in lines),
            items=lines,
            payments=[],
        )
        self.db.add(order)
        await self.db.flush()
        return order

    async def _build_lines(
        self, org_id: UUID, requested: Iterable[OrderItemRequest]
    ) -> list[OrderItem]:
        """Snapshot name and price of each requested menu item."""
        requested = list(requested)
        unique_ids = {line.menu_item_id for line in requested}
        result = await self.db.execute(
            select(MenuItem).where(
                MenuItem.id.in_(unique_ids),
                MenuItem.org_id == org_id,
                MenuItem.active.is_(True),
            )
        )
        menu_items = {item.id: item for item in result.scalars().all()}
        if len(menu_items) != len(unique_ids):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "ITEMS_UNAVAILABLE", "message": "Some items are not available"},
            )

        lines = []
        for position, line in enumerate(requested):
            menu_item = menu_items[line.menu_item_id]
            lines.append(
                OrderItem(
                    menu_item_id=menu_item.id,
                    position=position,
                    name=menu_item.name,
                    quantity=line.quantity,
                    price_cents=menu_item.price_cents,
                    total_cents=menu_item.price_cents * line.quantity,
                    notes=line.notes,
                )
            )
        return lines

    async def _next_order_number(self, org_id: UUID) -> int:
        """
        Allocate the next order number.

        The counter row is locked (SELECT ... FOR UPDATE) until the request
        transaction ends, serialising concurrent orders for the same org.
        """
        result = await self.db.execute(
            select(OrgOrderCounter).where(OrgOrderCounter.org_id == org_id).with_for_update()
        )
        counter = result.scalar_one_or_none()
        if counter is None:
            last = (
                await self.db.execute(select(func.max(Order.number)).where(Order.org_id == org_id))
            ).scalar_one_or_none()
            counter = OrgOrderCounter(org_id=org_id, last_number=last or 0)
            self.db.add(counter)

        counter.last_number += 1
        await self.db.flush()
        return counter.last_number

    async def _get_order(self, org_id: UUID, order_id: UUID) -> Order:
        result = await self.db.execute(
            select(Order).where(Order.id == order_id, Order.org_id == org_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "ORDER_NOT_FOUND", "message": "Order not found"},
            )
        return order

    async def _responses(self, orders: list[Order]) -> list[OrderResponse]:
        table_ids = {o.table_id for o in orders if o.table_id is not None}
        tables: dict[UUID, DiningTable] = {}
        if table_ids:
            result = await self.db.execute(
                select(DiningTable).where(DiningTable.id.in_(table_ids))
            )
            tables = {t.id: t for t in result.scalars().all()}
        return [
            order_response(o, tables.get(o.table_id) if o.table_id else None)
            for o in orders
        ]

    async def _metrics(self, org_id: UUID) -> OrderMetrics:
        result = await self.db.execute(
            select(Order.status, func.count(Order.id), func.coalesce(func.sum(Order.total_cents), 0))
            .where(Order.org_id == org_id)
            .group_by(Order.status)
        )
        by_status = {s.value: 0 for s in OrderStatus}
        served_revenue = 0
        for order_status, count, revenue in result.all():
            by_status[order_status.value] = count
            if order_status == OrderStatus.SERVED:
                served_revenue = int(revenue)

        return OrderMetrics(
            total=sum(by_status.values()),
            active=sum(by_status[s.value] for s in ACTIVE_ORDER_STATUSES),
            by_status=by_status,
            served_revenue_cents=served_revenue,
        )
