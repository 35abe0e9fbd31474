"""
Staff order endpoints: listing, POS orders, kitchen status and payments.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import get_redis, require_permission
from comanda.core.permissions import Permission
from comanda.models.member import Membership
from comanda.models.order import OrderStatus
from comanda.models.organization import Organization
from comanda.schemas.order import (
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdateRequest,
    PaymentRequest,
    PosOrderCreateRequest,
)
from comanda.services.order_service import OrderService

router = APIRouter()


def get_order_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> OrderService:
    return OrderService(db=db, redis=redis)


# ---------------------------------------------------------------------------
# List Orders
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/orders",
    response_model=OrderListResponse,
    summary="List orders with dashboard metrics",
)
async def list_orders(
    limit: int = Query(default=25, ge=1, le=100),
    order_status: list[OrderStatus] | None = Query(default=None, alias="status"),
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.ORDERS_VIEW)
    ),
    service: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """
    Newest orders first.

    Repeat ``status`` to filter by several statuses, e.g. the kitchen view
    asks for ``?status=ACCEPTED&status=PREPARING``.
    """
    org, _ = org_and_member
    return await service.list_orders(org.id, statuses=order_status, limit=limit)


# ---------------------------------------------------------------------------
# Create Order (POS)
# ---------------------------------------------------------------------------

@router.post(
    "/{slug}/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an order from the POS",
)
async def create_pos_order(
    data: PosOrderCreateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.ORDERS_CREATE)
    ),
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Premium only. The table is optional for take-away orders."""
    org, _ = org_and_member
    return await service.create_pos_order(org, data)


# ---------------------------------------------------------------------------
# Update Status
# ---------------------------------------------------------------------------

@router.patch(
    "/{slug}/orders/{order_id}",
    response_model=OrderResponse,
    summary="Move an order to another status",
)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.ORDERS_UPDATE)
    ),
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    org, _ = org_and_member
    return await service.update_status(org.id, order_id, data.status)


# ---------------------------------------------------------------------------
# Pay
# ---------------------------------------------------------------------------

@router.post(
    "/{slug}/orders/{order_id}/pay",
    response_model=OrderResponse,
    summary="Register a payment",
)
async def pay_order(
    order_id: UUID,
    data: PaymentRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.PAYMENTS)
    ),
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Omit ``amount_cents`` to settle the whole outstanding balance."""
    org, _ = org_and_member
    return await service.pay(org.id, order_id, data)
