"""
Guest endpoints. No authentication.

Table QR pages (info, menu, ordering) and the public restaurant menu.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import get_redis
from comanda.schemas.order import OrderCreateRequest, OrderResponse
from comanda.schemas.public import (
    PublicMenuResponse,
    TableInfoResponse,
    TableMenuResponse,
    TableOrdersResponse,
)
from comanda.services.public_service import PublicService

router = APIRouter()


def get_public_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> PublicService:
    return PublicService(db=db, redis=redis)


# ---------------------------------------------------------------------------
# Table QR
# ---------------------------------------------------------------------------

@router.get(
    "/table/{token}",
    response_model=TableInfoResponse,
    summary="Resolve a table QR token",
)
async def get_table(
    token: str,
    service: PublicService = Depends(get_public_service),
) -> TableInfoResponse:
    return await service.table_info(token)


@router.get(
    "/table/{token}/menu",
    response_model=TableMenuResponse,
    summary="Menu for a table",
)
async def get_table_menu(
    token: str,
    service: PublicService = Depends(get_public_service),
) -> TableMenuResponse:
    return await service.table_menu(token)


@router.post(
    "/table/{token}/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order from a table",
)
async def place_table_order(
    token: str,
    data: OrderCreateRequest,
    service: PublicService = Depends(get_public_service),
) -> OrderResponse:
    """
    Guest order.

    - The table must be enabled
    - Counts against the restaurant's monthly order limit
    - Prices are taken from the menu, never from the request
    """
    return await service.place_table_order(token, data)


@router.get(
    "/table/{token}/orders",
    response_model=TableOrdersResponse,
    summary="Recent orders of a table",
)
async def list_table_orders(
    token: str,
    limit: int = Query(default=1, ge=1, le=20),
    service: PublicService = Depends(get_public_service),
) -> TableOrdersResponse:
    return await service.table_orders(token, limit)


# ---------------------------------------------------------------------------
# Public restaurant menu
# ---------------------------------------------------------------------------

@router.get(
    "/public/restaurants/{slug}/menu",
    response_model=PublicMenuResponse,
    summary="Public menu page of a restaurant",
)
async def get_restaurant_menu(
    slug: str,
    service: PublicService = Depends(get_public_service),
) -> PublicMenuResponse:
    return await service.restaurant_menu(slug)
