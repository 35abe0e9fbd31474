"""
Guest-facing lookups: table QR pages and the public restaurant menu.

No authentication; a table's QR token or a restaurant slug is the only key.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.dependencies import ensure_active_plan
from comanda.core.plans import PlanTier, normalize_plan, plan_allows
from comanda.models.organization import Organization
from comanda.models.table import DiningTable
from comanda.schemas.order import OrderCreateRequest, OrderResponse
from comanda.schemas.public import (
    PublicMenuResponse,
    PublicOrganization,
    PublicRestaurant,
    PublicTable,
    TableInfoResponse,
    TableMenuResponse,
    TableOrdersResponse,
)
from comanda.services.menu_service import MenuService
from comanda.services.order_service import OrderService
from comanda.services.settings_service import SettingsService


class PublicService:
    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    async def resolve_table(self, token: str) -> tuple[DiningTable, Organization]:
        result = await self.db.execute(
            select(DiningTable, Organization)
            .join(Organization, DiningTable.org_id == Organization.id)
            .where(DiningTable.qr_token == token)
        )
        row = result.one_or_none()
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "TABLE_NOT_FOUND", "message": "Table not found"},
            )
        table, org = row
        await ensure_active_plan(self.db, org)
        return table, org

    async def table_info(self, token: str) -> TableInfoResponse:
        table, org = await self.resolve_table(token)
        branding = await SettingsService(self.db, self.redis).get_branding(org)
        return TableInfoResponse(
            table=PublicTable(id=table.id, number=table.number, is_enabled=table.is_enabled),
            organization=PublicOrganization.model_validate(org),
            branding=branding,
        )

    async def table_menu(self, token: str) -> TableMenuResponse:
        _, org = await self.resolve_table(token)
        sections = await MenuService(self.db, self.redis).menu_sections(org.id)
        return TableMenuResponse(
            organization=PublicOrganization.model_validate(org),
            categories=sections,
        )

    async def place_table_order(self, token: str, data: OrderCreateRequest) -> OrderResponse:
        table, org = await self.resolve_table(token)
        return await OrderService(self.db, self.redis).create_table_order(table, org, data)

    async def table_orders(self, token: str, limit: int = 1) -> TableOrdersResponse:
        """Latest orders of a table. Without order history only the last one."""
        table, org = await self.resolve_table(token)
        if not plan_allows(org.plan, "allow_order_history"):
            limit = 1
        orders = await OrderService(self.db, self.redis).list_table_orders(table, limit)
        return TableOrdersResponse(orders=orders)

    async def restaurant_menu(self, slug: str) -> PublicMenuResponse:
        """Public menu page; only published for premium restaurants."""
        result = await self.db.execute(select(Organization).where(Organization.slug == slug))
        org = result.scalar_one_or_none()
        if org is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "ORG_NOT_FOUND", "message": "Restaurant not found"},
            )
        await ensure_active_plan(self.db, org)

        if normalize_plan(org.plan) == PlanTier.FREE:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "PUBLIC_MENU_DISABLED",
                    "message": "This restaurant does not publish its menu",
                },
            )

        settings_service = SettingsService(self.db, self.redis)
        return PublicMenuResponse(
            restaurant=PublicRestaurant.model_validate(org),
            branding=await settings_service.get_branding(org),
            opening_hours=await settings_service.list_opening_hours(org),
            categories=await MenuService(self.db, self.redis).menu_sections(org.id),
        )
