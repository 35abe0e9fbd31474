"""
Table business logic.

Table CRUD, QR token rotation and floor-plan layout. All queries scoped by org_id.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.config import settings
from comanda.core.plans import enforce_feature, enforce_limit
from comanda.core.security import create_qr_token
from comanda.models.organization import Organization
from comanda.models.table import DiningTable
from comanda.schemas.table import (
    TableCreateRequest,
    TableLayoutRequest,
    TableListResponse,
    TableResponse,
)


def table_url(qr_token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/table/{qr_token}"


def table_response(table: DiningTable) -> TableResponse:
    return TableResponse(
        id=table.id,
        org_id=table.org_id,
        number=table.number,
        qr_token=table.qr_token,
        qr_url=table_url(table.qr_token),
        is_enabled=table.is_enabled,
        position_x=table.position_x,
        position_y=table.position_y,
        width=table.width,
        height=table.height,
        shape=table.shape,
        rotation=table.rotation,
        created_at=table.created_at,
        updated_at=table.updated_at,
    )


class TableService:
    """Handles all table operations."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    async def list_tables(self, org_id: UUID) -> TableListResponse:
        result = await self.db.execute(
            select(DiningTable)
            .where(DiningTable.org_id == org_id)
            .order_by(DiningTable.number)
        )
        tables = [table_response(t) for t in result.scalars().all()]
        return TableListResponse(tables=tables, total=len(tables))

    async def create_table(self, org: Organization, data: TableCreateRequest) -> TableResponse:
        """
        Create a table with a fresh QR token.

        - Enforces the plan's table limit
        - Table numbers are unique per organization
        """
        current = (
            await self.db.execute(
                select(func.count()).select_from(DiningTable).where(DiningTable.org_id == org.id)
            )
        ).scalar_one()
        enforce_limit(
            org.plan,
            "tables",
            current,
            "Table limit reached for the current plan. Upgrade to add more.",
        )

        existing = await self.db.execute(
            select(DiningTable.id).where(
                DiningTable.org_id == org.id,
                DiningTable.number == data.number,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "TABLE_EXISTS", "message": f"Table {data.number} already exists"},
            )

        table = DiningTable(org_id=org.id, number=data.number, qr_token=create_qr_token())
        self.db.add(table)
        await self.db.flush()
        return table_response(table)

    async def set_enabled(self, org_id: UUID, table_id: UUID, is_enabled: bool) -> TableResponse:
        table = await self._get_table(org_id, table_id)
        table.is_enabled = is_enabled
        await self.db.flush()
        return table_response(table)

    async def regenerate_qr(self, org: Organization, table_id: UUID) -> TableResponse:
        """Rotate the QR token; printed codes with the old token stop working."""
        enforce_feature(
            org.plan,
            "allow_qr_regeneration",
            "QR regeneration is available on the Premium plan",
        )
        table = await self._get_table(org.id, table_id)
        table.qr_token = create_qr_token()
        await self.db.flush()
        return table_response(table)

    async def update_layout(self, org_id: UUID, data: TableLayoutRequest) -> TableListResponse:
        """Apply floor-plan positions. Every table must belong to the org."""
        ids = {entry.id for entry in data.tables}
        result = await self.db.execute(
            select(DiningTable).where(
                DiningTable.org_id == org_id,
                DiningTable.id.in_(ids),
            )
        )
        tables = {t.id: t for t in result.scalars().all()}
        if len(tables) != len(ids):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "TABLE_NOT_FOUND", "message": "One or more tables were not found"},
            )

        for entry in data.tables:
            table = tables[entry.id]
            table.position_x = entry.position_x
            table.position_y = entry.position_y
            table.width = entry.width
            table.height = entry.height
            table.shape = entry.shape
            table.rotation = entry.rotation

        await self.db.flush()
        return await self.list_tables(org_id)

    async def _get_table(self, org_id: UUID, table_id: UUID) -> DiningTable:
        result = await self.db.execute(
            select(DiningTable).where(
                DiningTable.id == table_id,
                DiningTable.org_id == org_id,
            )
        )
        table = result.scalar_one_or_none()
        if table is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "TABLE_NOT_FOUND", "message": "Table not found"},
            )
        return table
