"""
Table endpoints: CRUD, QR rotation and floor-plan layout.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import get_redis, require_permission
from comanda.core.permissions import Permission
from comanda.models.member import Membership
from comanda.models.organization import Organization
from comanda.schemas.table import (
    TableCreateRequest,
    TableLayoutRequest,
    TableListResponse,
    TableResponse,
    TableUpdateRequest,
)
from comanda.services.table_service import TableService

router = APIRouter()


def get_table_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> TableService:
    return TableService(db=db, redis=redis)


@router.get(
    "/{slug}/tables",
    response_model=TableListResponse,
    summary="List tables",
)
async def list_tables(
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.TABLES)
    ),
    service: TableService = Depends(get_table_service),
) -> TableListResponse:
    org, _ = org_and_member
    return await service.list_tables(org.id)


@router.post(
    "/{slug}/tables",
    response_model=TableResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a table",
)
async def create_table(
    data: TableCreateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: TableService = Depends(get_table_service),
) -> TableResponse:
    org, _ = org_and_member
    return await service.create_table(org, data)


# Registered before /{table_id} so "layout" is never parsed as an id
@router.patch(
    "/{slug}/tables/layout",
    response_model=TableListResponse,
    summary="Save the floor-plan layout",
)
async def update_layout(
    data: TableLayoutRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.TABLES)
    ),
    service: TableService = Depends(get_table_service),
) -> TableListResponse:
    org, _ = org_and_member
    return await service.update_layout(org.id, data)


@router.patch(
    "/{slug}/tables/{table_id}",
    response_model=TableResponse,
    summary="Enable or disable a table",
)
async def update_table(
    table_id: UUID,
    data: TableUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: TableService = Depends(get_table_service),
) -> TableResponse:
    org, _ = org_and_member
    return await service.set_enabled(org.id, table_id, data.is_enabled)


@router.post(
    "/{slug}/tables/{table_id}/regenerate-qr",
    response_model=TableResponse,
    summary="Rotate a table's QR token",
)
async def regenerate_qr(
    table_id: UUID,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: TableService = Depends(get_table_service),
) -> TableResponse:
    """Premium only. Printed codes carrying the old token stop working."""
    org, _ = org_and_member
    return await service.regenerate_qr(org, table_id)
