"""
Sales report endpoint.
"""

from __future__ import annotations

from datetime import date

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import get_redis, require_permission
from comanda.core.permissions import Permission
from comanda.models.member import Membership
from comanda.models.organization import Organization
from comanda.schemas.report import ReportResponse
from comanda.services.report_service import ReportService, resolve_range

router = APIRouter()


def get_report_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> ReportService:
    return ReportService(db=db, redis=redis)


@router.get(
    "/{slug}/reports",
    response_model=ReportResponse,
    summary="Sales report for a date range",
)
async def get_report(
    range_key: str = Query(default="7d", alias="range", pattern="^(today|7d|30d|90d|custom)$"),
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.REPORTS)
    ),
    service: ReportService = Depends(get_report_service),
) -> ReportResponse:
    """
    Revenue, ticket and item statistics.

    - ``range=custom`` needs ``from`` and ``to`` (YYYY-MM-DD)
    - Premium only
    """
    org, _ = org_and_member
    window = resolve_range(range_key, date_from, date_to)
    return await service.build_report(org, window)
