"""
Platform admin and plan catalog endpoints.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.database import get_db
from comanda.core.dependencies import get_redis, require_admin
from comanda.core.plans import PLANS, PlanDefinition
from comanda.models.user import User
from comanda.schemas.organization import PremiumTrialRequest, PremiumTrialResponse
from comanda.services.organization_service import OrganizationService

router = APIRouter()


def get_org_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> OrganizationService:
    return OrganizationService(db=db, redis=redis)


@router.post(
    "/admin/premium-trials",
    response_model=PremiumTrialResponse,
    summary="Grant a premium trial to every restaurant a user owns",
)
async def grant_premium_trial(
    data: PremiumTrialRequest,
    admin: User = Depends(require_admin),
    service: OrganizationService = Depends(get_org_service),
) -> PremiumTrialResponse:
    """Restricted to the configured ADMIN_EMAIL."""
    return await service.grant_premium_trial(data)


@router.get(
    "/plans",
    response_model=list[PlanDefinition],
    summary="List subscription plans",
)
async def list_plans() -> list[PlanDefinition]:
    return list(PLANS.values())
