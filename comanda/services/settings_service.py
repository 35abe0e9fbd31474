"""
Restaurant settings: public profile, opening hours and branding.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.plans import PlanTier, enforce_feature, normalize_plan
from comanda.models.organization import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_BRAND_COLOR,
    Branding,
    OpeningHour,
    Organization,
)
from comanda.schemas.organization import (
    BrandingResponse,
    BrandingUpdateRequest,
    OpeningHourSchema,
    ProfileResponse,
    ProfileUpdateRequest,
)

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = (
    "name",
    "phone",
    "email",
    "address",
    "description",
    "latitude",
    "longitude",
)


def branding_response(branding: Branding | None) -> BrandingResponse:
    if branding is None:
        return BrandingResponse(
            brand_color=DEFAULT_BRAND_COLOR,
            accent_color=DEFAULT_ACCENT_COLOR,
            logo_url=None,
            is_default=True,
        )
    return BrandingResponse(
        brand_color=branding.brand_color,
        accent_color=branding.accent_color,
        logo_url=branding.logo_url,
        is_default=False,
    )


class SettingsService:
    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # Profile
    # -----------------------------------------------------------------------

    async def get_profile(self, org: Organization) -> ProfileResponse:
        hours = await self.list_opening_hours(org)
        return self._profile_response(org, hours)

    async def update_profile(
        self, org: Organization, data: ProfileUpdateRequest
    ) -> ProfileResponse:
        """
        Apply the fields present in the request.

        WhatsApp ordering needs a premium plan and a number; clearing the
        number switches ordering off. Opening hours are replaced wholesale.
        """
        provided = data.model_fields_set

        for field in _PROFILE_FIELDS:
            if field not in provided:
                continue
            value = getattr(data, field)
            if field == "name":
                if value is None:
                    continue
                value = value.strip()
            setattr(org, field, value)

        if "whatsapp_number" in provided:
            org.whatsapp_number = data.whatsapp_number
            if data.whatsapp_number is None:
                org.whatsapp_ordering_enabled = False

        if data.whatsapp_ordering_enabled is not None:
            if data.whatsapp_ordering_enabled:
                if normalize_plan(org.plan) != PlanTier.PREMIUM:
                    raise HTTPException(
                        status_code=status.HTTP_402_PAYMENT_REQUIRED,
                        detail={
                            "code": "PLAN_UPGRADE_REQUIRED",
                            "message": "WhatsApp ordering is available on the Premium plan",
                        },
                    )
                if not org.whatsapp_number:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail={
                            "code": "WHATSAPP_NUMBER_REQUIRED",
                            "message": "Set a WhatsApp number before enabling WhatsApp ordering",
                        },
                    )
            org.whatsapp_ordering_enabled = data.whatsapp_ordering_enabled

        if data.opening_hours is not None:
            await self.db.execute(delete(OpeningHour).where(OpeningHour.org_id == org.id))
            for hour in data.opening_hours:
                self.db.add(
                    OpeningHour(
                        org_id=org.id,
                        day_of_week=hour.day_of_week,
                        is_open=hour.is_open,
                        open_time=hour.open_time,
                        close_time=hour.close_time,
                    )
                )

        await self.db.flush()
        logger.info("Profile updated for org %s", org.slug)
        return await self.get_profile(org)

    async def list_opening_hours(self, org: Organization) -> list[OpeningHourSchema]:
        result = await self.db.execute(
            select(OpeningHour)
            .where(OpeningHour.org_id == org.id)
            .order_by(OpeningHour.day_of_week)
        )
        return [OpeningHourSchema.model_validate(h) for h in result.scalars().all()]

    # -----------------------------------------------------------------------
    # Branding
    # -----------------------------------------------------------------------

    async def get_branding(self, org: Organization) -> BrandingResponse:
        return branding_response(await self._load_branding(org))

    async def update_branding(
        self, org: Organization, data: BrandingUpdateRequest
    ) -> BrandingResponse:
        enforce_feature(org.plan, "allow_branding", "Custom branding is available on the Premium plan")

        branding = await self._load_branding(org)
        if branding is None:
            branding = Branding(org_id=org.id)
            self.db.add(branding)

        branding.brand_color = data.brand_color.upper()
        branding.accent_color = data.accent_color.upper()
        branding.logo_url = data.logo_url or None
        await self.db.flush()
        return branding_response(branding)

    async def reset_branding(self, org: Organization) -> BrandingResponse:
        await self.db.execute(delete(Branding).where(Branding.org_id == org.id))
        await self.db.flush()
        return branding_response(None)

    async def _load_branding(self, org: Organization) -> Branding | None:
        result = await self.db.execute(select(Branding).where(Branding.org_id == org.id))
        return result.scalar_one_or_none()

    @staticmethod
    def _profile_response(
        org: Organization, hours: list[OpeningHourSchema]
    ) -> ProfileResponse:
        return ProfileResponse(
            id=org.id,
            name=org.name,
            slug=org.slug,
            phone=org.phone,
            email=org.email,
            address=org.address,
            description=org.description,
            latitude=org.latitude,
            longitude=org.longitude,
            whatsapp_number=org.whatsapp_number,
            whatsapp_ordering_enabled=org.whatsapp_ordering_enabled,
            opening_hours=hours,
        )
