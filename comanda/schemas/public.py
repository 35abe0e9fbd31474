"""
Schemas for unauthenticated guest endpoints (table QR and public menu).
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from comanda.core.plans import PlanTier
from comanda.schemas.menu import MenuSection
from comanda.schemas.order import OrderResponse
from comanda.schemas.organization import BrandingResponse, OpeningHourSchema


class PublicOrganization(BaseModel):
    id: UUID
    name: str
    slug: str
    plan: PlanTier

    model_config = {"from_attributes": True}


class PublicTable(BaseModel):
    id: UUID
    number: int
    is_enabled: bool


class TableInfoResponse(BaseModel):
    table: PublicTable
    organization: PublicOrganization
    branding: BrandingResponse


class TableMenuResponse(BaseModel):
    organization: PublicOrganization
    categories: list[MenuSection]


class TableOrdersResponse(BaseModel):
    orders: list[OrderResponse]


class PublicRestaurant(BaseModel):
    id: UUID
    name: str
    slug: str
    description: str | None
    address: str | None
    phone: str | None
    email: str | None
    latitude: float | None
    longitude: float | None
    whatsapp_number: str | None
    whatsapp_ordering_enabled: bool

    model_config = {"from_attributes": True}


class PublicMenuResponse(BaseModel):
    restaurant: PublicRestaurant
    branding: BrandingResponse
    opening_hours: list[OpeningHourSchema]
    categories: list[MenuSection]
