"""
Menu schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, computed_field


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    position: int | None = Field(default=None, ge=0)


class CategoryUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=80)
    position: int | None = Field(default=None, ge=0)


class CategoryResponse(BaseModel):
    id: UUID
    org_id: UUID
    name: str
    position: int
    item_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
    total: int


# ---------------------------------------------------------------------------
# Menu items
# ---------------------------------------------------------------------------

class MenuItemCreateRequest(BaseModel):
    category_id: UUID
    name: str = Field(min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=1000)
    price_cents: int = Field(gt=0)
    image_url: str | None = Field(default=None, max_length=500)
    active: bool = True


class MenuItemUpdateRequest(BaseModel):
    category_id: UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=1000)
    price_cents: int | None = Field(default=None, gt=0)
    image_url: str | None = Field(default=None, max_length=500)
    active: bool | None = None


class MenuItemResponse(BaseModel):
    id: UUID
    org_id: UUID
    category_id: UUID
    name: str
    description: str | None
    price_cents: int
    image_url: str | None
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def price(self) -> float:
        return self.price_cents / 100


class MenuItemListResponse(BaseModel):
    items: list[MenuItemResponse]
    total: int


# ---------------------------------------------------------------------------
# Read-only menu (public pages, POS)
# ---------------------------------------------------------------------------

class MenuSectionItem(BaseModel):
    id: UUID
    name: str
    description: str | None
    price_cents: int
    image_url: str | None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def price(self) -> float:
        return self.price_cents / 100


class MenuSection(BaseModel):
    id: UUID
    name: str
    position: int
    items: list[MenuSectionItem]
