"""
Menu endpoints: categories and menu items.
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
from comanda.models.organization import Organization
from comanda.schemas.menu import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
    MenuItemCreateRequest,
    MenuItemListResponse,
    MenuItemResponse,
    MenuItemUpdateRequest,
)
from comanda.services.menu_service import MenuService

router = APIRouter()


def get_menu_service(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> MenuService:
    return MenuService(db=db, redis=redis)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/categories",
    response_model=CategoryListResponse,
    summary="List menu categories",
)
async def list_categories(
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_VIEW)
    ),
    service: MenuService = Depends(get_menu_service),
) -> CategoryListResponse:
    org, _ = org_and_member
    return await service.list_categories(org.id)


@router.post(
    "/{slug}/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a menu category",
)
async def create_category(
    data: CategoryCreateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: MenuService = Depends(get_menu_service),
) -> CategoryResponse:
    """
    Create a category.

    - Counts against the plan's category limit
    - Names are unique per restaurant, ignoring case
    """
    org, _ = org_and_member
    return await service.create_category(org, data)


@router.put(
    "/{slug}/categories/{category_id}",
    response_model=CategoryResponse,
    summary="Rename or reorder a category",
)
async def update_category(
    category_id: UUID,
    data: CategoryUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: MenuService = Depends(get_menu_service),
) -> CategoryResponse:
    org, _ = org_and_member
    return await service.update_category(org.id, category_id, data)


@router.delete(
    "/{slug}/categories/{category_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete an empty category",
)
async def delete_category(
    category_id: UUID,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: MenuService = Depends(get_menu_service),
) -> dict:
    org, _ = org_and_member
    await service.delete_category(org.id, category_id)
    return {}


# ---------------------------------------------------------------------------
# Menu Items
# ---------------------------------------------------------------------------

@router.get(
    "/{slug}/menu-items",
    response_model=MenuItemListResponse,
    summary="List menu items",
)
async def list_items(
    category_id: UUID | None = Query(default=None),
    active_only: bool = Query(default=False),
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_VIEW)
    ),
    service: MenuService = Depends(get_menu_service),
) -> MenuItemListResponse:
    org, _ = org_and_member
    return await service.list_items(org.id, category_id=category_id, active_only=active_only)


@router.post(
    "/{slug}/menu-items",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a menu item",
)
async def create_item(
    data: MenuItemCreateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: MenuService = Depends(get_menu_service),
) -> MenuItemResponse:
    org, _ = org_and_member
    return await service.create_item(org, data)


@router.put(
    "/{slug}/menu-items/{item_id}",
    response_model=MenuItemResponse,
    summary="Update a menu item",
)
async def update_item(
    item_id: UUID,
    data: MenuItemUpdateRequest,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: MenuService = Depends(get_menu_service),
) -> MenuItemResponse:
    org, _ = org_and_member
    return await service.update_item(org.id, item_id, data)


@router.delete(
    "/{slug}/menu-items/{item_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a menu item",
)
async def delete_item(
    item_id: UUID,
    org_and_member: tuple[Organization, Membership] = Depends(
        require_permission(Permission.MENU_EDIT)
    ),
    service: MenuService = Depends(get_menu_service),
) -> dict:
    """Items that already appear in orders must be deactivated instead."""
    org, _ = org_and_member
    await service.delete_item(org.id, item_id)
    return {}
