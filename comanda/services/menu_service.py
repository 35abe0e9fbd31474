"""
Menu business logic.

Category and menu item CRUD with plan limits. All queries scoped by org_id.
"""

from __future__ import annotations

from uuid import UUID

import redis.asyncio as aioredis
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.plans import enforce_limit
from comanda.models.menu import MenuCategory, MenuItem
from comanda.models.order import OrderItem
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
    MenuSection,
    MenuSectionItem,
)


class MenuService:
    """Handles all menu operations."""

    def __init__(self, db: AsyncSession, redis: aioredis.Redis) -> None:
        self.db = db
        self.redis = redis

    # -----------------------------------------------------------------------
    # Categories
    # -----------------------------------------------------------------------

    async def list_categories(self, org_id: UUID) -> CategoryListResponse:
        """Categories ordered by position, each with its active item count."""
        item_counts = (
            select(MenuItem.category_id, func.count(MenuItem.id).label("item_count"))
            .where(MenuItem.org_id == org_id, MenuItem.active.is_(True))
            .group_by(MenuItem.category_id)
            .subquery()
        )
        result = await self.db.execute(
            select(MenuCategory, func.coalesce(item_counts.c.item_count, 0))
            .outerjoin(item_counts, item_counts.c.category_id == MenuCategory.id)
            .where(MenuCategory.org_id == org_id)
            .order_by(MenuCategory.position, MenuCategory.name)
        )
        categories = [
            self._category_response(category, count) for category, count in result.all()
        ]
        return CategoryListResponse(categories=categories, total=len(categories))

    async def create_category(
        self, org: Organization, data: CategoryCreateRequest
    ) -> CategoryResponse:
        current = await self._count(MenuCategory, org.id)
        enforce_limit(
            org.plan,
            "categories",
            current,
            "Category limit reached for the current plan. Upgrade to add more.",
        )

        name = data.name.strip()
        await self._ensure_category_name_available(org.id, name)

        position = data.position
        if position is None:
            last = (
                await self.db.execute(
                    select(func.max(MenuCategory.position)).where(MenuCategory.org_id == org.id)
                )
            ).scalar_one_or_none()
            position = 0 if last is None else last + 1

        category = MenuCategory(org_id=org.id, name=name, position=position)
        self.db.add(category)
        await self.db.flush()
        return self._category_response(category, 0)

    async def update_category(
        self, org_id: UUID, category_id: UUID, data: CategoryUpdateRequest
    ) -> CategoryResponse:
        category = await self._get_category(org_id, category_id)

        if data.name is not None:
            name = data.name.strip()
            if name != category.name:
                await self._ensure_category_name_available(org_id, name, exclude_id=category.id)
                category.name = name
        if data.position is not None:
            category.position = data.position

        await self.db.flush()
        count = (
            await self.db.execute(
                select(func.count()).select_from(MenuItem).where(
                    MenuItem.category_id == category.id, MenuItem.active.is_(True)
                )
            )
        ).scalar_one()
        return self._category_response(category, count)

    async def delete_category(self, org_id: UUID, category_id: UUID) -> None:
        """Only empty categories can be deleted."""
        category = await self._get_category(org_id, category_id)

        item_count = (
            await self.db.execute(
                select(func.count()).select_from(MenuItem).where(MenuItem.category_id == category.id)
            )
        ).scalar_one()
        if item_count > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "code": "CATEGORY_NOT_EMPTY",
                    "message": "Move or delete the category's items first",
                },
            )

        await self.db.delete(category)
        await self.db.flush()

    # -----------------------------------------------------------------------
    # Menu items
    # -----------------------------------------------------------------------

    async def list_items(
        self,
        org_id: UUID,
        category_id: UUID | None = None,
        active_only: bool = False,
    ) -> MenuItemListResponse:
        stmt = (
            select(MenuItem)
            .join(MenuCategory, MenuItem.category_id == MenuCategory.id)
            .where(MenuItem.org_id == org_id)
        )
        if category_id is not None:
            stmt = stmt.where(MenuItem.category_id == category_id)
        if active_only:
            stmt = stmt.where(MenuItem.active.is_(True))

        stmt = stmt.order_by(MenuCategory.position, MenuItem.name)
        result = await self.db.execute(stmt)
        items = [MenuItemResponse.model_validate(i) for i in result.scalars().all()]
        return MenuItemListResponse(items=items, total=len(items))

    async def create_item(
        self, org: Organization, data: MenuItemCreateRequest
    ) -> MenuItemResponse:
        await self._get_category(org.id, data.category_id)

        current = await self._count(MenuItem, org.id)
        enforce_limit(
            org.plan,
            "menu_items",
            current,
            "Menu item limit reached for the current plan. Upgrade to add more.",
        )

        item = MenuItem(
            org_id=org.id,
            category_id=data.category_id,
            name=data.name.strip(),
            description=(data.description or "").strip() or None,
            price_cents=data.price_cents,
            image_url=data.image_url or None,
            active=data.active,
        )
        self.db.add(item)
        await self.db.flush()
        return MenuItemResponse.model_validate(item)

    async def update_item(
        self, org_id: UUID, item_id: UUID, data: MenuItemUpdateRequest
    ) -> MenuItemResponse:
        item = await self._get_item(org_id, item_id)
        provided = data.model_fields_set

        if data.category_id is not None and data.category_id != item.category_id:
            await self._get_category(org_id, data.category_id)
            item.category_id = data.category_id
        if data.name is not None:
            item.name = data.name.strip()
        if "description" in provided:
            item.description = (data.description or "").strip() or None
        if data.price_cents is not None:
            item.price_cents = data.price_cents
        if "image_url" in provided:
            item.image_url = data.image_url or None
        if data.active is not None:
            item.active = data.active

        await self.db.flush()
        return MenuItemResponse.model_validate(item)

    async def delete_item(self, org_id: UUID, item_id: UUID) -> None:
        """Items already ordered cannot be deleted; deactivate them instead."""
        item = await self._get_item(org_id, item_id)

        used = (
            await self.db.execute(
                select(func.count()).select_from(OrderItem).where(OrderItem.menu_item_id == item.id)
            )
        ).scalar_one()
        if used > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "code": "ITEM_IN_USE",
                    "message": "Item appears in existing orders; deactivate it instead",
                },
            )

        await self.db.delete(item)
        await self.db.flush()

    # -----------------------------------------------------------------------
    # Read-only menu
    # -----------------------------------------------------------------------

    async def menu_sections(self, org_id: UUID) -> list[MenuSection]:
        """Categories with their active items, skipping empty categories."""
        categories = (
            await self.db.execute(
                select(MenuCategory)
                .where(MenuCategory.org_id == org_id)
                .order_by(MenuCategory.position, MenuCategory.name)
            )
        ).scalars().all()
        items = (
            await self.db.execute(
                select(MenuItem)
                .where(MenuItem.org_id == org_id, MenuItem.active.is_(True))
                .order_by(MenuItem.name)
            )
        ).scalars().all()

        by_category: dict[UUID, list[MenuSectionItem]] = {}
        for item in items:
            by_category.setdefault(item.category_id, []).append(
                MenuSectionItem.model_validate(item)
            )

        return [
            MenuSection(
                id=category.id,
                name=category.name,
                position=category.position,
                items=by_category[category.id],
            )
            for category in categories
            if category.id in by_category
        ]

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _count(self, model: type[MenuCategory] | type[MenuItem], org_id: UUID) -> int:
        return (
            await self.db.execute(
                select(func.count()).select_from(model).where(model.org_id == org_id)
            )
        ).scalar_one()

    async def _ensure_category_name_available(
        self, org_id: UUID, name: str, exclude_id: UUID | None = None
    ) -> None:
        query = select(MenuCategory.id).where(
            MenuCategory.org_id == org_id,
            func.lower(MenuCategory.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.where(MenuCategory.id != exclude_id)
        existing = await self.db.execute(query)
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "CATEGORY_EXISTS", "message": "A category with this name already exists"},
            )

    async def _get_category(self, org_id: UUID, category_id: UUID) -> MenuCategory:
        result = await self.db.execute(
            select(MenuCategory).where(
                MenuCategory.id == category_id,
                MenuCategory.org_id == org_id,
            )
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "CATEGORY_NOT_FOUND", "message": "Category not found"},
            )
        return category

    async def _get_item(self, org_id: UUID, item_id: UUID) -> MenuItem:
        result = await self.db.execute(
            select(MenuItem).where(MenuItem.id == item_id, MenuItem.org_id == org_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "ITEM_NOT_FOUND", "message": "Menu item not found"},
            )
        return item

    @staticmethod
    def _category_response(category: MenuCategory, item_count: int) -> CategoryResponse:
        return CategoryResponse(
            id=category.id,
            org_id=category.org_id,
            name=category.name,
            position=category.position,
            item_count=item_count,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )
