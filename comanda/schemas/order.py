"""
Order and payment schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, field_validator

from comanda.models.order import OrderStatus, PaymentMethod, PaymentStatus


def _strip_or_none(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class OrderItemRequest(BaseModel):
    menu_item_id: UUID
    quantity: int = Field(ge=1, le=20)
    notes: str | None = Field(default=None, max_length=200)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class OrderCreateRequest(BaseModel):
    """Body for public table orders."""

    items: list[OrderItemRequest] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=300)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class PosOrderCreateRequest(OrderCreateRequest):
    """Body for staff (POS) orders; the table is optional."""

    table_id: UUID | None = None


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus


class PaymentRequest(BaseModel):
    method: PaymentMethod = PaymentMethod.CASH
    amount_cents: int | None = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class OrderItemResponse(BaseModel):
    id: UUID
    menu_item_id: UUID | None
    name: str
    quantity: int
    price_cents: int
    total_cents: int
    notes: str | None

    model_config = {"from_attributes": True}


class OrderTableSummary(BaseModel):
    id: UUID
    number: int


class PaymentResponse(BaseModel):
    id: UUID
    method: PaymentMethod
    status: PaymentStatus
    amount_cents: int
    paid_at: datetime | None

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: UUID
    org_id: UUID
    number: int
    status: OrderStatus
    notes: str | None
    total_cents: int
    paid_cents: int
    is_paid: bool
    table: OrderTableSummary | None
    items: list[OrderItemResponse]
    payments: list[PaymentResponse] = []
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def total(self) -> float:
        return self.total_cents / 100


class OrderMetrics(BaseModel):
    total: int
    active: int
    by_status: dict[str, int]
    served_revenue_cents: int


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    metrics: OrderMetrics
