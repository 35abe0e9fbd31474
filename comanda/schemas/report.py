"""
Sales report schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ReportRange(BaseModel):
    key: str
    start: datetime
    end: datetime
    days: int


class ReportTotals(BaseModel):
    revenue_cents: int
    total_orders: int
    served_orders: int
    cancelled_orders: int
    average_ticket_cents: int
    cancellation_rate: float


class PaymentBreakdown(BaseModel):
    method: str
    count: int
    amount_cents: int


class TopItem(BaseModel):
    id: UUID | None = Field(default=None, description="Menu item the lines were ordered from")
    name: str
    quantity: int
    revenue_cents: int


class TimelineEntry(BaseModel):
    day: date
    revenue_cents: int
    orders: int
    average_ticket_cents: int


class ReportHighlights(BaseModel):
    best_day: TimelineEntry | None = Field(
        default=None,
        description="Day with the highest served revenue; null when nothing was served in the window",
    )
    top_item: TopItem | None


class ReportResponse(BaseModel):
    range: ReportRange
    totals: ReportTotals
    status_counts: dict[str, int]
    payment_breakdown: list[PaymentBreakdown]
    top_items: list[TopItem]
    timeline: list[TimelineEntry]
    highlights: ReportHighlights
