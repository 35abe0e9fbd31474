"""
Table schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from comanda.models.table import TableShape


class TableCreateRequest(BaseModel):
    number: int = Field(ge=1, le=9999)


class TableUpdateRequest(BaseModel):
    is_enabled: bool


class TableLayoutItem(BaseModel):
    id: UUID
    position_x: float
    position_y: float
    width: float = Field(gt=0, le=2000)
    height: float = Field(gt=0, le=2000)
    shape: TableShape = TableShape.square
    rotation: float = Field(default=0, ge=-360, le=360)


class TableLayoutRequest(BaseModel):
    tables: list[TableLayoutItem] = Field(min_length=1)


class TableResponse(BaseModel):
    id: UUID
    org_id: UUID
    number: int
    qr_token: str
    qr_url: str
    is_enabled: bool
    position_x: float
    position_y: float
    width: float
    height: float
    shape: TableShape
    rotation: float
    created_at: datetime
    updated_at: datetime


class TableListResponse(BaseModel):
    tables: list[TableResponse]
    total: int
