# teamstock/domains/inv/schemas.py

"""
'inv' 도메인(품목, 재고 거래)의 요청/응답 스키마를 정의하는 모듈입니다.
"""

import math
from typing import Dict, List, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import field_validator, model_validator

from teamstock.core.contracts import require_text, strip_or_none
from . import models as inv_models


# =============================================================================
# 1. 품목 (Item) 스키마
# =============================================================================
class ItemCreate(SQLModel):
    name: str = Field(..., max_length=255, description="품목명")
    sku: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    cost: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    item_type: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    location_id: Optional[int] = Field(None, description="기본 보관 장소 ID")
    initial_quantity: float = Field(0, ge=0, description="초기 수량 (current_stock의 시작값)")
    minimum_stock: float = Field(0, ge=0, description="최소 재고")

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value):
        return require_text(value, "Item name is required")

    @field_validator("sku", "barcode", "item_type", "brand", "notes", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return strip_or_none(value)


class ItemUpdate(SQLModel):
    """
    품목 정보 수정 스키마. team_id, initial_quantity, current_stock은 수정할 수 없습니다.
    """
    name: Optional[str] = Field(None, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    cost: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    item_type: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    location_id: Optional[int] = None
    minimum_stock: Optional[float] = Field(None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value):
        return require_text(value, "Item name cannot be empty")

    @field_validator("sku", "barcode", "item_type", "brand", "notes", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return strip_or_none(value)


class ItemRead(SQLModel):
    id: int
    team_id: int
    name: str
    sku: Optional[str] = None
    barcode: Optional[str] = None
    cost: Optional[float] = None
    price: Optional[float] = None
    item_type: Optional[str] = None
    brand: Optional[str] = None
    notes: Optional[str] = None
    location_id: Optional[int] = None
    initial_quantity: float
    current_stock: float
    minimum_stock: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# 2. 재고 거래 (StockTransaction) 스키마
# =============================================================================
class StockTransactionCreate(SQLModel):
    """
    재고 거래 생성 명령입니다.
    - stock_in / stock_out / move: quantity > 0
    - adjust: 0이 아닌 부호 있는 증감량
    - count: 실사 수량 (>= 0)
    `location_id`는 단일 장소 지정용 별칭으로, 출고는 출발 장소, 그 외에는 도착 장소로 해석합니다.
    """
    item_id: int = Field(..., gt=0)
    transaction_type: inv_models.StockTransactionType
    quantity: float
    source_location_id: Optional[int] = None
    destination_location_id: Optional[int] = None
    location_id: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("notes", mode="before")
    @classmethod
    def _strip_notes(cls, value):
        return strip_or_none(value)

    @model_validator(mode="after")
    def _check_quantity(self):
        if not math.isfinite(self.quantity):
            raise ValueError("Quantity must be a valid number")

        kind = self.transaction_type
        if kind == inv_models.StockTransactionType.ADJUST:
            if self.quantity == 0:
                raise ValueError("Adjustment quantity cannot be zero")
        elif kind == inv_models.StockTransactionType.COUNT:
            if self.quantity < 0:
                raise ValueError("Counted quantity cannot be negative")
        elif self.quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        if self.location_id is not None and kind != inv_models.StockTransactionType.MOVE:
            if kind == inv_models.StockTransactionType.STOCK_OUT:
                if self.source_location_id is None:
                    self.source_location_id = self.location_id
            elif self.destination_location_id is None:
                self.destination_location_id = self.location_id
        return self


class StockTransactionRead(SQLModel):
    id: int
    team_id: int
    item_id: int
    transaction_type: inv_models.StockTransactionType
    quantity: float
    stock_delta: float
    source_location_id: Optional[int] = None
    destination_location_id: Optional[int] = None
    user_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class StockTransactionResult(SQLModel):
    """거래 생성 결과: 저장된 거래와 갱신된 현재 재고."""
    transaction: StockTransactionRead
    current_stock: float


# =============================================================================
# 3. 팀 보고서 (Report) 스키마
# =============================================================================
class ReportRecentTransaction(SQLModel):
    id: int
    transaction_type: inv_models.StockTransactionType
    quantity: float
    created_at: Optional[datetime] = None
    item_name: Optional[str] = None


class ReportItemValue(SQLModel):
    id: int
    name: str
    sku: Optional[str] = None
    current_stock: float
    price: Optional[float] = None
    total_value: float


class ReportLocationStock(SQLModel):
    """품목의 기본 보관 장소(location_id)별 집계. 장소가 없는 품목은 location_id=None."""
    location_id: Optional[int] = None
    location_name: str
    item_count: int
    total_stock: float
    total_value: float


class ReportDailyTransactions(SQLModel):
    date: str
    counts: Dict[str, int]


class TeamReport(SQLModel):
    """
    팀 재고 보고서입니다.
    거래 수와 유형별 집계, 최근 거래는 기간(start_date ~ end_date) 필터를 따르고,
    품목/장소 집계는 현재 재고 기준입니다.
    """
    total_items: int
    total_locations: int
    total_transactions: int
    total_stock_value: float
    low_stock_items: int
    out_of_stock_items: int
    transactions_by_type: Dict[str, int]
    recent_transactions: List[ReportRecentTransaction]
    top_items_by_value: List[ReportItemValue]
    stock_by_location: List[ReportLocationStock]
    transactions_by_date: List[ReportDailyTransactions]
