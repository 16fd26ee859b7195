# teamstock/domains/inv/models.py

"""
'inv' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- items: 팀별 품목. current_stock은 initial_quantity + Σ(거래의 stock_delta)와 항상 같습니다.
- stock_transactions: 추가 전용(append-only) 재고 거래 기록. 생성 후 수정하지 않습니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class StockTransactionType(str, Enum):
    STOCK_IN = "stock_in"      # 입고: +quantity
    STOCK_OUT = "stock_out"    # 출고: -quantity
    ADJUST = "adjust"          # 조정: 부호 있는 증감
    MOVE = "move"              # 장소 이동: 수량 변화 없음
    COUNT = "count"            # 실사: quantity가 실제 재고


# =============================================================================
# 1. items 테이블 모델
# =============================================================================
class ItemBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="품목 고유 ID")
    team_id: int = Field(foreign_key="teams.id", index=True, description="소유 팀 ID (변경 불가)")
    name: str = Field(max_length=255, description="품목명")
    sku: Optional[str] = Field(default=None, max_length=100, description="SKU 코드")
    barcode: Optional[str] = Field(default=None, max_length=100, description="바코드 (팀 내 고유)")
    cost: Optional[float] = Field(default=None, description="원가")
    price: Optional[float] = Field(default=None, description="판매가")
    item_type: Optional[str] = Field(default=None, max_length=100, description="품목 유형")
    brand: Optional[str] = Field(default=None, max_length=100, description="브랜드")
    notes: Optional[str] = Field(default=None, description="비고")
    location_id: Optional[int] = Field(default=None, foreign_key="locations.id", description="기본 보관 장소 ID")
    initial_quantity: float = Field(default=0, description="생성 시 초기 수량")
    current_stock: float = Field(default=0, description="현재 재고 (원장만 변경)")
    minimum_stock: float = Field(default=0, description="최소 재고 (알림 기준)")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class Item(ItemBase, table=True):
    __tablename__ = "items"
    __table_args__ = (UniqueConstraint("team_id", "barcode", name="uq_items_team_barcode"),)


# =============================================================================
# 2. stock_transactions 테이블 모델
# =============================================================================
class StockTransactionBase(SQLModel):
    """
    quantity는 요청된 크기(부호 없음), stock_delta는 current_stock에 실제 적용된 부호 있는 변화량입니다.
    거래 삭제 시 stock_delta를 그대로 되돌립니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="거래 고유 ID")
    team_id: int = Field(foreign_key="teams.id", index=True, description="팀 ID")
    item_id: int = Field(foreign_key="items.id", description="품목 ID")
    transaction_type: StockTransactionType = Field(description="거래 유형")
    quantity: float = Field(description="거래 수량 (부호 없음)")
    stock_delta: float = Field(default=0, description="재고에 적용된 변화량")
    source_location_id: Optional[int] = Field(default=None, foreign_key="locations.id", description="출발 장소 ID")
    destination_location_id: Optional[int] = Field(default=None, foreign_key="locations.id", description="도착 장소 ID")
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", description="거래 수행자 ID")
    notes: Optional[str] = Field(default=None, description="비고")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="거래 일시"
    )


class StockTransaction(StockTransactionBase, table=True):
    __tablename__ = "stock_transactions"
    __table_args__ = (Index("ix_stock_transactions_item_created", "item_id", "created_at"),)
