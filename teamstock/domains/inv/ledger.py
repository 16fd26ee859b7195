# teamstock/domains/inv/ledger.py

"""
재고 원장(Inventory Ledger) 모듈입니다.

`Item.current_stock`을 변경하는 유일한 모듈입니다.
모든 쓰기는 품목별 락(ItemLockRegistry) 안에서 다음 순서로 수행됩니다.

1. 품목 행을 다시 읽음 (지원하는 백엔드에서는 SELECT ... FOR UPDATE)
2. 거래 유형에 따라 새 재고 계산
3. 음수 재고 정책 적용
4. 거래 행 추가 + current_stock 갱신
5. 한 번의 커밋 (실패 시 둘 다 롤백)

불변식: current_stock == initial_quantity + Σ stock_delta (거래 생성 순서 기준)
품목 삭제도 같은 락 안에서 거래 이력을 확인한 뒤 수행됩니다.
"""

import asyncio
import logging
from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.config import settings
from teamstock.core.errors import (
    Conflict,
    Forbidden,
    InsufficientStock,
    ItemNotFound,
    TransactionNotFound,
    ValidationError,
)
from teamstock.core.locks import KeyedLockRegistry
from teamstock.domains.loc import crud as loc_crud
from . import crud, models, schemas

logger = logging.getLogger(__name__)

# 부동소수점 누적 오차 허용 범위
STOCK_EPSILON = 1e-9


class ItemLockRegistry(KeyedLockRegistry):
    """품목 ID별 락. 락은 읽기-수정-쓰기-커밋 전체 구간 동안 유지됩니다."""


item_locks = ItemLockRegistry()


# =============================================================================
# 1. 순수 계산 함수
# =============================================================================
def compute_stock_delta(
    transaction_type: models.StockTransactionType, quantity: float, current_stock: float
) -> float:
    """
    거래가 current_stock에 적용할 부호 있는 변화량을 계산합니다.

    | 유형       | 변화량                      |
    |-----------|-----------------------------|
    | stock_in  | +quantity                   |
    | stock_out | -quantity                   |
    | adjust    | quantity (부호 있음)          |
    | move      | 0                           |
    | count     | quantity - current_stock    |
    """
    kind = models.StockTransactionType(transaction_type)
    if kind == models.StockTransactionType.STOCK_IN:
        return quantity
    if kind == models.StockTransactionType.STOCK_OUT:
        return -quantity
    if kind == models.StockTransactionType.ADJUST:
        return quantity
    if kind == models.StockTransactionType.MOVE:
        return 0.0
    return quantity - current_stock


def _check_negative_stock(item: models.Item, new_stock: float, delta: float) -> None:
    if new_stock >= -STOCK_EPSILON:
        return
    if settings.ALLOW_NEGATIVE_STOCK:
        logger.warning(
            "Item %s (team %s) stock goes negative: %s -> %s",
            item.id, item.team_id, item.current_stock, new_stock,
        )
        return
    raise InsufficientStock(
        f"Insufficient stock for item '{item.name}': "
        f"current stock is {item.current_stock:g}, change of {delta:g} would make it negative"
    )


def _check_move_quantity(item: models.Item, quantity: float) -> None:
    """이동 수량은 현재 재고를 넘을 수 없습니다. 재고 수량 자체는 바뀌지 않습니다."""
    current_stock = item.current_stock or 0.0
    if quantity <= current_stock + STOCK_EPSILON:
        return
    if settings.ALLOW_NEGATIVE_STOCK:
        logger.warning(
            "Item %s (team %s) moves %s with only %s on hand",
            item.id, item.team_id, quantity, current_stock,
        )
        return
    raise InsufficientStock(
        f"Insufficient stock for item '{item.name}': "
        f"current stock is {current_stock:g}, cannot move {quantity:g}"
    )


# =============================================================================
# 2. 내부 헬퍼
# =============================================================================
async def _lock_item(db: AsyncSession, *, item_id: int) -> Optional[models.Item]:
    """품목 행을 잠금 조회합니다. 세션에 캐시된 객체가 있어도 DB 값으로 덮어씁니다."""
    statement = (
        select(models.Item)
        .where(models.Item.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await db.execute(statement)
    return result.scalars().first()


async def _validate_locations(
    db: AsyncSession, *, team_id: int, command: schemas.StockTransactionCreate
) -> None:
    if command.transaction_type == models.StockTransactionType.MOVE:
        # None은 '미지정' 장소로 취급합니다. 양쪽 모두 None이어도 같은 장소입니다.
        if command.source_location_id == command.destination_location_id:
            raise ValidationError("Source and destination locations must be different for a move")

    for location_id in (command.source_location_id, command.destination_location_id):
        if location_id is not None:
            await loc_crud.location.get_for_team(db, team_id=team_id, location_id=location_id)


async def _commit(db: AsyncSession) -> None:
    # 커밋 도중 요청이 취소되어도 커밋은 끝까지 진행됩니다.
    await asyncio.shield(db.commit())


# =============================================================================
# 3. 원장 쓰기 작업
# =============================================================================
async def create_transaction(
    db: AsyncSession,
    *,
    team_id: int,
    actor_user_id: int,
    command: schemas.StockTransactionCreate,
) -> models.StockTransaction:
    """
    재고 거래를 기록하고 품목의 current_stock을 갱신합니다.

    Raises:
        ItemNotFound / LocationNotFound (404), Forbidden (403, 다른 팀 소유),
        ValidationError (400, 같은 장소로의 이동), InsufficientStock (409)
    """
    await _validate_locations(db, team_id=team_id, command=command)

    async with item_locks.lock(command.item_id):
        try:
            item = await _lock_item(db, item_id=command.item_id)
            if item is None:
                raise ItemNotFound("Item not found")
            # 품목의 팀 소속은 락을 잡은 상태에서 다시 확인합니다.
            if item.team_id != team_id:
                raise Forbidden("Item does not belong to this team")

            current_stock = item.current_stock or 0.0
            delta = compute_stock_delta(command.transaction_type, command.quantity, current_stock)
            new_stock = current_stock + delta
            _check_negative_stock(item, new_stock, delta)
            if command.transaction_type == models.StockTransactionType.MOVE:
                _check_move_quantity(item, command.quantity)

            transaction = models.StockTransaction(
                team_id=team_id,
                item_id=item.id,
                transaction_type=command.transaction_type,
                quantity=abs(command.quantity),
                stock_delta=delta,
                source_location_id=command.source_location_id,
                destination_location_id=command.destination_location_id,
                user_id=actor_user_id,
                notes=command.notes,
            )
            item.current_stock = new_stock
            item.updated_at = datetime.now(UTC)
            db.add(transaction)
            db.add(item)
            await _commit(db)
        except Exception:
            await db.rollback()
            raise

        await db.refresh(transaction)

    logger.info(
        "Stock transaction %s (%s, delta %s) recorded for item %s by user %s",
        transaction.id, transaction.transaction_type.value, delta, transaction.item_id, actor_user_id,
    )
    return transaction


async def delete_transaction(
    db: AsyncSession, *, team_id: int, transaction_id: int
) -> models.StockTransaction:
    """
    거래를 삭제하고 그 거래의 stock_delta를 정확히 되돌립니다.
    되돌린 결과에도 음수 재고 정책이 적용됩니다.
    """
    transaction = await db.get(models.StockTransaction, transaction_id)
    if transaction is None or transaction.team_id != team_id:
        raise TransactionNotFound("Transaction not found")

    async with item_locks.lock(transaction.item_id):
        try:
            # 락 대기 중 다른 요청이 먼저 삭제했을 수 있으므로 다시 확인합니다.
            statement = (
                select(models.StockTransaction)
                .where(models.StockTransaction.id == transaction_id)
                .execution_options(populate_existing=True)
            )
            transaction = (await db.execute(statement)).scalars().first()
            if transaction is None:
                raise TransactionNotFound("Transaction not found")

            item = await _lock_item(db, item_id=transaction.item_id)
            if item is None:
                raise ItemNotFound("Item not found")

            reversal = -(transaction.stock_delta or 0.0)
            new_stock = (item.current_stock or 0.0) + reversal
            _check_negative_stock(item, new_stock, reversal)

            item.current_stock = new_stock
            item.updated_at = datetime.now(UTC)
            db.add(item)
            await db.delete(transaction)
            await _commit(db)
        except Exception:
            await db.rollback()
            raise

    logger.info("Stock transaction %s deleted; item %s stock reversed by %s", transaction_id, item.id, reversal)
    return transaction


async def delete_item(db: AsyncSession, *, team_id: int, item_id: int) -> models.Item:
    """
    거래 이력이 없는 품목을 삭제합니다.
    이력 확인과 삭제는 거래 생성과 같은 품목 락 안에서 수행되므로,
    삭제된 품목을 가리키는 거래가 남지 않습니다.

    Raises:
        ItemNotFound (404), Forbidden (403, 다른 팀 소유), Conflict (409, 거래 이력 있음)
    """
    async with item_locks.lock(item_id):
        try:
            item = await _lock_item(db, item_id=item_id)
            if item is None:
                raise ItemNotFound("Item not found")
            if item.team_id != team_id:
                raise Forbidden("Item does not belong to this team")
            if await crud.item.has_transactions(db, item_id=item_id):
                raise Conflict(
                    "Cannot delete item: it has stock transaction history. "
                    "Remove or adjust transactions first."
                )
            await db.delete(item)
            await _commit(db)
        except Exception:
            await db.rollback()
            raise

    logger.info("Item %s deleted from team %s", item_id, team_id)
    return item


# =============================================================================
# 4. 조회 작업
# =============================================================================
async def list_team_transactions(
    db: AsyncSession,
    *,
    team_id: int,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 500,
) -> List[models.StockTransaction]:
    """팀의 재고 거래를 최신순으로 조회합니다. search는 품목명/비고 부분 일치입니다."""
    statement = select(models.StockTransaction).where(models.StockTransaction.team_id == team_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        statement = statement.join(models.Item, models.Item.id == models.StockTransaction.item_id).where(
            or_(models.Item.name.ilike(pattern), models.StockTransaction.notes.ilike(pattern))
        )
    statement = (
        statement.order_by(models.StockTransaction.created_at.desc(), models.StockTransaction.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(statement)
    return list(result.scalars().all())


async def list_item_transactions(
    db: AsyncSession, *, team_id: int, item_id: int
) -> List[models.StockTransaction]:
    """품목의 재고 거래를 최신순으로 조회합니다. 품목은 팀 소유여야 합니다."""
    await crud.item.get_for_team(db, team_id=team_id, item_id=item_id)
    statement = (
        select(models.StockTransaction)
        .where(models.StockTransaction.item_id == item_id)
        .order_by(models.StockTransaction.created_at.desc(), models.StockTransaction.id.desc())
    )
    result = await db.execute(statement)
    return list(result.scalars().all())


async def replay_item_stock(db: AsyncSession, *, item: models.Item) -> float:
    """거래 기록으로부터 재고를 다시 계산합니다: initial_quantity + Σ stock_delta."""
    statement = select(func.coalesce(func.sum(models.StockTransaction.stock_delta), 0.0)).where(
        models.StockTransaction.item_id == item.id
    )
    result = await db.execute(statement)
    return (item.initial_quantity or 0.0) + float(result.scalar() or 0.0)
