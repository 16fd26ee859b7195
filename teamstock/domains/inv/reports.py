# teamstock/domains/inv/reports.py

"""
팀 재고 보고서 집계 모듈입니다. 읽기 전용이며 재고 값을 변경하지 않습니다.

- 거래 집계(총 거래 수, 유형별 수, 최근 거래): start_date ~ end_date 기간 필터 적용
- 품목 집계(재고 가치, 부족/품절, 장소별 재고): 현재 재고 기준
- 일별 거래 추이: 기간 필터와 무관하게 최근 30일
"""

from collections import OrderedDict
from datetime import datetime, timedelta, UTC
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.domains.loc.models import Location
from . import models, schemas

NO_LOCATION_NAME = "No Location"
RECENT_TRANSACTION_LIMIT = 10
TOP_ITEMS_LIMIT = 10
DAILY_WINDOW_DAYS = 30


def _empty_type_counts() -> Dict[str, int]:
    return {kind.value: 0 for kind in models.StockTransactionType}


def _item_value(item: models.Item) -> float:
    return (item.current_stock or 0.0) * (item.price or 0.0)


def _is_low_stock(item: models.Item) -> bool:
    # 품절(0 이하)은 부족 재고에 포함하지 않습니다.
    stock = item.current_stock or 0.0
    return 0 < stock <= (item.minimum_stock or 0.0)


async def _daily_transactions(
    db: AsyncSession, *, team_id: int, since: datetime
) -> List[schemas.ReportDailyTransactions]:
    statement = (
        select(models.StockTransaction.created_at, models.StockTransaction.transaction_type)
        .where(
            models.StockTransaction.team_id == team_id,
            models.StockTransaction.created_at >= since,
        )
        .order_by(models.StockTransaction.created_at)
    )
    by_date: Dict[str, Dict[str, int]] = OrderedDict()
    for created_at, transaction_type in (await db.execute(statement)).all():
        counts = by_date.setdefault(created_at.date().isoformat(), _empty_type_counts())
        counts[models.StockTransactionType(transaction_type).value] += 1
    return [schemas.ReportDailyTransactions(date=day, counts=counts) for day, counts in sorted(by_date.items())]


async def build_team_report(
    db: AsyncSession,
    *,
    team_id: int,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> schemas.TeamReport:
    """팀의 재고 보고서를 계산합니다. 팀 접근 권한 확인은 호출자의 책임입니다."""
    items = list(
        (
            await db.execute(select(models.Item).where(models.Item.team_id == team_id).order_by(models.Item.id))
        ).scalars().all()
    )
    location_names = {
        location_id: name
        for location_id, name in (
            await db.execute(select(Location.id, Location.name).where(Location.team_id == team_id))
        ).all()
    }

    conditions = [models.StockTransaction.team_id == team_id]
    if start_date is not None:
        conditions.append(models.StockTransaction.created_at >= start_date)
    if end_date is not None:
        conditions.append(models.StockTransaction.created_at <= end_date)

    transactions_by_type = _empty_type_counts()
    type_rows = await db.execute(
        select(models.StockTransaction.transaction_type, func.count(models.StockTransaction.id))
        .where(*conditions)
        .group_by(models.StockTransaction.transaction_type)
    )
    for transaction_type, total in type_rows.all():
        transactions_by_type[models.StockTransactionType(transaction_type).value] = int(total)

    recent_rows = await db.execute(
        select(models.StockTransaction, models.Item.name)
        .join(models.Item, models.Item.id == models.StockTransaction.item_id, isouter=True)
        .where(*conditions)
        .order_by(models.StockTransaction.created_at.desc(), models.StockTransaction.id.desc())
        .limit(RECENT_TRANSACTION_LIMIT)
    )
    recent_transactions = [
        schemas.ReportRecentTransaction(
            id=transaction.id,
            transaction_type=transaction.transaction_type,
            quantity=transaction.quantity,
            created_at=transaction.created_at,
            item_name=item_name,
        )
        for transaction, item_name in recent_rows.all()
    ]

    top_items = sorted(items, key=_item_value, reverse=True)[:TOP_ITEMS_LIMIT]

    by_location: Dict[Optional[int], schemas.ReportLocationStock] = OrderedDict()
    for item in items:
        entry = by_location.get(item.location_id)
        if entry is None:
            entry = schemas.ReportLocationStock(
                location_id=item.location_id,
                location_name=location_names.get(item.location_id, NO_LOCATION_NAME),
                item_count=0,
                total_stock=0.0,
                total_value=0.0,
            )
            by_location[item.location_id] = entry
        entry.item_count += 1
        entry.total_stock += item.current_stock or 0.0
        entry.total_value += _item_value(item)

    since = (now or datetime.now(UTC)) - timedelta(days=DAILY_WINDOW_DAYS)

    return schemas.TeamReport(
        total_items=len(items),
        total_locations=len(location_names),
        total_transactions=sum(transactions_by_type.values()),
        total_stock_value=sum(_item_value(item) for item in items),
        low_stock_items=sum(1 for item in items if _is_low_stock(item)),
        out_of_stock_items=sum(1 for item in items if (item.current_stock or 0.0) <= 0),
        transactions_by_type=transactions_by_type,
        recent_transactions=recent_transactions,
        top_items_by_value=[
            schemas.ReportItemValue(
                id=item.id,
                name=item.name,
                sku=item.sku,
                current_stock=item.current_stock or 0.0,
                price=item.price,
                total_value=_item_value(item),
            )
            for item in top_items
        ],
        stock_by_location=list(by_location.values()),
        transactions_by_date=await _daily_transactions(db, team_id=team_id, since=since),
    )
