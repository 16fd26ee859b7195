# teamstock/services/transactions.py

"""
재고 거래 서비스 파사드.

재고 변경은 모두 `teamstock.domains.inv.ledger`를 통해서만 이루어집니다.
"""

from typing import Any, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.permissions import Permission
from teamstock.domains.inv import crud as inv_crud
from teamstock.domains.inv import ledger
from teamstock.domains.inv import schemas as inv_schemas

from .common import require_payload, require_team_access, service_operation


@service_operation("creating stock transaction")
async def create_team_stock_transaction(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], payload: Any
) -> inv_schemas.StockTransactionResult:
    command = require_payload(inv_schemas.StockTransactionCreate, payload)
    auth = await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.STOCK_WRITE,
        require_subscription=True,
    )
    transaction = await ledger.create_transaction(
        db, team_id=team_id, actor_user_id=auth.user.id, command=command
    )
    item = await inv_crud.item.get(db, transaction.item_id)
    return inv_schemas.StockTransactionResult(
        transaction=inv_schemas.StockTransactionRead.model_validate(transaction),
        current_stock=item.current_stock,
    )


@service_operation("loading transactions")
async def list_team_transactions(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], search: Optional[str] = None
) -> List[inv_schemas.StockTransactionRead]:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    transactions = await ledger.list_team_transactions(db, team_id=team_id, search=search)
    return [inv_schemas.StockTransactionRead.model_validate(t) for t in transactions]


@service_operation("loading item transactions")
async def list_item_transactions(
    db: AsyncSession, *, team_id: int, item_id: int, request_user_id: Optional[int]
) -> List[inv_schemas.StockTransactionRead]:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    transactions = await ledger.list_item_transactions(db, team_id=team_id, item_id=item_id)
    return [inv_schemas.StockTransactionRead.model_validate(t) for t in transactions]


@service_operation("deleting transaction")
async def delete_team_transaction(
    db: AsyncSession, *, team_id: int, transaction_id: int, request_user_id: Optional[int]
) -> None:
    """거래를 삭제하고 재고 변화량을 되돌립니다 (팀 관리자 전용)."""
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.TRANSACTION_DELETE,
        require_subscription=True,
    )
    await ledger.delete_transaction(db, team_id=team_id, transaction_id=transaction_id)
    return None
