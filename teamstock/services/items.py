# teamstock/services/items.py

"""
품목 서비스 파사드. 모든 작업은 팀의 활성 구독이 필요합니다.
"""

from typing import Any, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.permissions import Permission
from teamstock.domains.inv import crud as inv_crud
from teamstock.domains.inv import ledger
from teamstock.domains.inv import schemas as inv_schemas

from .common import require_payload, require_team_access, service_operation


@service_operation("loading items")
async def list_team_items(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], search: Optional[str] = None
) -> List[inv_schemas.ItemRead]:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    items = await inv_crud.item.get_by_team(db, team_id=team_id, search=search)
    return [inv_schemas.ItemRead.model_validate(item) for item in items]


@service_operation("loading item")
async def get_team_item(
    db: AsyncSession, *, team_id: int, item_id: int, request_user_id: Optional[int]
) -> inv_schemas.ItemRead:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    item = await inv_crud.item.get_for_team(db, team_id=team_id, item_id=item_id)
    return inv_schemas.ItemRead.model_validate(item)


@service_operation("creating item")
async def create_team_item(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], payload: Any
) -> inv_schemas.ItemRead:
    data = require_payload(inv_schemas.ItemCreate, payload)
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.ITEM_WRITE,
        require_subscription=True,
    )
    item = await inv_crud.item.create(db, team_id=team_id, obj_in=data)
    return inv_schemas.ItemRead.model_validate(item)


@service_operation("updating item")
async def update_team_item(
    db: AsyncSession, *, team_id: int, item_id: int, request_user_id: Optional[int], payload: Any
) -> inv_schemas.ItemRead:
    data = require_payload(inv_schemas.ItemUpdate, payload)
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.ITEM_WRITE,
        require_subscription=True,
    )
    item = await inv_crud.item.get_for_team(db, team_id=team_id, item_id=item_id)
    item = await inv_crud.item.update(db, db_obj=item, obj_in=data)
    return inv_schemas.ItemRead.model_validate(item)


@service_operation("deleting item")
async def delete_team_item(
    db: AsyncSession, *, team_id: int, item_id: int, request_user_id: Optional[int]
) -> None:
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.ITEM_DELETE,
        require_subscription=True,
    )
    await ledger.delete_item(db, team_id=team_id, item_id=item_id)
    return None
