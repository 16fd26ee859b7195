# teamstock/domains/inv/crud.py

"""
'inv' 도메인의 품목(Item) CRUD 로직을 담당하는 모듈입니다.

품목 디렉터리는 생성 시 current_stock을 initial_quantity로 초기화하는 것 외에는
재고 수량을 변경하지 않습니다. 재고 변경은 `ledger` 모듈의 책임입니다.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.crud_base import CRUDBase
from teamstock.core.errors import Conflict, Forbidden, ItemNotFound
from teamstock.domains.loc import crud as loc_crud

from . import models as inv_models
from . import schemas as inv_schemas

logger = logging.getLogger(__name__)

DUPLICATE_BARCODE_MESSAGE = "An item with this barcode already exists"


# =============================================================================
# 1. 품목 (Item) CRUD
# =============================================================================
class CRUDItem(CRUDBase[inv_models.Item, inv_schemas.ItemCreate, inv_schemas.ItemUpdate]):
    def __init__(self):
        super().__init__(model=inv_models.Item)

    async def get_by_team(
        self,
        db: AsyncSession,
        *,
        team_id: int,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 1000,
    ) -> List[inv_models.Item]:
        """팀의 품목 목록을 이름순으로 조회합니다. search는 이름/SKU/바코드 부분 일치입니다."""
        statement = select(self.model).where(self.model.team_id == team_id)
        if search:
            pattern = f"%{search.strip()}%"
            statement = statement.where(
                or_(
                    self.model.name.ilike(pattern),
                    self.model.sku.ilike(pattern),
                    self.model.barcode.ilike(pattern),
                )
            )
        statement = statement.order_by(self.model.name, self.model.id).offset(skip).limit(limit)
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_for_team(self, db: AsyncSession, *, team_id: int, item_id: int) -> inv_models.Item:
        """
        팀 소유 품목을 조회합니다.
        없으면 ItemNotFound(404), 다른 팀 소유이면 Forbidden(403)을 발생시킵니다.
        """
        db_obj = await self.get(db, item_id)
        if db_obj is None:
            raise ItemNotFound("Item not found")
        if db_obj.team_id != team_id:
            raise Forbidden("Item does not belong to this team")
        return db_obj

    async def get_by_barcode_and_team(
        self, db: AsyncSession, *, team_id: int, barcode: str
    ) -> Optional[inv_models.Item]:
        return await self.get_one_filtered(db, filters={"team_id": team_id, "barcode": barcode})

    async def create(
        self, db: AsyncSession, *, team_id: int, obj_in: inv_schemas.ItemCreate
    ) -> inv_models.Item:
        """
        바코드 중복과 기본 장소의 팀 소속을 확인하고 품목을 생성합니다.
        current_stock은 initial_quantity로 시작합니다.
        """
        if obj_in.barcode and await self.get_by_barcode_and_team(db, team_id=team_id, barcode=obj_in.barcode):
            raise Conflict(DUPLICATE_BARCODE_MESSAGE)
        if obj_in.location_id is not None:
            await loc_crud.location.get_for_team(db, team_id=team_id, location_id=obj_in.location_id)

        return await super().create(
            db,
            obj_in=obj_in,
            extra={"team_id": team_id, "current_stock": obj_in.initial_quantity},
        )

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.Item, obj_in: inv_schemas.ItemUpdate
    ) -> inv_models.Item:
        """품목 정보를 업데이트합니다. 재고 수량과 소유 팀은 변경되지 않습니다."""
        if obj_in.barcode and obj_in.barcode != db_obj.barcode:
            existing = await self.get_by_barcode_and_team(db, team_id=db_obj.team_id, barcode=obj_in.barcode)
            if existing and existing.id != db_obj.id:
                raise Conflict(DUPLICATE_BARCODE_MESSAGE)
        if obj_in.location_id is not None and obj_in.location_id != db_obj.location_id:
            await loc_crud.location.get_for_team(db, team_id=db_obj.team_id, location_id=obj_in.location_id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def has_transactions(self, db: AsyncSession, *, item_id: int) -> bool:
        query = select(inv_models.StockTransaction.id).where(inv_models.StockTransaction.item_id == item_id)
        result = await db.execute(select(query.exists()))
        return bool(result.scalar())


item = CRUDItem()
