# teamstock/domains/loc/crud.py

"""
'loc' 도메인 (팀별 보관 장소)의 CRUD 로직을 담당하는 모듈입니다.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.crud_base import CRUDBase
from teamstock.core.errors import Conflict, Forbidden, LocationNotFound
from teamstock.domains.inv.models import Item, StockTransaction

from . import models as loc_models
from . import schemas as loc_schemas

logger = logging.getLogger(__name__)

DUPLICATE_LOCATION_MESSAGE = "A location with this name already exists for this team"


class CRUDLocation(
    CRUDBase[
        loc_models.Location,
        loc_schemas.LocationCreate,
        loc_schemas.LocationUpdate
    ]
):
    def __init__(self):
        super().__init__(model=loc_models.Location)

    async def get_by_team(
        self, db: AsyncSession, *, team_id: int, skip: int = 0, limit: int = 1000
    ) -> List[loc_models.Location]:
        """특정 팀에 속한 장소 목록을 이름순으로 조회합니다."""
        return await self.get_multi(db, skip=skip, limit=limit, order_by_field="name", team_id=team_id)

    async def get_by_name_and_team(
        self, db: AsyncSession, *, team_id: int, name: str
    ) -> Optional[loc_models.Location]:
        return await self.get_one_filtered(db, filters={"team_id": team_id, "name": name})

    async def get_for_team(self, db: AsyncSession, *, team_id: int, location_id: int) -> loc_models.Location:
        """
        팀 소유 장소를 조회합니다.
        없으면 LocationNotFound(404), 다른 팀 소유이면 Forbidden(403)을 발생시킵니다.
        """
        db_obj = await self.get(db, location_id)
        if db_obj is None:
            raise LocationNotFound("Location not found")
        if db_obj.team_id != team_id:
            raise Forbidden("Location does not belong to this team")
        return db_obj

    async def create(
        self, db: AsyncSession, *, team_id: int, obj_in: loc_schemas.LocationCreate
    ) -> loc_models.Location:
        """팀 내 이름 중복을 확인하고 생성합니다."""
        if await self.get_by_name_and_team(db, team_id=team_id, name=obj_in.name):
            raise Conflict(DUPLICATE_LOCATION_MESSAGE)
        return await super().create(db, obj_in=obj_in, extra={"team_id": team_id})

    async def update(
        self, db: AsyncSession, *, db_obj: loc_models.Location, obj_in: loc_schemas.LocationUpdate
    ) -> loc_models.Location:
        """장소 정보를 업데이트합니다. 이름 변경 시 팀 내 중복을 확인합니다."""
        if obj_in.name is not None and obj_in.name != db_obj.name:
            existing = await self.get_by_name_and_team(db, team_id=db_obj.team_id, name=obj_in.name)
            if existing and existing.id != db_obj.id:
                raise Conflict(DUPLICATE_LOCATION_MESSAGE)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def is_referenced(self, db: AsyncSession, *, location_id: int) -> bool:
        """품목의 기본 장소나 재고 거래의 출발/도착 장소로 참조되는지 확인합니다."""
        item_query = select(Item.id).where(Item.location_id == location_id)
        result = await db.execute(select(item_query.exists()))
        if result.scalar():
            return True

        transaction_query = select(StockTransaction.id).where(
            or_(
                StockTransaction.source_location_id == location_id,
                StockTransaction.destination_location_id == location_id,
            )
        )
        result = await db.execute(select(transaction_query.exists()))
        return bool(result.scalar())

    async def remove(self, db: AsyncSession, *, db_obj: loc_models.Location) -> loc_models.Location:
        """장소를 삭제합니다. 품목이나 거래가 참조 중이면 삭제를 제한합니다."""
        if await self.is_referenced(db, location_id=db_obj.id):
            logger.info("Refusing to delete location %s: still referenced", db_obj.id)
            raise Conflict("Cannot delete location: it is referenced by items or stock transactions")

        await db.delete(db_obj)
        await db.commit()
        return db_obj


location = CRUDLocation()
