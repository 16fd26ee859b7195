# teamstock/services/locations.py

"""
장소 서비스 파사드. 모든 작업은 팀의 활성 구독이 필요합니다.
"""

from typing import Any, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.permissions import Permission
from teamstock.domains.loc import crud as loc_crud
from teamstock.domains.loc import schemas as loc_schemas

from .common import require_payload, require_team_access, service_operation


@service_operation("loading locations")
async def list_team_locations(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int]
) -> List[loc_schemas.LocationRead]:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    locations = await loc_crud.location.get_by_team(db, team_id=team_id)
    return [loc_schemas.LocationRead.model_validate(location) for location in locations]


@service_operation("loading location")
async def get_team_location(
    db: AsyncSession, *, team_id: int, location_id: int, request_user_id: Optional[int]
) -> loc_schemas.LocationRead:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    location = await loc_crud.location.get_for_team(db, team_id=team_id, location_id=location_id)
    return loc_schemas.LocationRead.model_validate(location)


@service_operation("creating location")
async def create_team_location(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], payload: Any
) -> loc_schemas.LocationRead:
    data = require_payload(loc_schemas.LocationCreate, payload)
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.LOCATION_WRITE,
        require_subscription=True,
    )
    location = await loc_crud.location.create(db, team_id=team_id, obj_in=data)
    return loc_schemas.LocationRead.model_validate(location)


@service_operation("updating location")
async def update_team_location(
    db: AsyncSession, *, team_id: int, location_id: int, request_user_id: Optional[int], payload: Any
) -> loc_schemas.LocationRead:
    data = require_payload(loc_schemas.LocationUpdate, payload)
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.LOCATION_WRITE,
        require_subscription=True,
    )
    location = await loc_crud.location.get_for_team(db, team_id=team_id, location_id=location_id)
    location = await loc_crud.location.update(db, db_obj=location, obj_in=data)
    return loc_schemas.LocationRead.model_validate(location)


@service_operation("deleting location")
async def delete_team_location(
    db: AsyncSession, *, team_id: int, location_id: int, request_user_id: Optional[int]
) -> None:
    await require_team_access(
        db,
        team_id=team_id,
        request_user_id=request_user_id,
        permission=Permission.LOCATION_DELETE,
        require_subscription=True,
    )
    location = await loc_crud.location.get_for_team(db, team_id=team_id, location_id=location_id)
    await loc_crud.location.remove(db, db_obj=location)
    return None
