# teamstock/domains/loc/routers.py

"""
'loc' 도메인 (팀별 보관 장소)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core import dependencies as deps
from teamstock.services import locations as location_service


router = APIRouter(
    tags=["Location Management (장소 관리)"],
    responses={404: {"description": "Not found"}},
)


@router.get("/teams/{team_id}/locations", summary="팀 장소 목록 조회")
async def read_locations(
    team_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await location_service.list_team_locations(db, team_id=team_id, request_user_id=request_user_id)
    return deps.service_response(result)


@router.post("/teams/{team_id}/locations", status_code=status.HTTP_201_CREATED, summary="새 장소 생성")
async def create_location(
    team_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await location_service.create_team_location(
        db, team_id=team_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result, status.HTTP_201_CREATED)


@router.get("/teams/{team_id}/locations/{location_id}", summary="장소 상세 조회")
async def read_location(
    team_id: int,
    location_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await location_service.get_team_location(
        db, team_id=team_id, location_id=location_id, request_user_id=request_user_id
    )
    return deps.service_response(result)


@router.patch("/teams/{team_id}/locations/{location_id}", summary="장소 정보 수정")
async def update_location(
    team_id: int,
    location_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await location_service.update_team_location(
        db, team_id=team_id, location_id=location_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result)


@router.delete("/teams/{team_id}/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT, summary="장소 삭제")
async def delete_location(
    team_id: int,
    location_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await location_service.delete_team_location(
        db, team_id=team_id, location_id=location_id, request_user_id=request_user_id
    )
    return deps.service_response(result, status.HTTP_204_NO_CONTENT)
