# teamstock/domains/team/routers.py

"""
'team' 도메인 (팀, 팀 멤버)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
비즈니스 규칙은 서비스 파사드가 처리하며, 라우터는 결과를 HTTP 응답으로 변환만 합니다.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core import dependencies as deps
from teamstock.services import admin as admin_service
from teamstock.services import members as member_service
from teamstock.services import teams as team_service


router = APIRouter(
    tags=["Team Management (팀 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 팀 (Team) 엔드포인트
# =============================================================================
@router.get("/teams", summary="내 팀 목록 조회")
async def read_my_teams(
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await team_service.list_user_teams(db, request_user_id=request_user_id)
    return deps.service_response(result)


@router.post("/teams", status_code=status.HTTP_201_CREATED, summary="새 팀 생성")
async def create_team(
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await team_service.create_team_for_user(db, request_user_id=request_user_id, payload=payload)
    return deps.service_response(result, status.HTTP_201_CREATED)


@router.get("/teams/{team_id}", summary="팀 상세 조회")
async def read_team(
    team_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await team_service.get_team_for_user(db, team_id=team_id, request_user_id=request_user_id)
    return deps.service_response(result)


@router.patch("/teams/{team_id}", summary="팀 정보 수정")
async def update_team(
    team_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await team_service.update_team_details(
        db, team_id=team_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result)


@router.delete("/teams/{team_id}", status_code=status.HTTP_204_NO_CONTENT, summary="팀 삭제")
async def delete_team(
    team_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await team_service.delete_team_with_authorization(
        db, team_id=team_id, request_user_id=request_user_id
    )
    return deps.service_response(result, status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. 팀 멤버 (TeamMembership) 엔드포인트
# =============================================================================
@router.get("/teams/{team_id}/members", summary="팀 멤버 목록 조회")
async def read_team_members(
    team_id: int,
    include_suspended: bool = Query(False),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await member_service.list_team_members(
        db, team_id=team_id, request_user_id=request_user_id, include_suspended=include_suspended
    )
    return deps.service_response(result)


@router.post("/teams/{team_id}/members", status_code=status.HTTP_201_CREATED, summary="팀 멤버 추가")
async def add_team_member(
    team_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await member_service.add_team_member(
        db, team_id=team_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result, status.HTTP_201_CREATED)


@router.patch("/teams/{team_id}/members/{user_id}", summary="팀 멤버 역할 변경")
async def update_team_member(
    team_id: int,
    user_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await member_service.update_team_member_role(
        db, team_id=team_id, user_id=user_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result)


@router.delete("/teams/{team_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="팀 멤버 제거")
async def remove_team_member(
    team_id: int,
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await member_service.remove_team_member(
        db, team_id=team_id, user_id=user_id, request_user_id=request_user_id
    )
    return deps.service_response(result, status.HTTP_204_NO_CONTENT)


# =============================================================================
# 3. 슈퍼 관리자 (Super Admin) 엔드포인트
# =============================================================================
@router.get("/admin/teams", summary="전체 팀 목록 조회 (슈퍼 관리자)")
async def read_all_teams(
    page: Optional[str] = Query(None, description="페이지 번호 (기본 1)"),
    page_size: Optional[str] = Query(None, description="페이지 크기 (기본 20, 최대 100)"),
    search: Optional[str] = Query(None, description="팀명/회사명 부분 일치 검색"),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await admin_service.list_teams_for_super_admin(
        db, request_user_id=request_user_id, page=page, page_size=page_size, search=search
    )
    return deps.service_response(result)
