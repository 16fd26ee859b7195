# teamstock/domains/inv/routers.py

"""
'inv' 도메인 (품목, 재고 거래, 보고서)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core import dependencies as deps
from teamstock.services import items as item_service
from teamstock.services import reports as report_service
from teamstock.services import transactions as transaction_service


router = APIRouter(
    tags=["Inventory Management (재고 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 품목 (Item) 엔드포인트
# =============================================================================
@router.get("/teams/{team_id}/items", summary="팀 품목 목록 조회")
async def read_items(
    team_id: int,
    search: Optional[str] = Query(None, description="이름/SKU/바코드 부분 일치 검색"),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await item_service.list_team_items(
        db, team_id=team_id, request_user_id=request_user_id, search=search
    )
    return deps.service_response(result)


@router.post("/teams/{team_id}/items", status_code=status.HTTP_201_CREATED, summary="새 품목 생성")
async def create_item(
    team_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await item_service.create_team_item(
        db, team_id=team_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result, status.HTTP_201_CREATED)


@router.get("/teams/{team_id}/items/{item_id}", summary="품목 상세 조회")
async def read_item(
    team_id: int,
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await item_service.get_team_item(
        db, team_id=team_id, item_id=item_id, request_user_id=request_user_id
    )
    return deps.service_response(result)


@router.patch("/teams/{team_id}/items/{item_id}", summary="품목 정보 수정")
async def update_item(
    team_id: int,
    item_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await item_service.update_team_item(
        db, team_id=team_id, item_id=item_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result)


@router.delete("/teams/{team_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="품목 삭제")
async def delete_item(
    team_id: int,
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await item_service.delete_team_item(
        db, team_id=team_id, item_id=item_id, request_user_id=request_user_id
    )
    return deps.service_response(result, status.HTTP_204_NO_CONTENT)


@router.get("/teams/{team_id}/items/{item_id}/transactions", summary="품목별 재고 거래 조회")
async def read_item_transactions(
    team_id: int,
    item_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await transaction_service.list_item_transactions(
        db, team_id=team_id, item_id=item_id, request_user_id=request_user_id
    )
    return deps.service_response(result)


# =============================================================================
# 2. 재고 거래 (StockTransaction) 엔드포인트
# =============================================================================
@router.get("/teams/{team_id}/transactions", summary="팀 재고 거래 목록 조회")
async def read_transactions(
    team_id: int,
    search: Optional[str] = Query(None, description="품목명/비고 부분 일치 검색"),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await transaction_service.list_team_transactions(
        db, team_id=team_id, request_user_id=request_user_id, search=search
    )
    return deps.service_response(result)


@router.post("/teams/{team_id}/transactions", status_code=status.HTTP_201_CREATED, summary="재고 거래 등록")
async def create_transaction(
    team_id: int,
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await transaction_service.create_team_stock_transaction(
        db, team_id=team_id, request_user_id=request_user_id, payload=payload
    )
    return deps.service_response(result, status.HTTP_201_CREATED)


@router.delete(
    "/teams/{team_id}/transactions/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="재고 거래 삭제 (재고 되돌림)",
)
async def delete_transaction(
    team_id: int,
    transaction_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await transaction_service.delete_team_transaction(
        db, team_id=team_id, transaction_id=transaction_id, request_user_id=request_user_id
    )
    return deps.service_response(result, status.HTTP_204_NO_CONTENT)


# =============================================================================
# 3. 보고서 (Report) 엔드포인트
# =============================================================================
@router.get("/teams/{team_id}/reports", summary="팀 재고 보고서 조회")
async def read_team_report(
    team_id: int,
    start_date: Optional[datetime] = Query(None, description="거래 집계 시작 일시 (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="거래 집계 종료 일시 (ISO 8601)"),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await report_service.get_team_report_stats_for_user(
        db, team_id=team_id, request_user_id=request_user_id, start_date=start_date, end_date=end_date
    )
    return deps.service_response(result)
