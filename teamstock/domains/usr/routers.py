# teamstock/domains/usr/routers.py

"""
'usr' 도메인 (인증, 회원 가입, 현재 사용자)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from datetime import timedelta
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.config import settings
from teamstock.core import dependencies as deps
from teamstock.core.security import create_access_token
from teamstock.services import users as user_service

from . import crud as usr_crud
from . import schemas as usr_schemas


# 라우터 인스턴스 생성 (prefix는 main.py에서 관리)
router = APIRouter(
    tags=["Authentication (인증)"],
    responses={404: {"description": "Not found"}},
)


@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """OAuth2 password 폼의 username 필드에 이메일을 넣어 로그인합니다."""
    user = await usr_crud.user.authenticate(db, email=form_data.username, password=form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(data={"sub": str(user.id)}, expires_delta=access_token_expires)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="현재 사용자 정보 조회")
async def read_users_me(
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    user = await usr_crud.user.get(db, request_user_id) if request_user_id else None
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.post("/auth/signup", status_code=status.HTTP_201_CREATED, summary="회원 가입 (회사 생성 포함)")
async def signup(
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
):
    result = await user_service.signup_user(db, payload=payload)
    return deps.service_response(result, status.HTTP_201_CREATED)


@router.patch("/users/me/password", summary="내 비밀번호 변경")
async def update_my_password(
    payload: Any = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
    request_user_id: Optional[int] = Depends(deps.get_request_user_id),
):
    result = await user_service.update_own_password(db, request_user_id=request_user_id, payload=payload)
    return deps.service_response(result)
