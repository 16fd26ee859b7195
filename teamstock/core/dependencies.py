# teamstock/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- 요청 사용자 ID 식별 (get_request_user_id).
- 서비스 결과(ServiceResult)를 HTTP 응답으로 변환 (service_response).
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.database import get_session
from teamstock.core.errors import ServiceResult
from teamstock.core.security import decode_user_id, oauth2_scheme


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    teamstock.core.database.get_session을 래핑하여 사용합니다.
    """
    async for session in get_session():
        yield session


async def get_request_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[int]:
    """
    `Authorization: Bearer <token>` 헤더에서 사용자 ID를 식별합니다.
    토큰이 없거나 유효하지 않으면 None (거부 판정은 권한 게이트가 수행).
    """
    return decode_user_id(token)


def service_response(result: ServiceResult, success_status: int = status.HTTP_200_OK) -> Response:
    """
    ServiceResult를 JSON 응답으로 변환합니다.
    실패 시 본문은 {"detail": 메시지, "errorCode": 코드} 형식입니다.
    """
    if not result.ok:
        return JSONResponse(
            status_code=result.error.status,
            content={"detail": result.error.error, "errorCode": result.error.error_code.value},
        )
    if success_status == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(status_code=success_status, content=jsonable_encoder(result.data))
