# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 애플리케이션의 루트 경로 (`/`) 응답을 테스트합니다.
- 데이터베이스 연결 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    """(성공) 루트 엔드포인트가 환영 메시지를 반환"""
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to TeamStock API. Visit /docs for interactive API documentation."}


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """(성공) 헬스 체크가 데이터베이스 연결 상태를 반환"""
    response = await client.get("/health-check")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


@pytest.mark.asyncio
async def test_protected_route_without_token(client: AsyncClient):
    """(실패) 토큰 없이 팀 목록 조회 시 401과 오류 코드 반환"""
    response = await client.get("/api/v1/teams")

    assert response.status_code == 401
    assert response.json() == {"detail": "User not authenticated", "errorCode": "USER_NOT_AUTHENTICATED"}


@pytest.mark.asyncio
async def test_openapi_declares_bearer_scheme(client: AsyncClient):
    """(성공) 인증이 필요한 경로는 OAuth2 Bearer 스키마(토큰 발급 경로 포함)를 문서에 노출"""
    response = await client.get("/openapi.json")

    assert response.status_code == 200
    document = response.json()
    scheme = document["components"]["securitySchemes"]["OAuth2PasswordBearer"]
    assert scheme["flows"]["password"]["tokenUrl"] == "/api/v1/auth/token"
    assert {"OAuth2PasswordBearer": []} in document["paths"]["/api/v1/auth/me"]["get"]["security"]
