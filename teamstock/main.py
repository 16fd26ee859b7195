# teamstock/main.py

"""
TeamStock FastAPI 애플리케이션의 진입점입니다.

- 로깅 설정, 수명 주기(lifespan) 핸들러, CORS 미들웨어를 구성합니다.
- 각 도메인 라우터를 API_PREFIX 아래에 등록합니다.
- 루트(`/`)와 헬스 체크(`/health-check`) 엔드포인트를 제공합니다.
"""

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from teamstock import API_PREFIX
from teamstock.core.config import settings
from teamstock.core.database import create_db_and_tables, engine
from teamstock.core.dependencies import get_db_session

from teamstock.domains.usr.routers import router as usr_router
from teamstock.domains.team.routers import router as team_router
from teamstock.domains.loc.routers import router as loc_router
from teamstock.domains.inv.routers import router as inv_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    시작 시 (개발 환경에서) 테이블을 만들고, 종료 시 데이터베이스 연결 풀을 정리합니다.
    운영 환경의 스키마는 마이그레이션으로 관리합니다.
    """
    logger.info("%s starting (env=%s)", settings.APP_NAME, settings.APP_ENV)
    if settings.APP_ENV == "development":
        await create_db_and_tables()

    yield

    logger.info("%s shutting down", settings.APP_NAME)
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
# 개발용: 모든 출처 허용. 운영에서는 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
# 팀 범위 리소스는 모두 /teams/{team_id} 아래에 있으므로 공통 접두사만 붙입니다.
app.include_router(usr_router, prefix=API_PREFIX)
app.include_router(team_router, prefix=API_PREFIX)
app.include_router(loc_router, prefix=API_PREFIX)
app.include_router(inv_router, prefix=API_PREFIX)


@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": "Welcome to TeamStock API. Visit /docs for interactive API documentation."}


@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """
    데이터베이스에 가벼운 쿼리를 실행하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.exec(select(1))
        if result.first():
            return {"status": "ok", "database_connection": "successful"}
    except Exception:
        logger.exception("Database health check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection error during health check",
        )
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Database health check failed: No result from test query",
    )
