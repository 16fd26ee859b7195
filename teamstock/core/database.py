# teamstock/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
- 애플리케이션 시작 시 데이터베이스 테이블을 생성하는 함수를 포함합니다 (개발용).
"""

import logging
from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.config import settings

# 모든 SQLModel 클래스가 SQLModel.metadata에 등록되도록 모델 집합 모듈을 임포트합니다.
from teamstock.domains import models  # noqa: F401

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs: Any) -> AsyncEngine:
    """
    URL 종류에 맞는 옵션으로 비동기 엔진을 생성합니다.
    SQLite(aiosqlite)는 커넥션 풀 크기 옵션을 받지 않으므로 PostgreSQL에서만 지정합니다.
    """
    options: Dict[str, Any] = {"echo": settings.DEBUG_MODE, "future": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_recycle=3600,  # 1시간마다 연결 재활용
            pool_size=10,
            max_overflow=20,
        )
    options.update(kwargs)
    return create_async_engine(url, **options)


# SQLModel 엔진을 생성합니다.
engine: AsyncEngine = build_engine(settings.DATABASE_URL.get_secret_value())

# 비동기 세션을 생성하는 '세션 공장'을 정의합니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables(target: AsyncEngine = engine) -> None:
    """
    데이터베이스 테이블을 생성합니다.
    개발/테스트 환경 전용이며, 기존 테이블을 삭제하지는 않습니다.
    """
    logger.info("Creating database tables on %s", target.url.render_as_string(hide_password=True))
    async with target.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    스크립트 등 요청 밖의 비동기 컨텍스트에서 사용할 독립 세션을 제공합니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
