# teamstock/core/config.py

from typing import List
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일을 명시적으로 지정
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "TeamStock API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Team-scoped inventory ledger and authorization API"
    # 애플리케이션 환경 (예: "development", "production", "testing")
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and SQL echo")
    LOG_LEVEL: str = Field("INFO", description="Root log level (DEBUG, INFO, WARNING, ...)")

    # --- 데이터베이스 설정 ---
    # 개발 기본값은 로컬 SQLite 파일, 운영은 postgresql+asyncpg URL을 사용합니다.
    DATABASE_URL: SecretStr = Field(
        SecretStr("sqlite+aiosqlite:///./teamstock.db"),
        description="Async SQLAlchemy database URL",
    )

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(
        SecretStr("dev-secret-key-change-me"),
        description="Secret key for JWT token signing. Keep this highly secure!",
    )
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration time in minutes")

    # --- 재고 원장 정책 ---
    # False(기본): 재고를 음수로 만드는 거래를 409로 거부
    # True: 경고 로그를 남기고 거래를 허용
    ALLOW_NEGATIVE_STOCK: bool = Field(False, description="Allow transactions that drive stock below zero")

    # --- 구독 게이트 ---
    ACTIVE_SUBSCRIPTION_STATUSES: List[str] = Field(
        default_factory=lambda: ["active", "trialing", "canceling"],
        description="Billing statuses that grant access to inventory operations",
    )

    # --- 슈퍼 관리자 ---
    # role=super_admin 외에 전체 팀 조회를 허용할 이메일 목록 (JSON 배열, 예: ["ops@example.com"])
    SUPER_ADMIN_EMAILS: List[str] = Field(
        default_factory=list,
        description="Emails granted super admin read access in addition to the super_admin role",
    )


settings = Settings()
