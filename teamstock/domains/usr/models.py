# teamstock/domains/usr/models.py

"""
'usr' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

사용자(users) 테이블과 전역 역할 Enum을 포함합니다.
사용자는 삭제되지 않으며, 팀 멤버십을 통해서만 팀 리소스에 접근합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 전역 사용자 역할 (RBAC 1단계)
# =============================================================================
class UserRole(str, Enum):
    """
    사용자의 전역 역할입니다. 팀 생성 같은 팀 범위 밖의 작업 권한을 결정합니다.
    """
    ADMIN = "admin"
    OPERATOR = "operator"
    VIEWER = "viewer"
    SUPER_ADMIN = "super_admin"


# =============================================================================
# 1. users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    email: str = Field(max_length=255, sa_column_kwargs={"unique": True}, index=True, description="로그인 이메일 (소문자 정규화)")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")
    role: UserRole = Field(default=UserRole.VIEWER, description="전역 사용자 역할")
    is_active: bool = Field(default=True, description="계정 활성 여부")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class User(UserBase, table=True):
    """
    users 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "users"
