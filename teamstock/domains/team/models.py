# teamstock/domains/team/models.py

"""
'team' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- companies: 팀을 묶는 상위 조직 (선택).
- teams: 재고 데이터의 테넌트 경계. 결제 스냅샷 컬럼을 함께 보관합니다.
- team_memberships: (팀, 사용자)별 역할과 상태. 물리 삭제하지 않고 suspended로 전환합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class TeamRole(str, Enum):
    """팀 범위 역할입니다. 팀 리소스에 대한 권한을 결정합니다."""
    ADMIN = "admin"
    OPERATOR = "operator"
    VIEWER = "viewer"


class MembershipStatus(str, Enum):
    """
    멤버십 생명주기: active <-> suspended.
    suspended 멤버십은 권한 판정에서 멤버십이 없는 것과 동일하게 취급됩니다.
    """
    ACTIVE = "active"
    SUSPENDED = "suspended"


# 팀 삭제를 막는 결제 상태 (결제가 진행 중인 팀)
BLOCKING_SUBSCRIPTION_STATUSES = frozenset({"active", "trialing", "past_due", "canceling"})


# =============================================================================
# 1. companies 테이블 모델
# =============================================================================
class CompanyBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="회사 고유 ID")
    name: str = Field(max_length=255, description="회사명")
    slug: str = Field(max_length=255, sa_column_kwargs={"unique": True}, description="URL용 고유 식별자")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class Company(CompanyBase, table=True):
    __tablename__ = "companies"


# =============================================================================
# 2. teams 테이블 모델
# =============================================================================
class TeamBase(SQLModel):
    """
    teams 테이블의 기본 속성입니다.
    stripe_subscription_status / manual_trial_* 는 외부 결제 연동이 기록하는 스냅샷이며,
    이 애플리케이션은 구독 게이트에서 읽기만 합니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="팀 고유 ID")
    name: str = Field(max_length=255, description="팀명 (회사 내 고유)")
    notes: Optional[str] = Field(default=None, description="비고")
    owner_user_id: Optional[int] = Field(default=None, foreign_key="users.id", description="팀 생성자(소유자) ID")
    company_id: Optional[int] = Field(default=None, foreign_key="companies.id", description="소속 회사 ID")

    stripe_subscription_status: Optional[str] = Field(default=None, max_length=50, description="결제 구독 상태 스냅샷")
    manual_trial_ends_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="수동 체험 기간 종료 시각"
    )
    manual_trial_grants_count: int = Field(default=0, description="수동 체험 부여 횟수")

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


class Team(TeamBase, table=True):
    __tablename__ = "teams"
    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_teams_company_name"),)


# =============================================================================
# 3. team_memberships 테이블 모델
# =============================================================================
class TeamMembershipBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="멤버십 고유 ID")
    team_id: int = Field(foreign_key="teams.id", index=True, description="팀 ID")
    user_id: int = Field(foreign_key="users.id", index=True, description="사용자 ID")
    role: TeamRole = Field(default=TeamRole.VIEWER, description="팀 내 역할")
    status: MembershipStatus = Field(default=MembershipStatus.ACTIVE, description="멤버십 상태")

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


class TeamMembership(TeamMembershipBase, table=True):
    __tablename__ = "team_memberships"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_memberships_team_user"),)
