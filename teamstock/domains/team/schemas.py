# teamstock/domains/team/schemas.py

"""
'team' 도메인(팀, 멤버십)의 요청/응답 스키마를 정의하는 모듈입니다.
요청 스키마는 서비스 파사드에서 페이로드 계약으로 사용됩니다.
"""

from typing import List, Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, field_validator, model_validator

from teamstock.core.contracts import normalize_email, require_text, strip_or_none
from . import models as team_models


# =============================================================================
# 1. 팀 (Team) 스키마
# =============================================================================
class TeamCreate(SQLModel):
    name: str = Field(..., max_length=255, description="팀명")
    notes: Optional[str] = Field(None, description="비고")
    company_id: Optional[int] = Field(None, description="소속 회사 ID")

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value):
        return require_text(value, "Team name is required")

    @field_validator("notes", mode="before")
    @classmethod
    def _strip_notes(cls, value):
        return strip_or_none(value)


class TeamUpdate(SQLModel):
    name: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value):
        return require_text(value, "Team name cannot be empty")

    @field_validator("notes", mode="before")
    @classmethod
    def _strip_notes(cls, value):
        return strip_or_none(value)


class TeamRead(SQLModel):
    id: int
    name: str
    notes: Optional[str] = None
    owner_user_id: Optional[int] = None
    company_id: Optional[int] = None
    stripe_subscription_status: Optional[str] = None
    manual_trial_ends_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TeamSummary(TeamRead):
    """사용자 기준 팀 목록 항목: 요청 사용자의 팀 내 역할과 구독 활성 여부를 포함합니다."""
    team_role: team_models.TeamRole
    has_active_subscription: bool = False


class AdminTeamRead(TeamRead):
    """슈퍼 관리자 팀 목록 항목: 회사명과 팀별 집계를 포함합니다."""
    company_name: Optional[str] = None
    item_count: int = 0
    transaction_count: int = 0
    member_count: int = 0


class CompanyRead(SQLModel):
    id: int
    name: str
    slug: str
    created_at: Optional[datetime] = None


class Pagination(SQLModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class AdminTeamPage(SQLModel):
    teams: List[AdminTeamRead]
    pagination: Pagination


# =============================================================================
# 2. 팀 멤버 (TeamMembership) 스키마
# =============================================================================
class TeamMemberAdd(SQLModel):
    """
    기존 사용자(user_id 또는 email)를 팀에 추가하거나,
    email에 해당하는 사용자가 없으면 password로 새 사용자를 만들어 추가합니다.
    """
    user_id: Optional[int] = Field(None, gt=0)
    email: Optional[EmailStr] = Field(None, max_length=255)
    password: Optional[str] = None
    role: team_models.TeamRole = team_models.TeamRole.VIEWER

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        value = strip_or_none(value)
        return normalize_email(value) if isinstance(value, str) else value

    @model_validator(mode="after")
    def _require_identity(self):
        if self.user_id is None and not self.email:
            raise ValueError("Either user_id or email is required")
        return self


class TeamMemberRoleUpdate(SQLModel):
    role: team_models.TeamRole


class TeamMemberRead(SQLModel):
    user_id: int
    email: str
    role: team_models.TeamRole
    status: team_models.MembershipStatus
    joined_at: Optional[datetime] = None
