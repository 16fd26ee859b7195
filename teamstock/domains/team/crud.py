# teamstock/domains/team/crud.py

"""
'team' 도메인 (회사, 팀, 팀 멤버십)의 CRUD 로직을 담당하는 모듈입니다.

멤버십의 role/status 필드는 이 모듈의 CRUDTeamMembership만 변경합니다.
팀에 멤버십이 하나라도 있으면 활성 관리자(admin) 멤버십이 최소 1개 유지되어야 합니다.
"""

import logging
import re
import time
import unicodedata
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete as sa_delete, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.crud_base import CRUDBase
from teamstock.core.errors import Conflict, ErrorCode, NotFound, ValidationError
from teamstock.domains.inv.models import Item, StockTransaction
from teamstock.domains.loc.models import DEFAULT_LOCATION_NAME, Location
from teamstock.domains.usr.models import User

from . import models as team_models
from . import schemas as team_schemas

logger = logging.getLogger(__name__)

DUPLICATE_TEAM_MESSAGE = "A team with this name already exists"
LAST_ADMIN_MESSAGE = "Last admin cannot be removed"


# =============================================================================
# 1. 회사 (Company) CRUD
# =============================================================================
def slugify(value: str) -> str:
    """악센트를 제거한 소문자 영숫자와 하이픈으로 된 slug (최대 50자)."""
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_value.lower()).strip("-")[:50]


class CRUDCompany(CRUDBase[team_models.Company, team_models.CompanyBase, team_models.CompanyBase]):
    def __init__(self):
        super().__init__(model=team_models.Company)

    async def build_with_unique_slug(self, db: AsyncSession, *, name: str) -> team_models.Company:
        """
        이름에서 만든 slug가 이미 있으면 -1, -2 ... 접미사를 붙여 고유한 slug의 Company를 만듭니다.
        세션에 추가하거나 커밋하지 않습니다.
        """
        base = slugify(name) or "company"
        for suffix in range(1000):
            candidate = base if suffix == 0 else f"{base}-{suffix}"
            if await self.get_by_attribute(db, attribute="slug", value=candidate) is None:
                return team_models.Company(name=name, slug=candidate)
        return team_models.Company(name=name, slug=f"{base}-{int(time.time() * 1000)}")


company = CRUDCompany()


# =============================================================================
# 2. 팀 (Team) CRUD
# =============================================================================
class CRUDTeam(CRUDBase[team_models.Team, team_schemas.TeamCreate, team_schemas.TeamUpdate]):
    def __init__(self):
        super().__init__(model=team_models.Team)

    async def get_by_name_and_company(
        self, db: AsyncSession, *, name: str, company_id: Optional[int]
    ) -> Optional[team_models.Team]:
        return await self.get_one_filtered(db, filters={"name": name, "company_id": company_id})

    async def get_teams_for_user(
        self, db: AsyncSession, *, user_id: int
    ) -> List[Tuple[team_models.Team, team_models.TeamRole]]:
        """사용자가 활성 멤버로 속한 팀과 그 팀에서의 역할을 팀 이름순으로 반환합니다."""
        statement = (
            select(team_models.Team, team_models.TeamMembership.role)
            .join(team_models.TeamMembership, team_models.TeamMembership.team_id == team_models.Team.id)
            .where(
                team_models.TeamMembership.user_id == user_id,
                team_models.TeamMembership.status == team_models.MembershipStatus.ACTIVE,
            )
            .order_by(team_models.Team.name, team_models.Team.id)
        )
        result = await db.execute(statement)
        return [(row[0], row[1]) for row in result.all()]

    async def create_with_owner(
        self, db: AsyncSession, *, obj_in: team_schemas.TeamCreate, owner: User
    ) -> team_models.Team:
        """
        팀을 생성하고, 생성자를 활성 관리자 멤버로 등록하며, 기본 장소를 만듭니다.
        세 가지 쓰기는 하나의 커밋으로 처리됩니다.
        """
        if obj_in.company_id is not None and not await company.get(db, obj_in.company_id):
            raise NotFound("Company not found", error_code=ErrorCode.COMPANY_NOT_FOUND)
        if await self.get_by_name_and_company(db, name=obj_in.name, company_id=obj_in.company_id):
            raise Conflict(DUPLICATE_TEAM_MESSAGE)

        db_team = team_models.Team.model_validate(obj_in, update={"owner_user_id": owner.id})
        db.add(db_team)
        await db.flush()

        db.add(
            team_models.TeamMembership(
                team_id=db_team.id,
                user_id=owner.id,
                role=team_models.TeamRole.ADMIN,
                status=team_models.MembershipStatus.ACTIVE,
            )
        )
        db.add(Location(team_id=db_team.id, name=DEFAULT_LOCATION_NAME))
        await db.commit()
        await db.refresh(db_team)
        logger.info("Team %s created by user %s", db_team.id, owner.id)
        return db_team

    async def update(
        self, db: AsyncSession, *, db_obj: team_models.Team, obj_in: team_schemas.TeamUpdate
    ) -> team_models.Team:
        if obj_in.name is not None and obj_in.name != db_obj.name:
            existing = await self.get_by_name_and_company(db, name=obj_in.name, company_id=db_obj.company_id)
            if existing and existing.id != db_obj.id:
                raise Conflict(DUPLICATE_TEAM_MESSAGE)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: team_models.Team) -> team_models.Team:
        """
        팀과 팀에 속한 거래, 품목, 장소, 멤버십을 하나의 커밋으로 삭제합니다.
        결제 상태 확인은 호출하는 서비스 계층의 책임입니다.
        """
        team_id = db_obj.id
        await db.execute(sa_delete(StockTransaction).where(StockTransaction.team_id == team_id))
        await db.execute(sa_delete(Item).where(Item.team_id == team_id))
        await db.execute(sa_delete(Location).where(Location.team_id == team_id))
        await db.execute(
            sa_delete(team_models.TeamMembership).where(team_models.TeamMembership.team_id == team_id)
        )
        await db.delete(db_obj)
        await db.commit()
        logger.info("Team %s deleted", team_id)
        return db_obj

    def _admin_search_condition(self, search: Optional[str]):
        normalized = (search or "").strip().lower()
        if not normalized:
            return None
        pattern = f"%{normalized}%"
        return or_(
            func.lower(team_models.Team.name).like(pattern),
            func.lower(func.coalesce(team_models.Company.name, "")).like(pattern),
        )

    async def get_admin_page(
        self, db: AsyncSession, *, skip: int, limit: int, search: Optional[str] = None
    ) -> Tuple[List[Tuple[team_models.Team, Optional[str]]], int]:
        """
        전체 팀을 최신 생성순으로 조회합니다 (슈퍼 관리자용).
        search는 팀명 또는 회사명의 대소문자 무시 부분 일치이며, (팀, 회사명) 목록과 전체 건수를 반환합니다.
        """
        condition = self._admin_search_condition(search)
        company_join = team_models.Company.id == team_models.Team.company_id

        statement = select(team_models.Team, team_models.Company.name).join(
            team_models.Company, company_join, isouter=True
        )
        count_statement = (
            select(func.count(team_models.Team.id))
            .select_from(team_models.Team)
            .join(team_models.Company, company_join, isouter=True)
        )
        if condition is not None:
            statement = statement.where(condition)
            count_statement = count_statement.where(condition)

        statement = (
            statement.order_by(team_models.Team.created_at.desc(), team_models.Team.id.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = [(row[0], row[1]) for row in (await db.execute(statement)).all()]
        total = int((await db.execute(count_statement)).scalar() or 0)
        return rows, total

    async def count_team_stats(
        self, db: AsyncSession, *, team_ids: Sequence[int]
    ) -> Dict[str, Dict[int, int]]:
        """팀별 품목 수, 거래 수, 활성 멤버 수를 집계합니다."""
        async def _count_by_team(column, *conditions) -> Dict[int, int]:
            statement = select(column, func.count()).where(column.in_(team_ids), *conditions).group_by(column)
            return {team_id: int(total) for team_id, total in (await db.execute(statement)).all()}

        if not team_ids:
            return {"items": {}, "transactions": {}, "members": {}}
        return {
            "items": await _count_by_team(Item.team_id),
            "transactions": await _count_by_team(StockTransaction.team_id),
            "members": await _count_by_team(
                team_models.TeamMembership.team_id,
                team_models.TeamMembership.status == team_models.MembershipStatus.ACTIVE,
            ),
        }


team = CRUDTeam()


# =============================================================================
# 3. 팀 멤버십 (TeamMembership) CRUD
# =============================================================================
class CRUDTeamMembership(
    CRUDBase[team_models.TeamMembership, team_models.TeamMembershipBase, team_schemas.TeamMemberRoleUpdate]
):
    def __init__(self):
        super().__init__(model=team_models.TeamMembership)

    async def get_membership(
        self, db: AsyncSession, *, team_id: int, user_id: int
    ) -> Optional[team_models.TeamMembership]:
        """상태와 관계없이 (팀, 사용자) 멤버십을 조회합니다."""
        return await self.get_one_filtered(db, filters={"team_id": team_id, "user_id": user_id})

    async def get_active(
        self, db: AsyncSession, *, team_id: int, user_id: int
    ) -> Optional[team_models.TeamMembership]:
        """활성 멤버십만 조회합니다. suspended 멤버십은 없는 것으로 취급합니다."""
        return await self.get_one_filtered(
            db,
            filters={"team_id": team_id, "user_id": user_id, "status": team_models.MembershipStatus.ACTIVE},
        )

    async def list_members(
        self, db: AsyncSession, *, team_id: int, include_suspended: bool = False
    ) -> List[Tuple[team_models.TeamMembership, User]]:
        statement = (
            select(team_models.TeamMembership, User)
            .join(User, User.id == team_models.TeamMembership.user_id)
            .where(team_models.TeamMembership.team_id == team_id)
            .order_by(User.email)
        )
        if not include_suspended:
            statement = statement.where(
                team_models.TeamMembership.status == team_models.MembershipStatus.ACTIVE
            )
        result = await db.execute(statement)
        return [(row[0], row[1]) for row in result.all()]

    async def count_active_admins(self, db: AsyncSession, *, team_id: int) -> int:
        statement = select(func.count(team_models.TeamMembership.id)).where(
            team_models.TeamMembership.team_id == team_id,
            team_models.TeamMembership.role == team_models.TeamRole.ADMIN,
            team_models.TeamMembership.status == team_models.MembershipStatus.ACTIVE,
        )
        result = await db.execute(statement)
        return int(result.scalar() or 0)

    async def _ensure_not_last_admin(
        self, db: AsyncSession, *, membership: team_models.TeamMembership
    ) -> None:
        is_active_admin = (
            membership.role == team_models.TeamRole.ADMIN
            and membership.status == team_models.MembershipStatus.ACTIVE
        )
        if is_active_admin and await self.count_active_admins(db, team_id=membership.team_id) <= 1:
            raise ValidationError(LAST_ADMIN_MESSAGE, error_code=ErrorCode.LAST_ADMIN_CANNOT_BE_REMOVED)

    async def add_member(
        self,
        db: AsyncSession,
        *,
        team_id: int,
        user: User,
        role: team_models.TeamRole,
        commit: bool = True,
    ) -> team_models.TeamMembership:
        """
        사용자를 팀에 추가합니다. suspended 멤버십이 있으면 주어진 역할로 재활성화합니다.
        """
        membership = await self.get_membership(db, team_id=team_id, user_id=user.id)
        if membership is not None and membership.status == team_models.MembershipStatus.ACTIVE:
            raise Conflict("User is already a member of this team")

        if membership is None:
            membership = team_models.TeamMembership(team_id=team_id, user_id=user.id, role=role)
        else:
            membership.role = role
            membership.status = team_models.MembershipStatus.ACTIVE
        db.add(membership)

        if commit:
            await db.commit()
            await db.refresh(membership)
        return membership

    async def update_role(
        self, db: AsyncSession, *, membership: team_models.TeamMembership, role: team_models.TeamRole
    ) -> team_models.TeamMembership:
        """역할을 변경합니다. 마지막 활성 관리자를 강등할 수 없습니다."""
        if membership.role == role:
            return membership
        if role != team_models.TeamRole.ADMIN:
            await self._ensure_not_last_admin(db, membership=membership)

        membership.role = role
        db.add(membership)
        await db.commit()
        await db.refresh(membership)
        return membership

    async def suspend(
        self, db: AsyncSession, *, membership: team_models.TeamMembership
    ) -> team_models.TeamMembership:
        """멤버를 팀에서 제거(suspended 전환)합니다. 마지막 활성 관리자는 제거할 수 없습니다."""
        await self._ensure_not_last_admin(db, membership=membership)

        membership.status = team_models.MembershipStatus.SUSPENDED
        db.add(membership)
        await db.commit()
        await db.refresh(membership)
        return membership


membership = CRUDTeamMembership()
