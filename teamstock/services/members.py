# teamstock/services/members.py

"""
팀 멤버 관리 서비스 파사드. 모든 작업은 팀 관리자(team:update) 권한이 필요합니다.
"""

from typing import Any, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.permissions import Permission
from teamstock.domains.team import crud as team_crud
from teamstock.domains.team import models as team_models
from teamstock.domains.team import schemas as team_schemas
from teamstock.domains.team import services as team_services
from teamstock.domains.usr.models import User

from .common import require_payload, require_team_access, service_operation


def _member_read(membership: team_models.TeamMembership, user: User) -> team_schemas.TeamMemberRead:
    return team_schemas.TeamMemberRead(
        user_id=user.id,
        email=user.email,
        role=membership.role,
        status=membership.status,
        joined_at=membership.created_at,
    )


@service_operation("loading team members")
async def list_team_members(
    db: AsyncSession,
    *,
    team_id: int,
    request_user_id: Optional[int],
    include_suspended: bool = False,
) -> List[team_schemas.TeamMemberRead]:
    await require_team_access(
        db, team_id=team_id, request_user_id=request_user_id, permission=Permission.TEAM_UPDATE
    )
    rows = await team_crud.membership.list_members(db, team_id=team_id, include_suspended=include_suspended)
    return [_member_read(membership, user) for membership, user in rows]


@service_operation("adding team member")
async def add_team_member(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], payload: Any
) -> team_schemas.TeamMemberRead:
    data = require_payload(team_schemas.TeamMemberAdd, payload)
    await require_team_access(
        db, team_id=team_id, request_user_id=request_user_id, permission=Permission.TEAM_UPDATE
    )
    membership, user = await team_services.add_member(db, team_id=team_id, payload=data)
    return _member_read(membership, user)


@service_operation("updating team member")
async def update_team_member_role(
    db: AsyncSession, *, team_id: int, user_id: int, request_user_id: Optional[int], payload: Any
) -> team_schemas.TeamMemberRead:
    data = require_payload(team_schemas.TeamMemberRoleUpdate, payload)
    await require_team_access(
        db, team_id=team_id, request_user_id=request_user_id, permission=Permission.TEAM_UPDATE
    )
    membership = await team_services.update_member_role(db, team_id=team_id, user_id=user_id, role=data.role)
    user = await db.get(User, user_id)
    return _member_read(membership, user)


@service_operation("removing team member")
async def remove_team_member(
    db: AsyncSession, *, team_id: int, user_id: int, request_user_id: Optional[int]
) -> None:
    """멤버를 제거합니다 (멤버십을 suspended로 전환, 행은 유지)."""
    await require_team_access(
        db, team_id=team_id, request_user_id=request_user_id, permission=Permission.TEAM_UPDATE
    )
    await team_services.remove_member(db, team_id=team_id, user_id=user_id)
    return None
