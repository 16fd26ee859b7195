# teamstock/services/teams.py

"""
팀 서비스 파사드: 팀 생성/조회/수정/삭제.
"""

import logging
from typing import Any, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.authorization import authorize_global, authorize_team_scoped
from teamstock.core.errors import Conflict, ErrorCode, InsufficientPermissions
from teamstock.core.permissions import Permission
from teamstock.core.subscription import has_active_subscription
from teamstock.domains.team import crud as team_crud
from teamstock.domains.team import models as team_models
from teamstock.domains.team import schemas as team_schemas

from .common import (
    raise_for_auth,
    require_authenticated_user,
    require_payload,
    require_team_access,
    service_operation,
)

logger = logging.getLogger(__name__)


def _summary(team: team_models.Team, team_role: team_models.TeamRole) -> team_schemas.TeamSummary:
    return team_schemas.TeamSummary(
        **team_schemas.TeamRead.model_validate(team).model_dump(),
        team_role=team_role,
        has_active_subscription=has_active_subscription(team),
    )


@service_operation("creating team")
async def create_team_for_user(
    db: AsyncSession, *, request_user_id: Optional[int], payload: Any
) -> team_schemas.TeamRead:
    """팀을 생성합니다. 생성자는 활성 관리자가 되고 기본 장소가 함께 만들어집니다."""
    data = require_payload(team_schemas.TeamCreate, payload)
    auth = raise_for_auth(
        await authorize_global(
            db,
            permission=Permission.TEAM_CREATE,
            request_user_id=request_user_id,
            target_user_id=request_user_id,
        )
    )
    team = await team_crud.team.create_with_owner(db, obj_in=data, owner=auth.user)
    return team_schemas.TeamRead.model_validate(team)


@service_operation("loading teams")
async def list_user_teams(
    db: AsyncSession, *, request_user_id: Optional[int]
) -> List[team_schemas.TeamSummary]:
    user = await require_authenticated_user(db, request_user_id=request_user_id)
    rows = await team_crud.team.get_teams_for_user(db, user_id=user.id)
    return [_summary(team, role) for team, role in rows]


@service_operation("loading team")
async def get_team_for_user(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int]
) -> team_schemas.TeamSummary:
    auth = await require_team_access(db, team_id=team_id, request_user_id=request_user_id)
    return _summary(auth.team, auth.team_role)


@service_operation("updating team")
async def update_team_details(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int], payload: Any
) -> team_schemas.TeamRead:
    data = require_payload(team_schemas.TeamUpdate, payload)
    auth = await require_team_access(
        db, team_id=team_id, request_user_id=request_user_id, permission=Permission.TEAM_UPDATE
    )
    team = await team_crud.team.update(db, db_obj=auth.team, obj_in=data)
    return team_schemas.TeamRead.model_validate(team)


@service_operation("deleting team")
async def delete_team_with_authorization(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int]
) -> None:
    """
    팀을 삭제합니다. 팀 관리자만 가능하며, 결제가 진행 중인 팀은 삭제할 수 없습니다.
    """
    auth = await authorize_team_scoped(
        db, permission=Permission.TEAM_DELETE, team_id=team_id, request_user_id=request_user_id
    )
    if not auth.ok and auth.error_code == ErrorCode.INSUFFICIENT_PERMISSIONS:
        raise InsufficientPermissions("Only team admins can delete a team")
    raise_for_auth(auth)

    if (auth.team.stripe_subscription_status or "") in team_models.BLOCKING_SUBSCRIPTION_STATUSES:
        raise Conflict("Cannot delete team while subscription is active")

    await team_crud.team.remove(db, db_obj=auth.team)
    return None
