# teamstock/services/admin.py

"""
슈퍼 관리자 서비스 파사드: 전체 팀 목록 조회.

슈퍼 관리자는 전역 역할이 super_admin이거나, 이메일이 설정의 SUPER_ADMIN_EMAILS에 포함된 사용자입니다.
모든 조회는 감사(audit) 로그를 남깁니다.
"""

import logging
import math
from typing import Optional, Union

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.config import settings
from teamstock.core.contracts import normalize_email
from teamstock.core.errors import InsufficientPermissions
from teamstock.domains.team import crud as team_crud
from teamstock.domains.team import schemas as team_schemas
from teamstock.domains.usr import models as usr_models

from .common import require_authenticated_user, service_operation

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
SUPER_ADMIN_REQUIRED_MESSAGE = "Super admin access required"


def is_super_admin(user: usr_models.User) -> bool:
    if user.role == usr_models.UserRole.SUPER_ADMIN:
        return True
    allowlist = {normalize_email(email) for email in settings.SUPER_ADMIN_EMAILS if email.strip()}
    return normalize_email(user.email) in allowlist


def _positive_int(value: Union[int, str, None], fallback: int) -> int:
    """1 이상의 정수로 해석할 수 없는 값은 fallback을 사용합니다."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if parsed >= 1 else fallback


@service_operation("fetching teams for super admin")
async def list_teams_for_super_admin(
    db: AsyncSession,
    *,
    request_user_id: Optional[int],
    page: Union[int, str, None] = None,
    page_size: Union[int, str, None] = None,
    search: Optional[str] = None,
) -> team_schemas.AdminTeamPage:
    user = await require_authenticated_user(db, request_user_id=request_user_id)
    if not is_super_admin(user):
        raise InsufficientPermissions(SUPER_ADMIN_REQUIRED_MESSAGE)

    page = _positive_int(page, DEFAULT_PAGE)
    page_size = min(_positive_int(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    rows, total = await team_crud.team.get_admin_page(
        db, skip=(page - 1) * page_size, limit=page_size, search=search
    )
    stats = await team_crud.team.count_team_stats(db, team_ids=[team.id for team, _ in rows])

    logger.info(
        "[AUDIT] super_admin_read_all_teams user=%s page=%s page_size=%s search=%r total=%s",
        user.id, page, page_size, search, total,
    )

    teams = [
        team_schemas.AdminTeamRead(
            **team_schemas.TeamRead.model_validate(team).model_dump(),
            company_name=company_name,
            item_count=stats["items"].get(team.id, 0),
            transaction_count=stats["transactions"].get(team.id, 0),
            member_count=stats["members"].get(team.id, 0),
        )
        for team, company_name in rows
    ]
    return team_schemas.AdminTeamPage(
        teams=teams,
        pagination=team_schemas.Pagination(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=1 if total == 0 else math.ceil(total / page_size),
        ),
    )
