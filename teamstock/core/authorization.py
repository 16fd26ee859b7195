# teamstock/core/authorization.py

"""
권한 게이트(Authorization Gate) 모듈입니다.

"사용자 U가 팀 T에서 권한 P를 행사할 수 있는가"를 판정합니다.
판정 순서는 계약의 일부이며 (인증 → 팀 존재 → 사용자 존재 → 활성 멤버십 → 역할 매트릭스),
거부 시 예외를 던지지 않고 `AuthResult(ok=False, ...)`를 반환합니다.
이 모듈은 데이터베이스를 읽기만 합니다.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.errors import ErrorCode, ServiceError
from teamstock.core.permissions import Permission, allows_global, allows_team
from teamstock.domains.team import crud as team_crud
from teamstock.domains.usr import crud as usr_crud

logger = logging.getLogger(__name__)

UNAUTHENTICATED_MESSAGE = "User not authenticated"
TEAM_NOT_FOUND_MESSAGE = "Team not found"
FORBIDDEN_MESSAGE = "Forbidden"
INSUFFICIENT_PERMISSIONS_MESSAGE = "Insufficient permissions"


class AuthResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    status: int = 200
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    team: Any = None
    user: Any = None
    team_role: Any = None

    @classmethod
    def deny(cls, status: int, error_code: ErrorCode, error: str) -> "AuthResult":
        return cls(ok=False, status=status, error_code=error_code, error=error)

    def to_service_error(self) -> ServiceError:
        return ServiceError(
            status=self.status,
            error_code=self.error_code or ErrorCode.FORBIDDEN,
            error=self.error or FORBIDDEN_MESSAGE,
        )


def _unauthenticated() -> AuthResult:
    return AuthResult.deny(401, ErrorCode.USER_NOT_AUTHENTICATED, UNAUTHENTICATED_MESSAGE)


async def _load_user(db: AsyncSession, user_id: int):
    user = await usr_crud.user.get(db, user_id)
    # 비활성 계정은 존재하지 않는 사용자와 같이 취급합니다.
    if user is None or not user.is_active:
        return None
    return user


async def authorize_global(
    db: AsyncSession,
    *,
    permission: Permission,
    request_user_id: Optional[int],
    target_user_id: Optional[int],
) -> AuthResult:
    """
    팀 범위 밖의 전역 권한(예: team:create)을 판정합니다.
    요청 사용자는 대상 사용자 본인이어야 합니다.
    """
    if not request_user_id:
        return _unauthenticated()
    if request_user_id != target_user_id:
        return AuthResult.deny(403, ErrorCode.FORBIDDEN, FORBIDDEN_MESSAGE)

    user = await _load_user(db, request_user_id)
    if user is None:
        return _unauthenticated()

    if not allows_global(user.role, permission):
        logger.debug("User %s denied global permission %s", user.id, permission)
        return AuthResult.deny(403, ErrorCode.INSUFFICIENT_PERMISSIONS, INSUFFICIENT_PERMISSIONS_MESSAGE)

    return AuthResult(ok=True, user=user)


async def _resolve_team_membership(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int]
) -> AuthResult:
    if not request_user_id:
        return _unauthenticated()

    team = await team_crud.team.get(db, team_id)
    if team is None:
        return AuthResult.deny(404, ErrorCode.TEAM_NOT_FOUND, TEAM_NOT_FOUND_MESSAGE)

    user = await _load_user(db, request_user_id)
    if user is None:
        return _unauthenticated()

    membership = await team_crud.membership.get_active(db, team_id=team_id, user_id=user.id)
    if membership is None:
        return AuthResult.deny(403, ErrorCode.FORBIDDEN, FORBIDDEN_MESSAGE)

    return AuthResult(ok=True, team=team, user=user, team_role=membership.role)


async def authorize_team_scoped(
    db: AsyncSession,
    *,
    permission: Permission,
    team_id: int,
    request_user_id: Optional[int],
) -> AuthResult:
    """
    팀 범위 권한을 판정합니다. 활성 멤버십의 역할이 매트릭스에서 허용되어야 합니다.
    """
    result = await _resolve_team_membership(db, team_id=team_id, request_user_id=request_user_id)
    if not result.ok:
        return result

    if not allows_team(result.team_role, permission):
        logger.debug(
            "User %s (team role %s) denied %s on team %s",
            result.user.id, result.team_role, permission, team_id,
        )
        return AuthResult.deny(403, ErrorCode.INSUFFICIENT_PERMISSIONS, INSUFFICIENT_PERMISSIONS_MESSAGE)
    return result


async def authorize_team_access(
    db: AsyncSession, *, team_id: int, request_user_id: Optional[int]
) -> AuthResult:
    """활성 멤버라면 역할과 관계없이 허용합니다 (읽기 작업용)."""
    return await _resolve_team_membership(db, team_id=team_id, request_user_id=request_user_id)
