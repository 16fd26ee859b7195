# teamstock/services/common.py

"""
서비스 파사드 공통 유틸리티입니다.

- `service_operation`: 도메인 예외와 저장소 예외를 `ServiceResult` 실패로 변환하는 데코레이터.
- `require_payload`, `require_team_access`, `require_authenticated_user`: 파사드 단계별 검증 헬퍼.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.authorization import (
    AuthResult,
    UNAUTHENTICATED_MESSAGE,
    authorize_team_access,
    authorize_team_scoped,
)
from teamstock.core.contracts import SchemaType, parse_payload
from teamstock.core.errors import (
    DomainError,
    ErrorCode,
    ServiceResult,
    Unauthenticated,
    ValidationError,
    conflict_service_error,
    internal_service_error,
)
from teamstock.core.permissions import Permission
from teamstock.core.subscription import SUBSCRIPTION_REQUIRED_MESSAGE, has_active_subscription
from teamstock.domains.usr import crud as usr_crud
from teamstock.domains.usr import models as usr_models

logger = logging.getLogger(__name__)


def service_operation(action: str) -> Callable:
    """
    파사드 함수를 감싸 예외를 구조화된 실패 결과로 변환합니다.

    - DomainError: 예외에 담긴 상태 코드와 오류 코드를 그대로 사용
    - IntegrityError (고유 제약 위반 등): 409 CONFLICT
    - 그 밖의 예외: 로그를 남기고 500 INTERNAL_ERROR (내부 메시지는 노출하지 않음)
    """
    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[ServiceResult]]:
        @functools.wraps(func)
        async def wrapper(db: AsyncSession, *args: Any, **kwargs: Any) -> ServiceResult:
            try:
                data = await func(db, *args, **kwargs)
            except DomainError as e:
                return ServiceResult.failure(e.to_service_error())
            except IntegrityError:
                await db.rollback()
                logger.info("Integrity conflict while %s", action)
                return ServiceResult.failure(
                    conflict_service_error("The request conflicts with existing data")
                )
            except Exception:
                logger.exception("Unexpected error while %s", action)
                await db.rollback()
                return ServiceResult.failure(internal_service_error(f"An error occurred while {action}"))
            if isinstance(data, ServiceResult):
                return data
            return ServiceResult.success(data)
        return wrapper
    return decorator


def require_payload(schema: Type[SchemaType], payload: Any) -> SchemaType:
    parsed = parse_payload(schema, payload)
    if not parsed.ok:
        raise ValidationError(parsed.error)
    return parsed.data


def raise_for_auth(auth: AuthResult) -> AuthResult:
    if not auth.ok:
        raise DomainError(auth.error, status=auth.status, error_code=auth.error_code)
    return auth


async def require_team_access(
    db: AsyncSession,
    *,
    team_id: int,
    request_user_id: Optional[int],
    permission: Optional[Permission] = None,
    require_subscription: bool = False,
) -> AuthResult:
    """
    권한 게이트와 구독 게이트를 차례로 통과시킵니다.
    permission이 없으면 활성 멤버 여부만 확인합니다.
    """
    if permission is None:
        auth = await authorize_team_access(db, team_id=team_id, request_user_id=request_user_id)
    else:
        auth = await authorize_team_scoped(
            db, permission=permission, team_id=team_id, request_user_id=request_user_id
        )
    raise_for_auth(auth)

    if require_subscription and not has_active_subscription(auth.team):
        raise DomainError(
            SUBSCRIPTION_REQUIRED_MESSAGE, status=403, error_code=ErrorCode.SUBSCRIPTION_REQUIRED
        )
    return auth


async def require_authenticated_user(db: AsyncSession, *, request_user_id: Optional[int]) -> usr_models.User:
    if not request_user_id:
        raise Unauthenticated(UNAUTHENTICATED_MESSAGE)
    user = await usr_crud.user.get(db, request_user_id)
    if user is None or not user.is_active:
        raise Unauthenticated(UNAUTHENTICATED_MESSAGE)
    return user
