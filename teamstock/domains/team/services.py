# teamstock/domains/team/services.py

"""
팀 멤버십 관리 서비스입니다.

멤버 추가(기존 사용자 연결 또는 신규 viewer 사용자 생성), 역할 변경, 제거(suspend)를
팀 단위 락 안에서 수행하여 '활성 관리자 최소 1명' 규칙을 동시 요청에서도 유지합니다.
"""

import logging
from typing import Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.errors import DomainError, ErrorCode, NotFound, ValidationError
from teamstock.core.locks import KeyedLockRegistry
from teamstock.core.security import MIN_PASSWORD_LENGTH
from teamstock.domains.usr import crud as usr_crud
from teamstock.domains.usr import models as usr_models
from teamstock.domains.usr import schemas as usr_schemas
from . import crud, models, schemas

logger = logging.getLogger(__name__)

# 팀별 멤버십 변경 직렬화
team_membership_locks = KeyedLockRegistry()


async def _resolve_or_create_user(
    db: AsyncSession, *, payload: schemas.TeamMemberAdd
) -> usr_models.User:
    if payload.user_id is not None:
        user = await usr_crud.user.get(db, payload.user_id)
        if user is None:
            raise NotFound("User not found", error_code=ErrorCode.USER_NOT_FOUND)
        return user

    user = await usr_crud.user.get_by_email(db, email=payload.email)
    if user is not None:
        return user

    # 새 사용자는 전역 viewer 역할로 생성합니다.
    if not payload.password or len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            error_code=ErrorCode.PASSWORD_TOO_SHORT,
        )
    new_user = usr_crud.user.build(
        obj_in=usr_schemas.UserCreate(
            email=payload.email, password=payload.password, role=usr_models.UserRole.VIEWER
        )
    )
    db.add(new_user)
    await db.flush()
    logger.info("Created user %s while adding a team member", new_user.id)
    return new_user


async def add_member(
    db: AsyncSession, *, team_id: int, payload: schemas.TeamMemberAdd
) -> Tuple[models.TeamMembership, usr_models.User]:
    """
    팀에 멤버를 추가합니다. 신규 사용자 생성과 멤버십 추가는 하나의 커밋으로 처리됩니다.
    """
    async with team_membership_locks.lock(team_id):
        try:
            user = await _resolve_or_create_user(db, payload=payload)
            membership = await crud.membership.add_member(
                db, team_id=team_id, user=user, role=payload.role, commit=False
            )
            await db.commit()
        except DomainError:
            await db.rollback()
            raise
        await db.refresh(membership)
        await db.refresh(user)
    return membership, user


async def _get_member(db: AsyncSession, *, team_id: int, user_id: int) -> models.TeamMembership:
    membership = await crud.membership.get_active(db, team_id=team_id, user_id=user_id)
    if membership is None:
        raise NotFound("Team member not found", error_code=ErrorCode.TEAM_MEMBER_NOT_FOUND)
    return membership


async def update_member_role(
    db: AsyncSession, *, team_id: int, user_id: int, role: models.TeamRole
) -> models.TeamMembership:
    async with team_membership_locks.lock(team_id):
        membership = await _get_member(db, team_id=team_id, user_id=user_id)
        return await crud.membership.update_role(db, membership=membership, role=role)


async def remove_member(db: AsyncSession, *, team_id: int, user_id: int) -> models.TeamMembership:
    """멤버십을 suspended로 전환합니다. 행은 삭제하지 않습니다."""
    async with team_membership_locks.lock(team_id):
        membership = await _get_member(db, team_id=team_id, user_id=user_id)
        return await crud.membership.suspend(db, membership=membership)
