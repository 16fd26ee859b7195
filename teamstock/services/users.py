# teamstock/services/users.py

"""
사용자 계정 서비스 파사드: 회원 가입, 본인 비밀번호 변경.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.config import settings
from teamstock.core.contracts import parse_payload
from teamstock.core.errors import Conflict, ErrorCode, ValidationError
from teamstock.core.security import MIN_PASSWORD_LENGTH, create_access_token, verify_password
from teamstock.domains.team import crud as team_crud
from teamstock.domains.team import schemas as team_schemas
from teamstock.domains.usr import crud as usr_crud
from teamstock.domains.usr import models as usr_models
from teamstock.domains.usr import schemas as usr_schemas

from .common import require_authenticated_user, require_payload, service_operation

logger = logging.getLogger(__name__)

PASSWORD_UPDATED = "PASSWORD_UPDATED"


@service_operation("signing up")
async def signup_user(db: AsyncSession, *, payload: Any) -> usr_schemas.SignupResult:
    """
    새 사용자(전역 admin)와 회사를 하나의 커밋으로 만들고 access token을 발급합니다.
    회사 slug는 회사명에서 만들며 중복되면 접미사를 붙입니다.
    """
    data = require_payload(usr_schemas.SignupRequest, payload)
    if await usr_crud.user.get_by_email(db, email=data.email):
        raise Conflict("User with this email already exists", error_code=ErrorCode.EMAIL_ALREADY_IN_USE)

    db_user = usr_crud.user.build(
        obj_in=usr_schemas.UserCreate(email=data.email, password=data.password, role=usr_models.UserRole.ADMIN)
    )
    db_company = await team_crud.company.build_with_unique_slug(db, name=data.company_name)
    db.add(db_user)
    db.add(db_company)
    await db.commit()
    await db.refresh(db_user)
    await db.refresh(db_company)
    logger.info("User %s signed up with company %s (%s)", db_user.id, db_company.id, db_company.slug)

    access_token = create_access_token(
        data={"sub": str(db_user.id)},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return usr_schemas.SignupResult(
        user=usr_schemas.UserRead.model_validate(db_user),
        company=team_schemas.CompanyRead.model_validate(db_company),
        access_token=access_token,
    )


def _password_error(message: str, error_code: ErrorCode) -> ValidationError:
    return ValidationError(message, error_code=error_code)


@service_operation("updating password")
async def update_own_password(
    db: AsyncSession, *, request_user_id: Optional[int], payload: Any
) -> Dict[str, str]:
    """요청 사용자 본인의 비밀번호를 변경합니다. 현재 비밀번호 확인이 필요합니다."""
    parsed = parse_payload(usr_schemas.PasswordChange, payload)
    if not parsed.ok or not all(
        value.strip()
        for value in (parsed.data.current_password, parsed.data.new_password, parsed.data.confirm_password)
    ):
        raise _password_error("Password fields are required", ErrorCode.PASSWORD_FIELDS_REQUIRED)
    data = parsed.data

    user = await require_authenticated_user(db, request_user_id=request_user_id)

    if len(data.new_password) < MIN_PASSWORD_LENGTH:
        raise _password_error(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", ErrorCode.PASSWORD_TOO_SHORT
        )
    if data.new_password != data.confirm_password:
        raise _password_error("Password confirmation mismatch", ErrorCode.PASSWORD_CONFIRMATION_MISMATCH)
    if data.new_password == data.current_password:
        raise _password_error("New password must differ from current password", ErrorCode.PASSWORD_MUST_DIFFER)
    if not verify_password(data.current_password, user.password_hash):
        raise _password_error("Current password is incorrect", ErrorCode.CURRENT_PASSWORD_INCORRECT)

    await usr_crud.user.set_password(db, db_obj=user, password=data.new_password)
    logger.info("User %s changed password", user.id)
    return {"messageCode": PASSWORD_UPDATED}
