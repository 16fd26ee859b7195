# teamstock/domains/usr/crud.py

"""
'usr' 도메인 (사용자 관리)의 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import Optional
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.contracts import normalize_email
from teamstock.core.crud_base import CRUDBase
from teamstock.core.errors import Conflict, ErrorCode
from teamstock.core.security import get_password_hash, verify_password

from . import models as usr_models
from . import schemas as usr_schemas


class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserRead]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일(소문자 정규화)로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="email", value=normalize_email(email))

    def build(self, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """비밀번호를 해싱한 User 객체를 만듭니다 (세션에 추가하거나 커밋하지 않음)."""
        user_data = obj_in.model_dump(exclude={"password"})
        return usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 이메일 중복을 검사합니다."""
        if await self.get_by_email(db, email=obj_in.email):
            raise Conflict("Email is already in use", error_code=ErrorCode.EMAIL_ALREADY_IN_USE)

        db_user = self.build(obj_in=obj_in)
        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        return db_user

    async def authenticate(self, db: AsyncSession, *, email: str, password: str) -> Optional[usr_models.User]:
        """이메일과 비밀번호로 사용자를 인증합니다. 비활성 계정은 인증하지 않습니다."""
        user = await self.get_by_email(db, email=email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def set_password(self, db: AsyncSession, *, db_obj: usr_models.User, password: str) -> usr_models.User:
        db_obj.password_hash = get_password_hash(password)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj


user = CRUDUser()
