# teamstock/domains/usr/schemas.py

"""
'usr' 도메인의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import EmailStr, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from teamstock.core.contracts import normalize_email
from teamstock.core.security import MIN_PASSWORD_LENGTH
from teamstock.domains.team import schemas as team_schemas
from . import models as usr_models


class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    email: EmailStr = Field(..., max_length=255)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.VIEWER, description="전역 사용자 역할")
    is_active: bool = True

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value) if isinstance(value, str) else value


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마"""
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class UserRead(UserBase):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    created_at: Optional[datetime] = None


class Token(SQLModel):
    access_token: str
    token_type: str = "bearer"


# =============================================================================
# 회원 가입 / 비밀번호 변경
# =============================================================================
_email_adapter = TypeAdapter(EmailStr)

SIGNUP_FIELDS_REQUIRED_MESSAGE = "Email, password and company name are required"


class SignupRequest(SQLModel):
    """회원 가입 요청. 가입자는 전역 admin 역할을 받고 회사가 함께 만들어집니다."""
    email: str = Field(..., max_length=255)
    password: str
    company_name: str = Field(..., max_length=255)

    @model_validator(mode="before")
    @classmethod
    def _require_fields(cls, values):
        if not isinstance(values, dict):
            raise ValueError(SIGNUP_FIELDS_REQUIRED_MESSAGE)
        for key in ("email", "password", "company_name"):
            value = values.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(SIGNUP_FIELDS_REQUIRED_MESSAGE)
        return values

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        value = normalize_email(value)
        try:
            _email_adapter.validate_python(value)
        except PydanticValidationError:
            raise ValueError("Invalid email format")
        return value

    @field_validator("password")
    @classmethod
    def _check_password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value

    @field_validator("company_name")
    @classmethod
    def _strip_company_name(cls, value: str) -> str:
        return value.strip()


class SignupResult(SQLModel):
    user: UserRead
    company: team_schemas.CompanyRead
    access_token: str
    token_type: str = "bearer"


class PasswordChange(SQLModel):
    current_password: str
    new_password: str
    confirm_password: str
