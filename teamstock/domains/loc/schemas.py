# teamstock/domains/loc/schemas.py

"""
'loc' 도메인의 요청/응답 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import field_validator

from teamstock.core.contracts import require_text, strip_or_none


class LocationCreate(SQLModel):
    name: str = Field(..., max_length=255, description="장소명")
    description: Optional[str] = Field(None, description="설명")

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value):
        return require_text(value, "Location name is required")

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value):
        return strip_or_none(value)


class LocationUpdate(SQLModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value):
        return require_text(value, "Location name cannot be empty")

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value):
        return strip_or_none(value)


class LocationRead(SQLModel):
    id: int
    team_id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
