# teamstock/domains/loc/models.py

"""
'loc' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

locations: 팀별 보관 장소. 이름은 팀 안에서 고유합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

# 팀 생성 시 자동으로 만들어지는 기본 장소명
DEFAULT_LOCATION_NAME = "Default Location"


class LocationBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="장소 고유 ID")
    team_id: int = Field(foreign_key="teams.id", index=True, description="소유 팀 ID")
    name: str = Field(max_length=255, description="장소명 (팀 내 고유)")
    description: Optional[str] = Field(default=None, description="설명")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class Location(LocationBase, table=True):
    __tablename__ = "locations"
    __table_args__ = (UniqueConstraint("team_id", "name", name="uq_locations_team_name"),)
