# teamstock/services/reports.py

"""
팀 보고서 서비스 파사드. 활성 멤버라면 역할과 관계없이 조회할 수 있으며, 팀의 활성 구독이 필요합니다.
"""

from datetime import datetime
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.errors import ValidationError
from teamstock.domains.inv import reports
from teamstock.domains.inv import schemas as inv_schemas

from .common import require_team_access, service_operation


@service_operation("fetching report statistics")
async def get_team_report_stats_for_user(
    db: AsyncSession,
    *,
    team_id: int,
    request_user_id: Optional[int],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> inv_schemas.TeamReport:
    await require_team_access(db, team_id=team_id, request_user_id=request_user_id, require_subscription=True)
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    return await reports.build_team_report(db, team_id=team_id, start_date=start_date, end_date=end_date)
