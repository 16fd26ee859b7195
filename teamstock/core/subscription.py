# teamstock/core/subscription.py

"""
구독 게이트(Subscription Gate) 모듈입니다.

팀의 결제 스냅샷(외부 결제 제공자가 동기화한 상태 컬럼)만을 읽어
재고 관련 작업을 허용할지 판정하는 순수 함수를 제공합니다.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from teamstock.core.config import settings
from teamstock.core.errors import ErrorCode, ServiceError, make_service_error

SUBSCRIPTION_REQUIRED_MESSAGE = "Active subscription required"


class BillingSnapshot(BaseModel):
    stripe_subscription_status: Optional[str] = None
    manual_trial_ends_at: Optional[Union[datetime, str]] = None


def _as_snapshot(source: Any) -> BillingSnapshot:
    if isinstance(source, BillingSnapshot):
        return source
    if isinstance(source, Mapping):
        return BillingSnapshot(
            stripe_subscription_status=source.get("stripe_subscription_status"),
            manual_trial_ends_at=source.get("manual_trial_ends_at"),
        )
    # Team ORM 객체 등 속성을 가진 객체
    return BillingSnapshot(
        stripe_subscription_status=getattr(source, "stripe_subscription_status", None),
        manual_trial_ends_at=getattr(source, "manual_trial_ends_at", None),
    )


def parse_timestamp(value: Union[datetime, str, None]) -> Optional[datetime]:
    """
    datetime 또는 ISO-8601 문자열을 UTC 기준 aware datetime으로 변환합니다.
    tzinfo가 없는 값은 UTC로 간주하며, 해석할 수 없는 값은 None을 반환합니다.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def has_active_subscription(snapshot: Any, now: Optional[datetime] = None) -> bool:
    """
    활성 구독 상태이거나, 수동 체험 기간 종료 시각이 현재보다 미래이면 True.
    """
    snap = _as_snapshot(snapshot)
    if (snap.stripe_subscription_status or "") in settings.ACTIVE_SUBSCRIPTION_STATUSES:
        return True

    trial_ends_at = parse_timestamp(snap.manual_trial_ends_at)
    if trial_ends_at is None:
        return False

    current = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    return trial_ends_at > current


def subscription_required_error() -> ServiceError:
    return make_service_error(403, ErrorCode.SUBSCRIPTION_REQUIRED, SUBSCRIPTION_REQUIRED_MESSAGE)
