# teamstock/core/permissions.py

"""
역할 매트릭스(Role Matrix) 모듈입니다.

권한은 두 단계로 나뉩니다.
- 전역 권한: 사용자 계정의 전역 역할(UserRole)로 판정 (예: 팀 생성).
- 팀 권한: 해당 팀의 활성 멤버십 역할(TeamRole)로 판정 (예: 품목 수정, 재고 입출고).

매트릭스는 설정이 아닌 모듈 상수입니다.
"""

from enum import Enum
from typing import Dict, FrozenSet, Union


class Permission(str, Enum):
    TEAM_CREATE = "team:create"
    TEAM_UPDATE = "team:update"
    TEAM_DELETE = "team:delete"
    ITEM_WRITE = "item:write"
    ITEM_DELETE = "item:delete"
    LOCATION_WRITE = "location:write"
    LOCATION_DELETE = "location:delete"
    STOCK_WRITE = "stock:write"
    TRANSACTION_DELETE = "transaction:delete"


# 전역 역할 매트릭스 (UserRole 값)
GLOBAL_PERMISSION_MATRIX: Dict[Permission, FrozenSet[str]] = {
    Permission.TEAM_CREATE: frozenset({"admin", "operator", "super_admin"}),
}

# 팀 역할 매트릭스 (TeamRole 값)
TEAM_PERMISSION_MATRIX: Dict[Permission, FrozenSet[str]] = {
    Permission.TEAM_UPDATE: frozenset({"admin"}),
    Permission.TEAM_DELETE: frozenset({"admin"}),
    Permission.ITEM_WRITE: frozenset({"admin", "operator"}),
    Permission.ITEM_DELETE: frozenset({"admin", "operator"}),
    Permission.LOCATION_WRITE: frozenset({"admin", "operator"}),
    Permission.LOCATION_DELETE: frozenset({"admin", "operator"}),
    Permission.STOCK_WRITE: frozenset({"admin", "operator"}),
    Permission.TRANSACTION_DELETE: frozenset({"admin"}),
}


def _role_value(role: Union[str, Enum, None]) -> str:
    if isinstance(role, Enum):
        return str(role.value)
    return role or ""


def is_global_permission(permission: Union[Permission, str]) -> bool:
    return Permission(permission) in GLOBAL_PERMISSION_MATRIX


def is_team_permission(permission: Union[Permission, str]) -> bool:
    return Permission(permission) in TEAM_PERMISSION_MATRIX


def allows_global(role: Union[str, Enum, None], permission: Union[Permission, str]) -> bool:
    """전역 역할이 주어진 전역 권한을 허용하는지 판정합니다. 팀 권한은 항상 거부합니다."""
    allowed = GLOBAL_PERMISSION_MATRIX.get(Permission(permission))
    return allowed is not None and _role_value(role) in allowed


def allows_team(team_role: Union[str, Enum, None], permission: Union[Permission, str]) -> bool:
    """팀 멤버십 역할이 주어진 팀 권한을 허용하는지 판정합니다. 전역 권한은 항상 거부합니다."""
    allowed = TEAM_PERMISSION_MATRIX.get(Permission(permission))
    return allowed is not None and _role_value(team_role) in allowed


def allows(role: Union[str, Enum, None], permission: Union[Permission, str]) -> bool:
    """권한 종류(전역/팀)에 따라 해당 매트릭스로 위임합니다."""
    if is_global_permission(permission):
        return allows_global(role, permission)
    return allows_team(role, permission)
