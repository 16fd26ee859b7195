# teamstock/core/errors.py

"""
도메인 오류 분류 체계와 서비스 결과(ServiceResult) 모델을 정의하는 모듈입니다.

- `ErrorCode`: 클라이언트에 노출되는 안정적인 오류 코드 목록.
- `DomainError` 및 하위 예외: 도메인 계층 내부에서 발생시키는 예외 (HTTP 상태 + 오류 코드 포함).
- `ServiceError` / `ServiceResult`: 서비스 파사드가 반환하는 구조화된 결과.
  파사드는 예외를 밖으로 던지지 않고 항상 `ServiceResult`를 반환합니다.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    USER_NOT_AUTHENTICATED = "USER_NOT_AUTHENTICATED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    NOT_FOUND = "NOT_FOUND"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    COMPANY_NOT_FOUND = "COMPANY_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    LOCATION_NOT_FOUND = "LOCATION_NOT_FOUND"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    TEAM_MEMBER_NOT_FOUND = "TEAM_MEMBER_NOT_FOUND"
    LAST_ADMIN_CANNOT_BE_REMOVED = "LAST_ADMIN_CANNOT_BE_REMOVED"
    EMAIL_ALREADY_IN_USE = "EMAIL_ALREADY_IN_USE"
    PASSWORD_TOO_SHORT = "PASSWORD_TOO_SHORT"
    CURRENT_PASSWORD_INCORRECT = "CURRENT_PASSWORD_INCORRECT"
    PASSWORD_FIELDS_REQUIRED = "PASSWORD_FIELDS_REQUIRED"
    PASSWORD_CONFIRMATION_MISMATCH = "PASSWORD_CONFIRMATION_MISMATCH"
    PASSWORD_MUST_DIFFER = "PASSWORD_MUST_DIFFER"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    SUBSCRIPTION_REQUIRED = "SUBSCRIPTION_REQUIRED"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# 1. 도메인 예외
# =============================================================================
class DomainError(Exception):
    """
    도메인 계층의 모든 예외의 기반 클래스입니다.
    하위 클래스는 기본 상태 코드와 오류 코드를 가지며, 생성 시 덮어쓸 수 있습니다.
    """
    status: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[ErrorCode] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status is not None:
            self.status = status

    def to_service_error(self) -> "ServiceError":
        return ServiceError(status=self.status, error_code=self.error_code, error=self.message)


class Unauthenticated(DomainError):
    status = 401
    error_code = ErrorCode.USER_NOT_AUTHENTICATED


class Forbidden(DomainError):
    status = 403
    error_code = ErrorCode.FORBIDDEN


class InsufficientPermissions(DomainError):
    status = 403
    error_code = ErrorCode.INSUFFICIENT_PERMISSIONS


class ValidationError(DomainError):
    status = 400
    error_code = ErrorCode.VALIDATION_ERROR


class NotFound(DomainError):
    status = 404
    error_code = ErrorCode.NOT_FOUND


class Conflict(DomainError):
    status = 409
    error_code = ErrorCode.CONFLICT


class LedgerError(DomainError):
    """재고 원장(Inventory Ledger) 작업 실패의 기반 클래스입니다."""


class ItemNotFound(LedgerError, NotFound):
    error_code = ErrorCode.ITEM_NOT_FOUND


class LocationNotFound(LedgerError, NotFound):
    error_code = ErrorCode.LOCATION_NOT_FOUND


class TransactionNotFound(LedgerError, NotFound):
    error_code = ErrorCode.TRANSACTION_NOT_FOUND


class InsufficientStock(LedgerError, Conflict):
    error_code = ErrorCode.INSUFFICIENT_STOCK


# =============================================================================
# 2. 서비스 결과 모델
# =============================================================================
class ServiceError(BaseModel):
    """
    실패한 서비스 호출의 오류 정보입니다.
    JSON 직렬화 시 `errorCode` 키를 사용합니다.
    """
    model_config = ConfigDict(populate_by_name=True)

    status: int
    error_code: ErrorCode = Field(..., alias="errorCode")
    error: str


class ServiceResult(BaseModel):
    """
    서비스 파사드의 반환값: `{ok: True, data}` 또는 `{ok: False, error}`.
    """
    ok: bool
    data: Any = None
    error: Optional[ServiceError] = None

    @classmethod
    def success(cls, data: Any = None) -> "ServiceResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult":
        return cls(ok=False, error=error)


# --- 자주 쓰는 오류 헬퍼 ---
def make_service_error(status: int, error_code: ErrorCode, message: str) -> ServiceError:
    return ServiceError(status=status, error_code=error_code, error=message)


def validation_service_error(message: str) -> ServiceError:
    return make_service_error(400, ErrorCode.VALIDATION_ERROR, message)


def not_found_service_error(error_code: ErrorCode, message: str) -> ServiceError:
    return make_service_error(404, error_code, message)


def conflict_service_error(message: str) -> ServiceError:
    return make_service_error(409, ErrorCode.CONFLICT, message)


def internal_service_error(message: str = "An unexpected error occurred") -> ServiceError:
    return make_service_error(500, ErrorCode.INTERNAL_ERROR, message)
