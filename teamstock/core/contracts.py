# teamstock/core/contracts.py

"""
요청 페이로드 계약(contract) 파싱 유틸리티입니다.

라우터나 서비스 파사드는 임의의 입력(dict 등)을 받아 도메인 스키마로 검증하고,
예외 대신 태그가 붙은 `ValidationResult`를 돌려받습니다.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)

INVALID_PAYLOAD_MESSAGE = "Invalid request payload"


class ValidationResult(BaseModel, Generic[SchemaType]):
    ok: bool
    data: Optional[SchemaType] = None
    error: Optional[str] = None


def normalize_email(value: str) -> str:
    return value.strip().lower()


def format_validation_error(exc: PydanticValidationError) -> str:
    """
    pydantic 검증 오류 중 첫 번째 항목을 사람이 읽을 수 있는 한 줄 메시지로 변환합니다.
    field_validator에서 직접 던진 ValueError는 메시지를 그대로 사용합니다.
    """
    first = exc.errors()[0]
    if first.get("type") == "value_error" and "error" in first.get("ctx", {}):
        return str(first["ctx"]["error"])
    field = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def parse_payload(schema: Type[SchemaType], payload: Any) -> ValidationResult[SchemaType]:
    """
    `payload`를 `schema`로 검증합니다. 매핑이 아닌 입력은 즉시 거부합니다.
    """
    if isinstance(payload, schema):
        return ValidationResult[schema](ok=True, data=payload)
    if not isinstance(payload, dict):
        return ValidationResult[schema](ok=False, error=INVALID_PAYLOAD_MESSAGE)
    try:
        data = schema.model_validate(payload)
    except PydanticValidationError as exc:
        return ValidationResult[schema](ok=False, error=format_validation_error(exc))
    return ValidationResult[schema](ok=True, data=data)


# --- 스키마 field_validator에서 사용하는 문자열 정규화 헬퍼 ---
def strip_or_none(value: Any) -> Any:
    """문자열은 공백을 제거하고, 빈 문자열은 None으로 바꿉니다."""
    if isinstance(value, str):
        return value.strip() or None
    return value


def require_text(value: Any, message: str) -> str:
    """공백 제거 후 비어 있지 않은 문자열을 요구합니다."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()
