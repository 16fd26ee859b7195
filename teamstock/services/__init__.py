# teamstock/services/__init__.py

"""
서비스 파사드(Service Facade) 패키지입니다.

각 도메인 작업을 다음 순서로 조합하여 항상 `ServiceResult`를 반환합니다.
페이로드 계약 검증 → 권한 게이트 → 구독 게이트(재고 관련 작업) → 원장/디렉터리 작업.
"""
