# tests/__init__.py

"""
TeamStock API 테스트 스위트 패키지입니다.

- `core/`: 권한 매트릭스, 권한 게이트, 구독 판정, 페이로드 계약 단위 테스트
- `domains/`: 도메인별 (usr, team, loc, inv) API 통합 테스트와 재고 원장 테스트
- `conftest.py`: 테스트 DB, API 클라이언트, 사용자/팀 픽스처
"""

__title__ = "TeamStock API Tests"
__all__ = []
