# teamstock/__init__.py

"""
TeamStock FastAPI 애플리케이션의 메인 패키지입니다.

이 패키지는 팀 단위 재고 원장(Inventory Ledger)과 권한 부여 코어를 포함합니다.
FastAPI 애플리케이션의 진입점 (main.py)과
공통 설정, 데이터베이스 연결, 보안 및 권한 판정 유틸리티를 담는 core 서브패키지,
각 비즈니스 도메인을 대표하는 domains 서브패키지,
그리고 도메인 작업을 조합하는 services(서비스 파사드) 서브패키지로 구성됩니다.
"""

APP_NAME = "TeamStock API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Team-scoped inventory ledger and authorization core."
__all__ = []
