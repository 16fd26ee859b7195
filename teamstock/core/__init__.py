# teamstock/core/__init__.py

"""
애플리케이션 전역에서 사용하는 핵심 구성요소 패키지입니다.

- `config.py`: pydantic-settings 기반 환경 설정.
- `database.py`: 비동기 엔진 및 세션 관리.
- `crud_base.py`: 공통 CRUD 기본 클래스.
- `security.py`: 비밀번호 해싱, JWT 발급/검증, 요청 사용자 식별.
- `errors.py`, `contracts.py`: 도메인 오류 분류 체계와 요청 페이로드 계약.
- `permissions.py`, `authorization.py`, `subscription.py`: 역할 매트릭스, 권한 게이트, 구독 게이트.
"""
