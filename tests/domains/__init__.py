# tests/domains/__init__.py

"""
도메인별 통합 테스트 패키지입니다.

- `test_usr_n.py`: 로그인, 현재 사용자 조회
- `test_team_n.py`: 팀, 팀 멤버 관리
- `test_loc_n.py`: 팀별 보관 장소
- `test_inv_n.py`: 품목, 재고 거래 API
- `test_ledger_n.py`: 재고 원장 (수량 계산, 동시성, 거래 삭제 역산)
"""

__all__ = []
