# teamstock/domains/usr/__init__.py

"""
'usr' 도메인: 사용자 계정, 전역 역할(UserRole), 로그인 관련 기능을 담당합니다.
"""
