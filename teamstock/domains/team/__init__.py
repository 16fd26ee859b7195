# teamstock/domains/team/__init__.py

"""
'team' 도메인: 회사(Company), 팀(Team), 팀 멤버십(TeamMembership)을 담당합니다.
팀 멤버십의 역할/상태를 변경하는 유일한 계층입니다.
"""
