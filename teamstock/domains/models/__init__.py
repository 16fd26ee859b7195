# teamstock/domains/models/__init__.py

"""
모든 도메인의 SQLModel 모델을 한 곳에서 임포트하여
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다.
"""

# usr (User, UserRole)
from teamstock.domains.usr.models import User, UserRole

# team (Company, Team, TeamMembership)
from teamstock.domains.team.models import Company, Team, TeamMembership, TeamRole, MembershipStatus

# loc (Location)
from teamstock.domains.loc.models import Location

# inv (Item, StockTransaction)
from teamstock.domains.inv.models import Item, StockTransaction, StockTransactionType


__all__ = [
    # usr
    "User", "UserRole",
    # team
    "Company", "Team", "TeamMembership", "TeamRole", "MembershipStatus",
    # loc
    "Location",
    # inv
    "Item", "StockTransaction", "StockTransactionType",
]
