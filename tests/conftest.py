# tests/conftest.py

from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.main import app as main_app
from teamstock.core import dependencies as deps
from teamstock.core.database import create_db_and_tables
from teamstock.core.security import create_access_token

from teamstock.domains.inv import models as inv_models
from teamstock.domains.loc import crud as loc_crud
from teamstock.domains.loc import models as loc_models
from teamstock.domains.team import crud as team_crud
from teamstock.domains.team import models as team_models
from teamstock.domains.team import schemas as team_schemas
from teamstock.domains.usr import crud as usr_crud
from teamstock.domains.usr import models as usr_models
from teamstock.domains.usr import schemas as usr_schemas


# --- 데이터베이스 픽스처 ---
# 테스트마다 임시 디렉터리에 SQLite 파일 DB를 새로 만듭니다.
# 여러 세션이 같은 DB를 동시에 사용하는 테스트(동시성 테스트)를 위해 메모리 DB 대신 파일을 사용합니다.
@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'teamstock_test.db'}",
        echo=False,
        future=True,
        poolclass=NullPool,     # 각 연결이 독립적으로 사용되고 바로 닫히도록 함
    )
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
def session_factory(test_engine: AsyncEngine) -> sessionmaker:
    """테스트 DB에 바인딩된 세션 팩토리. 독립 세션이 필요한 테스트에서 사용합니다."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# --- API 클라이언트 픽스처 ---
# 요청마다 테스트 DB의 새 세션을 사용하도록 get_db_session 의존성을 오버라이드합니다.
@pytest_asyncio.fixture(scope="function")
async def client(session_factory: sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db_session():
        async with session_factory() as session:
            yield session

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides[deps.get_db_session] = override_get_db_session
    try:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)


@pytest_asyncio.fixture(scope="function")
def auth_headers() -> Callable[[usr_models.User], Dict[str, str]]:
    """사용자의 Bearer 토큰 헤더를 만드는 함수를 반환합니다."""
    def _headers(user: usr_models.User) -> Dict[str, str]:
        token = create_access_token(data={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


# --- 사용자 / 팀 팩토리 ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다."""
    async def _create_user(
        email: str,
        password: str = "password123",
        role: usr_models.UserRole = usr_models.UserRole.VIEWER,
        is_active: bool = True,
    ) -> usr_models.User:
        user_in = usr_schemas.UserCreate(email=email, password=password, role=role, is_active=is_active)
        return await usr_crud.user.create(db_session, obj_in=user_in)
    return _create_user


@pytest_asyncio.fixture(scope="function")
def team_factory(db_session: AsyncSession) -> Callable[..., Awaitable[team_models.Team]]:
    """
    owner를 관리자로 하는 팀을 생성합니다.
    기본값으로 결제 상태를 'active'로 기록하여 구독 게이트를 통과하게 합니다.
    """
    async def _create_team(
        owner: usr_models.User,
        name: str = "테스트 팀",
        subscription_status: Optional[str] = "active",
    ) -> team_models.Team:
        team = await team_crud.team.create_with_owner(
            db_session, obj_in=team_schemas.TeamCreate(name=name), owner=owner
        )
        team.stripe_subscription_status = subscription_status
        db_session.add(team)
        await db_session.commit()
        await db_session.refresh(team)
        return team
    return _create_team


@pytest_asyncio.fixture(scope="function")
def member_factory(db_session: AsyncSession) -> Callable[..., Awaitable[team_models.TeamMembership]]:
    async def _add_member(
        team: team_models.Team, user: usr_models.User, role: team_models.TeamRole
    ) -> team_models.TeamMembership:
        return await team_crud.membership.add_member(db_session, team_id=team.id, user=user, role=role)
    return _add_member


# --- 역할별 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    """전역 관리자(ADMIN). test_team의 소유자(팀 관리자)가 됩니다."""
    return await user_factory("admin@example.com", "adminpass123", role=usr_models.UserRole.ADMIN)


@pytest_asyncio.fixture(scope="function")
async def test_operator_user(user_factory: Callable) -> usr_models.User:
    return await user_factory("operator@example.com", "operpass123", role=usr_models.UserRole.OPERATOR)


@pytest_asyncio.fixture(scope="function")
async def test_viewer_user(user_factory: Callable) -> usr_models.User:
    return await user_factory("viewer@example.com", "viewpass123", role=usr_models.UserRole.VIEWER)


@pytest_asyncio.fixture(scope="function")
async def test_outsider_user(user_factory: Callable) -> usr_models.User:
    """어느 팀에도 속하지 않은 사용자."""
    return await user_factory("outsider@example.com", "outpass123", role=usr_models.UserRole.OPERATOR)


# --- 팀 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_team(
    team_factory: Callable,
    member_factory: Callable,
    test_admin_user: usr_models.User,
    test_operator_user: usr_models.User,
    test_viewer_user: usr_models.User,
) -> team_models.Team:
    """관리자/운영자/조회자 멤버가 있는 구독 활성 팀."""
    team = await team_factory(test_admin_user, name="재고 관리팀")
    await member_factory(team, test_operator_user, team_models.TeamRole.OPERATOR)
    await member_factory(team, test_viewer_user, team_models.TeamRole.VIEWER)
    return team


@pytest_asyncio.fixture(scope="function")
async def test_other_team(team_factory: Callable, test_outsider_user: usr_models.User) -> team_models.Team:
    """다른 테넌트: test_outsider_user가 관리자인 팀."""
    return await team_factory(test_outsider_user, name="다른 팀")


@pytest_asyncio.fixture(scope="function")
async def test_default_location(db_session: AsyncSession, test_team: team_models.Team) -> loc_models.Location:
    """팀 생성 시 자동으로 만들어진 기본 장소."""
    return await loc_crud.location.get_by_name_and_team(
        db_session, team_id=test_team.id, name=loc_models.DEFAULT_LOCATION_NAME
    )


@pytest_asyncio.fixture(scope="function")
async def test_item(db_session: AsyncSession, test_team: team_models.Team) -> inv_models.Item:
    """초기 수량 10의 테스트 품목."""
    item = inv_models.Item(
        team_id=test_team.id, name="볼트 M8", sku="BLT-M8", barcode="8800000000011",
        initial_quantity=10, current_stock=10,
    )
    db_session.add(item)
    await db_session.commit()
    await db_session.refresh(item)
    return item
