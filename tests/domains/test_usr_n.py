# tests/domains/test_usr_n.py

"""
'usr' 도메인 (인증) API 엔드포인트 통합 테스트입니다.
"""

import pytest
from httpx import AsyncClient

from teamstock.core.security import create_access_token
from teamstock.domains.usr import models as usr_models

TOKEN_URL = "/api/v1/auth/token"
ME_URL = "/api/v1/auth/me"
SIGNUP_URL = "/api/v1/auth/signup"
PASSWORD_URL = "/api/v1/users/me/password"


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_operator_user: usr_models.User):
    """(성공) 이메일/비밀번호로 로그인하고, 발급된 토큰으로 내 정보 조회"""
    response = await client.post(TOKEN_URL, data={"username": "operator@example.com", "password": "operpass123"})

    assert response.status_code == 200
    token = response.json()
    assert token["token_type"] == "bearer"

    response = await client.get(ME_URL, headers={"Authorization": f"Bearer {token['access_token']}"})
    assert response.status_code == 200
    me = response.json()
    assert me["id"] == test_operator_user.id
    assert me["email"] == "operator@example.com"
    assert me["role"] == "operator"
    assert "password_hash" not in me


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client: AsyncClient, test_viewer_user: usr_models.User):
    response = await client.post(TOKEN_URL, data={"username": " Viewer@Example.com ", "password": "viewpass123"})
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, password",
    [
        ("operator@example.com", "wrongpass"),
        ("nobody@example.com", "operpass123"),
    ],
)
async def test_login_failure(client: AsyncClient, test_operator_user: usr_models.User, username, password):
    """(실패) 잘못된 자격 증명은 401"""
    response = await client.post(TOKEN_URL, data={"username": username, "password": password})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_inactive_user(client: AsyncClient, user_factory):
    await user_factory("sleeper@example.com", "sleeppass123", is_active=False)

    response = await client.post(TOKEN_URL, data={"username": "sleeper@example.com", "password": "sleeppass123"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_valid_token(client: AsyncClient, test_admin_user: usr_models.User):
    """(실패) 토큰이 없거나 위조되었거나 없는 사용자를 가리키면 401"""
    assert (await client.get(ME_URL)).status_code == 401

    response = await client.get(ME_URL, headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

    ghost_token = create_access_token(data={"sub": "99999"})
    response = await client.get(ME_URL, headers={"Authorization": f"Bearer {ghost_token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not authenticated"


# =============================================================================
# 회원 가입
# =============================================================================
@pytest.mark.asyncio
async def test_signup_creates_admin_user_and_company(client: AsyncClient):
    """(성공) 가입자는 전역 admin이 되고, 회사가 slug와 함께 생성되며, 발급된 토큰으로 바로 인증됨"""
    response = await client.post(
        SIGNUP_URL, json={"email": " Founder@Example.com ", "password": "founder123", "company_name": " Café Ünïon "}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "founder@example.com"
    assert body["user"]["role"] == "admin"
    assert "password_hash" not in body["user"]
    assert body["company"]["name"] == "Café Ünïon"
    assert body["company"]["slug"] == "cafe-union"

    me = await client.get(ME_URL, headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]

    login = await client.post(TOKEN_URL, data={"username": "founder@example.com", "password": "founder123"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_signup_company_slug_is_unique(client: AsyncClient):
    slugs = []
    for index, company_name in enumerate(["Acme", "ACME!", "재고 회사", "창고 회사"]):
        response = await client.post(
            SIGNUP_URL,
            json={"email": f"owner{index}@example.com", "password": "owner12345", "company_name": company_name},
        )
        assert response.status_code == 201
        slugs.append(response.json()["company"]["slug"])

    # 영문자가 없는 이름은 'company'를 기본 slug로 사용
    assert slugs == ["acme", "acme-1", "company", "company-1"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, message",
    [
        ({"email": "a@example.com", "password": "secret123"}, "Email, password and company name are required"),
        ({"email": "  ", "password": "secret123", "company_name": "Acme"}, "Email, password and company name are required"),
        ({"email": "not-an-email", "password": "secret123", "company_name": "Acme"}, "Invalid email format"),
        ({"email": "a@example.com", "password": "12345", "company_name": "Acme"}, "Password must be at least 6 characters"),
        (["not", "an", "object"], "Invalid request payload"),
    ],
)
async def test_signup_validation(client: AsyncClient, payload, message):
    """(실패) 필수 값 누락, 이메일 형식, 비밀번호 길이 검증은 400"""
    response = await client.post(SIGNUP_URL, json=payload)

    assert response.status_code == 400
    assert response.json() == {"detail": message, "errorCode": "VALIDATION_ERROR"}


@pytest.mark.asyncio
async def test_signup_duplicate_email(client: AsyncClient, test_viewer_user: usr_models.User):
    response = await client.post(
        SIGNUP_URL, json={"email": "VIEWER@example.com", "password": "another123", "company_name": "Acme"}
    )

    assert response.status_code == 409
    assert response.json() == {"detail": "User with this email already exists", "errorCode": "EMAIL_ALREADY_IN_USE"}


# =============================================================================
# 비밀번호 변경
# =============================================================================
@pytest.mark.asyncio
async def test_change_own_password(client: AsyncClient, auth_headers, test_operator_user: usr_models.User):
    """(성공) 현재 비밀번호 확인 후 변경, 이전 비밀번호로는 로그인 불가"""
    response = await client.patch(
        PASSWORD_URL,
        json={"current_password": "operpass123", "new_password": "newpass456", "confirm_password": "newpass456"},
        headers=auth_headers(test_operator_user),
    )

    assert response.status_code == 200
    assert response.json() == {"messageCode": "PASSWORD_UPDATED"}

    old = await client.post(TOKEN_URL, data={"username": "operator@example.com", "password": "operpass123"})
    assert old.status_code == 401
    new = await client.post(TOKEN_URL, data={"username": "operator@example.com", "password": "newpass456"})
    assert new.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, error_code",
    [
        ({"current_password": "operpass123", "new_password": "newpass456"}, "PASSWORD_FIELDS_REQUIRED"),
        ({"current_password": " ", "new_password": "newpass456", "confirm_password": "newpass456"}, "PASSWORD_FIELDS_REQUIRED"),
        ({"current_password": "operpass123", "new_password": "123", "confirm_password": "123"}, "PASSWORD_TOO_SHORT"),
        ({"current_password": "operpass123", "new_password": "newpass456", "confirm_password": "newpass789"}, "PASSWORD_CONFIRMATION_MISMATCH"),
        ({"current_password": "operpass123", "new_password": "operpass123", "confirm_password": "operpass123"}, "PASSWORD_MUST_DIFFER"),
        ({"current_password": "wrongpass", "new_password": "newpass456", "confirm_password": "newpass456"}, "CURRENT_PASSWORD_INCORRECT"),
    ],
)
async def test_change_own_password_validation(
    client: AsyncClient, auth_headers, test_operator_user: usr_models.User, payload, error_code
):
    """(실패) 필드 누락, 길이, 확인 불일치, 동일 비밀번호, 현재 비밀번호 오류는 400과 각각의 오류 코드"""
    response = await client.patch(PASSWORD_URL, json=payload, headers=auth_headers(test_operator_user))

    assert response.status_code == 400
    assert response.json()["errorCode"] == error_code

    # 비밀번호는 바뀌지 않음
    login = await client.post(TOKEN_URL, data={"username": "operator@example.com", "password": "operpass123"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_change_password_requires_authentication(client: AsyncClient):
    response = await client.patch(
        PASSWORD_URL,
        json={"current_password": "operpass123", "new_password": "newpass456", "confirm_password": "newpass456"},
    )
    assert response.status_code == 401
    assert response.json()["errorCode"] == "USER_NOT_AUTHENTICATED"
