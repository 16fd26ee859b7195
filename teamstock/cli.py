# teamstock/cli.py

"""
운영용 명령줄 도구 (typer).

- init-db: 테이블 생성 (개발/테스트용)
- create-user: 새 사용자 계정 생성
- promote: 기존 사용자를 super_admin으로 승격
"""

import asyncio
import logging

import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.database import create_db_and_tables, get_async_session_context
from teamstock.core.errors import DomainError, ErrorCode, NotFound
from teamstock.core.security import MIN_PASSWORD_LENGTH
from teamstock.domains.usr import crud as usr_crud
from teamstock.domains.usr import schemas as usr_schemas
from teamstock.domains.usr.models import User, UserRole

logger = logging.getLogger(__name__)

cli = typer.Typer(help="TeamStock 관리 명령")


async def create_user_account(db: AsyncSession, *, email: str, password: str, role: UserRole) -> User:
    """사용자 계정을 생성합니다. 이메일이 이미 있으면 Conflict를 발생시킵니다."""
    user_in = usr_schemas.UserCreate(email=email, password=password, role=role)
    return await usr_crud.user.create(db, obj_in=user_in)


async def promote_to_super_admin(db: AsyncSession, *, email: str) -> User:
    user = await usr_crud.user.get_by_email(db, email=email)
    if user is None:
        raise NotFound("User not found", error_code=ErrorCode.USER_NOT_FOUND)
    if user.role != UserRole.SUPER_ADMIN:
        user.role = UserRole.SUPER_ADMIN
        db.add(user)
        await db.commit()
        await db.refresh(user)
    return user


def _run(coro_factory) -> None:
    async def runner():
        async with get_async_session_context() as db:
            return await coro_factory(db)

    try:
        asyncio.run(runner())
    except DomainError as e:
        typer.echo(f"오류: {e.message}", err=True)
        raise typer.Exit(code=1)


@cli.command("init-db")
def init_db():
    """모든 테이블을 생성합니다 (기존 테이블은 유지)."""
    asyncio.run(create_db_and_tables())
    typer.echo("데이터베이스 테이블 생성 완료")


@cli.command("create-user")
def create_user(
    email: str = typer.Option(..., "--email", "-e", prompt="이메일을 입력하세요", help="로그인 이메일"),
    password: str = typer.Option(
        ..., "--password", "-p",
        prompt="비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help=f"비밀번호 (최소 {MIN_PASSWORD_LENGTH}자)",
    ),
    role: UserRole = typer.Option(UserRole.ADMIN, "--role", "-r", help="전역 사용자 역할"),
):
    """새 사용자 계정을 생성합니다."""
    if len(password) < MIN_PASSWORD_LENGTH:
        typer.echo(f"오류: 비밀번호는 최소 {MIN_PASSWORD_LENGTH}자 이상이어야 합니다.", err=True)
        raise typer.Abort()

    _run(lambda db: create_user_account(db, email=email, password=password, role=role))
    typer.echo(f"사용자 계정이 생성되었습니다: {email} ({role.value})")


@cli.command("promote")
def promote(email: str = typer.Argument(..., help="승격할 사용자의 이메일")):
    """기존 사용자를 super_admin으로 승격합니다."""
    _run(lambda db: promote_to_super_admin(db, email=email))
    typer.echo(f"{email} 사용자가 super_admin으로 승격되었습니다.")


if __name__ == "__main__":
    cli()
