# tests/domains/test_ledger_n.py

"""
재고 원장(ledger) 모듈의 통합 테스트입니다.
데이터베이스 세션으로 ledger 함수를 직접 호출하여 재고 불변식을 검증합니다.
"""

import asyncio
import random

import pytest
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teamstock.core.config import settings
from teamstock.core.errors import (
    Conflict,
    Forbidden,
    InsufficientStock,
    ItemNotFound,
    LocationNotFound,
    TransactionNotFound,
    ValidationError,
)
from teamstock.domains.inv import ledger
from teamstock.domains.inv import models as inv_models
from teamstock.domains.inv.schemas import StockTransactionCreate
from teamstock.domains.loc import models as loc_models
from teamstock.domains.team import models as team_models
from teamstock.domains.usr import models as usr_models


def _command(item: inv_models.Item, transaction_type: str, quantity: float, **kwargs) -> StockTransactionCreate:
    return StockTransactionCreate(item_id=item.id, transaction_type=transaction_type, quantity=quantity, **kwargs)


async def _stock(db_session: AsyncSession, item: inv_models.Item) -> float:
    await db_session.refresh(item)
    return item.current_stock


# =============================================================================
# 1. 변화량 계산
# =============================================================================
@pytest.mark.parametrize(
    "transaction_type, quantity, current, expected",
    [
        ("stock_in", 5, 10, 5),
        ("stock_out", 3, 10, -3),
        ("adjust", -2, 10, -2),
        ("adjust", 4, 10, 4),
        ("move", 7, 10, 0),
        ("count", 12, 10, 2),
        ("count", 0, 10, -10),
    ],
)
def test_compute_stock_delta(transaction_type, quantity, current, expected):
    assert ledger.compute_stock_delta(transaction_type, quantity, current) == expected


# =============================================================================
# 2. 거래 생성
# =============================================================================
@pytest.mark.asyncio
async def test_ledger_scenario(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    test_default_location: loc_models.Location,
):
    """(성공) 초기 10 → 출고 3 → 이동 → 실사 10 순서로 재고가 갱신됨"""
    shelf = loc_models.Location(team_id=test_team.id, name="선반 A")
    db_session.add(shelf)
    await db_session.commit()
    await db_session.refresh(shelf)

    out = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_out", 3, source_location_id=test_default_location.id),
    )
    assert out.stock_delta == -3
    assert out.quantity == 3
    assert await _stock(db_session, test_item) == 7

    move = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(
            test_item, "move", 2,
            source_location_id=test_default_location.id, destination_location_id=shelf.id,
        ),
    )
    assert move.stock_delta == 0
    assert await _stock(db_session, test_item) == 7

    count = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "count", 10),
    )
    assert count.stock_delta == 3
    assert count.user_id == test_admin_user.id
    assert await _stock(db_session, test_item) == 10

    assert await ledger.replay_item_stock(db_session, item=test_item) == pytest.approx(10)


@pytest.mark.asyncio
async def test_adjust_stores_absolute_quantity_and_signed_delta(
    db_session: AsyncSession, test_team: team_models.Team, test_item: inv_models.Item, test_admin_user: usr_models.User
):
    transaction = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "adjust", -4, notes="파손"),
    )
    assert (transaction.quantity, transaction.stock_delta) == (4, -4)
    assert transaction.notes == "파손"
    assert await _stock(db_session, test_item) == 6


@pytest.mark.asyncio
async def test_negative_stock_is_rejected_by_default(
    db_session: AsyncSession, test_team: team_models.Team, test_item: inv_models.Item, test_admin_user: usr_models.User
):
    """(실패) 재고를 음수로 만드는 출고는 InsufficientStock, 재고와 거래 기록은 변하지 않음"""
    with pytest.raises(InsufficientStock) as exc_info:
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "stock_out", 11),
        )
    assert exc_info.value.status == 409
    assert "Insufficient stock for item '볼트 M8'" in exc_info.value.message

    assert await _stock(db_session, test_item) == 10
    rows = (await db_session.execute(select(inv_models.StockTransaction))).scalars().all()
    assert rows == []


@pytest.mark.asyncio
async def test_negative_stock_allowed_by_setting(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    monkeypatch,
    caplog,
):
    monkeypatch.setattr(settings, "ALLOW_NEGATIVE_STOCK", True)

    with caplog.at_level("WARNING", logger="teamstock.domains.inv.ledger"):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "stock_out", 15),
        )
    assert await _stock(db_session, test_item) == -5
    assert "stock goes negative" in caplog.text


@pytest.mark.asyncio
async def test_move_larger_than_stock_is_rejected(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    test_default_location: loc_models.Location,
):
    """(실패) 보유 재고(10)보다 많은 수량(50)의 이동은 거부, 재고와 거래 기록은 변하지 않음"""
    with pytest.raises(InsufficientStock) as exc_info:
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "move", 50, source_location_id=test_default_location.id),
        )
    assert exc_info.value.status == 409
    assert "cannot move 50" in exc_info.value.message

    assert await _stock(db_session, test_item) == 10
    rows = (await db_session.execute(select(inv_models.StockTransaction))).scalars().all()
    assert rows == []

    # 보유 재고 전량 이동은 허용
    move = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "move", 10, source_location_id=test_default_location.id),
    )
    assert move.stock_delta == 0
    assert await _stock(db_session, test_item) == 10


@pytest.mark.asyncio
async def test_move_larger_than_stock_allowed_by_setting(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    test_default_location: loc_models.Location,
    monkeypatch,
    caplog,
):
    monkeypatch.setattr(settings, "ALLOW_NEGATIVE_STOCK", True)

    with caplog.at_level("WARNING", logger="teamstock.domains.inv.ledger"):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "move", 50, source_location_id=test_default_location.id),
        )
    assert await _stock(db_session, test_item) == 10
    assert "moves 50" in caplog.text


@pytest.mark.asyncio
async def test_move_to_same_location_is_rejected(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    test_default_location: loc_models.Location,
):
    with pytest.raises(ValidationError, match="must be different"):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(
                test_item, "move", 1,
                source_location_id=test_default_location.id, destination_location_id=test_default_location.id,
            ),
        )
    # 양쪽 모두 미지정인 이동도 같은 장소로 취급
    with pytest.raises(ValidationError):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "move", 1),
        )


@pytest.mark.asyncio
async def test_location_of_another_team_is_forbidden(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_other_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
):
    foreign = (
        await db_session.execute(select(loc_models.Location).where(loc_models.Location.team_id == test_other_team.id))
    ).scalars().first()

    with pytest.raises(Forbidden):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "stock_in", 1, destination_location_id=foreign.id),
        )
    with pytest.raises(LocationNotFound):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, "stock_in", 1, destination_location_id=99999),
        )


@pytest.mark.asyncio
async def test_item_of_another_team_is_forbidden(
    db_session: AsyncSession,
    test_item: inv_models.Item,
    test_other_team: team_models.Team,
    test_outsider_user: usr_models.User,
):
    with pytest.raises(Forbidden, match="Item does not belong to this team"):
        await ledger.create_transaction(
            db_session, team_id=test_other_team.id, actor_user_id=test_outsider_user.id,
            command=_command(test_item, "stock_in", 1),
        )
    assert await _stock(db_session, test_item) == 10


@pytest.mark.asyncio
async def test_missing_item(db_session: AsyncSession, test_team: team_models.Team, test_admin_user: usr_models.User):
    with pytest.raises(ItemNotFound):
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=StockTransactionCreate(item_id=99999, transaction_type="stock_in", quantity=1),
        )


# =============================================================================
# 3. 거래 삭제 (되돌림)
# =============================================================================
@pytest.mark.asyncio
async def test_delete_transaction_reverses_delta(
    db_session: AsyncSession, test_team: team_models.Team, test_item: inv_models.Item, test_admin_user: usr_models.User
):
    stock_in = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_in", 5),
    )
    count = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "count", 20),
    )
    assert await _stock(db_session, test_item) == 20

    # 실사 거래를 삭제하면 기록된 stock_delta(+5)만큼 되돌림
    await ledger.delete_transaction(db_session, team_id=test_team.id, transaction_id=count.id)
    assert await _stock(db_session, test_item) == 15

    await ledger.delete_transaction(db_session, team_id=test_team.id, transaction_id=stock_in.id)
    assert await _stock(db_session, test_item) == 10
    assert await ledger.replay_item_stock(db_session, item=test_item) == pytest.approx(10)


@pytest.mark.asyncio
async def test_delete_stock_out_after_move_restores_stock(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    test_default_location: loc_models.Location,
):
    """(성공) 출고 3 → 7, 이동 2 → 7 유지, 출고 거래 삭제 → 10"""
    stock_out = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_out", 3, source_location_id=test_default_location.id),
    )
    assert await _stock(db_session, test_item) == 7

    await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "move", 2, source_location_id=test_default_location.id),
    )
    assert await _stock(db_session, test_item) == 7

    await ledger.delete_transaction(db_session, team_id=test_team.id, transaction_id=stock_out.id)
    assert await _stock(db_session, test_item) == 10
    assert await ledger.replay_item_stock(db_session, item=test_item) == pytest.approx(10)


@pytest.mark.asyncio
async def test_delete_transaction_that_would_go_negative(
    db_session: AsyncSession, test_team: team_models.Team, test_item: inv_models.Item, test_admin_user: usr_models.User
):
    """(실패) 입고 거래 삭제로 재고가 음수가 되면 거부"""
    stock_in = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_in", 5),
    )
    await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_out", 12),
    )
    stock_in_id = stock_in.id
    with pytest.raises(InsufficientStock):
        await ledger.delete_transaction(db_session, team_id=test_team.id, transaction_id=stock_in_id)

    assert await _stock(db_session, test_item) == 3
    # 롤백 후에는 ORM 객체가 만료되므로 저장해 둔 ID로 다시 조회합니다.
    assert await db_session.get(inv_models.StockTransaction, stock_in_id) is not None


@pytest.mark.asyncio
async def test_delete_transaction_of_another_team(
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_other_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
):
    stock_in = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_in", 1),
    )
    with pytest.raises(TransactionNotFound):
        await ledger.delete_transaction(db_session, team_id=test_other_team.id, transaction_id=stock_in.id)
    with pytest.raises(TransactionNotFound):
        await ledger.delete_transaction(db_session, team_id=test_team.id, transaction_id=99999)


# =============================================================================
# 4. 조회 및 동시성
# =============================================================================
@pytest.mark.asyncio
async def test_list_transactions_newest_first_with_search(
    db_session: AsyncSession, test_team: team_models.Team, test_item: inv_models.Item, test_admin_user: usr_models.User
):
    first = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_in", 1, notes="정기 입고"),
    )
    second = await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_out", 1, notes="현장 출고"),
    )

    listed = await ledger.list_team_transactions(db_session, team_id=test_team.id)
    assert [t.id for t in listed] == [second.id, first.id]

    by_notes = await ledger.list_team_transactions(db_session, team_id=test_team.id, search="입고")
    assert [t.id for t in by_notes] == [first.id]

    by_item_name = await ledger.list_team_transactions(db_session, team_id=test_team.id, search="볼트")
    assert len(by_item_name) == 2

    per_item = await ledger.list_item_transactions(db_session, team_id=test_team.id, item_id=test_item.id)
    assert [t.id for t in per_item] == [second.id, first.id]


@pytest.mark.asyncio
async def test_concurrent_stock_in_is_serialized(
    session_factory: sessionmaker,
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
):
    """(성공) 서로 다른 세션의 동시 입고 10건이 모두 반영됨 (갱신 손실 없음)"""
    team_id, item_id, user_id = test_team.id, test_item.id, test_admin_user.id

    async def stock_in_once():
        async with session_factory() as session:
            await ledger.create_transaction(
                session, team_id=team_id, actor_user_id=user_id,
                command=StockTransactionCreate(item_id=item_id, transaction_type="stock_in", quantity=1),
            )

    await asyncio.gather(*(stock_in_once() for _ in range(10)))

    assert await _stock(db_session, test_item) == 20
    assert await ledger.replay_item_stock(db_session, item=test_item) == pytest.approx(20)


def _random_commands(seed: int, initial: float, length: int = 12):
    """재고가 음수가 되지 않는 입고/출고/조정 거래 목록과 각 거래의 변화량을 만듭니다."""
    rng = random.Random(seed)
    stock = initial
    commands = []
    for _ in range(length):
        kind = rng.choice(["stock_in", "stock_out", "adjust"])
        if kind == "stock_out" and stock >= 1:
            quantity = rng.randint(1, int(min(stock, 6)))
            delta = -quantity
        elif kind == "adjust":
            quantity = rng.choice([n for n in range(-int(min(stock, 4)), 6) if n != 0])
            delta = quantity
        else:
            kind, quantity = "stock_in", rng.randint(1, 8)
            delta = quantity
        stock += delta
        commands.append((kind, quantity, delta))

    # 어느 거래를 지워도 재고가 음수가 되지 않도록 최대 증가량만큼 입고를 더합니다.
    top_up = max([delta for *_, delta in commands if delta > 0], default=1)
    commands.append(("stock_in", top_up, top_up))
    return commands


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", [1, 7, 42, 2024, 31337])
async def test_random_sequences_match_replay_and_deletion(
    seed: int,
    db_session: AsyncSession,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
):
    """(성공) 임의의 입고/출고/조정 순서에서 재고 == 재계산 값, 어떤 거래를 지워도 그 거래만 빠진 값이 됨"""
    commands = _random_commands(seed, test_item.initial_quantity)
    recorded = []
    for kind, quantity, delta in commands:
        transaction = await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, kind, quantity),
        )
        assert transaction.stock_delta == pytest.approx(delta)
        recorded.append((transaction.id, kind, quantity, delta))

    expected_total = test_item.initial_quantity + sum(delta for *_, delta in recorded)
    assert await _stock(db_session, test_item) == pytest.approx(expected_total)
    assert await ledger.replay_item_stock(db_session, item=test_item) == pytest.approx(expected_total)

    for transaction_id, kind, quantity, delta in recorded:
        await ledger.delete_transaction(db_session, team_id=test_team.id, transaction_id=transaction_id)
        assert await _stock(db_session, test_item) == pytest.approx(expected_total - delta)
        assert await ledger.replay_item_stock(db_session, item=test_item) == pytest.approx(expected_total - delta)

        # 같은 거래를 다시 기록해 다음 삭제 검사를 위한 합계를 복원합니다.
        await ledger.create_transaction(
            db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
            command=_command(test_item, kind, quantity),
        )
        assert await _stock(db_session, test_item) == pytest.approx(expected_total)


# =============================================================================
# 5. 품목 삭제
# =============================================================================
@pytest.mark.asyncio
async def test_delete_item_without_history(
    db_session: AsyncSession,
    session_factory: sessionmaker,
    test_team: team_models.Team,
    test_other_team: team_models.Team,
    test_item: inv_models.Item,
):
    item_id = test_item.id
    with pytest.raises(Forbidden):
        await ledger.delete_item(db_session, team_id=test_other_team.id, item_id=item_id)

    await ledger.delete_item(db_session, team_id=test_team.id, item_id=item_id)

    async with session_factory() as session:
        assert await session.get(inv_models.Item, item_id) is None
    with pytest.raises(ItemNotFound):
        await ledger.delete_item(db_session, team_id=test_team.id, item_id=item_id)


@pytest.mark.asyncio
async def test_delete_item_with_history_is_rejected(
    db_session: AsyncSession, test_team: team_models.Team, test_item: inv_models.Item, test_admin_user: usr_models.User
):
    item_id = test_item.id
    await ledger.create_transaction(
        db_session, team_id=test_team.id, actor_user_id=test_admin_user.id,
        command=_command(test_item, "stock_in", 1),
    )
    with pytest.raises(Conflict, match="stock transaction history"):
        await ledger.delete_item(db_session, team_id=test_team.id, item_id=item_id)
    assert await db_session.get(inv_models.Item, item_id) is not None


@pytest.mark.asyncio
async def test_transaction_during_item_delete_does_not_orphan(
    session_factory: sessionmaker,
    test_team: team_models.Team,
    test_item: inv_models.Item,
    test_admin_user: usr_models.User,
    monkeypatch,
):
    """(실패) 삭제가 이력 확인을 마친 직후 들어온 거래는 삭제가 끝난 뒤 ItemNotFound, 고아 거래가 남지 않음"""
    team_id, item_id, user_id = test_team.id, test_item.id, test_admin_user.id
    original_has_transactions = ledger.crud.item.has_transactions
    checked = asyncio.Event()

    async def has_transactions_then_pause(db, *, item_id):
        result = await original_has_transactions(db, item_id=item_id)
        checked.set()
        # 이력 확인과 삭제 사이에 다른 요청이 끼어들 시간을 줍니다.
        await asyncio.sleep(0.05)
        return result

    monkeypatch.setattr(ledger.crud.item, "has_transactions", has_transactions_then_pause)

    async def delete_item():
        async with session_factory() as session:
            await ledger.delete_item(session, team_id=team_id, item_id=item_id)

    async def stock_in_after_check():
        await checked.wait()
        async with session_factory() as session:
            await ledger.create_transaction(
                session, team_id=team_id, actor_user_id=user_id,
                command=StockTransactionCreate(item_id=item_id, transaction_type="stock_in", quantity=5),
            )

    deleted, created = await asyncio.gather(delete_item(), stock_in_after_check(), return_exceptions=True)

    assert deleted is None
    assert isinstance(created, ItemNotFound)
    async with session_factory() as session:
        assert await session.get(inv_models.Item, item_id) is None
        orphans = (
            await session.execute(select(inv_models.StockTransaction).where(inv_models.StockTransaction.item_id == item_id))
        ).scalars().all()
        assert orphans == []
