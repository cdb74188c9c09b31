"""
Integration Test: Credit Ledger

Test cases:
- Signup bonus on first sight, exactly once
- Balance is the sum of entries
- Recent transactions and activity counts
- Stored email follows the address verified on each request
"""

import asyncio
from decimal import Decimal
from uuid import uuid4

from prophet.config import get_settings
from prophet.database import get_db_session
from prophet.services import ledger_service


def test_signup_bonus_granted_once(factory) -> None:
    async def run() -> None:
        user_id = uuid4()
        async with get_db_session() as db:
            first = await ledger_service.ensure_user(db, user_id, "new@example.com")
        async with get_db_session() as db:
            again = await ledger_service.ensure_user(db, user_id, "new@example.com")
            balance = await ledger_service.get_balance(db, user_id)
            count = await ledger_service.count_transactions(db, user_id)

        assert first.id == again.id == user_id
        assert balance == Decimal("100.00")
        assert count == 1

    asyncio.run(run())


def test_concurrent_first_requests_register_once(factory) -> None:
    async def run() -> None:
        user_id = uuid4()

        async def register():
            async with get_db_session() as db:
                return await ledger_service.ensure_user(db, user_id, "race@example.com")

        users = await asyncio.gather(register(), register())

        async with get_db_session() as db:
            balance = await ledger_service.get_balance(db, user_id)
        assert {u.id for u in users} == {user_id}
        assert balance == Decimal("100.00")

    asyncio.run(run())


def test_balance_and_activity_follow_stakes_and_payouts(factory) -> None:
    async def run() -> None:
        creator = await factory.user()
        bettor = await factory.user()
        rival = await factory.user()
        settled = await factory.bet(creator, title="Settled bet")
        pending = await factory.bet(creator, title="Pending bet")

        await factory.stake(settled, bettor, True, "20")
        await factory.stake(settled, rival, False, "30")
        await factory.stake(pending, bettor, False, "15")
        await factory.resolve(settled, creator, True)

        async with get_db_session() as db:
            balance = await ledger_service.get_balance(db, bettor.id)
            recent = await ledger_service.get_recent_transactions(db, bettor.id, limit=2)
            total = await ledger_service.count_transactions(db, bettor.id)
            active = await ledger_service.count_active_bets(db, bettor.id)

        # 100 - 20 - 15 + 50
        assert balance == Decimal("115.00")
        assert total == 4
        assert active == 1
        assert len(recent) == 2
        assert recent[0].type == "payout"
        assert recent[0].amount == Decimal("50.00")

    asyncio.run(run())


def test_signup_bonus_follows_configuration(factory, monkeypatch) -> None:
    monkeypatch.setenv("LEDGER__SIGNUP_BONUS", "250")
    get_settings.cache_clear()

    async def run() -> Decimal:
        user = await factory.user()
        return await factory.balance(user)

    assert asyncio.run(run()) == Decimal("250.00")


def test_changed_email_replaces_stored_one(factory) -> None:
    async def run() -> None:
        user_id = uuid4()
        async with get_db_session() as db:
            await ledger_service.ensure_user(db, user_id, "old@example.com")
        async with get_db_session() as db:
            user = await ledger_service.ensure_user(db, user_id, "new@example.com")
        async with get_db_session() as db:
            stored = await ledger_service.ensure_user(db, user_id, "new@example.com")
            count = await ledger_service.count_transactions(db, user_id)

        assert user.email == "new@example.com"
        assert stored.email == "new@example.com"
        assert count == 1

    asyncio.run(run())


def test_email_moved_to_another_account_registers_it(factory) -> None:
    async def run() -> None:
        previous_owner, new_owner = uuid4(), uuid4()
        async with get_db_session() as db:
            await ledger_service.ensure_user(db, previous_owner, "shared@example.com")
        async with get_db_session() as db:
            user = await ledger_service.ensure_user(db, new_owner, "shared@example.com")
            balance = await ledger_service.get_balance(db, new_owner)

        assert user.id == new_owner
        assert balance == Decimal("100.00")

    asyncio.run(run())
