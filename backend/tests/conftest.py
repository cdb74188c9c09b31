"""Shared fixtures: isolated settings, a throwaway SQLite database, and factories."""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import pytest

from prophet.config import get_settings
from prophet.database import get_db_session, init_db
from prophet.database.session import configure_engine, dispose_engine
from prophet.models import Bet, User
from prophet.schemas import BetCreate
from prophet.services import (
    Requester,
    bet_service,
    ledger_service,
    resolution_service,
    staking_service,
)
from prophet.utils.time_utils import as_utc, utc_now


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Fresh settings per test, never read from a developer's .env or config.yaml."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "config.yaml"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def database(monkeypatch, tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'prophet.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()

    configure_engine(url)
    asyncio.run(init_db())
    yield url
    asyncio.run(dispose_engine())


class Factory:
    """Creates rows through the services so every invariant holds."""

    async def user(self, email: Optional[str] = None, role: str = "user") -> User:
        async with get_db_session() as db:
            user = await ledger_service.ensure_user(
                db, uuid4(), email or f"{uuid4().hex[:10]}@example.com"
            )
            if role != "user":
                user.role = role
                user.updated_at = utc_now()
                await db.commit()
            return user

    async def bet(
        self,
        creator: User,
        arbitrator_type: str = "creator",
        arbitrator_email: Optional[str] = None,
        minimum_stake: str = "10",
        title: str = "Will it rain in Lisbon tomorrow?",
    ) -> Bet:
        request = BetCreate(
            title=title,
            description="Resolves YES if any rain is recorded at the airport station.",
            deadline=utc_now() + timedelta(days=1),
            arbitrator_type=arbitrator_type,
            arbitrator_email=arbitrator_email,
            minimum_stake=Decimal(minimum_stake),
        )
        async with get_db_session() as db:
            return await bet_service.create_bet(db, creator, request)

    async def stake(self, bet: Bet, user: User, prediction: bool, amount: str):
        async with get_db_session() as db:
            return await staking_service.record_stake(
                db, bet.id, user.id, prediction, Decimal(amount)
            )

    async def resolve(self, bet: Bet, arbitrator: User, outcome: bool, now=None):
        async with get_db_session() as db:
            return await resolution_service.resolve_manually(
                db,
                bet.id,
                Requester(user_id=arbitrator.id, email=arbitrator.email),
                outcome,
                now=now or self.after_deadline(bet),
            )

    async def balance(self, user: User) -> Decimal:
        async with get_db_session() as db:
            return await ledger_service.get_balance(db, user.id)

    async def reload(self, bet: Bet) -> Bet:
        async with get_db_session() as db:
            return await bet_service.get_bet_with_details(db, bet.id)

    @staticmethod
    def after_deadline(bet: Bet, hours: int = 1) -> datetime:
        return as_utc(bet.deadline) + timedelta(hours=hours)


@pytest.fixture
def factory(database) -> Factory:
    return Factory()
