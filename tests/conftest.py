from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import AsyncIterator, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ledgerbot.core.config import DatabaseSettings, LedgerSettings
from ledgerbot.infrastructure.database import build_engine, build_session_factory, init_db
from ledgerbot.modules.accounts import Account, AccountCreateInput
from ledgerbot.modules.accounts.service import AccountService
from ledgerbot.modules.currency.service import CurrencyConverter
from ledgerbot.modules.flows import CleanupOutcome, FlowDependencies, FlowDispatcher, InboundEvent
from ledgerbot.modules.ledger import Actor
from ledgerbot.modules.ledger.service import LedgerService
from ledgerbot.modules.sessions.store import SessionStore

ALICE = Actor(id="alice", name="Alice")
BOB = Actor(id="bob", name="Bob")


class FakeRateProvider:
    def __init__(self, rates: Optional[dict[tuple[str, str], Decimal]] = None) -> None:
        self.rates = dict(rates or {})
        self.calls: list[tuple[str, str]] = []

    async def get_rate(self, base: str, target: str) -> Optional[Decimal]:
        self.calls.append((base, target))
        return self.rates.get((base, target))


@dataclass
class RecordingCleaner:
    removed: list[tuple[str, str]] = field(default_factory=list)
    fail: bool = False

    async def remove(self, chat_id: str, artifact_ids: Sequence[str]) -> list[CleanupOutcome]:
        if self.fail:
            raise RuntimeError("message to delete not found")
        self.removed.extend((chat_id, artifact_id) for artifact_id in artifact_ids)
        return [CleanupOutcome(artifact_id=artifact_id, removed=True) for artifact_id in artifact_ids]

    @property
    def removed_ids(self) -> list[str]:
        return [artifact_id for _, artifact_id in self.removed]


@dataclass
class Harness:
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    ledger: LedgerService
    store: SessionStore
    rates: FakeRateProvider
    cleaner: RecordingCleaner
    dispatcher: FlowDispatcher

    async def open(self, slug: str, currency: str = "EUR", balance: int = 0, name: Optional[str] = None) -> Account:
        payload = AccountCreateInput(name=name or slug.title(), slug=slug, currency=currency, opening_balance=balance)
        return await self.ledger.open_account(payload, actor=ALICE)

    async def account(self, slug: str) -> Account:
        async with self.session_factory() as session:
            return await AccountService.with_session(session).get(slug)

    async def balance(self, slug: str) -> int:
        return (await self.account(slug)).balance


def event(actor: Actor = ALICE, text: str = "", chat_id: str = "chat-1", artifacts: Sequence[str] = ()) -> InboundEvent:
    return InboundEvent(chat_id=chat_id, actor=actor, text=text, artifact_ids=tuple(artifacts))


@asynccontextmanager
async def ledger_harness(
    db_path: Path,
    *,
    rates: Optional[dict[tuple[str, str], Decimal]] = None,
    settings: Optional[LedgerSettings] = None,
) -> AsyncIterator[Harness]:
    engine = build_engine(DatabaseSettings(url=f"sqlite+aiosqlite:///{db_path}"))
    try:
        await init_db(engine)
        session_factory = build_session_factory(engine)
        ledger = LedgerService(session_factory)
        store = SessionStore(session_factory)
        provider = FakeRateProvider(rates)
        cleaner = RecordingCleaner()
        deps = FlowDependencies(
            session_factory=session_factory,
            ledger=ledger,
            converter=CurrencyConverter(provider),
            cleaner=cleaner,
            settings=settings or LedgerSettings(),
        )
        yield Harness(
            engine=engine,
            session_factory=session_factory,
            ledger=ledger,
            store=store,
            rates=provider,
            cleaner=cleaner,
            dispatcher=FlowDispatcher(store, deps),
        )
    finally:
        await engine.dispose()


@pytest.fixture
def harness(tmp_path):
    """Factory for an isolated ledger on a fresh SQLite file: ``async with harness() as h``."""

    def factory(**kwargs):
        return ledger_harness(tmp_path / "ledger.db", **kwargs)

    return factory
