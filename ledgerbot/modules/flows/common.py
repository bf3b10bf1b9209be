"""Shared plumbing for flow step handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledgerbot.core.config import LedgerSettings
from ledgerbot.modules.accounts.models import Account
from ledgerbot.modules.accounts.service import AccountService
from ledgerbot.modules.currency.money import ParsedAmount, ParseOptions, format_amount, parse_amount
from ledgerbot.modules.currency.service import CurrencyConverter
from ledgerbot.modules.ledger.models import Actor, TransactionRecord
from ledgerbot.modules.ledger.service import LedgerService
from ledgerbot.modules.sessions.models import FlowSession, SessionKey
from ledgerbot.modules.sessions.store import ScopedSessions

from .cleanup import ArtifactCleaner, CleanupOutcome, release_artifacts

SKIP_INPUTS = {"-", "/skip", "skip", ""}


@dataclass(frozen=True, slots=True)
class InboundEvent:
    """One actor event as delivered by the transport."""

    chat_id: str
    actor: Actor
    text: str = ""
    # UI artifacts this event produced (the actor's message, the prompt it answered)
    artifact_ids: tuple[str, ...] = ()

    @property
    def key(self) -> SessionKey:
        return SessionKey(chat_id=self.chat_id, actor_id=self.actor.id)


@dataclass(slots=True)
class FlowDependencies:
    session_factory: async_sessionmaker[AsyncSession]
    ledger: LedgerService
    converter: CurrencyConverter
    cleaner: ArtifactCleaner
    settings: LedgerSettings = field(default_factory=LedgerSettings)

    async def find_account(self, slug: Optional[str]) -> Optional[Account]:
        if not slug:
            return None
        async with self.session_factory() as session:
            return await AccountService.with_session(session).find(slug)

    async def list_accounts(self) -> list[Account]:
        async with self.session_factory() as session:
            return list(await AccountService.with_session(session).list_accounts())

    def parse(self, text: str, *, allow_negative: bool, allow_zero: bool) -> ParsedAmount:
        return parse_amount(
            text,
            ParseOptions(
                allow_negative=allow_negative,
                allow_zero=allow_zero,
                max_amount=self.settings.max_amount,
            ),
        )

    def description(self, text: str) -> Optional[str]:
        """Capitalise and truncate free text; skip inputs mean no description."""
        stripped = text.strip()
        if stripped.lower() in SKIP_INPUTS:
            return None
        return (stripped[:1].upper() + stripped[1:])[: self.settings.description_max_length]


@dataclass(slots=True)
class FlowContext:
    event: InboundEvent
    sessions: ScopedSessions
    deps: FlowDependencies

    @property
    def actor(self) -> Actor:
        return self.event.actor

    async def save(self, session: FlowSession) -> None:
        for artifact_id in self.event.artifact_ids:
            if artifact_id not in session.artifact_ids:
                session.artifact_ids.append(artifact_id)
        await self.sessions.save(session)

    async def finish(self, session: FlowSession | None = None) -> list[CleanupOutcome]:
        """Discard the session and release every artifact it collected."""
        stored = await self.sessions.discard()
        artifacts: list[str] = []
        for source in (stored, session):
            if source is not None:
                artifacts.extend(a for a in source.artifact_ids if a not in artifacts)
        artifacts.extend(a for a in self.event.artifact_ids if a not in artifacts)
        return await release_artifacts(self.deps.cleaner, self.event.chat_id, artifacts)


def account_view(account: Account) -> dict[str, Any]:
    return {
        "slug": account.slug,
        "name": account.name,
        "currency": account.currency,
        "balance": account.balance,
        "balance_display": format_amount(account.balance, account.currency, show_sign=False),
    }


def accounts_view(accounts: Sequence[Account]) -> list[dict[str, Any]]:
    return [account_view(account) for account in accounts]


def transaction_view(record: TransactionRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "account_slug": record.account_slug,
        "amount": record.amount,
        "currency": record.currency,
        "description": record.description,
        "source": record.source.value,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }
