"""Session store handed through the event-handling call chain.

Handlers never see the store itself, only a :class:`ScopedSessions` bound
to the key of the event they are processing, so one actor's flow cannot
read or overwrite another actor's session in the same chat.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledgerbot.infrastructure.database.repositories.session_repository import SqlFlowSessionRepository

from .models import FlowSession, SessionKey, record_to_session, session_to_record
from .repository import FlowSessionRepository


@dataclass(slots=True)
class SessionStore:
    session_factory: async_sessionmaker[AsyncSession]
    repository_factory: Callable[[AsyncSession], FlowSessionRepository] = SqlFlowSessionRepository

    @asynccontextmanager
    async def _unit(self) -> AsyncIterator[FlowSessionRepository]:
        async with self.session_factory() as session:
            async with session.begin():
                yield self.repository_factory(session)

    def scoped(self, key: SessionKey) -> "ScopedSessions":
        return ScopedSessions(store=self, key=key)

    async def _load(self, key: SessionKey) -> Optional[FlowSession]:
        async with self._unit() as repo:
            record = await repo.get(key)
        if record is None:
            return None
        return record_to_session(record)

    async def _save(self, key: SessionKey, session: FlowSession) -> None:
        if session.owner_id != key.actor_id:
            raise ValueError("session owner does not match its key")
        async with self._unit() as repo:
            await repo.upsert(session_to_record(key, session))

    async def _discard(self, key: SessionKey) -> Optional[FlowSession]:
        async with self._unit() as repo:
            record = await repo.delete(key)
        if record is None:
            return None
        return record_to_session(record)


@dataclass(frozen=True, slots=True)
class ScopedSessions:
    store: SessionStore
    key: SessionKey

    async def load(self) -> Optional[FlowSession]:
        return await self.store._load(self.key)

    async def save(self, session: FlowSession) -> None:
        await self.store._save(self.key, session)

    async def discard(self) -> Optional[FlowSession]:
        """Delete the session, returning what was stored (for artifact cleanup)."""
        return await self.store._discard(self.key)
