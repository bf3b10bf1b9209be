"""SQLAlchemy implementation for flow session persistence"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledgerbot.infrastructure.database.models import FlowSession
from ledgerbot.modules.sessions.models import SessionKey, SessionRecord


class SqlFlowSessionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_model(self, key: SessionKey) -> FlowSession | None:
        stmt = (
            select(FlowSession)
            .where(FlowSession.chat_id == key.chat_id)
            .where(FlowSession.actor_id == key.actor_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get(self, key: SessionKey) -> SessionRecord | None:
        model = await self._get_model(key)
        return self._to_record(model) if model else None

    async def upsert(self, record: SessionRecord) -> None:
        model = await self._get_model(SessionKey(record.chat_id, record.actor_id))
        if model is None:
            model = FlowSession(chat_id=record.chat_id, actor_id=record.actor_id)
            self.session.add(model)
        model.kind = record.kind
        model.step = record.step
        model.payload = record.payload
        model.artifact_ids = record.artifact_ids
        await self.session.flush()

    async def delete(self, key: SessionKey) -> SessionRecord | None:
        model = await self._get_model(key)
        if model is None:
            return None
        record = self._to_record(model)
        await self.session.delete(model)
        await self.session.flush()
        return record

    @staticmethod
    def _to_record(model: FlowSession) -> SessionRecord:
        return SessionRecord(
            chat_id=model.chat_id,
            actor_id=model.actor_id,
            kind=model.kind,
            step=model.step,
            payload=model.payload,
            artifact_ids=model.artifact_ids,
            created_at=model.created_at,
        )
