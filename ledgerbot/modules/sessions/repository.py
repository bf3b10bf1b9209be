"""Repository protocol for flow sessions."""

from __future__ import annotations

from typing import Protocol

from .models import SessionKey, SessionRecord


class FlowSessionRepository(Protocol):
    async def get(self, key: SessionKey) -> SessionRecord | None:
        ...

    async def upsert(self, record: SessionRecord) -> None:
        ...

    async def delete(self, key: SessionKey) -> SessionRecord | None:
        ...
