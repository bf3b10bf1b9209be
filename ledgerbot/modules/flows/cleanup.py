"""Removal of UI artifacts (prompt messages, keyboards) left by a flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CleanupOutcome:
    artifact_id: str
    removed: bool
    error: Optional[str] = None


class ArtifactCleaner(Protocol):
    """Best-effort removal; reports per-item outcomes instead of raising."""

    async def remove(self, chat_id: str, artifact_ids: Sequence[str]) -> list[CleanupOutcome]:
        ...


@dataclass(slots=True)
class DeferredArtifactCleaner:
    """Collects artifact ids for the transport to delete after the response."""

    released: list[str] = field(default_factory=list)

    async def remove(self, chat_id: str, artifact_ids: Sequence[str]) -> list[CleanupOutcome]:  # noqa: ARG002
        self.released.extend(artifact_ids)
        return [CleanupOutcome(artifact_id=artifact_id, removed=True) for artifact_id in artifact_ids]


async def release_artifacts(cleaner: ArtifactCleaner, chat_id: str, artifact_ids: Sequence[str]) -> list[CleanupOutcome]:
    """Hand artifacts to the cleaner and ignore failures; they may already be gone."""
    if not artifact_ids:
        return []
    try:
        outcomes = await cleaner.remove(chat_id, list(artifact_ids))
    except Exception as exc:  # pylint: disable=broad-except
        logger.debug("Artifact cleanup in chat %s failed: %s", chat_id, exc)
        return [CleanupOutcome(artifact_id=artifact_id, removed=False, error=str(exc)) for artifact_id in artifact_ids]

    for outcome in outcomes:
        if not outcome.removed:
            logger.debug("Could not remove artifact %s in chat %s: %s", outcome.artifact_id, chat_id, outcome.error)
    return outcomes
