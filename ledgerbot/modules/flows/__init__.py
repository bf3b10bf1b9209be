"""Multi-step conversational flows on top of the ledger."""

from .cleanup import ArtifactCleaner, CleanupOutcome, DeferredArtifactCleaner, release_artifacts
from .common import FlowContext, FlowDependencies, InboundEvent
from .dispatcher import FLOWS, FlowDispatcher
from .results import Aborted, Advance, Completed, Reprompt, StepError, StepResult

__all__ = [
    "Aborted",
    "Advance",
    "ArtifactCleaner",
    "CleanupOutcome",
    "Completed",
    "DeferredArtifactCleaner",
    "FLOWS",
    "FlowContext",
    "FlowDependencies",
    "FlowDispatcher",
    "InboundEvent",
    "Reprompt",
    "StepError",
    "StepResult",
    "release_artifacts",
]
