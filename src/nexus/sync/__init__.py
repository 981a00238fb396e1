"""Change-triggered synchronization: reconciliation pass and its trigger."""

from nexus.sync.synthesis import (
    DEFAULT_SYNTHESIS_WINDOW,
    SyncSource,
    SynthesisResult,
    Synthesizer,
    reconciliation_update,
)
from nexus.sync.trigger import DEFAULT_DEBOUNCE_SECONDS, SyncTrigger, TriggerState

__all__ = [
    "Synthesizer",
    "SynthesisResult",
    "SyncSource",
    "reconciliation_update",
    "DEFAULT_SYNTHESIS_WINDOW",
    "SyncTrigger",
    "TriggerState",
    "DEFAULT_DEBOUNCE_SECONDS",
]
