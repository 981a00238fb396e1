"""Pure computation helpers: change detection and timing."""

from nexus.engine.change import (
    DEFAULT_EDIT_THRESHOLD,
    DEFAULT_LINE_CEILING,
    ChangeDetector,
    edit_distance,
    heuristic_is_significant,
    is_significant,
    lcs_length,
    split_lines,
)
from nexus.engine.clock import (
    BackgroundPoller,
    Clock,
    Debouncer,
    ManualClock,
    MonotonicClock,
)

__all__ = [
    "ChangeDetector",
    "DEFAULT_EDIT_THRESHOLD",
    "DEFAULT_LINE_CEILING",
    "edit_distance",
    "heuristic_is_significant",
    "is_significant",
    "lcs_length",
    "split_lines",
    "BackgroundPoller",
    "Clock",
    "Debouncer",
    "ManualClock",
    "MonotonicClock",
]
