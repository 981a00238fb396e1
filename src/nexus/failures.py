"""Failure containment shared by agent turns and reconciliation.

A contained failure produces exactly three side effects: an ErrorRecord
handed to the error sink, an ERROR line in the activity log, and one
system-visible transcript entry carrying the remediation hint.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nexus.llm.gateway import error_record
from nexus.models.agents import SYSTEM_AUTHOR
from nexus.models.transcript import EntryKind, TranscriptEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nexus.activity import ActivityLog
    from nexus.exceptions import CompletionError
    from nexus.models.errors import ErrorRecord
    from nexus.protocols import ErrorSink
    from nexus.transcript import Transcript

logger = logging.getLogger(__name__)


def format_failure(record: ErrorRecord) -> str:
    text = f"**SYSTEM ERROR** in {record.context or 'Nexus'}\n`{record.describe()}`"
    if record.hint:
        text += f"\n\n> SUGGESTION: {record.hint}"
    return text


def format_restore_report(records: Sequence[ErrorRecord]) -> str:
    lines = [
        "**SYSTEM RESTORE REPORT**",
        "Recovered critical errors from previous session:",
    ]
    for record in records:
        stamp = record.created_at.isoformat(timespec="seconds")
        where = f" ({record.context})" if record.context else ""
        lines.append(f"- {stamp}: {record.describe()}{where}")
    return "\n".join(lines)


class FailureReporter:
    """Records contained failures.

    Args:
        transcript: Receives the system-visible failure entry.
        sink: Durable error log. Best effort: a failing sink is logged
            and otherwise ignored.
        activity: Operator activity log, optional.
    """

    def __init__(
        self,
        transcript: Transcript,
        sink: ErrorSink | None = None,
        activity: ActivityLog | None = None,
    ) -> None:
        self._transcript = transcript
        self._sink = sink
        self._activity = activity

    def report(self, error: CompletionError) -> tuple[ErrorRecord, TranscriptEntry]:
        record = error_record(error)
        if self._activity is not None:
            self._activity.error(f"FAILURE in {record.context}: {record.describe()}")
        if self._sink is not None:
            try:
                self._sink.record(record)
            except Exception:
                logger.warning("Error sink failed to record %s", record.describe(), exc_info=True)
        entry = self._transcript.append(
            TranscriptEntry(
                author=SYSTEM_AUTHOR,
                content=format_failure(record),
                kind=EntryKind.ERROR,
            )
        )
        return record, entry

    def restore(self, records: Sequence[ErrorRecord]) -> TranscriptEntry | None:
        """Append a restore report for failures carried over from a previous session."""
        if not records:
            return None
        if self._activity is not None:
            self._activity.error(
                f"[SYSTEM RESTORE]: Recovered {len(records)} critical error reports "
                "from previous session."
            )
        return self._transcript.append(
            TranscriptEntry(
                author=SYSTEM_AUTHOR,
                content=format_restore_report(records),
                kind=EntryKind.RESTORE,
            )
        )
