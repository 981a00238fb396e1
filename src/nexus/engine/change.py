"""Line-level change detection for the shared artifact.

Decides whether an edit is significant enough to warrant an automatic
reconciliation pass. Two tiers:

- **Exact**: longest common subsequence over line sequences, with the
  edit distance counted as inserted plus deleted lines. Quadratic time,
  linear memory (two rolling rows over the shorter sequence).
- **Heuristic**: for inputs above the line ceiling, compare line counts
  and count current lines missing from the previous version. Linear.
"""

from __future__ import annotations

from collections.abc import Sequence

DEFAULT_LINE_CEILING = 600
DEFAULT_EDIT_THRESHOLD = 5


def split_lines(text: str) -> list[str]:
    """Split on newlines. An empty string is a single empty line."""
    return text.split("\n")


def lcs_length(a: Sequence[str], b: Sequence[str]) -> int:
    """Length of the longest common subsequence of two line sequences.

    Iterates the longer sequence in the outer loop so the rolling rows
    are sized by the shorter one: O(len(a) * len(b)) time,
    O(min(len(a), len(b))) memory.
    """
    if len(a) < len(b):
        a, b = b, a
    n = len(b)
    if n == 0:
        return 0

    prev = [0] * (n + 1)
    curr = [0] * (n + 1)
    for i in range(1, len(a) + 1):
        line = a[i - 1]
        for j in range(1, n + 1):
            if line == b[j - 1]:
                curr[j] = prev[j - 1] + 1
            else:
                curr[j] = prev[j] if prev[j] >= curr[j - 1] else curr[j - 1]
        prev, curr = curr, prev
    return prev[n]


def edit_distance(previous: Sequence[str], current: Sequence[str]) -> int:
    """Inserted plus deleted lines between two sequences (exact path)."""
    common = lcs_length(previous, current)
    return (len(current) - common) + (len(previous) - common)


def heuristic_is_significant(
    previous: Sequence[str],
    current: Sequence[str],
    threshold: int = DEFAULT_EDIT_THRESHOLD,
) -> bool:
    """Linear-time significance check for large inputs.

    Significant when the line counts differ by at least ``threshold``, or
    when at least ``threshold`` lines of ``current`` appear nowhere in
    ``previous`` (set membership, not positional).
    """
    if abs(len(current) - len(previous)) >= threshold:
        return True
    seen = set(previous)
    novel = 0
    for line in current:
        if line not in seen:
            novel += 1
            if novel >= threshold:
                return True
    return False


class ChangeDetector:
    """Callable significance check with configurable constants.

    Usage::

        detector = ChangeDetector(line_ceiling=600, edit_threshold=5)
        if detector(last_synced, current):
            ...
    """

    def __init__(
        self,
        line_ceiling: int = DEFAULT_LINE_CEILING,
        edit_threshold: int = DEFAULT_EDIT_THRESHOLD,
    ) -> None:
        if line_ceiling < 1:
            raise ValueError("line_ceiling must be >= 1")
        if edit_threshold < 1:
            raise ValueError("edit_threshold must be >= 1")
        self.line_ceiling = line_ceiling
        self.edit_threshold = edit_threshold

    def uses_exact_path(self, previous: Sequence[str], current: Sequence[str]) -> bool:
        return len(previous) <= self.line_ceiling and len(current) <= self.line_ceiling

    def is_significant(self, previous: str, current: str) -> bool:
        if previous == current:
            return False
        prev_lines = split_lines(previous)
        curr_lines = split_lines(current)
        if not self.uses_exact_path(prev_lines, curr_lines):
            return heuristic_is_significant(prev_lines, curr_lines, self.edit_threshold)
        return edit_distance(prev_lines, curr_lines) >= self.edit_threshold

    __call__ = is_significant


def is_significant(
    previous: str,
    current: str,
    *,
    line_ceiling: int = DEFAULT_LINE_CEILING,
    edit_threshold: int = DEFAULT_EDIT_THRESHOLD,
) -> bool:
    """Module-level convenience wrapper around ChangeDetector."""
    return ChangeDetector(line_ceiling, edit_threshold).is_significant(previous, current)
