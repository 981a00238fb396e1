"""Tests for artifact change detection.

Covers the exact LCS path, the large-input heuristic, threshold
inclusivity, and property-based checks via Hypothesis.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from nexus.engine import change as change_module
from nexus.engine.change import (
    ChangeDetector,
    edit_distance,
    heuristic_is_significant,
    is_significant,
    lcs_length,
    split_lines,
)

lines = st.lists(st.sampled_from(["a", "b", "c", "d", "", "x = 1"]), max_size=30)


def _text(n: int, prefix: str = "line") -> str:
    return "\n".join(f"{prefix} {i}" for i in range(n))


class TestLcsLength:
    def test_identical(self) -> None:
        assert lcs_length(["a", "b", "c"], ["a", "b", "c"]) == 3

    def test_disjoint(self) -> None:
        assert lcs_length(["a", "b"], ["c", "d"]) == 0

    def test_empty_side(self) -> None:
        assert lcs_length([], ["a"]) == 0
        assert lcs_length(["a"], []) == 0

    def test_classic_example(self) -> None:
        assert lcs_length(list("ABCBDAB"), list("BDCABA")) == 4

    def test_order_matters(self) -> None:
        assert lcs_length(["a", "b", "c"], ["c", "b", "a"]) == 1


class TestEditDistance:
    def test_append_one_line(self) -> None:
        prev = split_lines("a\nb\nc")
        cur = split_lines("a\nb\nc\nd")
        assert edit_distance(prev, cur) == 1

    def test_replace_one_line_counts_two(self) -> None:
        assert edit_distance(["a", "b", "c"], ["a", "X", "c"]) == 2

    @given(lines, lines)
    @settings(max_examples=200)
    def test_symmetric(self, a: list[str], b: list[str]) -> None:
        assert edit_distance(a, b) == edit_distance(b, a)

    @given(lines)
    def test_zero_for_equal(self, a: list[str]) -> None:
        assert edit_distance(a, list(a)) == 0

    @given(lines, lines)
    def test_bounded_by_total_length(self, a: list[str], b: list[str]) -> None:
        distance = edit_distance(a, b)
        assert abs(len(a) - len(b)) <= distance <= len(a) + len(b)


class TestChangeDetector:
    def test_identical_not_significant(self) -> None:
        assert ChangeDetector()("x\ny", "x\ny") is False

    @given(st.text(max_size=200))
    def test_equal_strings_never_significant(self, text: str) -> None:
        assert is_significant(text, text) is False

    def test_append_one_line_not_significant(self) -> None:
        prev = _text(10)
        assert is_significant(prev, prev + "\nnew line") is False

    def test_append_five_distinct_lines_significant(self) -> None:
        prev = _text(10)
        cur = prev + "\n" + _text(5, prefix="added")
        assert is_significant(prev, cur) is True

    def test_threshold_is_inclusive(self) -> None:
        detector = ChangeDetector(edit_threshold=3)
        prev = "a\nb"
        assert detector(prev, prev + "\nc\nd") is False  # 2 edits
        assert detector(prev, prev + "\nc\nd\ne") is True  # 3 edits

    def test_rejects_bad_constants(self) -> None:
        with pytest.raises(ValueError):
            ChangeDetector(line_ceiling=0)
        with pytest.raises(ValueError):
            ChangeDetector(edit_threshold=0)

    def test_uses_exact_path_at_ceiling(self) -> None:
        detector = ChangeDetector(line_ceiling=600)
        assert detector.uses_exact_path(["x"] * 600, ["y"] * 600) is True
        assert detector.uses_exact_path(["x"] * 601, ["y"]) is False

    def test_above_ceiling_never_runs_lcs(self) -> None:
        prev = _text(700)
        cur = _text(702)
        with patch.object(change_module, "lcs_length", side_effect=AssertionError("quadratic path")):
            assert is_significant(prev, cur) is False

    def test_above_ceiling_either_side(self) -> None:
        with patch.object(change_module, "lcs_length", side_effect=AssertionError("quadratic path")):
            assert is_significant("short", _text(650)) is True


class TestHeuristic:
    def test_line_count_difference(self) -> None:
        assert heuristic_is_significant(["a"] * 10, ["a"] * 15, threshold=5) is True
        assert heuristic_is_significant(["a"] * 10, ["a"] * 14, threshold=5) is False

    def test_novel_lines_counted_by_membership(self) -> None:
        prev = [f"l{i}" for i in range(20)]
        cur = list(prev)
        for i in range(5):
            cur[i] = f"new{i}"
        assert heuristic_is_significant(prev, cur, threshold=5) is True

    def test_reordering_is_not_novel(self) -> None:
        prev = [f"l{i}" for i in range(20)]
        cur = list(reversed(prev))
        assert heuristic_is_significant(prev, cur, threshold=5) is False

    def test_large_rewrite_same_length(self) -> None:
        prev = _text(800)
        cur = _text(800, prefix="rewritten")
        assert is_significant(prev, cur) is True
