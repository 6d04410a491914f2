"""Unit tests for judge output normalizers."""

import math
from typing import Any

import pytest

from pitch_arena.arena.models import JudgeCriterion
from pitch_arena.judging.models import CoverageStatus, Verdict
from pitch_arena.judging.normalize import (
    clamp_score,
    normalize_coverage,
    normalize_verdict,
    normalize_verdict_hint,
    one_sentence,
    round_tenth,
    to_number,
)


class TestToNumber:

    def test_numbers_and_numeric_strings(self) -> None:
        assert to_number(7) == 7.0
        assert to_number("6.5") == 6.5

    @pytest.mark.parametrize("value", [None, "seven", {}, []])
    def test_non_numbers_are_nan(self, value: Any) -> None:
        assert math.isnan(to_number(value))


class TestClampScore:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(7.26, 7.3), (6.25, 6.3), (11, 10.0), (-2, 0.0), ("8", 8.0), ("abc", 0.0), (None, 0.0), (float("inf"), 0.0)],
    )
    def test_clamp(self, value: Any, expected: float) -> None:
        assert clamp_score(value) == expected


class TestOneSentence:

    def test_keeps_first_sentence(self) -> None:
        assert one_sentence("Who pays? And how much?") == "Who pays?"

    def test_without_terminator_keeps_text(self) -> None:
        assert one_sentence("  who pays for this  ") == "who pays for this"

    def test_empty(self) -> None:
        assert one_sentence(None) == ""


class TestVerdicts:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("pass", Verdict.PASS), ("PASS", Verdict.PASS), ("fail", Verdict.FAIL), ("maybe", Verdict.MAYBE)],
    )
    def test_hint(self, value: str, expected: Verdict) -> None:
        assert normalize_verdict_hint(value) == expected

    def test_empty_hint_is_none(self) -> None:
        assert normalize_verdict_hint("") is None
        assert normalize_verdict_hint(None) is None

    def test_verdict_defaults_to_maybe(self) -> None:
        assert normalize_verdict(None) == Verdict.MAYBE
        assert normalize_verdict("fail") == Verdict.FAIL


class TestNormalizeCoverage:

    @pytest.fixture
    def criteria(self) -> list[JudgeCriterion]:
        return [JudgeCriterion(id="a"), JudgeCriterion(id="b"), JudgeCriterion(id="c")]

    def test_one_entry_per_criterion_in_order(self, criteria: list[JudgeCriterion]) -> None:
        rows = [{"id": "c", "status": "clear"}, {"id": "a", "status": "partial"}]

        coverage = normalize_coverage(rows, criteria)

        assert [c.id for c in coverage] == ["a", "b", "c"]
        assert [c.status for c in coverage] == [
            CoverageStatus.PARTIAL,
            CoverageStatus.MISSING,
            CoverageStatus.CLEAR,
        ]

    def test_later_row_wins(self, criteria: list[JudgeCriterion]) -> None:
        rows = [{"id": "a", "status": "clear"}, {"id": "a", "status": "missing"}]

        assert normalize_coverage(rows, criteria)[0].status == CoverageStatus.MISSING

    def test_rows_without_id_and_non_dicts_dropped(self, criteria: list[JudgeCriterion]) -> None:
        rows = [{"status": "clear"}, "clear", None, {"id": "", "status": "clear"}]

        coverage = normalize_coverage(rows, criteria)

        assert all(c.status == CoverageStatus.MISSING for c in coverage)

    def test_unknown_status_is_missing(self, criteria: list[JudgeCriterion]) -> None:
        coverage = normalize_coverage([{"id": "a", "status": "excellent"}], criteria)

        assert coverage[0].status == CoverageStatus.MISSING

    def test_note_truncated(self, criteria: list[JudgeCriterion]) -> None:
        coverage = normalize_coverage([{"id": "a", "status": "partial", "note": "x" * 300}], criteria)

        assert coverage[0].note == "x" * 120

    def test_not_a_list(self, criteria: list[JudgeCriterion]) -> None:
        coverage = normalize_coverage({"a": "clear"}, criteria)

        assert [c.id for c in coverage] == ["a", "b", "c"]
        assert coverage[0].note is None


class TestRoundTenth:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(6.25, 6.3), (5.25, 5.3), (6.24, 6.2), (-0.25, -0.2), (-0.26, -0.3), (7.0, 7.0)],
    )
    def test_halves_round_up(self, value: float, expected: float) -> None:
        assert round_tenth(value) == expected
