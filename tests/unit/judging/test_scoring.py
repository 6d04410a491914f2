"""Unit tests for turn scoring."""

import math

from pitch_arena.judging.models import CoverageStatus, CriteriaCoverage, JudgeTurnResult
from pitch_arena.judging.scoring import avg, score_from_turn


def _turn(score: float, statuses: list[CoverageStatus]) -> JudgeTurnResult:
    return JudgeTurnResult(
        judge="tech",
        score=score,
        comment="",
        question="",
        coverage=[CriteriaCoverage(id=f"c{i}", status=s) for i, s in enumerate(statuses)],
    )


class TestScoreFromTurn:

    def test_positive_score_wins(self) -> None:
        assert score_from_turn(_turn(7.5, [CoverageStatus.MISSING])) == 7.5

    def test_zero_score_uses_coverage(self) -> None:
        turn = _turn(0, [CoverageStatus.CLEAR, CoverageStatus.PARTIAL, CoverageStatus.MISSING])

        assert score_from_turn(turn) == 6.0

    def test_coverage_average_rounded(self) -> None:
        turn = _turn(0, [CoverageStatus.CLEAR, CoverageStatus.CLEAR, CoverageStatus.PARTIAL])

        assert score_from_turn(turn) == 8.0

    def test_coverage_tie_rounds_half_up(self) -> None:
        turn = _turn(
            0,
            [CoverageStatus.CLEAR, CoverageStatus.PARTIAL, CoverageStatus.MISSING, CoverageStatus.MISSING],
        )

        assert score_from_turn(turn) == 5.3

    def test_nan_score_uses_coverage(self) -> None:
        assert score_from_turn(_turn(math.nan, [CoverageStatus.CLEAR])) == 9.0

    def test_no_score_no_coverage(self) -> None:
        assert score_from_turn(_turn(0, [])) == 0.0


class TestAvg:

    def test_mean(self) -> None:
        assert avg([6, 8]) == 7.0

    def test_skips_non_finite(self) -> None:
        assert avg([6, math.nan, math.inf, 8]) == 7.0

    def test_empty_is_zero(self) -> None:
        assert avg([]) == 0.0
