"""Unit tests for the end summary and coach report."""

import json

import pytest

from pitch_arena.arena.models import ArenaConfig
from pitch_arena.core.constants import SUMMARY_FALLBACK_NEXT_STEP, SUMMARY_UNAVAILABLE
from pitch_arena.core.exceptions import LLMProviderError
from pitch_arena.judging.models import Verdict
from pitch_arena.session.models import JudgeRun
from pitch_arena.session.summary import (
    CoachReport,
    CoachService,
    SummaryGenerator,
    fallback_summary,
    format_coach_message,
    format_summary_message,
    parse_coach_report,
)
from tests.fakes.arena_data import COACH_REPLY, SUMMARY_REPLY
from tests.fakes.fake_llm import FakeLLMClient


def _runs(count: int) -> list[JudgeRun]:
    return [
        JudgeRun(
            judge_id="tech",
            judge_label="Tech Judge",
            round=1,
            score=float(i),
            comment="c",
            question=f"Q{i}",
            answer=f"A{i}",
        )
        for i in range(count)
    ]


class TestSummaryGenerator:

    @pytest.mark.asyncio
    async def test_builds_summary_and_message(self, arena_config: ArenaConfig) -> None:
        llm = FakeLLMClient(replies={"summary": SUMMARY_REPLY})

        result = await SummaryGenerator(llm).build(6.04, arena_config, {"ideaName": "Pitchly"}, _runs(2))

        summary = result.summary
        assert summary.final_score == 6.0
        assert summary.verdict == Verdict.PASS
        assert summary.one_liner == "Sharp idea, vague channel."
        assert summary.next_step_24h == "Call five founders."
        assert result.message_text == (
            "PASS • Sharp idea, vague channel.\n\n"
            "Strength: Clear user\n"
            "Risk: Distribution\n"
            "Next 24h: Call five founders."
        )

    @pytest.mark.asyncio
    async def test_final_score_comes_from_session(self, arena_config: ArenaConfig) -> None:
        reply = json.dumps({"finalScore": 9.9, "verdict": "pass", "oneLiner": "x"})
        llm = FakeLLMClient(replies={"summary": reply})

        result = await SummaryGenerator(llm).build(4.0, arena_config, {}, [])

        assert result.summary.final_score == 4.0

    @pytest.mark.asyncio
    async def test_null_fields_take_defaults(self, arena_config: ArenaConfig) -> None:
        reply = json.dumps({"verdict": "weird", "oneLiner": None, "nextStep24h": None})
        llm = FakeLLMClient(replies={"summary": reply})

        result = await SummaryGenerator(llm).build(5.0, arena_config, {}, [])

        assert result.summary.verdict == Verdict.MAYBE
        assert result.summary.one_liner == SUMMARY_UNAVAILABLE
        assert result.summary.next_step_24h == SUMMARY_FALLBACK_NEXT_STEP
        assert result.summary.top_strength == ""

    @pytest.mark.asyncio
    async def test_unparseable_reply_uses_fallback(self, arena_config: ArenaConfig) -> None:
        result = await SummaryGenerator(FakeLLMClient()).build(5.0, arena_config, {}, [])

        assert result.summary == fallback_summary(5.0)
        assert result.message_text is None

    @pytest.mark.asyncio
    async def test_provider_error_uses_fallback(self, arena_config: ArenaConfig) -> None:
        llm = FakeLLMClient(error_on={"summary": LLMProviderError("down", model="m")})

        result = await SummaryGenerator(llm).build(5.0, arena_config, {}, [])

        assert result.summary.one_liner == SUMMARY_UNAVAILABLE
        assert result.message_text is None

    def test_user_prompt_sends_only_recent_runs(self, arena_config: ArenaConfig) -> None:
        user = SummaryGenerator(FakeLLMClient(), max_runs=3).build_user(5.0, arena_config, {}, _runs(5))

        assert "ARENA: Test Arena" in user
        assert "OBJECTIVE: Is this ready for a hackathon demo?" in user
        assert '"Q1"' not in user
        assert '"Q2"' in user and '"Q4"' in user

    def test_format_summary_message_fallback(self) -> None:
        assert format_summary_message(fallback_summary(3.0)).startswith("MAYBE • Summary unavailable.")


class TestCoach:

    def test_parse_report(self) -> None:
        report = parse_coach_report(COACH_REPLY)

        assert report is not None
        assert report.overall_score == 7
        assert report.fixes == ["Lead with the outcome.", "Name one number."]
        assert report.gaps == []
        assert report.criteria[0].label == "Buyer value"

    @pytest.mark.parametrize("raw", ["", "nope", '{"summary": "x"}', '{"coach": "x"}'])
    def test_parse_unusable(self, raw: str) -> None:
        assert parse_coach_report(raw) is None

    def test_parse_tolerates_bad_rows(self) -> None:
        raw = json.dumps({
            "coach": {
                "overallScore": "eight",
                "strength": "not a list",
                "criteria": ["x", {"id": "", "label": ""}, {"id": "buyer_value", "score": 6}],
            }
        })

        report = parse_coach_report(raw)

        assert report is not None
        assert report.overall_score == 0.0
        assert report.strength == []
        assert [(c.id, c.label, c.score) for c in report.criteria] == [("buyer_value", "buyer_value", 6.0)]

    def test_to_dict_is_wrapped(self) -> None:
        data = CoachReport(overall_score=5, drill="Do it").to_dict()

        assert data["coach"]["overallScore"] == 5
        assert data["coach"]["drill"] == "Do it"

    def test_format_message(self) -> None:
        report = parse_coach_report(COACH_REPLY)
        assert report is not None

        message = format_coach_message(report)

        assert message.splitlines()[0] == "Coach score: 7/10"
        assert "Fixes: Lead with the outcome. | Name one number." in message
        assert "Buyer value: 8/10 - Clear pain." in message
        assert "Gaps:" not in message

    @pytest.mark.asyncio
    async def test_run_sends_criteria_and_style(self, arena_config: ArenaConfig) -> None:
        llm = FakeLLMClient(replies={"coach": COACH_REPLY})
        interactions = [{"questioner": "ai", "responder": "user", "question": "Q", "answer": "A"}]

        report = await CoachService(llm).run(arena_config, "My pitch", interactions)

        assert report is not None
        user = llm.call_history[0]["user"]
        assert '"game changer"' in user
        assert "maxCommentWords: 40" in user
        assert '"questionStarters"' in user
        assert "My pitch" in user

    @pytest.mark.asyncio
    async def test_run_provider_error(self, arena_config: ArenaConfig) -> None:
        llm = FakeLLMClient(error_on={"coach": LLMProviderError("down", model="m")})

        assert await CoachService(llm).run(arena_config, "p", []) is None
