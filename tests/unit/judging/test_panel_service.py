"""Unit tests for the panel judge service and its prompts."""

import json

import pytest

from pitch_arena.arena.models import ArenaConfig, JudgeConfig
from pitch_arena.core.constants import FALLBACK_COMMENT, FALLBACK_QUESTION, FALLBACK_SCORE
from pitch_arena.core.exceptions import LLMProviderError
from pitch_arena.judging.models import (
    CoverageStatus,
    JudgeIntent,
    JudgeMode,
    JudgeTurnArgs,
    Verdict,
)
from pitch_arena.judging.panel import PanelJudgeService, fallback_for, normalize_result
from pitch_arena.judging.prompts import (
    build_panel_system,
    build_panel_user,
    intent_line,
)
from tests.fakes.arena_data import MARKET_QUESTION, TECH_QUESTION, panel_reply
from tests.fakes.fake_llm import FakeLLMClient


@pytest.fixture
def panel(arena_config: ArenaConfig) -> list[JudgeConfig]:
    return arena_config.panel_judges


@pytest.fixture
def args() -> JudgeTurnArgs:
    return JudgeTurnArgs(
        profile={"ideaName": "Pitchly"},
        last_delta="Previous (panel):\nQ: Who is it for?\nA: Founders.",
        mode=JudgeMode.DISCOVERY,
        round=1,
        max_rounds=2,
        intent=JudgeIntent(
            phase="clarify_core",
            goal="Clarify the core",
            primary_criteria=["buyer_value"],
            aggressiveness="light",
        ),
    )


class TestFallback:

    def test_fallback_shape(self, arena_config: ArenaConfig, panel: list[JudgeConfig]) -> None:
        result = fallback_for(arena_config, panel[0])

        assert result.judge == "tech"
        assert result.score == FALLBACK_SCORE
        assert result.comment == FALLBACK_COMMENT
        assert result.question == FALLBACK_QUESTION
        assert [c.id for c in result.coverage] == ["buyer_value", "scope_slice"]
        assert all(c.status == CoverageStatus.MISSING for c in result.coverage)
        assert result.asked_criteria_id == "buyer_value"
        assert result.verdict_hint == Verdict.MAYBE


class TestNormalizeResult:

    def test_blank_fields_take_fallback(self, arena_config: ArenaConfig, panel: list[JudgeConfig]) -> None:
        result = normalize_result({"score": None, "comment": "  ", "question": ""}, arena_config, panel[0])

        assert result.score == FALLBACK_SCORE
        assert result.comment == FALLBACK_COMMENT
        assert result.question == FALLBACK_QUESTION
        assert result.asked_criteria_id == "buyer_value"
        assert result.verdict_hint is None

    def test_clamps_and_trims(self, arena_config: ArenaConfig, panel: list[JudgeConfig]) -> None:
        raw = {"score": 14, "comment": "ok", "question": "One? Two?", "verdictHint": "pass"}

        result = normalize_result(raw, arena_config, panel[0])

        assert result.score == 10.0
        assert result.question == "One?"
        assert result.verdict_hint == Verdict.PASS


class TestPanelPrompts:

    def test_intent_line(self, args: JudgeTurnArgs) -> None:
        assert intent_line(args.intent) == (
            "Goal: Clarify the core | Phase: clarify_core | Pressure: light | Focus: buyer_value"
        )
        assert intent_line(None) == ""

    def test_system_lists_every_judge(
        self, arena_config: ArenaConfig, panel: list[JudgeConfig], args: JudgeTurnArgs
    ) -> None:
        system = build_panel_system(arena_config, panel, args)

        assert system.startswith("You are a panel of 2 judges.")
        assert "JUDGE tech: Tech Judge" in system
        assert "JUDGE market: Market Judge" in system
        assert "- buyer_value: Why the user cares. (pain, urgency)" in system
        assert "Chair guidance: Goal: Clarify the core" in system
        assert "Objective: Is this ready for a hackathon demo?" in system
        assert "Avoid: game changer | disrupt" in system
        assert "Comment <= 40 words." in system

    def test_user_caps_context(self, args: JudgeTurnArgs) -> None:
        args.last_delta = "x" * 5000

        user = build_panel_user(args)

        assert user.startswith('Founder profile:\n{"ideaName": "Pitchly"}')
        assert "x" * 2500 in user
        assert "x" * 2501 not in user

    def test_user_without_context(self) -> None:
        assert "Context:" not in build_panel_user(JudgeTurnArgs(profile={}))


class TestRunPanelTurn:

    @pytest.mark.asyncio
    async def test_parses_panel_in_request_order(
        self, arena_config: ArenaConfig, panel: list[JudgeConfig], args: JudgeTurnArgs
    ) -> None:
        llm = FakeLLMClient(replies={"panel": panel_reply()})
        service = PanelJudgeService(llm)

        result = await service.run_panel_turn(arena_config, list(reversed(panel)), args)

        assert result.parsed is True
        assert [t.judge for t in result.panel] == ["market", "tech"]
        market, tech = result.panel
        assert market.question == MARKET_QUESTION
        assert market.verdict_hint == Verdict.FAIL
        assert tech.question == TECH_QUESTION
        assert tech.score == 7.0
        assert [c.status for c in tech.coverage] == [CoverageStatus.CLEAR, CoverageStatus.PARTIAL]
        assert llm.call_history[0]["purpose"] == "panel"

    @pytest.mark.asyncio
    async def test_missing_judge_falls_back(
        self, arena_config: ArenaConfig, panel: list[JudgeConfig], args: JudgeTurnArgs
    ) -> None:
        reply = json.dumps({"panel": [{"judge": "tech", "score": 8, "question": "Why now?"}]})
        service = PanelJudgeService(FakeLLMClient(replies={"panel": reply}))

        result = await service.run_panel_turn(arena_config, panel, args)

        assert result.parsed is True
        assert result.panel[0].score == 8.0
        assert result.panel[1].question == FALLBACK_QUESTION

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["", "not json", '{"panel": {}}', '["a"]'])
    async def test_unparseable_reply_falls_back_entirely(
        self, arena_config: ArenaConfig, panel: list[JudgeConfig], args: JudgeTurnArgs, reply: str
    ) -> None:
        service = PanelJudgeService(FakeLLMClient(replies={"panel": reply}))

        result = await service.run_panel_turn(arena_config, panel, args)

        assert result.parsed is False
        assert [t.judge for t in result.panel] == ["tech", "market"]
        assert all(t.score == FALLBACK_SCORE for t in result.panel)

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(
        self, arena_config: ArenaConfig, panel: list[JudgeConfig], args: JudgeTurnArgs
    ) -> None:
        llm = FakeLLMClient(error_on={"panel": LLMProviderError("down", model="m")})
        service = PanelJudgeService(llm)

        result = await service.run_panel_turn(arena_config, panel, args)

        assert result.parsed is False
        assert result.raw is None
        assert len(result.panel) == 2

    @pytest.mark.asyncio
    async def test_fenced_reply(
        self, arena_config: ArenaConfig, panel: list[JudgeConfig], args: JudgeTurnArgs
    ) -> None:
        service = PanelJudgeService(FakeLLMClient(replies={"panel": f"```json\n{panel_reply()}\n```"}))

        result = await service.run_panel_turn(arena_config, panel, args)

        assert result.parsed is True
