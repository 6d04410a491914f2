"""
Arena Session - Round/phase state machine for one founder.

Lifecycle:
    warm_up | awaiting_pitch
        -> judging -> answering (one judge at a time)
        -> results -> rescoring
        -> host_filler -> judging ... (next round)
        -> ended

The panel for a round is computed in ONE background task per round. The
task is started as soon as the next round is known, so the model call
overlaps with the host filler question the founder is answering.

Public operations serialize on a per-session lock; internal steps call
each other directly.
"""

from __future__ import annotations

import asyncio
import json
import time
import uuid
from dataclasses import replace
from typing import Any

from pitch_arena.arena.models import ArenaConfig, JudgeConfig
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.constants import (
    AWAITING_PITCH_PROMPT,
    HOST_JUDGE_ID,
    HOST_PREPARSED_WELCOME,
    HOST_WELCOME,
    WARM_UP_COMPLETE,
)
from pitch_arena.core.exceptions import InvalidTransitionError
from pitch_arena.core.logging import get_logger
from pitch_arena.judging.models import (
    CriteriaCoverage,
    JudgeIntent,
    JudgeMode,
    JudgeTurnArgs,
    JudgeTurnResult,
    ResolutionStatus,
)
from pitch_arena.judging.panel import PanelJudgeService, fallback_for
from pitch_arena.judging.resolution import ResolutionEvaluator
from pitch_arena.judging.normalize import round_tenth
from pitch_arena.judging.scoring import avg, score_from_turn
from pitch_arena.llm.client import TextPrompt
from pitch_arena.session.host import HostService, merge_profiles, new_profile, pick_filler_question
from pitch_arena.session.memory import ArenaMemory, HostNote, update_arena_memory
from pitch_arena.session.micro_turn import detect_micro_turn
from pitch_arena.session.models import (
    ChatMessage,
    JudgeRun,
    MessageRole,
    SessionEvent,
    SessionPhase,
)
from pitch_arena.session.planner import (
    IntentPlannerState,
    RunLite,
    judges_for_round,
    plan_next_intent,
    plan_phase_intent,
)
from pitch_arena.session.summary import (
    CoachReport,
    CoachService,
    EndSummary,
    SummaryGenerator,
    format_coach_message,
)
from pitch_arena.session.transcript import build_interactions


logger = get_logger(__name__)


DEMO_PROFILE: dict[str, Any] = {
    "founderName": "peter",
    "ideaName": "pitch arena",
    "pitch": (
        "Pitch Arena is an AI-run space where founders and creators can test their "
        "ideas in a hackathon or shark tank style room. The arena has an overall "
        "objective and the judges are aligned with it, but each has their own "
        "character and goals, so people can test ideas in a real Q&A instead of in "
        "front of friends and family."
    ),
    "targetUser": "Early founders, creators, hackers",
    "targetContext": "preparing and perfecting a pitch",
    "firstValue": "realistic practice",
    "acquisitionPath": "via incubators",
    "inputSource": "Personal pain",
}

REJECTED_MESSAGE_PHASES = (SessionPhase.JUDGING, SessionPhase.RESCORING, SessionPhase.ENDED)


class ArenaSession:
    """State machine for a single pitch session.

    Attributes:
        id: Session identifier
        config: Arena config the session runs against
        phase: Current SessionPhase
        round: Current round (1-based, never above max_rounds)
        max_rounds: Rounds in this session
        profile: Founder profile collected so far
        messages: Visible conversation
        events: Internal event log (prompts, durations, reports)
        memory: Panel memory
        all_runs: Every answered judge question, all rounds
    """

    def __init__(
        self,
        config: ArenaConfig,
        llm: TextPrompt,
        settings: Settings | None = None,
        session_id: str | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.id = session_id or str(uuid.uuid4())
        self.config = config
        self.max_rounds = config.max_rounds(self._settings.default_max_rounds)
        self.judges_per_round = self._settings.judges_per_round
        self.host: JudgeConfig | None = config.host
        self.panel: list[JudgeConfig] = config.panel_judges

        self._panel_service = PanelJudgeService(llm)
        self._host_service = HostService(llm)
        self._resolution = ResolutionEvaluator(llm)
        self._summary = SummaryGenerator(llm, max_runs=self._settings.summary_max_runs)
        self._coach = CoachService(llm)

        self._lock = asyncio.Lock()
        self._compute_lock = asyncio.Lock()
        self._panel_task: asyncio.Task[None] | None = None

        self.created_at = time.time()
        self._reset()

    # =========================================================================
    # State
    # =========================================================================

    def _reset(self) -> None:
        self.phase = SessionPhase.WARM_UP
        self.round = 1
        self.profile: dict[str, Any] = {}
        self.messages: list[ChatMessage] = []
        self.events: list[SessionEvent] = []
        self.memory = ArenaMemory()
        self.all_runs: list[JudgeRun] = []

        self.host_done = False
        self.last_host_question: str | None = None
        self.pending_filler_question: str | None = None
        self._filler_round: int | None = None

        self.round_judges: list[JudgeConfig] = []
        self.round_turns: list[JudgeTurnResult] = []
        self.current_index = 0
        self.current_turn: JudgeTurnResult | None = None

        self.final_score: float | None = None
        self.end_summary: EndSummary | None = None
        self.coach_report: CoachReport | None = None
        self._finished = False

    @property
    def round_runs(self) -> list[JudgeRun]:
        return [r for r in self.all_runs if r.round == self.round]

    @property
    def current_judge(self) -> JudgeConfig | None:
        if self.phase != SessionPhase.ANSWERING:
            return None
        if 0 <= self.current_index < len(self.round_judges):
            return self.round_judges[self.current_index]
        return None

    @property
    def is_ended(self) -> bool:
        return self.phase == SessionPhase.ENDED

    def _set_phase(self, phase: SessionPhase) -> None:
        if phase == self.phase:
            return
        logger.info(
            "Session phase changed",
            session_id=self.id,
            round=self.round,
            previous=self.phase.value,
            phase=phase.value,
        )
        self.phase = phase

    def _log_event(self, event_type: str, payload: Any) -> None:
        self.events.append(SessionEvent(ts=time.time(), type=event_type, payload=payload))

    def _add_message(
        self,
        role: MessageRole,
        title: str,
        text: str,
        judge_id: str | None = None,
    ) -> ChatMessage:
        message = ChatMessage(role=role, title=title, text=text, judge_id=judge_id)
        self.messages.append(message)
        self._log_event(f"message.{role.value}", {"title": title, "text": text})
        return message

    def _add_system(self, text: str) -> ChatMessage:
        return self._add_message(MessageRole.SYSTEM, "system", text)

    def _add_host(self, text: str) -> ChatMessage:
        return self._add_message(MessageRole.AI, "Host", text, judge_id=HOST_JUDGE_ID)

    # =========================================================================
    # Public operations
    # =========================================================================

    async def start(self, demo: bool = False, profile: dict[str, Any] | None = None) -> list[ChatMessage]:
        """Reset and open the session.

        Args:
            demo: Use the built-in demo profile and start judging at once.
            profile: Pre-parsed founder profile (e.g. from a deck); the host
                acknowledges it and runs one warm-up turn on it.

        Returns:
            Messages added by this call.
        """
        async with self._lock:
            await self._cancel_panel_task()
            self._reset()
            self._log_event("arena.load", {"arenaId": self.config.id, "demo": demo})

            if self.config.goal:
                self._add_system(f"Goal: {self.config.goal}")
            if not self.panel:
                self._add_system("No judges found in this arena config (excluding host).")

            if demo:
                self.profile = dict(DEMO_PROFILE)
                self.host_done = True
                await self._start_judging()
                return list(self.messages)

            if self.host is None or not self.host.profile_config:
                self.profile = dict(profile or {})
                self.host_done = True
                self._set_phase(SessionPhase.AWAITING_PITCH)
                self._add_system(AWAITING_PITCH_PROMPT)
                return list(self.messages)

            self.profile = merge_profiles(new_profile(self.host.profile_config), profile)
            self._log_event("arena.profile.init", {"profile": dict(self.profile)})
            self._set_phase(SessionPhase.WARM_UP)

            if profile:
                self.last_host_question = HOST_PREPARSED_WELCOME
                self._add_system(HOST_PREPARSED_WELCOME)
                await self._run_host_turn("")
            else:
                self.last_host_question = HOST_WELCOME
                self._add_host(HOST_WELCOME)

            return list(self.messages)

    async def handle_message(self, text: str) -> list[ChatMessage]:
        """Process one founder message.

        Returns:
            Messages added by this call (empty for blank input).

        Raises:
            InvalidTransitionError: While judging, rescoring, or after the end.
        """
        async with self._lock:
            before = len(self.messages)
            await self._handle_message(text)
            return self.messages[before:]

    async def rescore(self) -> list[ChatMessage]:
        """Evaluate the finished round and advance or end.

        Raises:
            InvalidTransitionError: Unless the session is in ``results``.
        """
        async with self._lock:
            before = len(self.messages)
            await self._rescore()
            return self.messages[before:]

    async def finish(self) -> list[ChatMessage]:
        """End the session and generate the reports. Safe to call twice."""
        async with self._lock:
            before = len(self.messages)
            await self._finish()
            return self.messages[before:]

    # =========================================================================
    # Message handling
    # =========================================================================

    def _pending_question(self) -> str | None:
        if self.phase == SessionPhase.ANSWERING and self.current_turn:
            return self.current_turn.question
        if self.phase == SessionPhase.HOST_FILLER:
            return self.pending_filler_question
        if self.phase == SessionPhase.WARM_UP:
            return self.last_host_question
        if self.phase == SessionPhase.AWAITING_PITCH:
            return AWAITING_PITCH_PROMPT
        return None

    async def _handle_message(self, text: str) -> None:
        answer = (text or "").strip()
        if not answer:
            return

        if self.phase in REJECTED_MESSAGE_PHASES:
            raise InvalidTransitionError("send a message", self.phase.value)

        self._add_message(MessageRole.USER, "Founder", answer)

        if self.phase == SessionPhase.RESULTS:
            await self._rescore()
            return

        micro = detect_micro_turn(answer, self._pending_question())
        if micro.blocks_flow:
            self._log_event("micro_turn", {"kind": micro.kind.value})
            self._add_host(micro.prompt)
            return
        if micro.text:
            self._log_event("micro_turn", {"kind": micro.kind.value})
            self._add_host(micro.text)

        if self.phase == SessionPhase.AWAITING_PITCH:
            self.profile = {**self.profile, "pitch": answer}
            self._add_system("Got it.")
            await self._start_judging()
        elif self.phase == SessionPhase.WARM_UP:
            await self._run_host_turn(answer)
        elif self.phase == SessionPhase.HOST_FILLER:
            await self._answer_filler(answer)
        elif self.phase == SessionPhase.ANSWERING:
            await self._answer_judge(answer)

    async def _run_host_turn(self, answer: str) -> None:
        if self.host is None:
            return

        started = time.perf_counter()
        reply, prompt = await self._host_service.run_turn(
            self.config,
            self.host,
            self.profile,
            self.last_host_question or "",
            answer,
        )
        self._log_event("host.prompt.created", {"prompt": prompt})
        self._log_event("host.prompt.response", {
            "ready": reply.ready,
            "nextQuestion": reply.next_question,
            "profile": reply.profile,
            "parsed": reply.parsed,
            "elapsedMs": int((time.perf_counter() - started) * 1000),
        })

        self.profile = merge_profiles(self.profile, reply.profile)

        if reply.ready:
            self._add_system(WARM_UP_COMPLETE)
            self.host_done = True
            self._clear_round_buffers()
            await self._begin_round()
            return

        self.last_host_question = reply.next_question
        self._add_host(reply.next_question)

    async def _answer_filler(self, answer: str) -> None:
        self.memory = self.memory.with_host_note(
            HostNote(question=self.pending_filler_question or "", answer=answer, round=self.round)
        )
        self.pending_filler_question = None
        await self._start_judging()

    async def _answer_judge(self, answer: str) -> None:
        judge = self.current_judge
        turn = self.current_turn
        if judge is None or turn is None:
            return

        previous = next((r for r in reversed(self.all_runs) if r.judge_id == judge.id), None)
        run = JudgeRun(
            judge_id=judge.id,
            judge_label=judge.label,
            round=self.round,
            score=turn.score,
            comment=turn.comment,
            question=turn.question,
            answer=answer,
            asked_criteria_id=turn.asked_criteria_id,
            coverage=list(turn.coverage),
            delta=round_tenth(turn.score - previous.score) if previous else None,
        )
        self.all_runs.append(run)
        self.memory = update_arena_memory(
            self.memory,
            judge.id,
            turn,
            answer,
            keep_last_criteria=self._settings.memory_keep_criteria,
            keep_last_questions=self._settings.memory_keep_questions,
        )

        self.current_index += 1
        if self.current_index < len(self.round_judges):
            self._set_phase(SessionPhase.JUDGING)
            await self._present_current_judge()
            return

        self.current_turn = None
        self._set_phase(SessionPhase.RESULTS)
        self._log_event("round.results", {
            "round": self.round,
            "scores": {r.judge_id: r.score for r in self.round_runs},
        })
        if self._settings.auto_rescore:
            await self._rescore()

    # =========================================================================
    # Rounds
    # =========================================================================

    def _clear_round_buffers(self) -> None:
        self.round_judges = []
        self.round_turns = []
        self.current_index = 0
        self.current_turn = None

    async def _begin_round(self) -> None:
        """Start computing the round's panel, then fill the wait with the host."""
        self._kickoff_panel_compute()
        if self._start_host_filler():
            return
        await self._start_judging()

    def _start_host_filler(self) -> bool:
        if self.host is None or not self.config.host_enabled:
            return False
        if self._filler_round == self.round:
            return False

        self._filler_round = self.round
        question = pick_filler_question(self.round)
        self.pending_filler_question = question
        self._set_phase(SessionPhase.HOST_FILLER)
        self._add_host(question)
        return True

    async def _start_judging(self) -> None:
        previous = self.phase
        self._set_phase(SessionPhase.JUDGING)
        try:
            self._kickoff_panel_compute()
            await self._await_panel()
        except BaseException:
            self._clear_round_buffers()
            self._set_phase(previous)
            raise
        await self._present_current_judge()

    async def _present_current_judge(self) -> None:
        if self.is_ended:
            return

        index = self.current_index
        judge = self.round_judges[index] if index < len(self.round_judges) else None
        turn = self.round_turns[index] if index < len(self.round_turns) else None
        if judge is None or turn is None:
            await self._finish()
            return

        self.current_turn = turn
        self._add_message(MessageRole.AI, judge.label, turn.question, judge_id=judge.id)
        self._set_phase(SessionPhase.ANSWERING)

    # =========================================================================
    # Panel compute
    # =========================================================================

    def _kickoff_panel_compute(self) -> None:
        if self._panel_task is not None and not self._panel_task.done():
            return
        if self.round_turns and self.round_judges:
            return
        self._panel_task = asyncio.create_task(self._ensure_round_turns())

    async def _await_panel(self) -> None:
        task = self._panel_task
        if task is None:
            return
        try:
            await task
        finally:
            if self._panel_task is task:
                self._panel_task = None

    async def _cancel_panel_task(self) -> None:
        task = self._panel_task
        self._panel_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _plan_intent(self, judges: list[JudgeConfig]) -> JudgeIntent:
        if self.config.phases:
            return plan_phase_intent(self.config, self.round, self.judges_per_round).to_judge_intent()

        criteria_ids: list[str] = []
        for judge in judges:
            for criterion in judge.criteria_config:
                if criterion.id not in criteria_ids:
                    criteria_ids.append(criterion.id)

        objective = self.config.objective.thesis if self.config.objective else None
        return plan_next_intent(IntentPlannerState(
            round=self.round,
            max_rounds=self.max_rounds,
            criteria_ids=criteria_ids,
            coverage=[
                CriteriaCoverage(id=criterion_id, status=status)
                for criterion_id, status in self.memory.coverage_by_criteria.items()
            ],
            runs=[
                RunLite(round=r.round, score=r.score, judge=r.judge_id, asked_criteria_id=r.asked_criteria_id)
                for r in self.all_runs
            ],
            objective_goal=objective or None,
            fast_mode=self.config.constraints.fast_mode,
        ))

    def _last_delta_for(self, judge_id: str) -> str | None:
        same = next((r for r in reversed(self.all_runs) if r.judge_id == judge_id), None)
        if same is not None:
            return f"Previous (same judge):\nQ: {same.question}\nA: {same.answer}"
        if self.all_runs:
            last = self.all_runs[-1]
            return f"Previous (panel):\nQ: {last.question}\nA: {last.answer}"
        return None

    def _build_last_delta(self, judges: list[JudgeConfig]) -> str | None:
        deltas = {}
        for judge in judges:
            delta = self._last_delta_for(judge.id)
            if delta:
                deltas[judge.id] = delta
        if not deltas:
            return None
        return f"LastDeltaByJudge:\n{json.dumps(deltas, ensure_ascii=False)}"

    async def _ensure_round_turns(self) -> None:
        async with self._compute_lock:
            if self.round_turns and self.round_judges:
                return

            judges = judges_for_round(
                self.config,
                self.panel,
                self.round,
                self.max_rounds,
                self.judges_per_round,
            )
            self.round_judges = judges
            if not judges:
                return

            intent = self._plan_intent(judges)
            args = JudgeTurnArgs(
                profile=dict(self.profile),
                last_delta=self._build_last_delta(judges),
                memory=self.memory,
                mode=JudgeMode.DISCOVERY if self.round <= 1 else JudgeMode.INTERROGATION,
                round=self.round,
                max_rounds=self.max_rounds,
                intent=intent,
            )
            self._log_event("judge.panel.prompt", {
                "round": self.round,
                "judgeIds": [j.id for j in judges],
                "intent": intent.to_dict(),
                "lastDelta": args.last_delta,
            })

            started = time.perf_counter()
            result = await self._panel_service.run_panel_turn(self.config, judges, args)

            by_judge = {turn.judge: turn for turn in result.panel}
            ordered = [by_judge.get(j.id) or fallback_for(self.config, j) for j in judges]
            self.round_turns = [replace(turn, score=score_from_turn(turn)) for turn in ordered]

            self._log_event("judge.panel.duration", {
                "elapsedMs": int((time.perf_counter() - started) * 1000),
                "round": self.round,
                "judgeIds": [j.id for j in judges],
                "parsed": result.parsed,
            })

    # =========================================================================
    # Rescoring and end
    # =========================================================================

    async def _rescore(self) -> None:
        if self.phase != SessionPhase.RESULTS:
            raise InvalidTransitionError("rescore", self.phase.value)

        self._set_phase(SessionPhase.RESCORING)
        runs = self.round_runs
        try:
            statuses = await asyncio.gather(*(
                self._resolution.evaluate(run.issue_id, run.question, run.answer) for run in runs
            ))
        except BaseException:
            self._set_phase(SessionPhase.RESULTS)
            raise

        for run, status in zip(runs, statuses):
            if status == ResolutionStatus.RESOLVED:
                self.memory = self.memory.with_resolved(run.judge_id, run.issue_id)

        self._log_event("rescore.results", {
            "round": self.round,
            "results": {run.judge_id: status.value for run, status in zip(runs, statuses)},
        })

        if self.round >= self.max_rounds:
            await self._finish()
            return

        self.round += 1
        self._clear_round_buffers()
        await self._begin_round()

    async def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True

        await self._cancel_panel_task()
        self.current_turn = None
        self._set_phase(SessionPhase.ENDED)

        final_score = round_tenth(avg(r.score for r in self.all_runs))
        self.final_score = final_score
        self._add_system(f"Ended • Final score: {final_score:.1f}")

        interactions = build_interactions(self.messages)[-self._settings.coach_max_interactions:]
        pitch = str(self.profile.get("pitch") or "").strip()
        if not pitch:
            pitch = next(
                (str(i["answer"]).strip() for i in interactions if i["responder"] == MessageRole.USER.value),
                "",
            )

        async def no_coach() -> None:
            return None

        coach_call = (
            self._coach.run(self.config, pitch, interactions)
            if pitch and interactions
            else no_coach()
        )
        summary_result, coach = await asyncio.gather(
            self._summary.build(final_score, self.config, self.profile, self.all_runs),
            coach_call,
        )

        self.end_summary = summary_result.summary
        if summary_result.message_text:
            self._add_system(summary_result.message_text)

        if coach is not None:
            self.coach_report = coach
            self._log_event("coach.report", coach.to_dict())
            self._add_message(MessageRole.SYSTEM, "Coach", format_coach_message(coach))

        logger.info(
            "Session ended",
            session_id=self.id,
            round=self.round,
            runs=len(self.all_runs),
            final_score=final_score,
        )

    # =========================================================================
    # Views
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        judge = self.current_judge
        return {
            "id": self.id,
            "arenaId": self.config.id,
            "arenaName": self.config.name,
            "phase": self.phase.value,
            "round": self.round,
            "maxRounds": self.max_rounds,
            "profile": dict(self.profile),
            "currentJudge": {"id": judge.id, "label": judge.label} if judge else None,
            "currentTurn": self.current_turn.to_dict() if self.current_turn else None,
            "pendingQuestion": self._pending_question(),
            "messages": [m.to_dict() for m in self.messages],
            "judgeRuns": [r.to_dict() for r in self.all_runs],
            "memory": self.memory.to_dict(),
            "finalScore": self.final_score,
            "summary": self.end_summary.to_dict() if self.end_summary else None,
            "coachReport": self.coach_report.to_dict() if self.coach_report else None,
        }
