"""
Round planning - who speaks each round and what the chair asks them to focus on.

No model calls here. Everything is deterministic so a round can be
replayed from the session state alone.

Two intent planners exist:
- ``plan_phase_intent`` follows the arena's configured ``phases``.
- ``plan_next_intent`` works from coverage alone, for arenas without phases.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from pitch_arena.arena.models import ArenaConfig, JudgeConfig, RoundPhase
from pitch_arena.judging.models import CoverageStatus, CriteriaCoverage, JudgeIntent
from pitch_arena.judging.scoring import avg


class Stage(str, Enum):
    """Lineup stage a round belongs to."""
    CLARIFY = "clarify"
    PRESSURE = "pressure"
    DECISION = "decision"


class IntentPhase(str, Enum):
    CLARIFY_CORE = "clarify_core"
    STRESS_WEAKEST = "stress_weakest"
    DECISION_READY = "decision_ready"


# Coverage thresholds (share of criteria clear, partial counts half)
CORE_OK = 0.75
READY_OK = 0.80
MIN_READY = 0.65

RECENT_RUNS_WINDOW = 4

DEFAULT_PHASE_GOAL = "Clarify the idea with friendly precision."

# Criterion groups used when the arena's criteria use these ids
CORE_CRITERIA = ("buyer_value", "moment_trigger", "substitute_break", "wedge_entry")
VIABILITY_CRITERIA = ("channel_realism", "pricing_anchor", "retention_loop")
RISK_CRITERIA = ("scope_slice", "trust_boundary")


# =============================================================================
# Stages and lineups
# =============================================================================


def stage_for_round(round_number: int, max_rounds: int) -> Stage:
    if max_rounds <= 1:
        return Stage.DECISION
    if round_number <= 1:
        return Stage.CLARIFY
    if round_number >= max_rounds:
        return Stage.DECISION
    return Stage.PRESSURE


def judges_for_round(
    cfg: ArenaConfig,
    judges: Sequence[JudgeConfig],
    round_number: int,
    max_rounds: int,
    judges_per_round: int = 0,
) -> list[JudgeConfig]:
    """Judges that speak in a round, in speaking order.

    An explicit ``lineup[stage]`` wins (unknown ids are skipped). Otherwise
    every judge speaks when ``judges_per_round`` is 0 or covers the panel,
    else a window of N judges rotates through the panel each round.
    """
    if not judges:
        return []

    stage = stage_for_round(round_number, max_rounds)
    lineup = cfg.lineup.get(stage.value)
    if lineup:
        by_id = {j.id: j for j in judges}
        return [by_id[judge_id] for judge_id in lineup if judge_id in by_id]

    size = len(judges)
    count = judges_per_round
    if not count or count >= size:
        return list(judges)

    start = ((round_number - 1) * count) % size
    return [judges[(start + offset) % size] for offset in range(count)]


# =============================================================================
# Phase-based intent
# =============================================================================


@dataclass
class PhaseIntent:
    """Configured round intent and the judges best placed to pursue it."""
    phase_id: str
    goal: str
    primary_criteria: list[str] = field(default_factory=list)
    secondary_criteria: list[str] = field(default_factory=list)
    aggressiveness: str = "medium"
    judge_ids: list[str] = field(default_factory=list)

    def to_judge_intent(self) -> JudgeIntent:
        return JudgeIntent(
            phase=self.phase_id,
            goal=self.goal,
            primary_criteria=list(self.primary_criteria),
            secondary_criteria=list(self.secondary_criteria),
            aggressiveness=self.aggressiveness,
            reason=f"configured phase for judges {', '.join(self.judge_ids) or '(none)'}",
        )


def plan_phase_intent(cfg: ArenaConfig, round_number: int, judges_per_round: int = 0) -> PhaseIntent:
    """Intent from ``phases[min(round - 1, len - 1)]``.

    Judges are ranked by how many of the phase's primary criteria they own;
    judges owning none are dropped unless nobody matches, in which case the
    first judge is kept.
    """
    phases = cfg.phases
    if phases:
        phase = phases[max(0, min(round_number - 1, len(phases) - 1))]
    else:
        phase = RoundPhase(id="default", goal=DEFAULT_PHASE_GOAL)

    wanted = phase.primary_criteria

    def matches(judge: JudgeConfig) -> int:
        owned = {c.id for c in judge.criteria_config}
        return sum(1 for criterion_id in wanted if criterion_id in owned)

    ordered = sorted(cfg.panel_judges, key=matches, reverse=True)
    picked = [j for j in ordered if matches(j) > 0] or ordered[:1]
    if judges_per_round > 0:
        picked = picked[:judges_per_round]

    return PhaseIntent(
        phase_id=phase.id or phase.phase,
        goal=phase.goal,
        primary_criteria=list(phase.primary_criteria),
        secondary_criteria=list(phase.secondary_criteria),
        aggressiveness=phase.aggressiveness,
        judge_ids=[j.id for j in picked],
    )


# =============================================================================
# Coverage-driven intent
# =============================================================================


@dataclass
class RunLite:
    round: int
    score: float
    judge: str | None = None
    asked_criteria_id: str | None = None


@dataclass
class IntentPlannerState:
    """Inputs for ``plan_next_intent``.

    Attributes:
        round: Round being planned
        max_rounds: Rounds in the session
        criteria_ids: Criterion ids in play
        coverage: Best known coverage across judges
        runs: Judge runs so far
        objective_goal: Optional arena goal woven into the intent goal
        fast_mode: Jump to the decision once the core is clear
    """
    round: int
    max_rounds: int
    criteria_ids: list[str]
    coverage: list[CriteriaCoverage] = field(default_factory=list)
    runs: list[RunLite] = field(default_factory=list)
    objective_goal: str | None = None
    fast_mode: bool = False


def _status_score(status: CoverageStatus) -> float:
    if status == CoverageStatus.CLEAR:
        return 1.0
    if status == CoverageStatus.PARTIAL:
        return 0.5
    return 0.0


def _coverage_for(criteria_ids: list[str], coverage: list[CriteriaCoverage]) -> list[CriteriaCoverage]:
    by_id = {c.id: c for c in coverage if c.id}
    return [by_id.get(criterion_id) or CriteriaCoverage(id=criterion_id) for criterion_id in criteria_ids]


def _recently_asked(runs: list[RunLite], window: int) -> set[str]:
    return {r.asked_criteria_id for r in runs[-window:] if r.asked_criteria_id}


def _pick_by_need(
    coverage: list[CriteriaCoverage],
    wanted: Sequence[str],
    recently_asked: set[str],
    count: int,
) -> list[str]:
    """Weakest wanted criteria first, skipping recently asked ones when possible."""
    wanted_set = set(wanted)
    candidates = sorted(
        (c for c in coverage if c.id in wanted_set),
        key=lambda c: _status_score(c.status),
    )

    picked: list[str] = []
    for candidate in candidates:
        if len(picked) >= count:
            break
        if candidate.id not in recently_asked:
            picked.append(candidate.id)

    for candidate in candidates:
        if len(picked) >= count:
            break
        if candidate.id not in picked:
            picked.append(candidate.id)

    return picked


def _criteria_groups(criteria_ids: list[str]) -> tuple[list[str], list[str], list[str]]:
    core = [c for c in CORE_CRITERIA if c in criteria_ids]
    viability = [c for c in VIABILITY_CRITERIA if c in criteria_ids]
    risk = [c for c in RISK_CRITERIA if c in criteria_ids]

    if not core:
        half = max(1, len(criteria_ids) // 2)
        return criteria_ids[:half], [], criteria_ids[half:]

    return core, viability, risk


def plan_next_intent(state: IntentPlannerState) -> JudgeIntent:
    """Pick the next round's intent from coverage.

    clarify_core until the core criteria are mostly clear, then
    stress_weakest until most criteria are clear, then decision_ready. The
    last round is always decision_ready.
    """
    criteria_ids = list(state.criteria_ids)
    coverage = _coverage_for(criteria_ids, state.coverage)
    core, viability, risk = _criteria_groups(criteria_ids)
    recent = _recently_asked(state.runs, RECENT_RUNS_WINDOW)

    core_avg = avg(_status_score(c.status) for c in coverage if c.id in core)
    all_avg = avg(_status_score(c.status) for c in coverage)
    rounds_left = max(0, state.max_rounds - state.round + 1)
    goal_of = state.objective_goal

    if rounds_left <= 1:
        primary = _pick_by_need(coverage, criteria_ids, recent, 2)
        if all_avg >= READY_OK:
            pressure = "light"
        elif all_avg >= MIN_READY:
            pressure = "medium"
        else:
            pressure = "hard"
        return JudgeIntent(
            phase=IntentPhase.DECISION_READY.value,
            goal=(f"Make a decision against: {goal_of}" if goal_of
                  else "Make a decision: is this ready given what we know?"),
            primary_criteria=primary or criteria_ids[:2],
            aggressiveness=pressure,
            reason=f"Rounds left={rounds_left}, forcing decision. "
                   f"coreAvg={core_avg:.2f} allAvg={all_avg:.2f}",
        )

    if core_avg < CORE_OK:
        primary = _pick_by_need(coverage, core or criteria_ids, recent, 2)
        secondary = _pick_by_need(coverage, viability, recent, 1) if viability else []
        return JudgeIntent(
            phase=IntentPhase.CLARIFY_CORE.value,
            goal=(f"Clarify the core so it matches: {goal_of}" if goal_of
                  else "Clarify the core: who it’s for, when used, and why it matters."),
            primary_criteria=primary or core,
            secondary_criteria=secondary,
            aggressiveness="light",
            reason=f"coreAvg={core_avg:.2f} below CORE_OK={CORE_OK}",
        )

    if state.fast_mode:
        primary = _pick_by_need(coverage, criteria_ids, recent, 2)
        return JudgeIntent(
            phase=IntentPhase.DECISION_READY.value,
            goal=(f"Decide readiness for: {goal_of}" if goal_of
                  else "Decide: is it compelling + plausible enough to proceed?"),
            primary_criteria=primary or criteria_ids[:2],
            aggressiveness="light" if all_avg >= READY_OK else "medium",
            reason=f"fastMode=true and coreAvg={core_avg:.2f} >= CORE_OK",
        )

    if all_avg >= READY_OK:
        primary = _pick_by_need(coverage, criteria_ids, recent, 2)
        return JudgeIntent(
            phase=IntentPhase.DECISION_READY.value,
            goal=f"Finalize against: {goal_of}" if goal_of else "Finalize decision and next steps.",
            primary_criteria=primary or criteria_ids[:2],
            aggressiveness="light",
            reason=f"allAvg={all_avg:.2f} >= READY_OK={READY_OK}",
        )

    primary = _pick_by_need(coverage, risk or criteria_ids, recent, 2)
    secondary = _pick_by_need(coverage, viability, recent, 1) if viability else []
    return JudgeIntent(
        phase=IntentPhase.STRESS_WEAKEST.value,
        goal=(f"Stress the weakest points relative to: {goal_of}" if goal_of
              else "Stress the weakest points: feasibility, trust, scope, or real-world constraints."),
        primary_criteria=primary or criteria_ids[:2],
        secondary_criteria=secondary,
        aggressiveness="hard" if all_avg < 0.55 else "medium",
        reason=f"coreAvg ok ({core_avg:.2f}), allAvg={all_avg:.2f}",
    )
