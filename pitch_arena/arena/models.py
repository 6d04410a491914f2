"""
Arena Models - Pydantic schema for arena config assets.

An arena config describes the objective, the round phases, the style rules
and the judges (including the optional ``host``) for one Pitch Arena.
Asset files use camelCase keys; every model also accepts snake_case and
ignores keys it does not know about.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pitch_arena.core.constants import HOST_JUDGE_ID


Aggressiveness = Literal["light", "medium", "hard"]


class ArenaModel(BaseModel):
    """Base model for asset-backed config objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Criteria
# =============================================================================


class ArenaCriterion(ArenaModel):
    """Canonical criterion shared by the arena (source of truth for labels)."""

    id: str
    label: str | None = None
    description: str = ""
    signals: list[str] = Field(default_factory=list)
    question_starters: list[str] = Field(default_factory=list)


class JudgeCriterion(ArenaModel):
    """Criterion a single judge scores (``criteriaConfig`` entries)."""

    id: str
    description: str = ""
    signals: list[str] = Field(default_factory=list)
    weight: float | None = None


# =============================================================================
# Judges
# =============================================================================


class SpeakingStyle(ArenaModel):
    voice: str | None = None
    banned_phrases: list[str] = Field(default_factory=list)


class JudgePersona(ArenaModel):
    archetype: str | None = None
    pet_peeves: list[str] = Field(default_factory=list)
    default_stance: str | None = None
    speaking_style: SpeakingStyle | None = None


class JudgeConfig(ArenaModel):
    """One judge persona. The judge with id ``host`` runs the warm-up."""

    id: str
    label: str
    dimension: str = ""
    image: str | None = None
    tone: str | None = None
    safety: list[str] = Field(default_factory=list)
    profile_config: list[str] = Field(default_factory=list)
    focus: list[str] = Field(default_factory=list)
    role_prompt: str | None = None
    persona: JudgePersona | None = None
    criteria_config: list[JudgeCriterion] = Field(default_factory=list)

    @property
    def is_host(self) -> bool:
        return self.id == HOST_JUDGE_ID


# =============================================================================
# Style and Objective
# =============================================================================


class ConversationRules(ArenaModel):
    max_comment_words: int = 80
    one_question_only: bool = True
    question_max_sentences: int = 1
    de_escalate_if_defensive: bool = False
    avoid_repetitive_templates: bool = True
    avoid_categorical_language: bool = False


class GlobalStyle(ArenaModel):
    tone_default: str = "direct"
    banned_phrases: list[str] = Field(default_factory=list)
    banned_cliches: list[str] = Field(default_factory=list)
    conversation_rules: ConversationRules | None = None


class ArenaConstraints(ArenaModel):
    host_enabled: bool = True
    max_rounds: int | None = None
    tone_floor: str | None = None
    no_investor_talk: bool = False
    timebox_per_judge_seconds: int | None = None
    fast_mode: bool = False
    parse_mode: Literal["none", "fast", "full"] | None = None
    summary_mode: Literal["none", "template", "llm"] | None = None
    llm_timeout_ms: int | None = None


class ArenaObjective(ArenaModel):
    thesis: str = ""
    success_definition: list[str] = Field(default_factory=list)
    constraints: ArenaConstraints | None = None


class RoundPhase(ArenaModel):
    """Configured intent for one round (``phases[round - 1]``)."""

    id: str | None = None
    phase: str = "default"
    goal: str = ""
    primary_criteria: list[str] = Field(default_factory=list)
    secondary_criteria: list[str] = Field(default_factory=list)
    aggressiveness: Aggressiveness = "medium"


# =============================================================================
# Arena
# =============================================================================


class ArenaConfig(ArenaModel):
    """Complete arena description loaded from ``/arenas/{path}.json``."""

    id: str
    name: str
    goal: str | None = None
    description: str | None = None
    objective: ArenaObjective | None = None
    phases: list[RoundPhase] = Field(default_factory=list)
    safety: list[str] = Field(default_factory=list)
    voices: dict[str, str] = Field(default_factory=dict)
    global_style: GlobalStyle | None = None
    judges: list[JudgeConfig] = Field(default_factory=list)
    criteria: list[ArenaCriterion] = Field(default_factory=list)
    lineup: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def constraints(self) -> ArenaConstraints:
        if self.objective and self.objective.constraints:
            return self.objective.constraints
        return ArenaConstraints()

    @property
    def host_enabled(self) -> bool:
        return self.constraints.host_enabled is not False

    @property
    def host(self) -> JudgeConfig | None:
        """The host judge, or None when absent or disabled."""
        if not self.host_enabled:
            return None
        return next((j for j in self.judges if j.is_host), None)

    @property
    def panel_judges(self) -> list[JudgeConfig]:
        """All judges except the host, in config order."""
        return [j for j in self.judges if not j.is_host]

    @property
    def conversation_rules(self) -> ConversationRules:
        if self.global_style and self.global_style.conversation_rules:
            return self.global_style.conversation_rules
        return ConversationRules()

    @property
    def banned_phrases(self) -> list[str]:
        if not self.global_style:
            return []
        phrases = [*self.global_style.banned_phrases, *self.global_style.banned_cliches]
        return [p for p in phrases if p and p.strip()]

    def max_rounds(self, default: int) -> int:
        """Configured positive max rounds, else ``default``."""
        configured = self.constraints.max_rounds
        if isinstance(configured, int) and configured > 0:
            return configured
        return default

    def get_judge(self, judge_id: str) -> JudgeConfig | None:
        return next((j for j in self.judges if j.id == judge_id), None)

    def criteria_for(self, judge: JudgeConfig) -> list[JudgeCriterion]:
        """Judge criteria with blank descriptions/signals filled from arena criteria."""
        canonical = {c.id: c for c in self.criteria}
        resolved: list[JudgeCriterion] = []
        for criterion in judge.criteria_config:
            source = canonical.get(criterion.id)
            if source is None:
                resolved.append(criterion)
                continue
            resolved.append(
                criterion.model_copy(
                    update={
                        "description": criterion.description or source.description,
                        "signals": criterion.signals or source.signals,
                    }
                )
            )
        return resolved
