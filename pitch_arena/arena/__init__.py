"""Arena configuration models and loader."""

from pitch_arena.arena.loader import ArenaConfigLoader, is_valid_arena_path
from pitch_arena.arena.models import (
    ArenaConfig,
    ArenaConstraints,
    ArenaCriterion,
    ArenaObjective,
    ConversationRules,
    GlobalStyle,
    JudgeConfig,
    JudgeCriterion,
    JudgePersona,
    RoundPhase,
)


__all__ = [
    "ArenaConfig",
    "ArenaConfigLoader",
    "ArenaConstraints",
    "ArenaCriterion",
    "ArenaObjective",
    "ConversationRules",
    "GlobalStyle",
    "JudgeConfig",
    "JudgeCriterion",
    "JudgePersona",
    "RoundPhase",
    "is_valid_arena_path",
]
