"""Session - the arena state machine and everything a session needs."""

from pitch_arena.session.manager import SessionManager
from pitch_arena.session.memory import ArenaMemory, fingerprint, update_arena_memory
from pitch_arena.session.models import ChatMessage, JudgeRun, MessageRole, SessionPhase
from pitch_arena.session.state_machine import ArenaSession


__all__ = [
    "ArenaMemory",
    "ArenaSession",
    "ChatMessage",
    "JudgeRun",
    "MessageRole",
    "SessionManager",
    "SessionPhase",
    "fingerprint",
    "update_arena_memory",
]
