"""Unit tests for transcript pairing and exports."""

from pitch_arena.session.models import ChatMessage, MessageRole, SessionEvent
from pitch_arena.session.transcript import EXPORTERS, build_interactions


def _msg(role: MessageRole, text: str) -> ChatMessage:
    return ChatMessage(role=role, title=role.value, text=text)


AI = MessageRole.AI
USER = MessageRole.USER
SYSTEM = MessageRole.SYSTEM


class TestBuildInteractions:

    def test_pairs_question_and_answer(self) -> None:
        interactions = build_interactions([_msg(AI, "Who pays?"), _msg(USER, "Teams.")])

        assert interactions == [
            {"questioner": "ai", "responder": "user", "question": "Who pays?", "answer": "Teams."}
        ]

    def test_skips_system_messages(self) -> None:
        messages = [_msg(SYSTEM, "Goal: x"), _msg(AI, "Q"), _msg(SYSTEM, "note"), _msg(USER, "A")]

        assert build_interactions(messages) == [
            {"questioner": "ai", "responder": "user", "question": "Q", "answer": "A"}
        ]

    def test_same_role_twice_leaves_first_unanswered(self) -> None:
        interactions = build_interactions([_msg(AI, "Q1"), _msg(AI, "Q2"), _msg(USER, "A2")])

        assert interactions == [
            {"questioner": "ai", "responder": "user", "question": "Q1", "answer": None},
            {"questioner": "ai", "responder": "user", "question": "Q2", "answer": "A2"},
        ]

    def test_trailing_message_is_unanswered(self) -> None:
        interactions = build_interactions([_msg(AI, "Q"), _msg(USER, "A"), _msg(USER, "extra")])

        assert interactions[-1] == {"questioner": "user", "responder": "ai", "question": "extra", "answer": None}

    def test_empty(self) -> None:
        assert build_interactions([]) == []


class _StubSession:
    """Just the attributes the exporters read."""

    def __init__(self) -> None:
        self.messages = [_msg(AI, "Q"), _msg(USER, "A")]
        self.events = []
        self.config = None
        self.end_summary = None
        self.coach_report = None
        self.all_runs = []
        self.profile = {"ideaName": "Pitchly"}


class TestExporters:

    def test_known_kinds(self) -> None:
        assert set(EXPORTERS) == {"conversation", "prompts", "report"}

    def test_conversation(self) -> None:
        data = EXPORTERS["conversation"](_StubSession())

        assert data["interactions"][0]["answer"] == "A"
        assert data["exportedAt"]

    def test_prompts_keep_prompt_events_only(self) -> None:
        session = _StubSession()
        session.events = [
            SessionEvent(ts=1.0, type="judge.panel.prompt", payload={"round": 1}),
            SessionEvent(ts=2.0, type="message.user", payload={"text": "A"}),
        ]

        data = EXPORTERS["prompts"](session)

        assert [p["type"] for p in data["prompts"]] == ["judge.panel.prompt"]

    def test_report_without_end(self) -> None:
        data = EXPORTERS["report"](_StubSession())

        assert data["arenaId"] is None
        assert data["summary"] is None
        assert data["coachReport"] is None
        assert data["profile"] == {"ideaName": "Pitchly"}
