"""Unit tests for micro-turn detection."""

import pytest

from pitch_arena.session.micro_turn import (
    ACK_TEXT,
    CLARIFY_PROMPT,
    REPEAT_PROMPT,
    SMALLTALK_TEXT,
    MicroTurnKind,
    detect_micro_turn,
)


class TestDetectMicroTurn:

    @pytest.mark.parametrize(
        "text",
        ["Can you repeat that?", "sorry, say that again", "Pardon?", "what was the question", "I didn't catch that"],
    )
    def test_repeat(self, text: str) -> None:
        micro = detect_micro_turn(text, "Who pays?")

        assert micro.kind == MicroTurnKind.REPEAT
        assert micro.prompt == f"{REPEAT_PROMPT} Who pays?"
        assert micro.blocks_flow

    @pytest.mark.parametrize(
        "text",
        ["What do you mean?", "I don't understand", "could you clarify", "not sure what you mean"],
    )
    def test_clarify(self, text: str) -> None:
        micro = detect_micro_turn(text)

        assert micro.kind == MicroTurnKind.CLARIFY
        assert micro.prompt == CLARIFY_PROMPT
        assert micro.blocks_flow

    @pytest.mark.parametrize("text", ["ok", "Thanks!", "got it.", "Sure"])
    def test_ack(self, text: str) -> None:
        micro = detect_micro_turn(text)

        assert micro.kind == MicroTurnKind.ACK
        assert micro.text == ACK_TEXT
        assert not micro.blocks_flow

    @pytest.mark.parametrize("text", ["hi", "Hello!", "how's it going?"])
    def test_smalltalk(self, text: str) -> None:
        micro = detect_micro_turn(text)

        assert micro.kind == MicroTurnKind.SMALLTALK
        assert micro.text == SMALLTALK_TEXT

    @pytest.mark.parametrize(
        "text",
        [
            "",
            None,
            "Founders who practice pitches before demo day.",
            "Can you repeat the part where we explain how pricing tiers work for teams?",
            "ok so the buyer is the hackathon organizer",
        ],
    )
    def test_real_answers(self, text: str | None) -> None:
        assert detect_micro_turn(text).kind == MicroTurnKind.NONE

    def test_repeat_without_pending_question(self) -> None:
        assert detect_micro_turn("repeat please").prompt == REPEAT_PROMPT
