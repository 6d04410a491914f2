"""Unit tests for SessionManager."""

import json
from pathlib import Path

import pytest

from pitch_arena.arena.loader import ArenaConfigLoader
from pitch_arena.core.config import Settings
from pitch_arena.core.exceptions import ArenaConfigNotFoundError, SessionNotFoundError
from pitch_arena.session.manager import SessionManager, render_transcript
from pitch_arena.session.models import SessionPhase
from tests.fakes.arena_data import LONG_ANSWER, TECH_QUESTION
from tests.fakes.fake_llm import FakeLLMClient


@pytest.fixture
def manager(local_loader: ArenaConfigLoader, fake_llm: FakeLLMClient, test_settings: Settings) -> SessionManager:
    return SessionManager(llm=fake_llm, loader=local_loader, settings=test_settings)


@pytest.fixture
def saving_manager(
    local_loader: ArenaConfigLoader, fake_llm: FakeLLMClient, test_settings: Settings
) -> SessionManager:
    settings = test_settings.model_copy(update={"save_transcripts": True})
    return SessionManager(llm=fake_llm, loader=local_loader, settings=settings)


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_create_starts_session(self, manager: SessionManager) -> None:
        session, messages = await manager.create("test-arena", demo=True)

        assert manager.get(session.id) is session
        assert manager.session_count == 1
        assert messages[-1].text == TECH_QUESTION

    @pytest.mark.asyncio
    async def test_unknown_arena(self, manager: SessionManager) -> None:
        with pytest.raises(ArenaConfigNotFoundError):
            await manager.create("missing")

        assert manager.session_count == 0

    def test_unknown_session(self, manager: SessionManager) -> None:
        with pytest.raises(SessionNotFoundError) as exc_info:
            manager.get("nope")

        assert exc_info.value.session_id == "nope"

    @pytest.mark.asyncio
    async def test_operations_by_id(self, manager: SessionManager) -> None:
        session, _ = await manager.create("nested/demo", demo=True)

        _, added = await manager.handle_message(session.id, LONG_ANSWER)
        assert added[0].text == LONG_ANSWER

        _, added = await manager.finish(session.id)
        assert session.phase == SessionPhase.ENDED
        assert added[0].text.startswith("Ended")

    @pytest.mark.asyncio
    async def test_rescore_unknown_session(self, manager: SessionManager) -> None:
        with pytest.raises(SessionNotFoundError):
            await manager.rescore("nope")


class TestTranscripts:

    @pytest.mark.asyncio
    async def test_nothing_saved_when_disabled(self, manager: SessionManager) -> None:
        session, _ = await manager.create("test-arena", demo=True)
        await manager.finish(session.id)

        assert not manager.transcript_dir.exists()

    @pytest.mark.asyncio
    async def test_saved_once_on_end(self, saving_manager: SessionManager) -> None:
        session, _ = await saving_manager.create("test-arena", demo=True)
        json_path = saving_manager.transcript_dir / f"{session.id}.json"

        await saving_manager.handle_message(session.id, LONG_ANSWER)
        assert not json_path.exists()

        await saving_manager.finish(session.id)

        payload = json.loads(json_path.read_text(encoding="utf-8"))
        assert payload["arenaId"] == "test-arena"
        assert payload["session"]["phase"] == "ended"
        assert len(payload["judgeRuns"]) == 1
        txt = (saving_manager.transcript_dir / f"{session.id}.txt").read_text(encoding="utf-8")
        assert f"[FOUNDER]: {LONG_ANSWER}" in txt

        json_path.unlink()
        await saving_manager.finish(session.id)
        assert not json_path.exists()

    @pytest.mark.asyncio
    async def test_render_transcript(self, manager: SessionManager) -> None:
        session, _ = await manager.create("test-arena", demo=True)

        text = render_transcript(session)

        assert text.startswith("Pitch Arena: Test Arena\nSession: ")
        assert "Final score: -" in text
        assert "[SYSTEM]: Goal: Leave with a sharper pitch." in text
        assert f"[TECH JUDGE]: {TECH_QUESTION}" in text

    def test_transcript_dir_from_settings(self, manager: SessionManager, test_settings: Settings) -> None:
        assert manager.transcript_dir == Path(test_settings.transcript_dir)


class TestRetention:

    @pytest.mark.asyncio
    async def test_oldest_ended_sessions_dropped(
        self, local_loader: ArenaConfigLoader, fake_llm: FakeLLMClient, test_settings: Settings
    ) -> None:
        settings = test_settings.model_copy(update={"max_ended_sessions": 1})
        manager = SessionManager(llm=fake_llm, loader=local_loader, settings=settings)
        first, _ = await manager.create("test-arena", demo=True)
        second, _ = await manager.create("test-arena", demo=True)
        live, _ = await manager.create("test-arena", demo=True)

        await manager.finish(first.id)
        assert manager.get(first.id) is first

        await manager.finish(second.id)

        with pytest.raises(SessionNotFoundError):
            manager.get(first.id)
        assert manager.get(second.id) is second
        assert manager.get(live.id) is live
        assert manager.session_count == 2

    @pytest.mark.asyncio
    async def test_repeated_finish_does_not_evict(
        self, local_loader: ArenaConfigLoader, fake_llm: FakeLLMClient, test_settings: Settings
    ) -> None:
        settings = test_settings.model_copy(update={"max_ended_sessions": 1})
        manager = SessionManager(llm=fake_llm, loader=local_loader, settings=settings)
        session, _ = await manager.create("test-arena", demo=True)

        await manager.finish(session.id)
        await manager.finish(session.id)

        assert manager.get(session.id) is session
