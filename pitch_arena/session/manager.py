"""
Session Manager - Holds live sessions and persists finished ones.

Sessions are kept in memory by id. When ``save_transcripts`` is enabled a
finished session is written once to ``{transcript_dir}/{id}.json`` (the full
report export plus state) and ``{id}.txt`` (readable transcript).
"""

from __future__ import annotations

import json
from collections import OrderedDict
from pathlib import Path
from typing import Any

from pitch_arena.arena.loader import ArenaConfigLoader
from pitch_arena.core.config import Settings, get_settings
from pitch_arena.core.exceptions import SessionNotFoundError
from pitch_arena.core.logging import bind_session_context, get_logger
from pitch_arena.llm.client import TextPrompt
from pitch_arena.session.models import ChatMessage, MessageRole
from pitch_arena.session.state_machine import ArenaSession
from pitch_arena.session.transcript import export_report


logger = get_logger(__name__)


def render_transcript(session: ArenaSession) -> str:
    """Human-readable transcript, one ``[TITLE]: text`` block per message."""
    lines = [
        f"Pitch Arena: {session.config.name}",
        f"Session: {session.id}",
        f"Final score: {session.final_score if session.final_score is not None else '-'}",
        "=" * 60,
        "",
    ]
    for message in session.messages:
        speaker = "SYSTEM" if message.role == MessageRole.SYSTEM else message.title.upper()
        lines.append(f"[{speaker}]: {message.text}")
        lines.append("")
    return "\n".join(lines)


class SessionManager:
    """Creates, looks up and persists arena sessions."""

    def __init__(
        self,
        llm: TextPrompt,
        loader: ArenaConfigLoader,
        settings: Settings | None = None,
    ) -> None:
        self._llm = llm
        self._loader = loader
        self._settings = settings or get_settings()
        self._sessions: dict[str, ArenaSession] = {}
        self._ended: OrderedDict[str, None] = OrderedDict()
        self.transcript_dir = Path(self._settings.transcript_dir)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    async def create(
        self,
        arena_path: str,
        demo: bool = False,
        profile: dict[str, Any] | None = None,
    ) -> tuple[ArenaSession, list[ChatMessage]]:
        """Load the arena, create a session and start it.

        Raises:
            ArenaConfigNotFoundError: Unknown arena path.
            ArenaConfigInvalidError: Arena asset cannot be used.
        """
        config = await self._loader.load(arena_path)
        session = ArenaSession(config, self._llm, settings=self._settings)
        self._sessions[session.id] = session
        bind_session_context(session.id, config.id)
        logger.info("Session created", session_id=session.id, arena=arena_path, demo=demo)

        messages = await session.start(demo=demo, profile=profile)
        self._after_operation(session)
        return session, messages

    def get(self, session_id: str) -> ArenaSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        bind_session_context(session.id, session.config.id)
        return session

    async def handle_message(self, session_id: str, text: str) -> tuple[ArenaSession, list[ChatMessage]]:
        session = self.get(session_id)
        messages = await session.handle_message(text)
        self._after_operation(session)
        return session, messages

    async def rescore(self, session_id: str) -> tuple[ArenaSession, list[ChatMessage]]:
        session = self.get(session_id)
        messages = await session.rescore()
        self._after_operation(session)
        return session, messages

    async def finish(self, session_id: str) -> tuple[ArenaSession, list[ChatMessage]]:
        session = self.get(session_id)
        messages = await session.finish()
        self._after_operation(session)
        return session, messages

    def _after_operation(self, session: ArenaSession) -> None:
        """Persist a newly ended session once and drop the oldest ended ones."""
        if not session.is_ended or session.id in self._ended:
            return
        if self._settings.save_transcripts:
            self.save_transcript(session)
        self._ended[session.id] = None

        while len(self._ended) > self._settings.max_ended_sessions:
            evicted, _ = self._ended.popitem(last=False)
            self._sessions.pop(evicted, None)
            logger.info("Session evicted", session_id=evicted)

    def save_transcript(self, session: ArenaSession) -> Path:
        """Write ``<id>.json`` and ``<id>.txt`` to the transcript directory.

        Returns:
            Path of the JSON file.
        """
        self.transcript_dir.mkdir(parents=True, exist_ok=True)

        json_path = self.transcript_dir / f"{session.id}.json"
        payload = {**export_report(session), "session": session.to_dict()}
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str, ensure_ascii=False)

        txt_path = self.transcript_dir / f"{session.id}.txt"
        with open(txt_path, "w", encoding="utf-8") as f:
            f.write(render_transcript(session))

        logger.info("Saved transcript", session_id=session.id, path=str(json_path))
        return json_path
