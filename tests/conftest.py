"""Test configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from pitch_arena.arena.loader import ArenaConfigLoader
from pitch_arena.arena.models import ArenaConfig
from pitch_arena.core.config import Settings
from tests.fakes.arena_data import COACH_REPLY, SUMMARY_REPLY, build_arena_data, panel_reply
from tests.fakes.fake_llm import FakeLLMClient


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with safe defaults."""
    return Settings(
        llm_gateway_url="http://llm.test",
        llm_model="test-model",
        arena_assets_url="http://assets.test",
        arena_assets_dir=None,
        default_max_rounds=3,
        judges_per_round=0,
        auto_rescore=True,
        save_transcripts=False,
        transcript_dir=str(tmp_path / "sessions"),
        log_level="DEBUG",
    )


# ============================================================================
# Arena Fixtures
# ============================================================================

@pytest.fixture
def arena_data() -> dict[str, Any]:
    return build_arena_data()


@pytest.fixture
def arena_config(arena_data: dict[str, Any]) -> ArenaConfig:
    return ArenaConfig.model_validate(arena_data)


@pytest.fixture
def arenas_dir(tmp_path: Path, arena_data: dict[str, Any]) -> Path:
    """Local assets directory with ``test-arena``, ``nested/demo`` and ``broken``."""
    root = tmp_path / "arenas"
    (root / "nested").mkdir(parents=True)
    (root / "test-arena.json").write_text(json.dumps(arena_data), encoding="utf-8")
    (root / "nested" / "demo.json").write_text(json.dumps(arena_data), encoding="utf-8")
    (root / "broken.json").write_text("{not json", encoding="utf-8")
    return root


# ============================================================================
# LLM Fixtures
# ============================================================================

@pytest.fixture
def fake_llm() -> FakeLLMClient:
    """Fake LLM with a well-formed reply for every purpose except host."""
    return FakeLLMClient(
        replies={
            "panel": panel_reply(),
            "resolution": "resolved",
            "summary": SUMMARY_REPLY,
            "coach": COACH_REPLY,
        }
    )


@pytest.fixture
def local_loader(test_settings: Settings, arenas_dir: Path) -> ArenaConfigLoader:
    """Loader reading from ``arenas_dir`` instead of the asset URL."""
    settings = test_settings.model_copy(update={"arena_assets_dir": str(arenas_dir)})
    return ArenaConfigLoader(settings=settings)
