"""LLM access through the llm-gateway."""

from pitch_arena.llm.client import LLMClient, TextPrompt


__all__ = ["LLMClient", "TextPrompt"]
