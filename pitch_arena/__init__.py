"""Pitch Arena - multi-judge AI pitch practice service."""

__version__ = "0.1.0"
