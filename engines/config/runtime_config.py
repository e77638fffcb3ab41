"""Runtime configuration helpers for the card engine."""
from __future__ import annotations

import os
from typing import Optional

DEFAULT_RENDER_CACHE_SIZE = 256
DEFAULT_REFERENCE_WIDTH = 800.0


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_render_cache_size() -> int:
    """Max entries kept by the render cache; 0 disables caching."""
    return max(0, _get_int("CARD_RENDER_CACHE_SIZE", DEFAULT_RENDER_CACHE_SIZE))


def get_reference_width() -> float:
    """Authoring canvas width used when a legacy design carries none."""
    width = _get_float("CARD_REFERENCE_WIDTH", DEFAULT_REFERENCE_WIDTH)
    return width if width > 0 else DEFAULT_REFERENCE_WIDTH
