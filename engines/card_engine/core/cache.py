"""Optional memoization of render results.

Keys use the template's id and version, so any committed edit (which
always bumps the version) misses the cache. Draft templates keep their
base version while edited and must be rendered uncached.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Hashable, Mapping, Optional, Tuple, Union

from engines.card_engine.core.defaults import template_or_default
from engines.card_engine.core.renderer import check_surface, render
from engines.card_engine.core.types import RenderSurface, ResolvedCardView, SceneGraph, Template
from engines.config import runtime_config

logger = logging.getLogger(__name__)


def cache_key(template: Template, view: ResolvedCardView, surface: RenderSurface) -> Tuple[Hashable, ...]:
    return (template.id, template.version, view, surface.width, surface.height, surface.pixelRatio)


class RenderCache:
    """Thread-safe LRU of SceneGraphs."""

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self.max_entries = runtime_config.get_render_cache_size() if max_entries is None else max_entries
        self._entries: "OrderedDict[Tuple[Hashable, ...], SceneGraph]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def render(
        self,
        template: Optional[Union[Template, Mapping[str, Any]]],
        view: ResolvedCardView,
        surface: Union[RenderSurface, Mapping[str, Any]],
    ) -> SceneGraph:
        surface = check_surface(surface)
        template = template_or_default(template)
        if self.max_entries <= 0:
            return render(template, view, surface)

        key = cache_key(template, view, surface)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return cached
            self.misses += 1

        # Rendering is pure, so two threads racing on one key produce equal graphs.
        scene = render(template, view, surface)
        with self._lock:
            self._entries[key] = scene
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return scene

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
        logger.debug("Render cache cleared")


_default_cache: Optional[RenderCache] = None


def get_render_cache() -> RenderCache:
    global _default_cache
    if _default_cache is None:
        _default_cache = RenderCache()
    return _default_cache


def set_render_cache(cache: RenderCache) -> None:
    global _default_cache
    _default_cache = cache
