"""Reconciliation: mapping freshly built trees back onto live components.

Applications rebuild their whole tree (and, usually, brand-new component
instances) on every render. The reconciler keeps one long-lived instance per
identity and swaps it into each new tree:

* identity is ``(component type, structural path)``, where the path is the
  dot-separated chain of child indices from the root (``"0.2.1"``);
* a node with an explicit ``key`` uses ``(component type, "#" + key)``
  instead, so it keeps its identity when it moves between positions.

When a cached instance replaces a fresh one, the fresh one is discarded after
its props were offered to the cached instance. Every component node is then
re-rendered from its live instance, so the frame shows current state rather
than the defaults of a throwaway instance or output built on an earlier
frame.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Iterator

from lotus.tui.component import capabilities
from lotus.tui.config import DEFAULT_CACHE_SIZE
from lotus.tui.element import Element, render_component

logger = logging.getLogger(__name__)

CacheKey = tuple[type, str]


@dataclass
class _CacheEntry:
    component: Any
    last_seen: int


class ComponentCache:
    """Bounded LRU map from :data:`CacheKey` to live component instances.

    Entries are refreshed on every hit. When the cache is full the least
    recently seen entry is evicted, which bounds growth for long sessions
    that mount one component per list item.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("cache capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[CacheKey, _CacheEntry] = OrderedDict()
        self._frame = 0

    @property
    def frame(self) -> int:
        return self._frame

    def begin_frame(self) -> None:
        self._frame += 1

    def get(self, key: CacheKey) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.last_seen = self._frame
        self._entries.move_to_end(key)
        return entry.component

    def put(self, key: CacheKey, component: Any) -> None:
        self._entries[key] = _CacheEntry(component, self._frame)
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("evicted %s@%s from component cache", evicted[0].__name__, evicted[1])

    def prune(self, max_idle_frames: int) -> int:
        """Drop entries not seen during the last *max_idle_frames* frames.

        Returns the number of entries removed.
        """
        cutoff = self._frame - max_idle_frames
        stale = [key for key, entry in self._entries.items() if entry.last_seen < cutoff]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("pruned %d idle component(s)", len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> Iterator[CacheKey]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class Reconciler:
    """Restores live component identity in freshly rendered trees."""

    def __init__(self, cache: ComponentCache | None = None) -> None:
        self.cache = cache if cache is not None else ComponentCache()

    def reconcile(self, root: Element, path: str = "0") -> Element:
        """Rewrite *root* in place so every component node points at its
        long-lived instance. Returns *root* for chaining."""
        self.cache.begin_frame()
        self._visit(root, path, set())
        return root

    def reconcile_subtree(self, node: Element, path: str) -> Element:
        """Reconcile a subtree spliced into an already reconciled frame."""
        self._visit(node, path, set())
        return node

    def _key_for(self, node: Element, path: str, seen: set[CacheKey]) -> CacheKey:
        component_type = type(node.component)
        if node.key:
            keyed = (component_type, "#" + node.key)
            if keyed not in seen:
                return keyed
            logger.warning(
                "duplicate key %r for %s at %s; falling back to its position",
                node.key,
                component_type.__name__,
                path,
            )
        return (component_type, path)

    def _visit(self, node: Element, path: str, seen: set[CacheKey]) -> None:
        if node.is_component:
            key = self._key_for(node, path, seen)
            seen.add(key)
            cached = self.cache.get(key)
            fresh = node.component
            if cached is None:
                self.cache.put(key, fresh)
                cached = fresh
            elif cached is not fresh and capabilities(cached).props_updater:
                try:
                    cached.update_props(fresh)
                except Exception:
                    logger.exception("update_props failed for %s", type(cached).__name__)
            # The output carried in by the tree may predate changes to the
            # instance (static trees share their components across frames).
            node.component = cached
            node.children = [render_component(cached)]

        for i, child in enumerate(node.children):
            self._visit(child, f"{path}.{i}", seen)
