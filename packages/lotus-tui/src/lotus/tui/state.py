"""Component state persistence across process restarts.

The whole mounted tree is flattened to ``{"version": "1.0", "components":
{id: state}}``. Only components that implement ``get_id``/``save_state``/
``load_state`` and report a non-empty ID take part.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from lotus.tui.component import capabilities, component_id
from lotus.tui.element import Element
from lotus.tui.errors import StateError

logger = logging.getLogger(__name__)

STATE_VERSION = "1.0"


def collect_stateful(tree: Element) -> list[Any]:
    """Stateful components of *tree*, in pre-order."""
    found: list[Any] = []
    for _, node in tree.walk():
        if node.is_component and capabilities(node.component).stateful:
            found.append(node.component)
    return found


def snapshot(tree: Element) -> dict[str, Any]:
    components: dict[str, Any] = {}
    for component in collect_stateful(tree):
        cid = component_id(component)
        if not cid:
            logger.debug("skipping %s without an id", type(component).__name__)
            continue
        if cid in components:
            logger.warning("duplicate component id %r; keeping the first", cid)
            continue
        components[cid] = component.save_state()
    return {"version": STATE_VERSION, "components": components}


def save_app_state(tree: Element, path: str) -> int:
    """Write the state of every identified component to *path*.

    Returns the number of components saved.
    """
    data = snapshot(tree)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    logger.info("saved state of %d component(s) to %s", len(data["components"]), path)
    return len(data["components"])


def restore(tree: Element, data: dict[str, Any]) -> int:
    """Apply a decoded snapshot to *tree*; returns the components restored."""
    states = data.get("components")
    if not isinstance(states, dict):
        return 0
    restored = 0
    for component in collect_stateful(tree):
        cid = component_id(component)
        state = states.get(cid) if cid else None
        if not isinstance(state, dict):
            continue
        try:
            component.load_state(state)
        except Exception:
            logger.exception("load_state failed for %s (%s)", type(component).__name__, cid)
            continue
        restored += 1
    return restored


def load_app_state(tree: Element, path: str) -> int:
    """Restore component state saved by :func:`save_app_state`.

    A missing file is not an error (returns 0). An unreadable or malformed
    file raises :class:`StateError`.
    """
    if not os.path.exists(path):
        return 0
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise StateError(f"cannot read state file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise StateError(f"state file {path} does not hold an object")
    version = data.get("version")
    if version != STATE_VERSION:
        logger.warning("state file %s has version %r, expected %s", path, version, STATE_VERSION)
    restored = restore(tree, data)
    logger.info("restored state of %d component(s) from %s", restored, path)
    return restored
