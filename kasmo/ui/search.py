"""Substring search acting as a visibility filter over the scene."""
from __future__ import annotations

import logging
from typing import List, Optional

from kasmo.config import SearchConfig, ViewportConfig
from kasmo.graph.model import Node
from kasmo.ui.layout import ForceLayoutEngine
from kasmo.ui.scene import RenderingLayer
from kasmo.ui.selection import SelectionController
from kasmo.ui.state import ExplorerState

LOGGER = logging.getLogger(__name__)


def normalise_query(raw: str) -> str:
    return (raw or "").strip().lower()


def matches_query(node: Node, query: str) -> bool:
    """Case-insensitive substring match on both labels and the id."""

    return query in node.term_so.lower() or query in node.term_en.lower() or query in node.id.lower()


class SearchFilter:
    """Dims non-matching nodes without touching selection or the sidebar."""

    def __init__(
        self,
        state: ExplorerState,
        scene: RenderingLayer,
        selection: SelectionController,
        engine: ForceLayoutEngine,
        config: SearchConfig,
        viewport: ViewportConfig,
    ) -> None:
        self._state = state
        self._scene = scene
        self._selection = selection
        self._engine = engine
        self._config = config
        self._reheat_alpha = viewport.reheat_alpha
        self.query = ""

    def hits(self, query: str) -> List[Node]:
        return [node for node in self._state.graph.nodes if matches_query(node, query)]

    def on_input(self, raw: str) -> List[Node]:
        """Apply the filter for the current query text; returns the hit list."""

        query = normalise_query(raw)
        self.query = query
        if not query:
            self._scene.apply_baseline()
            self._engine.reheat(self._reheat_alpha)
            return []
        hits = self.hits(query)
        hit_ids = {node.id for node in hits}
        for node, circle, halo, label in zip(
            self._state.graph.nodes, self._scene.circles, self._scene.halos, self._scene.labels
        ):
            matched = node.id in hit_ids
            circle.opacity = 1.0 if matched else self._config.node_opacity
            label.opacity = 1.0 if matched else self._config.label_opacity
            halo.opacity = 1.0 if matched else 0.0
        for path in self._scene.paths:
            path.stroke_opacity = self._config.edge_opacity
        LOGGER.debug("Search %r matched %d nodes", query, len(hits))
        return hits

    def on_submit(self, raw: str) -> Optional[Node]:
        """Select the first match in dataset order; an empty query does nothing."""

        query = normalise_query(raw)
        if not query:
            return None
        for node in self._state.graph.nodes:
            if matches_query(node, query):
                self._selection.select_node(node)
                return node
        return None


__all__ = ["SearchFilter", "matches_query", "normalise_query"]
