"""Selection state machine driving emphasis, the sidebar, and the address bar."""
from __future__ import annotations

import html
import logging
from typing import List, Optional, Set

from kasmo.config import EmphasisConfig
from kasmo.graph.labels import definition_from_links, tag_tokens
from kasmo.graph.model import Graph, Node
from kasmo.ui.history import AddressBar, encode_fragment
from kasmo.ui.panel import PLACEHOLDER, SidebarPanel
from kasmo.ui.scene import RenderingLayer
from kasmo.ui.state import ExplorerState
from kasmo.ui.viewport import ViewportController

LOGGER = logging.getLogger(__name__)

CENTRAL_TAG = "central"
MUTED_CLASS = "text-muted"
EMPTY_RELATED = f'<span class="muted">{PLACEHOLDER}</span>'


def find_central_node(graph: Graph) -> Optional[Node]:
    """Return the default focus node.

    Nodes tagged ``central`` win, the most connected of them first; without
    any tagged node the highest-degree node overall is used. Ties keep
    dataset order.
    """

    if not graph.nodes:
        return None
    tagged = [node for node in graph.nodes if CENTRAL_TAG in tag_tokens(node.tags)]
    candidates = tagged or graph.nodes
    return max(candidates, key=lambda node: node.degree or 0)


class SelectionController:
    """Idle/Selected state machine over ``ExplorerState.current_id``."""

    def __init__(
        self,
        state: ExplorerState,
        scene: RenderingLayer,
        panel: SidebarPanel,
        address: AddressBar,
        viewport: ViewportController,
        config: EmphasisConfig,
    ) -> None:
        self._state = state
        self._scene = scene
        self._panel = panel
        self._address = address
        self._viewport = viewport
        self._config = config

    @property
    def current_id(self) -> Optional[str]:
        return self._state.current_id

    def related_nodes(self, node: Node) -> List[Node]:
        """Up to ``related_limit`` neighbours of ``node`` in dataset order."""

        neighbours = self._state.graph.neighbors(node.id)
        related = [other for other in self._state.graph.nodes if other.id != node.id and other.id in neighbours]
        return related[: self._config.related_limit]

    def select_node(self, node: Node) -> None:
        """Enter Selected(node.id), rewriting sidebar, emphasis, and address."""

        state = self._state
        definition = definition_from_links(node.id, state.graph.edges, state.language) or PLACEHOLDER
        self._panel.selected_label.set_text(state.label(node))
        self._panel.definition.remove_class(MUTED_CLASS)
        self._panel.definition.set_html(html.escape(definition))

        related = self.related_nodes(node)
        if related:
            items = "".join(f"<li>{html.escape(state.label(other))}</li>" for other in related)
            self._panel.related.set_html(f'<ul class="related-list">{items}</ul>')
        else:
            self._panel.related.set_html(EMPTY_RELATED)
        self._panel.tags.add_class("small", MUTED_CLASS)
        self._panel.tags.set_text(node.tags.strip() or PLACEHOLDER)

        state.current_id = node.id
        self.apply_emphasis(node)
        self._address.replace_state(encode_fragment(node.id))
        LOGGER.debug("Selected node %s", node.id)

    def select_id(self, node_id: Optional[str]) -> bool:
        node = self._state.graph.get(node_id)
        if node is None:
            return False
        self.select_node(node)
        return True

    def apply_emphasis(self, node: Node) -> None:
        """Highlight ``node`` and its neighbours; dim everything else.

        Labels stay visible for the selected node, its top neighbours by degree,
        and any node at or above the permanent-label threshold.
        """

        graph = self._state.graph
        palette = self._scene.config.palette
        config = self._config
        neighbours: Set[str] = graph.neighbors(node.id)

        for other, circle in zip(graph.nodes, self._scene.circles):
            inside = other.id in neighbours
            circle.fill = palette.node_fill if inside else palette.muted_fill
            circle.stroke = palette.node_stroke if inside else palette.muted_stroke
            circle.stroke_width = config.selected_stroke_width if other.id == node.id else config.neighbor_stroke_width
            circle.opacity = 1.0 if inside else config.dimmed_node_opacity

        edge_width = self._state.scales.edge_width
        for edge, path in zip(graph.edges, self._scene.paths):
            width = edge_width(edge.weight)
            if edge.touches(node.id):
                path.stroke = palette.link_highlight
                path.stroke_opacity = config.highlight_edge_opacity
                path.stroke_width = max(config.highlight_edge_min_width, width + config.highlight_edge_extra_width)
            else:
                path.stroke = palette.link_stroke
                path.stroke_opacity = config.dimmed_edge_opacity
                path.stroke_width = width

        ranked = sorted(
            (other for other in graph.nodes if other.id in neighbours),
            key=lambda other: other.degree or 0,
            reverse=True,
        )
        labelled = {other.id for other in ranked[: config.visible_neighbor_labels]}
        labelled.add(node.id)
        scales = self._state.scales
        for other, halo, label in zip(graph.nodes, self._scene.halos, self._scene.labels):
            shown = other.id in labelled or scales.is_permanently_labelled(other.degree)
            label.opacity = 1.0 if shown else config.dimmed_label_opacity
            halo.opacity = 1.0 if shown else 0.0

    def clear(self) -> None:
        """Soft reset: blank the sidebar, recentre, then select the central node."""

        self._panel.selected_label.set_text("")
        self._panel.definition.add_class(MUTED_CLASS)
        self._panel.definition.set_text("")
        self._panel.related.set_html(EMPTY_RELATED)
        self._panel.tags.add_class("small", MUTED_CLASS)
        self._panel.tags.set_text(PLACEHOLDER)
        self._scene.apply_baseline()
        self._state.current_id = None
        self._address.replace_state("#")

        self._viewport.reset_view()
        central = find_central_node(self._state.graph)
        if central is not None:
            self.select_node(central)


__all__ = ["CENTRAL_TAG", "SelectionController", "find_central_node"]
