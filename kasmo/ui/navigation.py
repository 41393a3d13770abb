"""Default focus discovery and alphabetical previous/next traversal."""
from __future__ import annotations

from typing import List, Optional

from kasmo.graph.labels import collation_key
from kasmo.graph.model import Node
from kasmo.ui.selection import SelectionController, find_central_node
from kasmo.ui.state import ExplorerState


class NavigationController:
    """Steps through nodes ordered by their currently displayed label."""

    def __init__(self, state: ExplorerState, selection: SelectionController) -> None:
        self._state = state
        self._selection = selection

    def find_central_node(self) -> Optional[Node]:
        return find_central_node(self._state.graph)

    def ordered_ids(self) -> List[str]:
        """Node ids sorted by displayed label; rebuilt per call for the active language."""

        ordered = sorted(self._state.graph.nodes, key=lambda node: collation_key(self._state.label(node)))
        return [node.id for node in ordered]

    def select_by_offset(self, step: int) -> Optional[Node]:
        order = self.ordered_ids()
        if not order:
            return None
        current = self._state.current_id
        index = order.index(current) if current in self._state.graph else 0
        target_id = order[(index + step) % len(order)]
        node = self._state.graph.get(target_id)
        if node is not None:
            self._selection.select_node(node)
        return node

    def next(self) -> Optional[Node]:
        return self.select_by_offset(1)

    def previous(self) -> Optional[Node]:
        return self.select_by_offset(-1)


__all__ = ["NavigationController"]
