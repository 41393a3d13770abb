"""Single owned application state shared by the explorer controllers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from kasmo.graph.labels import DisplayLanguage, resolve_label
from kasmo.graph.model import Graph, Node
from kasmo.ui.scales import ScaleSet


@dataclass
class ExplorerState:
    """Mutable view state; only the controllers write to it.

    ``current_id`` is owned by the selection controller and ``language`` by
    the language toggle.
    """

    graph: Graph
    scales: ScaleSet
    language: DisplayLanguage = DisplayLanguage.SOMALI
    current_id: Optional[str] = None

    @property
    def current(self) -> Optional[Node]:
        return self.graph.get(self.current_id)

    def label(self, node: Node) -> str:
        return resolve_label(node, self.language)


__all__ = ["ExplorerState"]
