"""Force-directed layout simulation computing node positions."""
from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from kasmo.config import ForceConfig
from kasmo.graph.model import Graph, Node

LOGGER = logging.getLogger(__name__)

TickObserver = Callable[["ForceLayoutEngine"], None]

_INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))
_JIGGLE = 1e-6


@dataclass
class DragHandle:
    """Pointer gesture holding the pin on a single node."""

    engine: "ForceLayoutEngine"
    node: Node

    def move(self, x: float, y: float) -> None:
        self.engine.drag_to(self.node.id, x, y)


class ForceLayoutEngine:
    """Stepped simulation with link, many-body, centering, and collision forces.

    Positions live on the :class:`Node` objects and are rewritten every tick.
    Observers registered with :meth:`on_tick` are notified after each step;
    the engine knows nothing about how positions are drawn.
    """

    def __init__(
        self,
        graph: Graph,
        radius: Callable[[Node], float],
        config: ForceConfig,
        *,
        center: Tuple[float, float] = (0.0, 0.0),
        seed: int = 0,
    ) -> None:
        self._graph = graph
        self._config = config
        self._nodes: List[Node] = list(graph.nodes)
        self._links = np.asarray(graph.edge_index_pairs(), dtype=int).reshape(-1, 2)
        self._radii = np.asarray([radius(node) + config.collide_margin for node in self._nodes], dtype=float)
        self._rng = np.random.default_rng(seed)
        self._observers: List[TickObserver] = []
        self._dragging: Optional[str] = None
        self.center: Tuple[float, float] = center
        self.alpha = 1.0
        self.alpha_target = 0.0
        self.running = True
        self.ticks = 0

        count = len(self._nodes)
        degrees = np.bincount(self._links.ravel(), minlength=count) if count else np.zeros(0)
        if len(self._links):
            sources, targets = self._links[:, 0], self._links[:, 1]
            self._bias = degrees[sources] / (degrees[sources] + degrees[targets])
        else:
            self._bias = np.zeros(0)
        self._place_initial()

    # -- lifecycle -------------------------------------------------------

    def _place_initial(self) -> None:
        for index, node in enumerate(self._nodes):
            radius = self._config.initial_radius * math.sqrt(0.5 + index)
            angle = index * _INITIAL_ANGLE
            node.x = radius * math.cos(angle)
            node.y = radius * math.sin(angle)
            node.vx = 0.0
            node.vy = 0.0

    def on_tick(self, observer: TickObserver) -> None:
        self._observers.append(observer)

    def restart(self) -> None:
        self.running = True

    def reheat(self, alpha: float) -> None:
        """Set ``alpha`` and resume stepping."""

        self.alpha = alpha
        self.restart()

    def set_center(self, x: float, y: float) -> None:
        self.center = (x, y)

    # -- stepping --------------------------------------------------------

    def step(self) -> bool:
        """Advance one frame if the simulation is active.

        Returns:
            bool: ``True`` when a tick was performed.
        """

        if not self.running:
            return False
        self.tick()
        for observer in list(self._observers):
            observer(self)
        if self.alpha < self._config.alpha_min:
            self.running = False
            LOGGER.debug("Layout came to rest after %d ticks", self.ticks)
        return True

    def settle(self, max_ticks: int = 300) -> int:
        """Step until the simulation rests or ``max_ticks`` is reached."""

        performed = 0
        while performed < max_ticks and self.step():
            performed += 1
        return performed

    def tick(self) -> None:
        """Apply one relaxation step to every node position."""

        self.alpha += (self.alpha_target - self.alpha) * self._config.alpha_decay
        self.ticks += 1
        if not self._nodes:
            return
        x = np.array([node.x for node in self._nodes], dtype=float)
        y = np.array([node.y for node in self._nodes], dtype=float)
        vx = np.array([node.vx for node in self._nodes], dtype=float)
        vy = np.array([node.vy for node in self._nodes], dtype=float)

        self._apply_links(x, y, vx, vy)
        self._apply_charge(x, y, vx, vy)
        self._apply_center(x, y)
        self._apply_collision(x, y, vx, vy)

        keep = 1.0 - self._config.velocity_decay
        for index, node in enumerate(self._nodes):
            if node.fx is None:
                node.vx = float(vx[index] * keep)
                node.x = float(x[index] + node.vx)
            else:
                node.x = node.fx
                node.vx = 0.0
            if node.fy is None:
                node.vy = float(vy[index] * keep)
                node.y = float(y[index] + node.vy)
            else:
                node.y = node.fy
                node.vy = 0.0

    def _jiggle(self, values: np.ndarray) -> np.ndarray:
        zero = values == 0
        if np.any(zero):
            values = values.copy()
            values[zero] = (self._rng.random(int(zero.sum())) - 0.5) * _JIGGLE
        return values

    def _apply_links(self, x: np.ndarray, y: np.ndarray, vx: np.ndarray, vy: np.ndarray) -> None:
        if not len(self._links):
            return
        sources, targets = self._links[:, 0], self._links[:, 1]
        dx = self._jiggle(x[targets] + vx[targets] - x[sources] - vx[sources])
        dy = self._jiggle(y[targets] + vy[targets] - y[sources] - vy[sources])
        length = np.hypot(dx, dy)
        factor = (length - self._config.link_distance) / length * self.alpha * self._config.link_strength
        dx *= factor
        dy *= factor
        np.add.at(vx, targets, -dx * self._bias)
        np.add.at(vy, targets, -dy * self._bias)
        np.add.at(vx, sources, dx * (1.0 - self._bias))
        np.add.at(vy, sources, dy * (1.0 - self._bias))

    def _apply_charge(self, x: np.ndarray, y: np.ndarray, vx: np.ndarray, vy: np.ndarray) -> None:
        count = len(x)
        if count < 2:
            return
        dx = x[None, :] - x[:, None]
        dy = y[None, :] - y[:, None]
        off_diagonal = ~np.eye(count, dtype=bool)
        coincident = (dx == 0) & off_diagonal
        if np.any(coincident):
            dx[coincident] = self._jiggle(np.zeros(int(coincident.sum())))
        distance2 = dx * dx + dy * dy
        near = distance2 < 1.0
        distance2[near] = np.sqrt(distance2[near])
        distance2[~off_diagonal] = 1.0
        weight = np.where(off_diagonal, self._config.charge_strength * self.alpha / distance2, 0.0)
        vx += (dx * weight).sum(axis=1)
        vy += (dy * weight).sum(axis=1)

    def _apply_center(self, x: np.ndarray, y: np.ndarray) -> None:
        cx, cy = self.center
        x -= x.mean() - cx
        y -= y.mean() - cy

    def _apply_collision(self, x: np.ndarray, y: np.ndarray, vx: np.ndarray, vy: np.ndarray) -> None:
        count = len(x)
        if count < 2:
            return
        px = x + vx
        py = y + vy
        dx = px[:, None] - px[None, :]
        dy = py[:, None] - py[None, :]
        reach = self._radii[:, None] + self._radii[None, :]
        upper = np.triu(np.ones((count, count), dtype=bool), k=1)
        distance2 = dx * dx + dy * dy
        overlapping = upper & (distance2 < reach * reach)
        if not np.any(overlapping):
            return
        dx = np.where(overlapping, self._jiggle(np.where(overlapping, dx, 1.0)), 0.0)
        dy = np.where(overlapping, dy, 0.0)
        distance = np.sqrt(np.where(overlapping, dx * dx + dy * dy, 1.0))
        factor = np.where(overlapping, (reach - distance) / distance, 0.0)
        dx *= factor
        dy *= factor
        ri2 = (self._radii * self._radii)[:, None]
        rj2 = (self._radii * self._radii)[None, :]
        share = rj2 / (ri2 + rj2)
        vx += (dx * share).sum(axis=1)
        vy += (dy * share).sum(axis=1)
        vx -= (dx * (1.0 - share)).sum(axis=0)
        vy -= (dy * (1.0 - share)).sum(axis=0)

    # -- drag ------------------------------------------------------------

    def _node(self, node_id: str) -> Node:
        node = self._graph.get(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    def begin_drag(self, node_id: str) -> Node:
        """Pin ``node_id`` at its current position and hold the simulation warm."""

        if self._dragging is not None and self._dragging != node_id:
            self.end_drag(self._dragging)
        node = self._node(node_id)
        self.alpha_target = self._config.drag_alpha_target
        self.restart()
        node.fx = node.x
        node.fy = node.y
        self._dragging = node_id
        return node

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        node = self._node(node_id)
        if self._dragging != node_id:
            return
        node.fx = x
        node.fy = y

    def end_drag(self, node_id: str) -> None:
        """Release the pin and let the simulation cool again."""

        node = self._node(node_id)
        self.alpha_target = 0.0
        node.fx = None
        node.fy = None
        if self._dragging == node_id:
            self._dragging = None

    @contextmanager
    def drag(self, node_id: str) -> Iterator[DragHandle]:
        """Context manager for a drag gesture; the pin is released on any exit."""

        node = self.begin_drag(node_id)
        try:
            yield DragHandle(engine=self, node=node)
        finally:
            self.end_drag(node_id)


__all__ = ["DragHandle", "ForceLayoutEngine", "TickObserver"]
