"""Retained visual marks for nodes, curved edges, and halo-backed labels."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from kasmo.config import RenderConfig
from kasmo.graph.model import Edge, Node
from kasmo.ui.state import ExplorerState


def format_number(value: float) -> str:
    """Compact decimal rendering used in path data and attributes."""

    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def curve_control_point(sx: float, sy: float, tx: float, ty: float, curvature: float) -> Tuple[float, float]:
    """Offset the segment midpoint along its unit normal by ``curvature``."""

    dx = tx - sx
    dy = ty - sy
    length = math.hypot(dx, dy) or 1.0
    mx = (sx + tx) / 2.0
    my = (sy + ty) / 2.0
    return mx - (dy / length) * curvature, my + (dx / length) * curvature


def curved_path(sx: float, sy: float, tx: float, ty: float, curvature: float) -> str:
    """Quadratic path data from source to target bending to the left of travel."""

    cx, cy = curve_control_point(sx, sy, tx, ty, curvature)
    return (
        f"M{format_number(sx)},{format_number(sy)} "
        f"Q{format_number(cx)},{format_number(cy)} {format_number(tx)},{format_number(ty)}"
    )


@dataclass
class CircleMark:
    node_id: str
    r: float
    fill: str
    stroke: str
    stroke_width: float
    opacity: float = 1.0
    cx: float = 0.0
    cy: float = 0.0
    tabindex: int = 0


@dataclass
class PathMark:
    source: str
    target: str
    weight: float
    stroke: str
    stroke_opacity: float
    stroke_width: float
    d: str = ""


@dataclass
class TextMark:
    node_id: str
    css_class: str
    font_weight: int
    opacity: float
    text: str = ""
    x: float = 0.0
    y: float = 0.0
    font_size: float = 0.0


class RenderingLayer:
    """One circle, one curved path per edge, and a halo plus label per node.

    :meth:`update` is registered as the layout engine's tick observer and
    re-derives geometry and label text from the current node positions.
    """

    def __init__(self, state: ExplorerState, config: RenderConfig) -> None:
        self._state = state
        self._config = config
        palette = config.palette
        scales = state.scales
        graph = state.graph
        self.width = 0.0
        self.height = 0.0
        self.circles: List[CircleMark] = []
        self.halos: List[TextMark] = []
        self.labels: List[TextMark] = []
        self.paths: List[PathMark] = []
        self._endpoints: List[Tuple[Node, Node]] = []

        for node in graph.nodes:
            visible = scales.is_permanently_labelled(node.degree)
            weight = config.strong_font_weight if visible else config.regular_font_weight
            self.circles.append(
                CircleMark(
                    node_id=node.id,
                    r=scales.node_radius(node.degree),
                    fill=palette.node_fill,
                    stroke=palette.node_stroke,
                    stroke_width=config.node_stroke_width,
                )
            )
            self.halos.append(TextMark(node_id=node.id, css_class="halo", font_weight=weight, opacity=0.0))
            self.labels.append(TextMark(node_id=node.id, css_class="label", font_weight=weight, opacity=0.0))
        for edge in graph.edges:
            source = graph.nodes[graph.index_of(edge.source)]
            target = graph.nodes[graph.index_of(edge.target)]
            self._endpoints.append((source, target))
            self.paths.append(
                PathMark(
                    source=edge.source,
                    target=edge.target,
                    weight=edge.weight,
                    stroke=palette.link_stroke,
                    stroke_opacity=config.edge_opacity,
                    stroke_width=scales.edge_width(edge.weight),
                )
            )
        self.apply_baseline()
        self.relabel()

    @property
    def config(self) -> RenderConfig:
        return self._config

    @property
    def edges(self) -> List[Edge]:
        return self._state.graph.edges

    def circle(self, node_id: str) -> CircleMark:
        return self.circles[self._state.graph.index_of(node_id)]

    def label(self, node_id: str) -> TextMark:
        return self.labels[self._state.graph.index_of(node_id)]

    def halo(self, node_id: str) -> TextMark:
        return self.halos[self._state.graph.index_of(node_id)]

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def update(self, _engine: Optional[object] = None) -> None:
        """Re-read node positions into every mark."""

        scales = self._state.scales
        offset = self._config.label_offset
        for node, circle, halo, label in zip(self._state.graph.nodes, self.circles, self.halos, self.labels):
            circle.cx = node.x
            circle.cy = node.y
            baseline = node.y + scales.node_radius(node.degree) + offset
            size = scales.node_font_size(node.degree)
            text = self._state.label(node)
            for mark in (halo, label):
                mark.x = node.x
                mark.y = baseline
                mark.font_size = size
                mark.text = text
        for (source, target), path in zip(self._endpoints, self.paths):
            path.d = curved_path(source.x, source.y, target.x, target.y, self._config.curvature)

    def relabel(self) -> None:
        """Rewrite label text for the active language without touching geometry."""

        for node, halo, label in zip(self._state.graph.nodes, self.halos, self.labels):
            text = self._state.label(node)
            halo.text = text
            label.text = text

    def baseline_label_opacity(self, node: Node) -> float:
        return 1.0 if self._state.scales.is_permanently_labelled(node.degree) else 0.0

    def apply_baseline(self) -> None:
        """Undo emphasis and search dimming."""

        palette = self._config.palette
        for node, circle, halo, label in zip(self._state.graph.nodes, self.circles, self.halos, self.labels):
            circle.fill = palette.node_fill
            circle.stroke = palette.node_stroke
            circle.stroke_width = self._config.node_stroke_width
            circle.opacity = 1.0
            opacity = self.baseline_label_opacity(node)
            label.opacity = opacity
            halo.opacity = opacity
        for path in self.paths:
            path.stroke = palette.link_stroke
            path.stroke_opacity = self._config.edge_opacity
            path.stroke_width = self._state.scales.edge_width(path.weight)


__all__ = [
    "CircleMark",
    "PathMark",
    "RenderingLayer",
    "TextMark",
    "curve_control_point",
    "curved_path",
    "format_number",
]
