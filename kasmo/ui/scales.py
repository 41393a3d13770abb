"""Continuous scales mapping degree and weight to visual sizes."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from kasmo.config import ScaleConfig
from kasmo.graph.model import Graph


@dataclass(frozen=True)
class LinearScale:
    """Linear interpolation from ``domain`` to ``range``.

    A collapsed domain maps every input to the middle of the range.
    """

    domain: Tuple[float, float]
    range: Tuple[float, float]
    clamp: bool = False

    def _transform(self, value: float) -> float:
        return value

    def __call__(self, value: float) -> float:
        d0 = self._transform(self.domain[0])
        d1 = self._transform(self.domain[1])
        r0, r1 = self.range
        span = d1 - d0
        t = (self._transform(value) - d0) / span if span else 0.5
        if self.clamp:
            t = min(max(t, 0.0), 1.0)
        return r0 + (r1 - r0) * t


@dataclass(frozen=True)
class SqrtScale(LinearScale):
    """Square-root scale, so circle area rather than radius tracks the input."""

    def _transform(self, value: float) -> float:
        return math.copysign(math.sqrt(abs(value)), value)


def _quantile(values: Sequence[float], q: float) -> float:
    if not values:
        return 0.0
    return float(np.quantile(np.asarray(values, dtype=float), q))


@dataclass(frozen=True)
class ScaleSet:
    """Size mappings derived once from the loaded graph."""

    radius: SqrtScale
    edge_width: LinearScale
    label_font_size: LinearScale
    label_threshold: float

    def node_radius(self, degree: float) -> float:
        return self.radius(degree or 1)

    def node_font_size(self, degree: float) -> float:
        return self.label_font_size(degree or 1)

    def is_permanently_labelled(self, degree: float) -> bool:
        return degree >= self.label_threshold


def build_scales(graph: Graph, config: ScaleConfig) -> ScaleSet:
    """Build the radius, edge width, and label size scales for ``graph``.

    The label threshold is the configured quantile of node degree, or the
    fallback when the quantile is zero or the graph is empty.
    """

    max_degree = max((node.degree or 1 for node in graph.nodes), default=1)
    max_weight = max((edge.weight for edge in graph.edges), default=1.0) or 1.0
    threshold = _quantile([node.degree for node in graph.nodes], config.label_quantile)
    return ScaleSet(
        radius=SqrtScale(domain=(1.0, float(max_degree)), range=config.radius_range),
        edge_width=LinearScale(domain=(1.0, float(max_weight)), range=config.edge_width_range),
        label_font_size=LinearScale(
            domain=(1.0, float(max_degree)),
            range=config.label_font_range,
            clamp=True,
        ),
        label_threshold=threshold or config.label_threshold_fallback,
    )


__all__ = ["LinearScale", "ScaleSet", "SqrtScale", "build_scales"]
