"""Drawing-area sizing and zoom/pan state."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from kasmo.config import ViewportConfig
from kasmo.ui.layout import ForceLayoutEngine
from kasmo.ui.panel import DisplaySurface
from kasmo.ui.scene import RenderingLayer, format_number

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoomTransform:
    """Uniform scale ``k`` followed by translation ``(x, y)``."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        return px * self.k + self.x, py * self.k + self.y

    def invert(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def to_svg(self) -> str:
        return f"translate({format_number(self.x)},{format_number(self.y)}) scale({format_number(self.k)})"


IDENTITY = ZoomTransform()


def _ease_cubic_in_out(t: float) -> float:
    t *= 2.0
    if t <= 1.0:
        return t * t * t / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0


@dataclass
class ZoomTransition:
    """Eased interpolation between two transforms, timed by the frame clock."""

    start: ZoomTransform
    end: ZoomTransform
    duration_ms: float
    started_at: Optional[float] = None

    def value_at(self, now_ms: float) -> Tuple[ZoomTransform, bool]:
        if self.started_at is None:
            self.started_at = now_ms
        elapsed = now_ms - self.started_at
        if self.duration_ms <= 0 or elapsed >= self.duration_ms:
            return self.end, True
        t = _ease_cubic_in_out(elapsed / self.duration_ms)
        return (
            ZoomTransform(
                k=self.start.k + (self.end.k - self.start.k) * t,
                x=self.start.x + (self.end.x - self.start.x) * t,
                y=self.start.y + (self.end.y - self.start.y) * t,
            ),
            False,
        )


class ZoomBehavior:
    """Wheel and pan input over a scale extent, with animated reset."""

    def __init__(self, scale_extent: Tuple[float, float]) -> None:
        self.scale_extent = scale_extent
        self.transform = IDENTITY
        self._transition: Optional[ZoomTransition] = None

    @property
    def animating(self) -> bool:
        return self._transition is not None

    def zoom_by(self, factor: float, anchor: Tuple[float, float] = (0.0, 0.0)) -> ZoomTransform:
        """Scale around a screen-space anchor, clamped to the extent."""

        low, high = self.scale_extent
        k = min(max(self.transform.k * factor, low), high)
        px, py = self.transform.invert(*anchor)
        self._transition = None
        self.transform = ZoomTransform(k=k, x=anchor[0] - px * k, y=anchor[1] - py * k)
        return self.transform

    def pan_by(self, dx: float, dy: float) -> ZoomTransform:
        self._transition = None
        self.transform = ZoomTransform(k=self.transform.k, x=self.transform.x + dx, y=self.transform.y + dy)
        return self.transform

    def reset(self, duration_ms: float) -> None:
        if duration_ms <= 0:
            self._transition = None
            self.transform = IDENTITY
            return
        self._transition = ZoomTransition(start=self.transform, end=IDENTITY, duration_ms=duration_ms)

    def advance(self, now_ms: float) -> bool:
        """Progress any running transition; returns ``True`` while one was active."""

        if self._transition is None:
            return False
        self.transform, finished = self._transition.value_at(now_ms)
        if finished:
            self._transition = None
        return True


class ViewportController:
    """Tracks the available drawing area and keeps the layout centred in it."""

    def __init__(
        self,
        config: ViewportConfig,
        scene: RenderingLayer,
        engine: ForceLayoutEngine,
        surface: DisplaySurface,
    ) -> None:
        self._config = config
        self._scene = scene
        self._engine = engine
        self._surface = surface
        self.zoom = ZoomBehavior((config.zoom_min, config.zoom_max))
        self.width = float(config.min_width)
        self.height = float(config.min_height)

    def measure(self, window_width: float, window_height: float) -> Tuple[float, float]:
        """Window size minus the sidebar, floored at the configured minimum."""

        width = max(float(self._config.min_width), window_width - self._surface.sidebar_width())
        height = max(float(self._config.min_height), window_height)
        return width, height

    def initialise(self, window_width: float, window_height: float) -> None:
        self.width, self.height = self.measure(window_width, window_height)
        self._scene.resize(self.width, self.height)
        self._engine.set_center(self.width / 2.0, self.height / 2.0)

    def resize(self, window_width: float, window_height: float) -> bool:
        """Apply an observed size change; returns ``False`` when nothing changed."""

        width, height = self.measure(window_width, window_height)
        if (width, height) == (self.width, self.height):
            return False
        self.width, self.height = width, height
        self._scene.resize(width, height)
        self._engine.set_center(width / 2.0, height / 2.0)
        self._engine.reheat(self._config.reheat_alpha)
        LOGGER.debug("Viewport resized to %sx%s", width, height)
        return True

    def reset_view(self) -> None:
        """Animate zoom/pan back to identity and nudge the layout."""

        self.zoom.reset(self._config.reset_duration_ms)
        self._engine.reheat(self._config.reheat_alpha)

    def advance(self, now_ms: float) -> bool:
        return self.zoom.advance(now_ms)


__all__ = [
    "IDENTITY",
    "ViewportController",
    "ZoomBehavior",
    "ZoomTransform",
    "ZoomTransition",
]
