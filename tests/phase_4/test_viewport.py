"""Tests for drawing-area sizing, zoom, and pan."""
from __future__ import annotations

import pytest

from kasmo.config import AppConfig, DatasetConfig
from kasmo.graph.model import build_graph
from kasmo.ui.history import MemoryAddressBar
from kasmo.ui.panel import MemorySurface, SidebarPanel
from kasmo.ui.service import ExplorerApp
from kasmo.ui.viewport import IDENTITY, ZoomBehavior, ZoomTransform

PAYLOAD = {
    "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
    "links": [{"source_id": "a", "target_id": "b"}, {"source_id": "b", "target_id": "c"}],
}


def _start(sidebar: float = 300.0) -> ExplorerApp:
    config = AppConfig(dataset=DatasetConfig(location="unused.json"))
    app = ExplorerApp(config, SidebarPanel.in_memory(), MemorySurface(sidebar=sidebar), MemoryAddressBar())
    app.start(1280, 800, graph=build_graph(PAYLOAD))
    return app


def test_start_sizes_drawing_area_next_to_sidebar() -> None:
    app = _start()
    viewport = app.components.viewport

    assert (viewport.width, viewport.height) == (980.0, 800.0)
    assert (app.scene.width, app.scene.height) == (980.0, 800.0)
    assert app.components.engine.center == (490.0, 400.0)


def test_measure_floors_at_minimum_size() -> None:
    viewport = _start().components.viewport
    assert viewport.measure(500, 200) == (320.0, 320.0)
    assert viewport.measure(2000, 900) == (1700.0, 900.0)


def test_resize_recentres_and_reheats() -> None:
    app = _start()
    engine = app.components.engine
    engine.settle(1000)

    assert app.on_resize(1280, 800) is False
    assert engine.running is False

    assert app.on_resize(1000, 700) is True
    assert app.scene.width == 700.0
    assert engine.center == (350.0, 350.0)
    assert engine.running is True
    assert engine.alpha == 0.15


def test_wheel_zoom_is_clamped_to_extent() -> None:
    app = _start()
    zoom = app.components.viewport.zoom

    app.on_wheel(100.0, (0.0, 0.0))
    assert zoom.transform.k == 6.0
    app.on_wheel(0.0001, (0.0, 0.0))
    assert zoom.transform.k == 0.3


def test_zoom_keeps_anchor_point_fixed() -> None:
    zoom = ZoomBehavior((0.3, 6.0))
    transform = zoom.zoom_by(2.0, (100.0, 50.0))

    assert transform.k == 2.0
    assert transform.apply(100.0, 50.0) == pytest.approx((100.0, 50.0))
    assert transform.invert(*transform.apply(7.0, 9.0)) == pytest.approx((7.0, 9.0))


def test_pan_translates() -> None:
    app = _start()
    app.on_pan(15.0, -5.0)
    assert app.components.viewport.zoom.transform == ZoomTransform(k=1.0, x=15.0, y=-5.0)
    assert app.components.viewport.zoom.transform.to_svg() == "translate(15,-5) scale(1)"


def test_reset_animates_back_to_identity() -> None:
    zoom = ZoomBehavior((0.3, 6.0))
    zoom.zoom_by(2.0, (0.0, 0.0))
    zoom.reset(500.0)

    assert zoom.advance(1000.0) is True
    assert zoom.transform.k == pytest.approx(2.0)
    assert zoom.advance(1250.0) is True
    assert zoom.transform.k == pytest.approx(1.5)
    assert zoom.advance(1500.0) is True
    assert zoom.transform == IDENTITY
    assert zoom.animating is False
    assert zoom.advance(1600.0) is False


def test_user_input_cancels_reset_transition() -> None:
    zoom = ZoomBehavior((0.3, 6.0))
    zoom.zoom_by(2.0, (0.0, 0.0))
    zoom.reset(500.0)

    zoom.pan_by(1.0, 1.0)

    assert zoom.animating is False
    assert zoom.transform == ZoomTransform(k=2.0, x=1.0, y=1.0)


def test_zero_duration_reset_is_immediate() -> None:
    zoom = ZoomBehavior((0.3, 6.0))
    zoom.zoom_by(3.0, (10.0, 10.0))
    zoom.reset(0.0)
    assert zoom.transform == IDENTITY
    assert zoom.animating is False
