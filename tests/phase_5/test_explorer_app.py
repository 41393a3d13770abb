"""Integration tests for the explorer application wiring."""
from __future__ import annotations

import asyncio

import httpx
import pytest

from kasmo.config import AppConfig, DatasetConfig, ViewportConfig
from kasmo.graph.loader import DatasetLoadError
from kasmo.graph.model import build_graph
from kasmo.ui.history import MemoryAddressBar
from kasmo.ui.panel import MemorySurface, SidebarPanel
from kasmo.ui.service import ExplorerApp, ExplorerNotStartedError

URL = "https://example.test/graph.json"
PAYLOAD = {
    "nodes": [
        {"id": "afka", "term_en": "language", "tags": "Central, core"},
        {"id": "erey", "term_en": "word"},
        {"id": "naxwe", "term_en": "grammar"},
        {"id": "a b", "term_en": "spaced"},
    ],
    "links": [
        {"source_id": "afka", "target_id": "erey", "term_so": "Af", "def_so": "Nidaam lagu wada xiriiro."},
        {"source_id": "afka", "target_id": "naxwe"},
        {"source_id": "erey", "target_id": "a b"},
    ],
}


def _config(**viewport) -> AppConfig:
    return AppConfig(dataset=DatasetConfig(location=URL), viewport=ViewportConfig(**viewport))


def _client(status: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, text="unavailable")
        return httpx.Response(200, json=PAYLOAD)

    return httpx.Client(transport=httpx.MockTransport(handler))


def _app(fragment: str = "", *, status: int = 200, panel: SidebarPanel | None = None) -> ExplorerApp:
    return ExplorerApp(
        _config(),
        panel or SidebarPanel.in_memory(),
        MemorySurface(sidebar=280),
        MemoryAddressBar(hash=fragment),
        client=_client(status),
    )


def test_start_loads_dataset_and_selects_central_node() -> None:
    app = _app()
    state = app.start(1280, 800)

    assert app.started
    assert state is app.state
    assert state.current_id == "afka"
    assert app.panel.selected_label.text == "Af"
    assert app.panel.definition.html == "Nidaam lagu wada xiriiro."
    assert app.address.hash == "#id=afka"


def test_start_restores_selection_from_fragment() -> None:
    app = _app("#id=a%20b")
    app.start(1280, 800)

    assert app.state.current_id == "a b"
    assert app.address.hash == "#id=a%20b"


def test_unknown_fragment_id_falls_back_to_central_node() -> None:
    app = _app("#id=missing")
    app.start(1280, 800)
    assert app.state.current_id == "afka"


def test_load_failure_is_shown_once_and_nothing_starts() -> None:
    app = _app(status=500)

    with pytest.raises(DatasetLoadError):
        app.start(1280, 800)

    assert app.surface.errors == [f"Could not load {URL} — HTTP 500"]
    assert app.started is False
    assert app.address.replacements == []
    with pytest.raises(ExplorerNotStartedError):
        app.on_next()
    with pytest.raises(ExplorerNotStartedError):
        asyncio.run(app.run(frame_interval=0))


def test_panel_events_reach_controllers() -> None:
    app = _app()
    app.start(1280, 800)
    panel = app.panel

    panel.search.emit("input", value="gram")
    assert app.scene.circle("naxwe").opacity == 1.0
    assert app.scene.circle("erey").opacity == 0.15

    panel.search.emit("keydown", key="Escape")
    assert app.state.current_id == "afka"
    panel.search.emit("keydown", key="Enter")
    assert app.state.current_id == "naxwe"

    panel.lang.emit("click")
    assert app.panel.selected_label.text == "grammar"

    panel.next.emit("click")
    assert app.state.current_id == "afka"
    panel.prev.emit("click")
    assert app.state.current_id == "naxwe"

    panel.reset.emit("click")
    assert app.state.current_id == "afka"


def test_panel_without_stepper_buttons_starts() -> None:
    app = _app(panel=SidebarPanel.in_memory(with_stepper=False))
    app.start(1280, 800)
    assert app.state.current_id == "afka"


def test_node_keyboard_activation() -> None:
    app = _app()
    app.start(1280, 800)

    app.on_node_key("erey", " ")
    assert app.state.current_id == "afka"
    app.on_node_key("erey", "Enter")
    assert app.state.current_id == "erey"
    with pytest.raises(KeyError):
        app.on_node_click("missing")


def test_advance_frame_steps_layout_and_updates_scene() -> None:
    app = _app()
    app.start(1280, 800)
    engine = app.components.engine

    assert app.advance_frame(now_ms=0.0) is True
    assert engine.ticks == 1
    node = app.state.graph.get("erey")
    circle = app.scene.circle("erey")
    assert (circle.cx, circle.cy) == (node.x, node.y)

    engine.settle(1000)
    assert app.advance_frame(now_ms=16.0) is False


def test_drag_gesture_through_app() -> None:
    app = _app()
    app.start(1280, 800)
    node = app.state.graph.get("naxwe")

    with app.drag("naxwe") as handle:
        handle.move(12.0, 34.0)
        app.advance_frame(now_ms=0.0)
        assert (node.x, node.y) == (12.0, 34.0)
        assert app.scene.circle("naxwe").cx == 12.0

    assert node.fx is None
    app.on_drag_start("erey")
    app.on_drag("erey", 1.0, 2.0)
    assert app.state.graph.get("erey").fx == 1.0
    app.on_drag_end("erey")
    assert app.state.graph.get("erey").fx is None


def test_start_with_prebuilt_graph_skips_loading() -> None:
    app = _app(status=500)
    app.start(1280, 800, graph=build_graph(PAYLOAD))
    assert app.surface.errors == []
    assert len(app.state.graph) == 4


def test_launch_waits_for_panel() -> None:
    panel = SidebarPanel.in_memory()
    calls = []

    def provider():
        calls.append(1)
        return panel if len(calls) >= 3 else None

    app = asyncio.run(
        ExplorerApp.launch(
            _config(panel_poll_seconds=0.001),
            provider,
            MemorySurface(),
            MemoryAddressBar(),
            (1024.0, 768.0),
            client=_client(),
        )
    )

    assert len(calls) == 3
    assert app.panel is panel
    assert app.state.current_id == "afka"


def test_run_drives_frames_until_stopped() -> None:
    app = _app()
    app.start(1280, 800)

    async def _drive() -> None:
        stop = asyncio.Event()
        task = asyncio.create_task(app.run(frame_interval=0, stop=stop))
        for _ in range(5):
            await asyncio.sleep(0)
        stop.set()
        await task

    asyncio.run(_drive())

    assert app.components.engine.ticks > 0
