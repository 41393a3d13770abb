from __future__ import annotations

from kasmo.config import AppConfig, DatasetConfig
from kasmo.graph.model import build_graph
from kasmo.ui.history import MemoryAddressBar
from kasmo.ui.navigation import NavigationController
from kasmo.ui.panel import MemorySurface, SidebarPanel
from kasmo.ui.service import ExplorerApp

PAYLOAD = {
    "nodes": [
        {"id": "hub", "term_so": "Xarun", "term_en": "Hub", "tags": "central"},
        {"id": "a", "term_so": "alif", "term_en": "Apple"},
        {"id": "b", "term_so": "Baal", "term_en": "Banana"},
        {"id": "c", "term_so": "Cagaar", "term_en": "Cherry"},
        {"id": "lone", "term_so": "Keli", "term_en": "Lonely"},
    ],
    "links": [
        {"source_id": "hub", "target_id": "a"},
        {"source_id": "hub", "target_id": "b"},
        {"source_id": "c", "target_id": "hub"},
    ],
}


def _start() -> ExplorerApp:
    config = AppConfig(dataset=DatasetConfig(location="unused.json"))
    app = ExplorerApp(config, SidebarPanel.in_memory(), MemorySurface(), MemoryAddressBar())
    app.start(1280, 800, graph=build_graph(PAYLOAD))
    return app


def test_ordered_ids_follow_displayed_labels_case_insensitively() -> None:
    app = _start()
    assert app.components.navigation.ordered_ids() == ["a", "b", "c", "lone", "hub"]

    app.on_toggle_language()

    assert app.components.navigation.ordered_ids() == ["a", "b", "c", "hub", "lone"]


def test_next_and_previous_wrap_around() -> None:
    app = _start()

    assert app.on_next().id == "a"
    assert app.on_previous().id == "hub"
    assert app.on_previous().id == "lone"


def test_stepping_through_every_node_returns_to_start() -> None:
    app = _start()
    app.on_node_click("c")
    visited = []

    for _ in range(len(app.state.graph)):
        visited.append(app.on_next().id)

    assert visited[-1] == "c"
    assert sorted(visited) == sorted(node.id for node in app.state.graph.nodes)
    for _ in range(len(app.state.graph)):
        app.on_previous()
    assert app.state.current_id == "c"


def test_next_follows_active_language() -> None:
    app = _start()
    app.on_node_click("c")
    assert app.on_next().id == "lone"

    app.on_node_click("c")
    app.on_toggle_language()
    assert app.on_next().id == "hub"


def test_without_selection_stepping_starts_from_first_position() -> None:
    app = _start()
    app.state.current_id = None
    navigation = NavigationController(app.state, app.components.selection)

    assert navigation.next().id == "b"
    app.state.current_id = None
    assert navigation.previous().id == "hub"


def test_empty_graph_navigation_returns_none() -> None:
    config = AppConfig(dataset=DatasetConfig(location="unused.json"))
    app = ExplorerApp(config, SidebarPanel.in_memory(), MemorySurface(), MemoryAddressBar())
    app.start(800, 600, graph=build_graph({}))

    assert app.state.current_id is None
    assert app.on_next() is None
    assert app.on_previous() is None
