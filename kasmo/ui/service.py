"""Explorer application wiring the graph, simulation, scene, and controllers."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from kasmo.config import AppConfig
from kasmo.graph.labels import DisplayLanguage
from kasmo.graph.loader import DatasetLoadError, load_graph
from kasmo.graph.model import Graph, Node
from kasmo.ui.history import AddressBar, parse_fragment
from kasmo.ui.language import LanguageToggle
from kasmo.ui.layout import DragHandle, ForceLayoutEngine
from kasmo.ui.navigation import NavigationController
from kasmo.ui.panel import DisplaySurface, PanelProvider, SidebarPanel, WidgetEvent, wait_for_panel
from kasmo.ui.scales import build_scales
from kasmo.ui.scene import RenderingLayer
from kasmo.ui.search import SearchFilter
from kasmo.ui.selection import SelectionController
from kasmo.ui.state import ExplorerState
from kasmo.ui.viewport import ViewportController

LOGGER = logging.getLogger(__name__)


class ExplorerNotStartedError(RuntimeError):
    """Raised when input arrives before :meth:`ExplorerApp.start` succeeded."""


@dataclass(frozen=True)
class ExplorerComponents:
    """Everything built by a successful start, sharing one state object."""

    state: ExplorerState
    scene: RenderingLayer
    engine: ForceLayoutEngine
    viewport: ViewportController
    selection: SelectionController
    search: SearchFilter
    navigation: NavigationController
    language: LanguageToggle


class ExplorerApp:
    """Owns the explorer components and routes host input to them.

    The host calls :meth:`start` once, then forwards pointer, keyboard, and
    resize input to the ``on_*`` handlers and drives frames with
    :meth:`advance_frame` (or lets :meth:`run` do so). Everything runs on the
    caller's thread; each handler completes before the next is processed.
    """

    def __init__(
        self,
        config: AppConfig,
        panel: SidebarPanel,
        surface: DisplaySurface,
        address: AddressBar,
        *,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = config
        self.panel = panel
        self.surface = surface
        self.address = address
        self._client = client
        self._components: Optional[ExplorerComponents] = None
        self._clock_origin = time.monotonic()

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def started(self) -> bool:
        return self._components is not None

    @property
    def components(self) -> ExplorerComponents:
        if self._components is None:
            raise ExplorerNotStartedError("Explorer has not been started")
        return self._components

    @property
    def state(self) -> ExplorerState:
        return self.components.state

    @property
    def scene(self) -> RenderingLayer:
        return self.components.scene

    @classmethod
    async def launch(
        cls,
        config: AppConfig,
        provider: PanelProvider,
        surface: DisplaySurface,
        address: AddressBar,
        window_size: Tuple[float, float],
        *,
        client: Optional[httpx.Client] = None,
    ) -> "ExplorerApp":
        """Wait for the host sidebar, then start the explorer."""

        panel = await wait_for_panel(provider, poll_seconds=config.viewport.panel_poll_seconds)
        app = cls(config, panel, surface, address, client=client)
        app.start(*window_size)
        return app

    def start(self, window_width: float, window_height: float, *, graph: Optional[Graph] = None) -> ExplorerState:
        """Load the dataset and bring every component up.

        Args:
            window_width: Current window width in pixels.
            window_height: Current window height in pixels.
            graph: Pre-built graph; when omitted the configured dataset is loaded.

        Returns:
            ExplorerState: The state shared by all controllers.

        Raises:
            DatasetLoadError: When the dataset cannot be loaded; the failure is
                shown on the display surface once and nothing is initialised.
        """

        if graph is None:
            dataset = self._config.dataset
            try:
                graph = load_graph(dataset.location, timeout=dataset.timeout_seconds, client=self._client)
            except DatasetLoadError as exc:
                LOGGER.error("Explorer start aborted: %s", exc)
                self.surface.show_error(str(exc))
                raise

        config = self._config
        state = ExplorerState(
            graph=graph,
            scales=build_scales(graph, config.scales),
            language=DisplayLanguage(config.language.default),
        )
        scene = RenderingLayer(state, config.render)
        engine = ForceLayoutEngine(graph, lambda node: state.scales.node_radius(node.degree), config.force)
        engine.on_tick(scene.update)
        viewport = ViewportController(config.viewport, scene, engine, self.surface)
        viewport.initialise(window_width, window_height)
        selection = SelectionController(state, scene, self.panel, self.address, viewport, config.emphasis)
        navigation = NavigationController(state, selection)
        self._components = ExplorerComponents(
            state=state,
            scene=scene,
            engine=engine,
            viewport=viewport,
            selection=selection,
            search=SearchFilter(state, scene, selection, engine, config.search, config.viewport),
            navigation=navigation,
            language=LanguageToggle(state, scene, selection, self.address),
        )
        self._attach_panel()

        scene.update()
        if not selection.select_id(parse_fragment(self.address.hash)):
            central = navigation.find_central_node()
            if central is not None:
                selection.select_node(central)
        LOGGER.info("Explorer started with %d nodes and %d edges", len(graph.nodes), len(graph.edges))
        return state

    def _attach_panel(self) -> None:
        panel = self.panel
        panel.search.listen("input", lambda event: self.on_search_input(event.value))
        panel.search.listen("keydown", self._on_search_key)
        panel.reset.listen("click", lambda _event: self.on_reset())
        panel.lang.listen("click", lambda _event: self.on_toggle_language())
        if panel.prev is not None:
            panel.prev.listen("click", lambda _event: self.on_previous())
        if panel.next is not None:
            panel.next.listen("click", lambda _event: self.on_next())

    def _node(self, node_id: str) -> Node:
        node = self.state.graph.get(node_id)
        if node is None:
            raise KeyError(node_id)
        return node

    # -- pointer and keyboard -------------------------------------------

    def on_node_click(self, node_id: str) -> None:
        self.components.selection.select_node(self._node(node_id))

    def on_node_key(self, node_id: str, key: str) -> None:
        if key == "Enter":
            self.on_node_click(node_id)

    def on_drag_start(self, node_id: str) -> Node:
        return self.components.engine.begin_drag(node_id)

    def on_drag(self, node_id: str, x: float, y: float) -> None:
        self.components.engine.drag_to(node_id, x, y)

    def on_drag_end(self, node_id: str) -> None:
        self.components.engine.end_drag(node_id)

    def drag(self, node_id: str) -> AbstractContextManager[DragHandle]:
        """Drag gesture whose pin is released however the block exits."""

        return self.components.engine.drag(node_id)

    def on_wheel(self, factor: float, anchor: Tuple[float, float]) -> None:
        self.components.viewport.zoom.zoom_by(factor, anchor)

    def on_pan(self, dx: float, dy: float) -> None:
        self.components.viewport.zoom.pan_by(dx, dy)

    def on_resize(self, window_width: float, window_height: float) -> bool:
        return self.components.viewport.resize(window_width, window_height)

    # -- sidebar controls -----------------------------------------------

    def on_search_input(self, text: str) -> None:
        self.components.search.on_input(text)

    def _on_search_key(self, event: WidgetEvent) -> None:
        if event.key == "Enter":
            self.components.search.on_submit(event.value)

    def on_reset(self) -> None:
        self.components.selection.clear()

    def on_toggle_language(self) -> DisplayLanguage:
        return self.components.language.toggle()

    def on_previous(self) -> Optional[Node]:
        return self.components.navigation.previous()

    def on_next(self) -> Optional[Node]:
        return self.components.navigation.next()

    # -- frame clock ----------------------------------------------------

    def advance_frame(self, now_ms: Optional[float] = None) -> bool:
        """Run one cooperative frame; returns ``True`` while anything is animating."""

        components = self.components
        if now_ms is None:
            now_ms = (time.monotonic() - self._clock_origin) * 1000.0
        stepped = components.engine.step()
        animating = components.viewport.advance(now_ms)
        return stepped or animating

    async def run(self, *, frame_interval: float = 1 / 60, stop: Optional[asyncio.Event] = None) -> None:
        """Drive frames until ``stop`` is set, yielding to other tasks between frames."""

        if not self.started:
            raise ExplorerNotStartedError("Explorer has not been started")
        stop = stop or asyncio.Event()
        while not stop.is_set():
            self.advance_frame()
            await asyncio.sleep(frame_interval)


__all__ = ["ExplorerApp", "ExplorerComponents", "ExplorerNotStartedError"]
