"""Interactive explorer engine: layout, scene, and interaction controllers."""

from .history import MemoryAddressBar, encode_fragment, parse_fragment
from .layout import ForceLayoutEngine
from .panel import MemorySurface, PanelWidget, SidebarPanel
from .scales import ScaleSet, build_scales
from .scene import RenderingLayer
from .selection import SelectionController, find_central_node
from .service import ExplorerApp, ExplorerNotStartedError
from .state import ExplorerState
from .viewport import ViewportController, ZoomTransform

__all__ = [
    "ExplorerApp",
    "ExplorerNotStartedError",
    "ExplorerState",
    "ForceLayoutEngine",
    "MemoryAddressBar",
    "MemorySurface",
    "PanelWidget",
    "RenderingLayer",
    "ScaleSet",
    "SelectionController",
    "SidebarPanel",
    "ViewportController",
    "ZoomTransform",
    "build_scales",
    "encode_fragment",
    "find_central_node",
    "parse_fragment",
]
