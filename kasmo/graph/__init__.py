"""Term graph model, dataset loading, and label resolution."""

from .labels import DisplayLanguage, definition_from_links, resolve_label
from .loader import DatasetLoadError, load_graph, load_payload
from .model import Edge, Graph, NameLookup, Node, build_graph

__all__ = [
    "DatasetLoadError",
    "DisplayLanguage",
    "Edge",
    "Graph",
    "NameLookup",
    "Node",
    "build_graph",
    "definition_from_links",
    "load_graph",
    "load_payload",
    "resolve_label",
]
