"""Normalisation of raw dataset records into the in-memory term graph."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from kasmo.contracts import RawGraphPayload, RawLinkRecord, parse_link_record, parse_node_record

LOGGER = logging.getLogger(__name__)


@dataclass(eq=False)
class Node:
    """A term in the network.

    Labels and tags are fixed at load time. ``degree`` and the position fields
    are the only attributes mutated afterwards, by degree recomputation, the
    layout engine, and drag gestures respectively.
    """

    id: str
    term_so: str
    term_en: str
    tags: str = ""
    degree: float = 0
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


@dataclass(frozen=True)
class Edge:
    """A relation between two terms; ``def_*`` fragments belong to the source."""

    source: str
    target: str
    weight: float = 1.0
    def_so: str = ""
    def_en: str = ""

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


@dataclass(frozen=True)
class NameLookup:
    """Preferred labels inferred from the labels embedded in raw links."""

    somali: Mapping[str, str]
    english: Mapping[str, str]


@dataclass
class Graph:
    """Validated node and edge sets; every edge endpoint exists in ``nodes``."""

    nodes: List[Node]
    edges: List[Edge]
    names: NameLookup
    _index: Dict[str, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._index = {node.id: position for position, node in enumerate(self.nodes)}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        position = self._index.get(node_id)
        return self.nodes[position] if position is not None else None

    def index_of(self, node_id: str) -> int:
        return self._index[node_id]

    def neighbors(self, node_id: str) -> Set[str]:
        """Return ids sharing an edge with ``node_id``, including the node itself."""

        result = {node_id}
        for edge in self.edges:
            if edge.source == node_id:
                result.add(edge.target)
            if edge.target == node_id:
                result.add(edge.source)
        return result

    def edge_index_pairs(self) -> List[Tuple[int, int]]:
        return [(self._index[edge.source], self._index[edge.target]) for edge in self.edges]


def build_name_lookup(links: Sequence[RawLinkRecord]) -> NameLookup:
    """Collect id to label tables from every raw link, dangling ones included.

    Source-side ``term_so``/``term_en`` always overwrite earlier entries; a
    target id defaults its Somali label to itself and takes the first
    ``target_en`` seen.
    """

    somali: Dict[str, str] = {}
    english: Dict[str, str] = {}
    for link in links:
        if link.source_id:
            if link.term_so:
                somali[link.source_id] = link.term_so
            if link.term_en:
                english[link.source_id] = link.term_en
        if link.target_id:
            somali.setdefault(link.target_id, link.target_id)
            if link.target_en and link.target_id not in english:
                english[link.target_id] = link.target_en
    return NameLookup(somali=somali, english=english)


def _assign_degrees(nodes: Sequence[Node], supplied: Sequence[float], edges: Sequence[Edge]) -> bool:
    """Apply supplied degrees only when every node has a positive one.

    Returns:
        bool: ``True`` when degrees were recomputed from edge endpoints.
    """

    if all(value > 0 for value in supplied):
        for node, value in zip(nodes, supplied):
            node.degree = value
        return False
    counts: Dict[str, int] = {node.id: 0 for node in nodes}
    for edge in edges:
        counts[edge.source] += 1
        counts[edge.target] += 1
    for node in nodes:
        node.degree = counts[node.id]
    return True


def build_graph(payload: Mapping[str, Any]) -> Graph:
    """Convert a decoded dataset into a :class:`Graph`, deterministically.

    Args:
        payload: Mapping with ``nodes`` and ``links`` arrays.

    Returns:
        Graph: Nodes in payload order, edges with both endpoints present, and
            degrees either supplied or recomputed for the whole set.
    """

    raw = RawGraphPayload.model_validate(dict(payload))
    raw_links = [record for record in (parse_link_record(item) for item in raw.links) if record is not None]
    names = build_name_lookup(raw_links)

    nodes: List[Node] = []
    supplied: List[float] = []
    seen: Set[str] = set()
    skipped_nodes = 0
    for item in raw.nodes:
        record = parse_node_record(item)
        if record is None or record.id in seen:
            skipped_nodes += 1
            continue
        seen.add(record.id)
        nodes.append(
            Node(
                id=record.id,
                term_so=record.term_so or names.somali.get(record.id) or record.id,
                term_en=record.term_en or names.english.get(record.id) or record.id,
                tags=record.tags,
            )
        )
        supplied.append(record.degree)

    edges = [
        Edge(
            source=link.source_id,
            target=link.target_id,
            weight=link.weight,
            def_so=link.def_so,
            def_en=link.def_en,
        )
        for link in raw_links
        if link.source_id in seen and link.target_id in seen
    ]
    dropped_edges = len(raw.links) - len(edges)
    recomputed = _assign_degrees(nodes, supplied, edges)

    if skipped_nodes:
        LOGGER.debug("Skipped %d node records without a usable id", skipped_nodes)
    if dropped_edges:
        LOGGER.debug("Dropped %d link records with missing endpoints", dropped_edges)
    LOGGER.info(
        "Graph built (nodes=%d, edges=%d, degree_source=%s)",
        len(nodes),
        len(edges),
        "edges" if recomputed else "dataset",
    )
    return Graph(nodes=nodes, edges=edges, names=names)


__all__ = ["Edge", "Graph", "NameLookup", "Node", "build_graph", "build_name_lookup"]
