"""Tests for building the term graph from raw dataset payloads."""
from __future__ import annotations

import logging

from kasmo.graph.labels import DisplayLanguage, definition_from_links
from kasmo.graph.model import build_graph, build_name_lookup
from kasmo.contracts import RawLinkRecord


def test_build_graph_recomputes_degrees_when_any_is_missing() -> None:
    graph = build_graph(
        {
            "nodes": [{"id": "A"}, {"id": "B", "degree": 5}],
            "links": [{"source_id": "A", "target_id": "B", "weight": 2, "def_so": "shaqo"}],
        }
    )

    assert [node.id for node in graph.nodes] == ["A", "B"]
    assert [node.degree for node in graph.nodes] == [1, 1]
    assert graph.edges[0].weight == 2
    assert definition_from_links("A", graph.edges, DisplayLanguage.SOMALI) == "shaqo"
    assert definition_from_links("B", graph.edges, DisplayLanguage.SOMALI) == ""
    assert graph.nodes[0].term_so == "A"
    assert graph.nodes[1].term_so == "B"


def test_supplied_degrees_are_kept_when_every_node_has_one() -> None:
    graph = build_graph(
        {
            "nodes": [{"id": "a", "degree": 4}, {"id": "b", "degree": "2"}],
            "links": [{"source_id": "a", "target_id": "b"}],
        }
    )
    assert [node.degree for node in graph.nodes] == [4.0, 2.0]


def test_labels_are_backfilled_from_links() -> None:
    graph = build_graph(
        {
            "nodes": [{"id": "x"}, {"id": "y", "term_en": "Why"}, {"id": "z"}],
            "links": [
                {"source_id": "x", "target_id": "y", "term_so": "Eks", "term_en": "Ex", "target_en": "Wye"},
                {"source_id": "z", "target_id": "ghost", "term_en": "Zed"},
                {"source_id": "ghost2", "target_id": "x", "target_en": "ignored"},
            ],
        }
    )
    x, y, z = graph.nodes

    assert (x.term_so, x.term_en) == ("Eks", "Ex")
    assert (y.term_so, y.term_en) == ("y", "Why")
    assert (z.term_so, z.term_en) == ("z", "Zed")
    assert graph.names.english["y"] == "Wye"


def test_name_lookup_source_labels_overwrite_and_targets_keep_first() -> None:
    names = build_name_lookup(
        [
            RawLinkRecord(source_id="a", target_id="b", term_so="Hore", target_en="first"),
            RawLinkRecord(source_id="a", target_id="b", term_so="Dambe", target_en="second"),
        ]
    )
    assert names.somali == {"a": "Dambe", "b": "b"}
    assert names.english == {"b": "first"}


def test_dangling_edges_are_dropped(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="kasmo.graph.model")
    graph = build_graph(
        {
            "nodes": [{"id": "a"}, {"id": "b"}],
            "links": [
                {"source_id": "a", "target_id": "b"},
                {"source_id": "a", "target_id": "missing"},
                {"source_id": "", "target_id": "b"},
            ],
        }
    )

    assert len(graph.edges) == 1
    assert all(edge.source in graph and edge.target in graph for edge in graph.edges)
    assert [node.degree for node in graph.nodes] == [1, 1]
    assert "Dropped 2 link records" in caplog.text


def test_duplicate_and_invalid_node_records_are_skipped() -> None:
    graph = build_graph(
        {
            "nodes": [{"id": "a"}, {"id": "a", "term_en": "dup"}, {"term_so": "no id"}, "junk", {"id": 7}],
            "links": [{"source_id": 7, "target_id": "a", "weight": "heavy"}],
        }
    )

    assert [node.id for node in graph.nodes] == ["a", "7"]
    assert graph.nodes[0].term_en == "a"
    assert graph.edges[0].source == "7"
    assert graph.edges[0].weight == 1.0


def test_empty_payload_builds_empty_graph() -> None:
    graph = build_graph({"nodes": None})
    assert len(graph) == 0
    assert graph.edges == []


def test_neighbors_include_the_node_itself() -> None:
    graph = build_graph(
        {
            "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}, {"id": "d"}],
            "links": [{"source_id": "a", "target_id": "b"}, {"source_id": "c", "target_id": "a"}],
        }
    )
    assert graph.neighbors("a") == {"a", "b", "c"}
    assert graph.neighbors("d") == {"d"}
    assert graph.get("missing") is None
    assert graph.get(None) is None
    assert graph.edge_index_pairs() == [(0, 1), (2, 0)]
