"""Unit tests for the rustworkx-backed topology graph."""

import pytest

from topomap.core.exceptions import MalformedGraphError
from topomap.core.graph import TopologyGraph
from topomap.core.types import GraphEdge, GraphNode, LayerType


def _node(node_id: str, layer: LayerType = LayerType.SERVICE) -> GraphNode:
    return GraphNode(id=node_id, layer_type=layer, label=node_id)


def _edge(source: str, target: str, suffix: str = "") -> GraphEdge:
    return GraphEdge(id=f"e-{source}-{target}{suffix}", source_id=source, target_id=target)


class TestTopologyGraph:
    """Test TopologyGraph construction and queries."""

    def setup_method(self):
        """A-B-C chain, D-E pair and an isolated F."""
        self.graph = TopologyGraph.from_elements(
            [
                _node("A", LayerType.APPLICATION),
                _node("B"),
                _node("C", LayerType.PROCESS),
                _node("D"),
                _node("E", LayerType.HOST),
                _node("F", LayerType.HOST),
            ],
            [_edge("A", "B"), _edge("B", "C"), _edge("D", "E")],
        )

    def test_counts(self):
        assert self.graph.node_count == 6
        assert self.graph.edge_count == 3

    def test_edges_are_undirected(self):
        assert self.graph.has_edge("A", "B")
        assert self.graph.has_edge("B", "A")
        assert not self.graph.has_edge("A", "C")
        assert self.graph.neighbors("B") == {"A", "C"}

    def test_connected_component(self):
        assert self.graph.connected_component("C") == {"A", "B", "C"}
        assert self.graph.connected_component("E") == {"D", "E"}
        assert self.graph.connected_component("F") == {"F"}

    def test_connected_component_unknown(self):
        assert self.graph.connected_component("missing") == set()
        assert self.graph.connected_component(None) == set()

    def test_edges_within(self):
        assert self.graph.edges_within({"A", "B", "C"}) == {"e-A-B", "e-B-C"}
        assert self.graph.edges_within({"F"}) == set()

    def test_isolated_nodes(self):
        assert self.graph.isolated_nodes() == {"F"}

    def test_nodes_by_layer(self):
        hosts = self.graph.get_nodes_by_layer(LayerType.HOST)
        assert [node.id for node in hosts] == ["E", "F"]

    def test_replacing_node_moves_layer_index(self):
        self.graph.add_node(_node("F", LayerType.DATACENTER))
        assert self.graph.node_count == 6
        assert [n.id for n in self.graph.get_nodes_by_layer(LayerType.HOST)] == ["E"]
        assert self.graph.get_node("F").layer_type is LayerType.DATACENTER

    def test_parallel_edges(self):
        self.graph.add_edge(_edge("A", "B", "-2"))
        assert self.graph.edge_count == 4
        assert self.graph.degree("A") == 2

    def test_stats(self):
        stats = self.graph.get_stats()
        assert stats["total_nodes"] == 6
        assert stats["components"] == 3
        assert stats["orphans"] == 1
        assert stats["nodes_by_layer"]["host"] == 2
        assert stats["backend"] == "rustworkx"


class TestStrictness:
    def test_dangling_edge_raises(self):
        with pytest.raises(MalformedGraphError, match="ghost"):
            TopologyGraph.from_elements([_node("A")], [_edge("A", "ghost")])

    def test_non_strict_skips_dangling_edge(self):
        graph = TopologyGraph.from_elements([_node("A")], [_edge("A", "ghost")], strict=False)
        assert graph.edge_count == 0
        assert graph.node_count == 1

    def test_duplicate_node_id_raises(self):
        nodes = [_node("A"), _node("A", LayerType.HOST)]
        with pytest.raises(MalformedGraphError, match="duplicate node id 'A'"):
            TopologyGraph.from_elements(nodes, [])

    def test_non_strict_duplicate_replaces(self):
        nodes = [_node("A"), _node("A", LayerType.HOST)]
        graph = TopologyGraph.from_elements(nodes, [], strict=False)
        assert graph.node_count == 1
        assert graph.get_node("A").layer_type is LayerType.HOST
