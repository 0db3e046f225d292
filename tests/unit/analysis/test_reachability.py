"""
Unit tests for the reachability resolver.

Tests cover:
- Connected components on small hand-built graphs
- Symmetry and count conservation on generated layouts
- Agreement with the fixed-point reference
- Null, unknown and malformed inputs
- Debris isolation in cluster layouts
"""

import pytest

from topomap.analysis.reachability import ReachabilityResolver, resolve, resolve_fixed_point
from topomap.core.exceptions import MalformedGraphError
from topomap.core.types import GraphEdge, GraphNode, LayerType
from topomap.layout import generate_cluster_layout, generate_stack_layout, make_rng


def _node(node_id: str, layer: LayerType) -> GraphNode:
    return GraphNode(id=node_id, layer_type=layer, label=node_id)


def _edge(source: str, target: str) -> GraphEdge:
    return GraphEdge(id=f"e-{source}-{target}", source_id=source, target_id=target)


@pytest.fixture
def chain():
    """A -> B -> C plus an isolated D."""
    nodes = [
        _node("A", LayerType.APPLICATION),
        _node("B", LayerType.SERVICE),
        _node("C", LayerType.PROCESS),
        _node("D", LayerType.HOST),
    ]
    edges = [_edge("A", "B"), _edge("B", "C")]
    return nodes, edges


class TestResolve:
    def test_component_from_the_middle(self, chain):
        nodes, edges = chain
        result = resolve(nodes, edges, "B")
        assert result.selected_node_id == "B"
        assert result.related_node_ids == {"A", "B", "C"}
        assert result.related_edge_ids == {"e-A-B", "e-B-C"}
        assert result.counts_by_layer == {
            LayerType.APPLICATION: 1,
            LayerType.SERVICE: 1,
            LayerType.PROCESS: 1,
        }

    def test_direction_is_ignored(self, chain):
        nodes, edges = chain
        assert resolve(nodes, edges, "C").related_node_ids == {"A", "B", "C"}

    def test_isolated_node(self, chain):
        nodes, edges = chain
        result = resolve(nodes, edges, "D")
        assert result.related_node_ids == {"D"}
        assert result.related_edge_ids == frozenset()
        assert result.counts_by_layer == {LayerType.HOST: 1}

    def test_null_selection(self, chain):
        nodes, edges = chain
        result = resolve(nodes, edges, None)
        assert result.is_empty
        assert result.related_edge_ids == frozenset()
        assert result.counts_by_layer == {}

    def test_unknown_selection(self, chain):
        nodes, edges = chain
        assert resolve(nodes, edges, "Z").is_empty

    def test_dangling_edge(self, chain):
        nodes, edges = chain
        with pytest.raises(MalformedGraphError):
            resolve(nodes, edges + [_edge("C", "ghost")], "A")

    def test_duplicate_node_id(self, chain):
        nodes, edges = chain
        with pytest.raises(MalformedGraphError, match="duplicate node id 'B'"):
            resolve(nodes + [_node("B", LayerType.HOST)], edges, "A")

    def test_cycle_terminates(self):
        nodes = [_node(n, LayerType.SERVICE) for n in "XYZ"]
        edges = [_edge("X", "Y"), _edge("Y", "Z"), _edge("Z", "X")]
        result = resolve(nodes, edges, "X")
        assert result.related_node_ids == {"X", "Y", "Z"}
        assert len(result.related_edge_ids) == 3

    def test_to_selection(self, chain):
        nodes, edges = chain
        selection = resolve(nodes, edges, "A").to_selection()
        assert selection.selected_node_id == "A"
        assert selection.related_node_ids == {"A", "B", "C"}
        assert resolve(nodes, edges, None).to_selection().is_idle


class TestGeneratedLayouts:
    """Properties that hold on every generated layout."""

    @pytest.fixture(params=["stack", "process", "host"])
    def layout(self, request):
        if request.param == "stack":
            return generate_stack_layout()
        return generate_cluster_layout(request.param, rng=make_rng(11))

    def test_membership_is_symmetric(self, layout):
        resolver = ReachabilityResolver(layout)
        for node in layout.nodes[::7]:
            related = resolver.resolve(node.id).related_node_ids
            for other in list(related)[:5]:
                assert node.id in resolver.resolve(other).related_node_ids

    def test_counts_sum_to_related(self, layout):
        resolver = ReachabilityResolver(layout)
        for node in layout.nodes[::5]:
            result = resolver.resolve(node.id)
            assert sum(result.counts_by_layer.values()) == len(result.related_node_ids)

    def test_matches_fixed_point(self, layout):
        resolver = ReachabilityResolver(layout)
        for node in layout.nodes[::9]:
            expected_nodes, expected_edges = resolve_fixed_point(layout.nodes, layout.edges, node.id)
            result = resolver.resolve(node.id)
            assert result.related_node_ids == expected_nodes
            assert result.related_edge_ids == expected_edges

    def test_isolated_nodes_resolve_to_themselves(self, layout):
        resolver = ReachabilityResolver(layout)
        for node_id in layout.isolated_node_ids():
            result = resolver.resolve(node_id)
            assert result.related_node_ids == {node_id}
            assert result.related_edge_ids == frozenset()


class TestDemoEstate:
    def test_island_is_separate(self):
        resolver = ReachabilityResolver(generate_stack_layout())
        island = resolver.resolve("svc-probe")
        assert island.related_node_ids == {"app-status", "svc-probe", "proc-probe-0", "host-edge"}
        assert len(island.related_edge_ids) == 3

    def test_main_component(self):
        resolver = ReachabilityResolver(generate_stack_layout())
        result = resolver.resolve("app-web")
        assert len(result.related_node_ids) == 33
        assert len(result.related_edge_ids) == 46
        assert "app-backoffice" in result.related_node_ids
        assert "svc-legacy" not in result.related_node_ids

    def test_for_elements(self, chain):
        nodes, edges = chain
        resolver = ReachabilityResolver.for_elements(nodes, edges)
        assert resolver.selection_for("A").related_edge_ids == {"e-A-B", "e-B-C"}
        assert resolver.selection_for("missing").is_idle


class TestClusterDebris:
    @pytest.fixture(params=["process", "host"])
    def layout(self, request):
        return generate_cluster_layout(request.param, rng=make_rng(3))

    def test_debris_never_joins_a_selection(self, layout):
        resolver = ReachabilityResolver(layout)
        for node in layout.nodes:
            if "-debris-" in node.id:
                continue
            related = resolver.resolve(node.id).related_node_ids
            assert not {node_id for node_id in related if "-debris-" in node_id}

    def test_debris_selects_only_itself(self, layout):
        resolver = ReachabilityResolver(layout)
        debris = [node.id for node in layout.nodes if "-debris-" in node.id]
        assert debris
        for node_id in debris:
            assert resolver.resolve(node_id).related_node_ids == {node_id}
