"""
Reachability Resolver.

Given a selected node, finds every entity connected to it through any chain
of edges (edges treated as undirected) together with the edges of that
connected component, and counts the result per layer for the sidebar.
"""

import logging
from typing import Dict, FrozenSet, Iterable, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.graph import TopologyGraph
from ..core.types import (
    GraphEdge,
    GraphNode,
    LayerType,
    LayoutResult,
    SelectionState,
    count_by_layer,
)

logger = logging.getLogger(__name__)


class Reachability(BaseModel):
    """Connected component of a selected node."""
    model_config = ConfigDict(frozen=True)

    selected_node_id: Optional[str] = None
    related_node_ids: FrozenSet[str] = frozenset()
    related_edge_ids: FrozenSet[str] = frozenset()
    counts_by_layer: Dict[LayerType, int] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.related_node_ids

    def to_selection(self) -> SelectionState:
        if self.selected_node_id is None or self.is_empty:
            return SelectionState.empty()
        return SelectionState.selected(
            self.selected_node_id,
            self.related_node_ids,
            self.related_edge_ids,
            self.counts_by_layer,
        )


def _component(
    graph: TopologyGraph, nodes: Iterable[GraphNode], selected_node_id: Optional[str]
) -> Reachability:
    if not graph.has_node(selected_node_id):
        return Reachability()

    related_nodes = graph.connected_component(selected_node_id)
    related_edges = graph.edges_within(related_nodes)
    return Reachability(
        selected_node_id=selected_node_id,
        related_node_ids=frozenset(related_nodes),
        related_edge_ids=frozenset(related_edges),
        counts_by_layer=count_by_layer(nodes, related_nodes),
    )


def resolve(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    selected_node_id: Optional[str],
) -> Reachability:
    """
    Resolve the connected component containing selected_node_id.

    A null or unknown id gives an empty result rather than an error.

    Raises:
        MalformedGraphError: a node id repeats, or an edge references a node
            that is not in nodes.
    """
    graph = TopologyGraph.from_elements(nodes, edges)
    return _component(graph, nodes, selected_node_id)


def resolve_fixed_point(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    selected_node_id: Optional[str],
) -> Tuple[Set[str], Set[str]]:
    """
    Repeated full edge scans until nothing new is added.

    O(passes x |E|). Kept as the reference behaviour that `resolve` must
    match; use `resolve` for real work.
    """
    if selected_node_id is None or selected_node_id not in {node.id for node in nodes}:
        return set(), set()

    related_nodes: Set[str] = {selected_node_id}
    related_edges: Set[str] = set()

    changed = True
    while changed:
        changed = False
        for edge in edges:
            if edge.id in related_edges:
                continue
            if edge.source_id in related_nodes or edge.target_id in related_nodes:
                related_edges.add(edge.id)
                related_nodes.add(edge.source_id)
                related_nodes.add(edge.target_id)
                changed = True

    return related_nodes, related_edges


class ReachabilityResolver:
    """
    Resolver bound to one layout snapshot.

    The graph is built once per layout, so repeated clicks on the same map
    do not rebuild adjacency.
    """

    def __init__(self, layout: LayoutResult):
        self.layout = layout
        self.graph = TopologyGraph.from_layout(layout)

    @classmethod
    def for_elements(cls, nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> "ReachabilityResolver":
        return cls(LayoutResult(nodes=list(nodes), edges=list(edges)))

    def resolve(self, selected_node_id: Optional[str]) -> Reachability:
        result = _component(self.graph, self.layout.nodes, selected_node_id)
        logger.debug(
            f"Resolved {selected_node_id}: {len(result.related_node_ids)} nodes, "
            f"{len(result.related_edge_ids)} edges"
        )
        return result

    def selection_for(self, selected_node_id: Optional[str]) -> SelectionState:
        return self.resolve(selected_node_id).to_selection()


__all__ = [
    "Reachability",
    "ReachabilityResolver",
    "count_by_layer",
    "resolve",
    "resolve_fixed_point",
]
