"""
Topology graph backed by rustworkx.

Wraps an undirected rustworkx multigraph and manages:
- The bimap between string node ids and rustworkx integer indices.
- A per-layer index of node ids for sidebar totals.
- Connected-component lookup used by the reachability resolver.

Edges keep their source/target for presentation, but the backend is a
PyGraph so every traversal is undirected.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

import rustworkx as rx

from .exceptions import MalformedGraphError
from .types import LAYER_ORDER, GraphEdge, GraphNode, LayerType, LayoutResult


class TopologyGraph:
    """
    In-memory topology graph.

    Features:
    - O(1) node lookup via the id-to-index bimap
    - Parallel edges allowed (multigraph), matching the generators
    - O(V+E) connected-component queries
    """

    def __init__(self):
        self._graph = rx.PyGraph(multigraph=True)
        self._id_to_idx: Dict[str, int] = {}
        self._idx_to_id: Dict[int, str] = {}
        self._nodes_by_layer: Dict[LayerType, Set[str]] = defaultdict(set)

    @classmethod
    def from_elements(
        cls,
        nodes: Iterable[GraphNode],
        edges: Iterable[GraphEdge],
        strict: bool = True,
    ) -> "TopologyGraph":
        """
        Build a graph from node and edge sequences.

        Raises:
            MalformedGraphError: when strict and a node id repeats or an edge
                references a missing node.
        """
        graph = cls()
        for node in nodes:
            if strict and graph.has_node(node.id):
                raise MalformedGraphError(f"duplicate node id '{node.id}'")
            graph.add_node(node)
        for edge in edges:
            graph.add_edge(edge, strict=strict)
        return graph

    @classmethod
    def from_layout(cls, layout: LayoutResult) -> "TopologyGraph":
        return cls.from_elements(layout.nodes, layout.edges)

    def add_node(self, node: GraphNode) -> None:
        """Add or replace a node."""
        if node.id in self._id_to_idx:
            idx = self._id_to_idx[node.id]
            previous: GraphNode = self._graph[idx]
            self._nodes_by_layer[previous.layer_type].discard(node.id)
            self._graph[idx] = node
        else:
            idx = self._graph.add_node(node)
            self._id_to_idx[node.id] = idx
            self._idx_to_id[idx] = node.id

        self._nodes_by_layer[node.layer_type].add(node.id)

    def add_edge(self, edge: GraphEdge, strict: bool = True) -> None:
        """
        Add an edge between two existing nodes.

        Raises:
            MalformedGraphError: if an endpoint is unknown and strict is set.
                Non-strict mode silently skips the edge.
        """
        u_idx = self._id_to_idx.get(edge.source_id)
        v_idx = self._id_to_idx.get(edge.target_id)
        if u_idx is None or v_idx is None:
            if strict:
                raise MalformedGraphError(
                    f"edge '{edge.id}' references a node outside the graph "
                    f"({edge.source_id} -> {edge.target_id})"
                )
            return
        self._graph.add_edge(u_idx, v_idx, edge)

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            return None
        return self._graph[idx]

    def has_node(self, node_id: Optional[str]) -> bool:
        return node_id is not None and node_id in self._id_to_idx

    def has_edge(self, source_id: str, target_id: str) -> bool:
        """Check if the two nodes are adjacent, in either direction."""
        if source_id not in self._id_to_idx or target_id not in self._id_to_idx:
            return False
        return self._graph.has_edge(self._id_to_idx[source_id], self._id_to_idx[target_id])

    def neighbors(self, node_id: str) -> Set[str]:
        if node_id not in self._id_to_idx:
            return set()
        return {self._idx_to_id[idx] for idx in self._graph.neighbors(self._id_to_idx[node_id])}

    def degree(self, node_id: str) -> int:
        if node_id not in self._id_to_idx:
            return 0
        return self._graph.degree(self._id_to_idx[node_id])

    def get_nodes_by_layer(self, layer: LayerType) -> List[GraphNode]:
        return [self.get_node(nid) for nid in sorted(self._nodes_by_layer.get(layer, set()))]

    def connected_component(self, node_id: Optional[str]) -> Set[str]:
        """
        Every node reachable from node_id, node_id included.

        Unknown or null ids yield an empty set.
        """
        if not self.has_node(node_id):
            return set()
        component = rx.node_connected_component(self._graph, self._id_to_idx[node_id])
        return {self._idx_to_id[idx] for idx in component}

    def edges_within(self, node_ids: Set[str]) -> Set[str]:
        """Ids of every edge with an endpoint in node_ids."""
        return {
            edge.id
            for edge in self.iter_edges()
            if edge.source_id in node_ids or edge.target_id in node_ids
        }

    def isolated_nodes(self) -> Set[str]:
        return {
            self._idx_to_id[idx]
            for idx in self._graph.node_indices()
            if self._graph.degree(idx) == 0
        }

    def iter_nodes(self) -> Iterator[GraphNode]:
        return iter(self._graph.nodes())

    def iter_edges(self) -> Iterator[GraphEdge]:
        return iter(self._graph.edges())

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_nodes": self.node_count,
            "total_edges": self.edge_count,
            "nodes_by_layer": {
                layer.value: len(self._nodes_by_layer.get(layer, set()))
                for layer in LAYER_ORDER
            },
            "components": len(rx.connected_components(self._graph)),
            "orphans": len(self.isolated_nodes()),
            "backend": "rustworkx",
        }
