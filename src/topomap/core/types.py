"""
Core type definitions for topomap.

Nodes, edges and layout results are immutable pydantic models. A layout is
replaced wholesale on regeneration, never patched in place, so every
consumer can hold on to the snapshot it was handed.
"""

from collections import Counter
from enum import StrEnum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import MalformedGraphError


class LayerType(StrEnum):
    """Architectural layer of an entity, top of the stack first."""
    APPLICATION = "application"
    SERVICE = "service"
    PROCESS = "process"
    HOST = "host"
    DATACENTER = "datacenter"

    @property
    def row(self) -> int:
        return LAYER_ORDER.index(self)


LAYER_ORDER: List[LayerType] = [
    LayerType.APPLICATION,
    LayerType.SERVICE,
    LayerType.PROCESS,
    LayerType.HOST,
    LayerType.DATACENTER,
]


class NodeStatus(StrEnum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class Severity(StrEnum):
    """Vulnerability severity tiers, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Higher rank means more severe."""
        return {
            Severity.CRITICAL: 4,
            Severity.HIGH: 3,
            Severity.MEDIUM: 2,
            Severity.LOW: 1,
        }[self]


class Technology(StrEnum):
    """
    Closed set of technology tags.

    Only used to pick an icon; no engine logic depends on it.
    """
    JAVA = "java"
    NODEJS = "nodejs"
    PYTHON = "python"
    GO = "go"
    NGINX = "nginx"
    POSTGRES = "postgres"
    REDIS = "redis"
    KAFKA = "kafka"
    DOCKER = "docker"
    LINUX = "linux"
    WINDOWS = "windows"
    AWS = "aws"
    AZURE = "azure"
    APPLE = "apple"
    CONFLUENCE = "confluence"


class LayoutMode(StrEnum):
    STACK = "stack"
    CLUSTER = "cluster"


class ViewMode(StrEnum):
    TOPOLOGY = "topology"
    VULNERABILITY = "vulnerability"

    def toggled(self) -> "ViewMode":
        if self is ViewMode.TOPOLOGY:
            return ViewMode.VULNERABILITY
        return ViewMode.TOPOLOGY


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class GraphNode(BaseModel):
    """
    A single entity on the map.

    The position is assigned by a layout generator and never touched again;
    the resolver and the projection only read it.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    layer_type: LayerType
    label: str
    sub_label: Optional[str] = None
    status: NodeStatus = NodeStatus.HEALTHY
    vulnerability: Optional[Severity] = None
    technology: Optional[Technology] = None
    notification_count: int = 0
    position: Position = Field(default_factory=lambda: Position(x=0.0, y=0.0))

    def __hash__(self):
        return hash(self.id)


class GraphEdge(BaseModel):
    """
    Relationship between two nodes.

    Source and target are kept for presentation (animation direction);
    traversal treats every edge as undirected.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    target_id: str

    @property
    def endpoints(self) -> FrozenSet[str]:
        return frozenset((self.source_id, self.target_id))

    def touches(self, node_id: str) -> bool:
        return node_id == self.source_id or node_id == self.target_id

    def other(self, node_id: str) -> str:
        """Return the endpoint opposite to node_id."""
        return self.target_id if node_id == self.source_id else self.source_id


def edge_id(source_id: str, target_id: str) -> str:
    return f"e-{source_id}-{target_id}"


def unique_edge_id(source_id: str, target_id: str, taken: Set[str]) -> str:
    """
    Edge id for the pair, suffixed when the id is already in use.

    Parallel edges are allowed; duplicate ids are not. The returned id is
    added to taken.
    """
    base = edge_id(source_id, target_id)
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


class LayoutResult(BaseModel):
    """
    Output of a layout generator: positioned nodes, edges and, for the
    stack layout, the vertical offset of every layer row.
    """
    model_config = ConfigDict(frozen=True)

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    layer_offsets: Optional[Dict[LayerType, float]] = None
    mode: LayoutMode = LayoutMode.STACK

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: Optional[str]) -> Optional[GraphNode]:
        if node_id is None:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def nodes_in_layer(self, layer: LayerType) -> List[GraphNode]:
        return [node for node in self.nodes if node.layer_type == layer]

    def layer_totals(self) -> Dict[LayerType, int]:
        """Static per-layer entity counts shown next to related counts."""
        counts = Counter(node.layer_type for node in self.nodes)
        return {layer: counts.get(layer, 0) for layer in LAYER_ORDER}

    def layer_center(self, layer: LayerType) -> Optional[Position]:
        """Centre of the bounding box of a layer's nodes, if it has any."""
        members = self.nodes_in_layer(layer)
        if not members:
            return None
        xs = [n.position.x for n in members]
        ys = [n.position.y for n in members]
        return Position(x=(min(xs) + max(xs)) / 2, y=(min(ys) + max(ys)) / 2)

    def isolated_node_ids(self) -> Set[str]:
        """Nodes that no edge touches."""
        touched: Set[str] = set()
        for edge in self.edges:
            touched.add(edge.source_id)
            touched.add(edge.target_id)
        return self.node_ids() - touched

    def check_integrity(self) -> "LayoutResult":
        """
        Fail fast on a malformed graph.

        Raises:
            MalformedGraphError: duplicate node ids or an edge endpoint that
                is not a node of this layout.
        """
        seen: Set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise MalformedGraphError(f"duplicate node id '{node.id}'")
            seen.add(node.id)

        for edge in self.edges:
            missing = [nid for nid in (edge.source_id, edge.target_id) if nid not in seen]
            if missing:
                raise MalformedGraphError(
                    f"edge '{edge.id}' references unknown node(s): {', '.join(missing)}"
                )
        return self


def count_by_layer(nodes: Iterable[GraphNode], node_ids: Iterable[str]) -> Dict[LayerType, int]:
    """Group the given node ids by layer. Layers with no member are omitted."""
    wanted = set(node_ids)
    counts: Dict[LayerType, int] = {}
    for node in nodes:
        if node.id in wanted:
            counts[node.layer_type] = counts.get(node.layer_type, 0) + 1
    return counts


class EngineMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    layout_mode: LayoutMode = LayoutMode.STACK
    view_mode: ViewMode = ViewMode.TOPOLOGY


class SelectionState(BaseModel):
    """
    Current selection and everything derived from it.

    Build it through `empty()` or `selected()` so the related sets always
    come from the selected id and the current edge set.
    """
    model_config = ConfigDict(frozen=True)

    selected_node_id: Optional[str] = None
    related_node_ids: FrozenSet[str] = frozenset()
    related_edge_ids: FrozenSet[str] = frozenset()
    related_counts_by_layer: Dict[LayerType, int] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "SelectionState":
        return cls()

    @classmethod
    def selected(
        cls,
        node_id: str,
        related_node_ids: Iterable[str],
        related_edge_ids: Iterable[str],
        counts_by_layer: Dict[LayerType, int],
    ) -> "SelectionState":
        return cls(
            selected_node_id=node_id,
            related_node_ids=frozenset(related_node_ids),
            related_edge_ids=frozenset(related_edge_ids),
            related_counts_by_layer=dict(counts_by_layer),
        )

    @property
    def is_idle(self) -> bool:
        return self.selected_node_id is None

    def counts_for_sidebar(self) -> Optional[Dict[LayerType, int]]:
        """Related counts for every layer, or None when nothing is selected."""
        if self.is_idle:
            return None
        return {layer: self.related_counts_by_layer.get(layer, 0) for layer in LAYER_ORDER}
