"""
Cluster Layout - star-shaped meshes around process or host centres.

Every cluster is a centre node with two concentric rings:

    ring 1 ("core")   evenly spaced, wired to the centre and, by chance, to
                      its angular successor
    ring 2 ("outer")  jittered angle and radius, attached to a random core
                      node plus an occasional chaos link to another outer node

A handful of debris nodes with no edges at all are scattered far out; they
exercise the isolation guarantees of the resolver and the projection.

Ids of cluster k all start with "c<k>-": c<k>-center, c<k>-r1-<i>,
c<k>-r2-<i> and c<k>-debris-<i>.

All randomness is drawn from an injected source so layouts are reproducible
under a fixed seed.
"""

import logging
import math
import random
from typing import List, Optional, Protocol, Sequence, Set, Tuple, TypeVar, Union

from ..config import CLUSTER_FOCUS_LAYERS, ClusterLayoutConfig
from ..core.exceptions import InvalidFocusError
from ..core.types import (
    GraphEdge,
    GraphNode,
    LayerType,
    LayoutMode,
    LayoutResult,
    NodeStatus,
    Position,
    Severity,
    Technology,
    unique_edge_id,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    """The subset of random.Random the generator draws from."""

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


# focus -> (ring 1 layer, ring 2 layer); rings sit one and two layers up
RING_LAYERS = {
    LayerType.PROCESS: (LayerType.SERVICE, LayerType.APPLICATION),
    LayerType.HOST: (LayerType.PROCESS, LayerType.SERVICE),
}

CENTER_TECHNOLOGY = {
    LayerType.PROCESS: Technology.JAVA,
    LayerType.HOST: Technology.LINUX,
}

RING_TECHNOLOGY = {
    LayerType.APPLICATION: Technology.CONFLUENCE,
    LayerType.SERVICE: Technology.JAVA,
    LayerType.PROCESS: Technology.DOCKER,
}

CENTER_LABELS = {
    LayerType.PROCESS: "Core Process",
    LayerType.HOST: "Master Host",
}

# Vertical stagger between neighbouring cluster centres, as a share of spacing
_STAGGER = 0.2


def make_rng(seed: Optional[int] = None) -> random.Random:
    """A private random source, seeded when a seed is given."""
    return random.Random(seed)


def resolve_focus(focus: Union[LayerType, str]) -> LayerType:
    """
    Normalise a focus argument.

    Raises:
        InvalidFocusError: the value is not a layer that has a cluster view.
    """
    try:
        layer = LayerType(focus)
    except ValueError as e:
        raise InvalidFocusError(str(focus)) from e
    if layer not in CLUSTER_FOCUS_LAYERS:
        raise InvalidFocusError(layer.value)
    return layer


def cluster_centers(count: int, spacing: float) -> List[Tuple[float, float]]:
    """Centre coordinates, spaced far enough apart that rings never overlap."""
    return [
        (index * spacing, (index % 2) * spacing * _STAGGER)
        for index in range(count)
    ]


def _roll_severity(rng: RandomSource) -> Optional[Severity]:
    roll = rng.random()
    if roll > 0.9:
        return Severity.CRITICAL
    if roll > 0.8:
        return Severity.HIGH
    if roll > 0.7:
        return Severity.MEDIUM
    if roll > 0.6:
        return Severity.LOW
    return None


def _polar(cx: float, cy: float, angle: float, radius: float) -> Position:
    return Position(x=cx + math.cos(angle) * radius, y=cy + math.sin(angle) * radius)


class _ClusterBuilder:
    """Accumulates nodes and edges for one generator call."""

    def __init__(self, focus: LayerType, config: ClusterLayoutConfig, rng: RandomSource):
        self.focus = focus
        self.config = config
        self.rng = rng
        self.nodes: List[GraphNode] = []
        self.edges: List[GraphEdge] = []
        self._edge_ids: Set[str] = set()

    def connect(self, source_id: str, target_id: str) -> None:
        self.edges.append(GraphEdge(
            id=unique_edge_id(source_id, target_id, self._edge_ids),
            source_id=source_id,
            target_id=target_id,
        ))

    def build(self, index: int, cx: float, cy: float) -> None:
        center_id = self._add_center(index, cx, cy)
        core_ids = self._add_core_ring(index, cx, cy, center_id)
        self._add_outer_ring(index, cx, cy, center_id, core_ids)
        self._add_debris(index, cx, cy)

    def _add_center(self, index: int, cx: float, cy: float) -> str:
        center_id = f"c{index}-center"
        self.nodes.append(GraphNode(
            id=center_id,
            layer_type=self.focus,
            label=f"{CENTER_LABELS[self.focus]} {index}",
            sub_label="Cluster Core",
            technology=CENTER_TECHNOLOGY[self.focus],
            position=Position(x=cx, y=cy),
        ))
        return center_id

    def _add_core_ring(self, index: int, cx: float, cy: float, center_id: str) -> List[str]:
        layer = RING_LAYERS[self.focus][0]
        count = self.config.ring1_for(self.focus)
        ids: List[str] = []

        for i in range(count):
            node_id = f"c{index}-r1-{i}"
            angle = (i / count) * 2 * math.pi
            self.nodes.append(GraphNode(
                id=node_id,
                layer_type=layer,
                label=f"{layer.value} {i}",
                technology=RING_TECHNOLOGY[layer],
                vulnerability=_roll_severity(self.rng),
                position=_polar(cx, cy, angle, self.config.ring1_radius),
            ))
            ids.append(node_id)
            self.connect(center_id, node_id)

        # Partial mesh between angular neighbours
        if count > 1:
            for i, node_id in enumerate(ids):
                if self.rng.random() < self.config.core_mesh_probability:
                    self.connect(node_id, ids[(i + 1) % count])

        return ids

    def _add_outer_ring(
        self, index: int, cx: float, cy: float, center_id: str, core_ids: List[str]
    ) -> None:
        layer = RING_LAYERS[self.focus][1]
        count = self.config.ring2_for(self.focus)
        angle_jitter = self.config.ring2_angle_jitter
        radius_jitter = self.config.ring2_radius_jitter
        ids: List[str] = []

        for i in range(count):
            node_id = f"c{index}-r2-{i}"
            angle = (i / count) * 2 * math.pi + self.rng.uniform(-angle_jitter, angle_jitter)
            radius = self.config.ring2_radius + self.rng.uniform(-radius_jitter, radius_jitter)
            self.nodes.append(GraphNode(
                id=node_id,
                layer_type=layer,
                label=f"{layer.value} {index}.{i}",
                technology=RING_TECHNOLOGY[layer],
                position=_polar(cx, cy, angle, radius),
            ))
            ids.append(node_id)

            # Parent is any core node, not the geometrically closest one
            parent = self.rng.choice(core_ids) if core_ids else center_id
            self.connect(parent, node_id)

        if count > 1:
            for node_id in ids:
                if self.rng.random() < self.config.chaos_link_probability:
                    other = self.rng.choice([candidate for candidate in ids if candidate != node_id])
                    self.connect(node_id, other)

    def _add_debris(self, index: int, cx: float, cy: float) -> None:
        for i in range(self.config.debris_count):
            angle = self.rng.uniform(0, 2 * math.pi)
            radius = self.rng.uniform(self.config.debris_min_radius, self.config.debris_max_radius)
            self.nodes.append(GraphNode(
                id=f"c{index}-debris-{i}",
                layer_type=self.focus,
                label=f"unmanaged-{self.focus.value}-{index}.{i}",
                sub_label="Undiscovered",
                status=NodeStatus.WARNING,
                position=_polar(cx, cy, angle, radius),
            ))


def generate_cluster_layout(
    focus: Union[LayerType, str],
    rng: Optional[RandomSource] = None,
    config: Optional[ClusterLayoutConfig] = None,
) -> LayoutResult:
    """
    Generate one or more star clusters around the focus layer.

    Args:
        focus: LayerType.PROCESS (three clusters by default) or
            LayerType.HOST (one cluster).
        rng: Random source. Defaults to a fresh random.Random seeded with
            config.seed.
        config: Ring sizes, radii and edge probabilities.

    Returns:
        LayoutResult in cluster mode. It has no layer_offsets.

    Raises:
        InvalidFocusError: focus is not process or host.
    """
    layer = resolve_focus(focus)
    config = config or ClusterLayoutConfig()
    rng = rng or make_rng(config.seed)

    builder = _ClusterBuilder(layer, config, rng)
    for index, (cx, cy) in enumerate(cluster_centers(config.clusters_for(layer), config.cluster_spacing), start=1):
        builder.build(index, cx, cy)

    logger.debug(
        f"Cluster layout ({layer.value}): {len(builder.nodes)} nodes, {len(builder.edges)} edges"
    )

    return LayoutResult(
        nodes=builder.nodes,
        edges=builder.edges,
        layer_offsets=None,
        mode=LayoutMode.CLUSTER,
    )
