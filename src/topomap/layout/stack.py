"""
Stack Layout - one row per architectural layer.

Rows follow LAYER_ORDER (application on top, datacenter at the bottom).
Inside a row, entities keep catalog order and are centred on x = 0, so the
result is a pure function of row and column indices.
"""

import logging
from typing import Dict, List, Optional, Set

from ..config import StackLayoutConfig
from ..core.types import (
    LAYER_ORDER,
    GraphEdge,
    GraphNode,
    LayerType,
    LayoutMode,
    LayoutResult,
    Position,
    unique_edge_id,
)
from .catalog import CatalogEntity, EntityCatalog, default_catalog

logger = logging.getLogger(__name__)


def row_offset(layer: LayerType, config: StackLayoutConfig) -> float:
    """Vertical coordinate of a layer's row."""
    return layer.row * config.row_height + config.base_offset


def column_x(column: int, columns: int, config: StackLayoutConfig) -> float:
    """Horizontal coordinate of a column, with the row centred on zero."""
    return (column - (columns - 1) / 2) * config.column_pitch


def generate_stack_layout(
    catalog: Optional[EntityCatalog] = None,
    config: Optional[StackLayoutConfig] = None,
) -> LayoutResult:
    """
    Lay the catalog out as a vertical stack of layers.

    Args:
        catalog: Estate to draw. Defaults to the built-in demo catalog.
        config: Row and column spacing.

    Returns:
        LayoutResult with positions and layer_offsets for every layer that
        has at least one entity. An empty catalog gives an empty result.

    Raises:
        MalformedGraphError: the catalog is inconsistent.
    """
    catalog = (default_catalog() if catalog is None else catalog).check_integrity()
    config = config or StackLayoutConfig()

    rows: Dict[LayerType, List[CatalogEntity]] = {layer: [] for layer in LAYER_ORDER}
    for entity in catalog.entities:
        rows[entity.layer_type].append(entity)

    nodes: List[GraphNode] = []
    layer_offsets: Dict[LayerType, float] = {}

    for layer in LAYER_ORDER:
        members = rows[layer]
        if not members:
            continue
        y = row_offset(layer, config)
        layer_offsets[layer] = y
        for column, entity in enumerate(members):
            nodes.append(GraphNode(
                id=entity.id,
                layer_type=entity.layer_type,
                label=entity.label,
                sub_label=entity.sub_label,
                status=entity.status,
                vulnerability=entity.vulnerability,
                technology=entity.technology,
                notification_count=entity.notification_count,
                position=Position(x=column_x(column, len(members), config), y=y),
            ))

    taken: Set[str] = set()
    edges = [
        GraphEdge(id=unique_edge_id(source, target, taken), source_id=source, target_id=target)
        for source, target in catalog.dependencies
    ]

    logger.debug(f"Stack layout: {len(nodes)} nodes, {len(edges)} edges, {len(layer_offsets)} rows")

    return LayoutResult(
        nodes=nodes,
        edges=edges,
        layer_offsets=layer_offsets,
        mode=LayoutMode.STACK,
    )
