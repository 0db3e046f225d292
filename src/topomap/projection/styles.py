"""
Visual Projection.

Turns a reachability result into per-node and per-edge display attributes.
The projection is a pure function: it reads nodes and edges and never
changes them, so the same inputs always give the same styles.
"""

from typing import AbstractSet, Dict, Optional, Sequence, Set

from pydantic import BaseModel, ConfigDict, Field

from ..config import ProjectionConfig
from ..core.types import GraphEdge, GraphNode, ViewMode
from .palette import node_color, node_icon


class NodeStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: str
    icon: str
    opacity: float = 1.0
    filter: Optional[str] = None
    highlighted: bool = False


class EdgeStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    stroke: str
    stroke_opacity: float
    stroke_width: float
    animated: bool
    highlighted: bool = False


class Projection(BaseModel):
    """Styles keyed by node id and edge id."""
    model_config = ConfigDict(frozen=True)

    node_styles: Dict[str, NodeStyle] = Field(default_factory=dict)
    edge_styles: Dict[str, EdgeStyle] = Field(default_factory=dict)

    def dimmed_node_ids(self) -> Set[str]:
        return {nid for nid, style in self.node_styles.items() if style.filter is not None}

    def highlighted_edge_ids(self) -> Set[str]:
        return {eid for eid, style in self.edge_styles.items() if style.highlighted}


def _default_edge(config: ProjectionConfig) -> EdgeStyle:
    return EdgeStyle(
        stroke=config.default_edge_color,
        stroke_opacity=config.default_edge_opacity,
        stroke_width=config.default_edge_width,
        animated=True,
    )


def _highlight_edge(config: ProjectionConfig) -> EdgeStyle:
    return EdgeStyle(
        stroke=config.highlight_edge_color,
        stroke_opacity=config.highlight_edge_opacity,
        stroke_width=config.highlight_edge_width,
        animated=True,
        highlighted=True,
    )


def _dimmed_edge(config: ProjectionConfig) -> EdgeStyle:
    return EdgeStyle(
        stroke=config.dimmed_edge_color,
        stroke_opacity=config.dimmed_edge_opacity,
        stroke_width=config.dimmed_edge_width,
        animated=False,
    )


def project(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    related_node_ids: AbstractSet[str],
    related_edge_ids: AbstractSet[str],
    view_mode: ViewMode = ViewMode.TOPOLOGY,
    config: Optional[ProjectionConfig] = None,
) -> Projection:
    """
    Compute display attributes for every node and edge.

    With no related nodes everything is drawn at full strength. Otherwise
    related nodes and edges are emphasised and the rest are dimmed. The
    view mode only changes node colours; dimming applies on top of it.
    """
    config = config or ProjectionConfig()
    has_selection = bool(related_node_ids)

    node_styles: Dict[str, NodeStyle] = {}
    for node in nodes:
        color = node_color(node, view_mode)
        icon = node_icon(node)
        if not has_selection or node.id in related_node_ids:
            node_styles[node.id] = NodeStyle(
                color=color, icon=icon, highlighted=has_selection,
            )
        else:
            node_styles[node.id] = NodeStyle(
                color=color,
                icon=icon,
                opacity=config.dimmed_node_opacity,
                filter=config.dimmed_node_filter,
            )

    if has_selection:
        highlight, dimmed = _highlight_edge(config), _dimmed_edge(config)
        edge_styles = {
            edge.id: highlight if edge.id in related_edge_ids else dimmed
            for edge in edges
        }
    else:
        default = _default_edge(config)
        edge_styles = {edge.id: default for edge in edges}

    return Projection(node_styles=node_styles, edge_styles=edge_styles)
