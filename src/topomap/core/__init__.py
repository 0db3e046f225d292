"""
Core data types and graph structures.
"""

from .exceptions import (
    ConfigError,
    InvalidFocusError,
    MalformedGraphError,
    TopomapError,
    UnknownFilterError,
    UnknownLayerError,
)
from .graph import TopologyGraph
from .types import (
    LAYER_ORDER,
    EngineMode,
    GraphEdge,
    GraphNode,
    LayerType,
    LayoutMode,
    LayoutResult,
    NodeStatus,
    Position,
    SelectionState,
    Severity,
    Technology,
    ViewMode,
)

__all__ = [
    "ConfigError", "InvalidFocusError", "MalformedGraphError", "TopomapError",
    "UnknownFilterError", "UnknownLayerError",
    "TopologyGraph",
    "LAYER_ORDER", "EngineMode", "GraphEdge", "GraphNode", "LayerType", "LayoutMode",
    "LayoutResult", "NodeStatus", "Position", "SelectionState", "Severity",
    "Technology", "ViewMode",
]
