"""
Colour and icon lookup tables.

Every layer, technology and severity has an explicit entry. There is no
string matching and no catch-all branch: adding a new enum member without
a table entry is caught by the tests.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..core.types import GraphNode, LayerType, NodeStatus, Severity, Technology, ViewMode


class LayerStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: str
    icon: str


LAYER_STYLES: Dict[LayerType, LayerStyle] = {
    LayerType.APPLICATION: LayerStyle(color="#00a6fb", icon="monitor"),
    LayerType.SERVICE: LayerStyle(color="#73be28", icon="share-2"),
    LayerType.PROCESS: LayerStyle(color="#9355b7", icon="box"),
    LayerType.HOST: LayerStyle(color="#ffa400", icon="server"),
    LayerType.DATACENTER: LayerStyle(color="#6d747e", icon="building-2"),
}

TECHNOLOGY_ICONS: Dict[Technology, str] = {
    Technology.JAVA: "codepen",
    Technology.NODEJS: "hexagon",
    Technology.PYTHON: "code",
    Technology.GO: "zap",
    Technology.NGINX: "activity",
    Technology.POSTGRES: "database",
    Technology.REDIS: "layers",
    Technology.KAFKA: "radio",
    Technology.DOCKER: "container",
    Technology.LINUX: "terminal",
    Technology.WINDOWS: "command",
    Technology.AWS: "cloud",
    Technology.AZURE: "cloud-cog",
    Technology.APPLE: "smartphone",
    Technology.CONFLUENCE: "globe",
}

# Most severe first
SEVERITY_COLORS: Dict[Severity, str] = {
    Severity.CRITICAL: "#8B0000",
    Severity.HIGH: "#ef4444",
    Severity.MEDIUM: "#eab308",
    Severity.LOW: "#3b82f6",
}

STATUS_COLORS: Dict[NodeStatus, Optional[str]] = {
    NodeStatus.HEALTHY: None,
    NodeStatus.WARNING: None,
    NodeStatus.CRITICAL: "#ef4444",
}


def base_color(node: GraphNode) -> str:
    """Layer colour, replaced by the status colour for critical nodes."""
    return STATUS_COLORS[node.status] or LAYER_STYLES[node.layer_type].color


def node_color(node: GraphNode, view_mode: ViewMode) -> str:
    """
    Display colour of a node.

    The vulnerability view paints nodes that carry a severity with the
    severity tier; nodes without one keep their topology colour.
    """
    if view_mode is ViewMode.VULNERABILITY and node.vulnerability is not None:
        return SEVERITY_COLORS[node.vulnerability]
    return base_color(node)


def node_icon(node: GraphNode) -> str:
    """Technology icon when the node has a technology, otherwise the layer icon."""
    if node.technology is not None:
        return TECHNOLOGY_ICONS[node.technology]
    return LAYER_STYLES[node.layer_type].icon
