"""
Visual projection of a selection onto node and edge styles.
"""

from .palette import LAYER_STYLES, SEVERITY_COLORS, TECHNOLOGY_ICONS, node_color, node_icon
from .styles import EdgeStyle, NodeStyle, Projection, project

__all__ = [
    "LAYER_STYLES", "SEVERITY_COLORS", "TECHNOLOGY_ICONS",
    "node_color", "node_icon",
    "EdgeStyle", "NodeStyle", "Projection", "project",
]
