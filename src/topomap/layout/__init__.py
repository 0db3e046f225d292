"""
Layout generators.

- stack: one row per layer, deterministic for a given catalog
- cluster: randomized star meshes around process or host centres
"""

from typing import Optional

from ..config import CLUSTER_FOCUS_LAYERS, EngineConfig
from ..core.types import LayerType, LayoutMode, LayoutResult
from .catalog import CatalogEntity, EntityCatalog, default_catalog
from .cluster import RandomSource, generate_cluster_layout, make_rng
from .stack import generate_stack_layout


def layout_mode_for(layer: LayerType) -> LayoutMode:
    """Process and host get the cluster view, everything else the stack."""
    return LayoutMode.CLUSTER if layer in CLUSTER_FOCUS_LAYERS else LayoutMode.STACK


def generate_for_layer(
    layer: LayerType,
    config: Optional[EngineConfig] = None,
    catalog: Optional[EntityCatalog] = None,
    rng: Optional[RandomSource] = None,
) -> LayoutResult:
    """Run the generator that belongs to the selected layer."""
    config = config or EngineConfig()
    if layout_mode_for(layer) is LayoutMode.CLUSTER:
        return generate_cluster_layout(layer, rng=rng, config=config.cluster)
    return generate_stack_layout(catalog, config=config.stack)


__all__ = [
    "CatalogEntity", "EntityCatalog", "default_catalog",
    "RandomSource", "make_rng",
    "generate_stack_layout", "generate_cluster_layout",
    "generate_for_layer", "layout_mode_for",
]
