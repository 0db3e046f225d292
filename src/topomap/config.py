"""
Engine configuration and layout defaults.

Generation parameters (ring sizes, radii, edge probabilities, row spacing)
live here instead of being scattered as literals through the generators.
Values can be overridden from a YAML file, by default
`.topomap/config.yaml`.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Set

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .core.exceptions import ConfigError
from .core.types import LayerType

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".topomap/config.yaml")

# Layers whose selection switches the map to the cluster layout
CLUSTER_FOCUS_LAYERS: Set[LayerType] = {LayerType.PROCESS, LayerType.HOST}


class StackLayoutConfig(BaseModel):
    """Spacing of the layered stack layout."""
    node_width: float = 140.0
    gutter: float = 60.0
    row_height: float = 250.0
    base_offset: float = 0.0

    @property
    def column_pitch(self) -> float:
        return self.node_width + self.gutter


class ClusterLayoutConfig(BaseModel):
    """
    Shape of the star/cluster layout.

    Per-focus dictionaries are keyed by the focus layer (process or host).
    """
    cluster_count: Dict[LayerType, int] = Field(default_factory=lambda: {
        LayerType.PROCESS: 3,
        LayerType.HOST: 1,
    })
    ring1_count: Dict[LayerType, int] = Field(default_factory=lambda: {
        LayerType.PROCESS: 12,
        LayerType.HOST: 8,
    })
    ring2_count: Dict[LayerType, int] = Field(default_factory=lambda: {
        LayerType.PROCESS: 24,
        LayerType.HOST: 16,
    })

    ring1_radius: float = 300.0
    ring2_radius: float = 600.0
    ring2_radius_jitter: float = 80.0   # +/- offset applied to ring2_radius
    ring2_angle_jitter: float = 0.15    # radians

    core_mesh_probability: float = Field(default=0.6, ge=0.0, le=1.0)
    chaos_link_probability: float = Field(default=0.3, ge=0.0, le=1.0)

    debris_count: int = Field(default=6, ge=0)
    debris_min_radius: float = 900.0
    debris_max_radius: float = 1200.0

    cluster_spacing: float = 1800.0
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _check_geometry(self) -> "ClusterLayoutConfig":
        if self.debris_min_radius > self.debris_max_radius:
            raise ValueError("debris_min_radius must not exceed debris_max_radius")
        # Outer rings of neighbouring clusters must not overlap
        if self.cluster_spacing < 2 * (self.ring2_radius + self.ring2_radius_jitter):
            raise ValueError("cluster_spacing is too small for the outer ring")
        return self

    def clusters_for(self, focus: LayerType) -> int:
        return self.cluster_count.get(focus, 1)

    def ring1_for(self, focus: LayerType) -> int:
        return self.ring1_count.get(focus, 0)

    def ring2_for(self, focus: LayerType) -> int:
        return self.ring2_count.get(focus, 0)


class ProjectionConfig(BaseModel):
    """Emphasis values applied by the visual projection."""
    dimmed_node_opacity: float = Field(default=0.2, ge=0.0, le=1.0)
    dimmed_node_filter: str = "grayscale(100%)"

    default_edge_color: str = "#555"
    default_edge_opacity: float = 0.6
    default_edge_width: float = 2.0

    highlight_edge_color: str = "#00a6fb"
    highlight_edge_opacity: float = 1.0
    highlight_edge_width: float = 3.0

    dimmed_edge_color: str = "#333"
    dimmed_edge_opacity: float = 0.1
    dimmed_edge_width: float = 1.0


class EngineConfig(BaseModel):
    stack: StackLayoutConfig = Field(default_factory=StackLayoutConfig)
    cluster: ClusterLayoutConfig = Field(default_factory=ClusterLayoutConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """
    Load the engine configuration.

    Args:
        path: Explicit YAML file. When omitted, DEFAULT_CONFIG_PATH is used
            if it exists.

    Returns:
        EngineConfig: defaults merged with the file's values.

    Raises:
        ConfigError: the explicit file is missing, or any file is not valid
            YAML or does not match the schema.
    """
    config_path = path or DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if path is not None:
            raise ConfigError(str(config_path), "file not found")
        return EngineConfig()

    logger.info(f"Loading configuration from {config_path}")
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(str(config_path), f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(str(config_path), "top-level value must be a mapping")

    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(config_path), str(e)) from e
