"""
Entity filters for the map's filter bar.

A filter key is a `prefix:value` string:

    ns:default     hide kube-system style entities (id or label contains "system")
    app:<name>     keep entities whose label or sub-label mentions <name>;
                   hosts and datacenters always stay for context
    tier:backend   hide the application layer
    tier:frontend  keep only the application layer

Active filters combine with AND. Edges survive only when both endpoints do,
so a filtered layout is a well-formed graph in its own right.
"""

from typing import Dict, Iterable, List, Set, Tuple

from ..core.exceptions import UnknownFilterError
from ..core.types import GraphNode, LayerType, LayoutResult

# Chips offered by the filter bar
FILTER_BAR_KEYS: List[str] = ["ns:default", "app:payment", "app:inventory", "tier:backend"]

# Accepted values per prefix; app takes any non-empty name
FIXED_VALUES: Dict[str, Set[str]] = {
    "ns": {"default"},
    "tier": {"backend", "frontend"},
}

INFRA_LAYERS: Set[LayerType] = {LayerType.HOST, LayerType.DATACENTER}
BACKEND_LAYERS: Set[LayerType] = {
    LayerType.SERVICE, LayerType.PROCESS, LayerType.HOST, LayerType.DATACENTER,
}


def parse_filter(key: str) -> Tuple[str, str]:
    """
    Split a filter key into prefix and value.

    Raises:
        UnknownFilterError: missing separator, unknown prefix, or a value the
            prefix does not accept.
    """
    prefix, sep, value = key.partition(":")
    value = value.lower()
    if not sep or not value or prefix not in ("ns", "app", "tier"):
        raise UnknownFilterError(key)
    if prefix in FIXED_VALUES and value not in FIXED_VALUES[prefix]:
        raise UnknownFilterError(key)
    return prefix, value


def _passes_default_namespace(node: GraphNode) -> bool:
    return "system" not in node.id and "system" not in node.label.lower()


def _passes_apps(node: GraphNode, apps: List[str]) -> bool:
    if node.layer_type in INFRA_LAYERS:
        return True
    label = node.label.lower()
    sub_label = (node.sub_label or "").lower()
    return any(app in label or app in sub_label for app in apps)


def _passes_tier(node: GraphNode, value: str) -> bool:
    if value == "backend":
        return node.layer_type in BACKEND_LAYERS
    return node.layer_type not in BACKEND_LAYERS


def node_visible(node: GraphNode, active: Iterable[str]) -> bool:
    """Whether a node survives every active filter."""
    apps: List[str] = []
    for key in active:
        prefix, value = parse_filter(key)
        if prefix == "ns" and not _passes_default_namespace(node):
            return False
        if prefix == "tier" and not _passes_tier(node, value):
            return False
        if prefix == "app":
            apps.append(value)

    # Several app filters widen each other, then AND with the rest
    if apps and not _passes_apps(node, apps):
        return False
    return True


def apply_filters(layout: LayoutResult, active: Iterable[str]) -> LayoutResult:
    """
    Restrict a layout to the entities the active filters let through.

    Positions and layer offsets are kept, so the filtered view lines up with
    the full one.
    """
    keys = list(active)
    if not keys:
        return layout

    for key in keys:
        parse_filter(key)

    nodes = [node for node in layout.nodes if node_visible(node, keys)]
    visible = {node.id for node in nodes}
    edges = [
        edge for edge in layout.edges
        if edge.source_id in visible and edge.target_id in visible
    ]
    return LayoutResult(
        nodes=nodes,
        edges=edges,
        layer_offsets=layout.layer_offsets,
        mode=layout.mode,
    )


def toggle_filter(active: Iterable[str], key: str) -> List[str]:
    """Add the key if absent, remove it if present. Order is preserved."""
    parse_filter(key)
    current = list(active)
    if key in current:
        return [existing for existing in current if existing != key]
    return current + [key]
