"""
Analysis over a generated topology.

- reachability: connected component of a selected entity
- filters: filter-bar restriction of a layout
"""

from .filters import FILTER_BAR_KEYS, apply_filters, toggle_filter
from .reachability import (
    Reachability,
    ReachabilityResolver,
    count_by_layer,
    resolve,
    resolve_fixed_point,
)

__all__ = [
    "FILTER_BAR_KEYS", "apply_filters", "toggle_filter",
    "Reachability", "ReachabilityResolver",
    "count_by_layer", "resolve", "resolve_fixed_point",
]
