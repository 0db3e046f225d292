"""
Topomap - layered topology maps of a software estate.

Topomap lays out applications, services, processes, hosts and datacenters
either as a vertical stack of layers or as star-shaped clusters, and
highlights everything connected to a selected entity.

Key Components:
- core: Data types, exceptions and the rustworkx-backed graph
- layout: Stack and cluster layout generators plus the entity catalog
- analysis: Reachability resolver and filter-bar filters
- projection: Colours, icons and emphasis for rendering
- controller: Selection and mode state machine
"""

__version__ = "0.3.0"
