"""
Catalog Command - Validate an entity catalog.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...core.exceptions import TopomapError
from ...core.graph import TopologyGraph
from ...layout import generate_stack_layout
from ..utils import echo_error, echo_success, load_catalog

console = Console()


@click.command()
@click.option("-f", "--file", "catalog_path", type=click.Path(path_type=Path), default=None,
              help="Entity catalog YAML (default: built-in demo estate)")
def catalog(catalog_path: Optional[Path]) -> None:
    """
    Check that a catalog produces a well-formed graph.
    """
    try:
        entities = load_catalog(catalog_path)
        result = generate_stack_layout(entities)
    except TopomapError as e:
        echo_error(str(e))
        sys.exit(1)

    stats = TopologyGraph.from_layout(result).get_stats()

    table = Table(title="Entities per layer")
    table.add_column("Layer", style="cyan")
    table.add_column("Count", justify="right")
    for layer, count in stats["nodes_by_layer"].items():
        table.add_row(layer, str(count))
    console.print(table)

    source = str(catalog_path) if catalog_path else "built-in catalog"
    echo_success(
        f"{source}: {stats['total_nodes']} entities, {stats['total_edges']} dependencies, "
        f"{stats['components']} components, {stats['orphans']} isolated"
    )
