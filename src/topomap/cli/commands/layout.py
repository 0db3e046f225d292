"""
Layout Command - Generate the map shown for a layer.

Without --layer the stack layout of the whole catalog is printed, as on
first load.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...core.exceptions import TopomapError
from ...core.types import LAYER_ORDER, LayerType, LayoutResult
from ...layout import generate_for_layer, generate_stack_layout
from ..utils import echo_error, echo_warning, load_catalog, load_engine_config

console = Console()

LAYER_CHOICES = [layer.value for layer in LAYER_ORDER]


@click.command()
@click.option("-l", "--layer", type=click.Choice(LAYER_CHOICES), default=None,
              help="Layer to select (process and host give the cluster view)")
@click.option("--seed", type=int, default=None, help="Seed for the cluster generator")
@click.option("-c", "--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Engine configuration YAML (default: .topomap/config.yaml)")
@click.option("--catalog", "catalog_path", type=click.Path(path_type=Path), default=None,
              help="Entity catalog YAML (default: built-in demo estate)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def layout(
    layer: Optional[str],
    seed: Optional[int],
    config_path: Optional[Path],
    catalog_path: Optional[Path],
    as_json: bool,
) -> None:
    """
    Generate a layout and summarise it per layer.
    """
    try:
        config = load_engine_config(config_path, seed)
        catalog = load_catalog(catalog_path)
        if layer is None:
            result = generate_stack_layout(catalog, config=config.stack)
        else:
            result = generate_for_layer(LayerType(layer), config=config, catalog=catalog)
    except TopomapError as e:
        echo_error(str(e))
        sys.exit(1)

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    if result.is_empty:
        echo_warning("The catalog has no entities; nothing to lay out.")
        return

    _print_summary(result)


def _print_summary(result: LayoutResult) -> None:
    table = Table(title=f"{result.mode.value.capitalize()} layout")
    table.add_column("Layer", style="cyan")
    table.add_column("Entities", justify="right")
    table.add_column("Row offset", justify="right", style="dim")

    offsets = result.layer_offsets or {}
    for layer, total in result.layer_totals().items():
        offset = offsets.get(layer)
        table.add_row(layer.value, str(total), "-" if offset is None else f"{offset:g}")

    console.print(table)
    console.print(
        f"{len(result.nodes)} nodes, {len(result.edges)} edges, "
        f"{len(result.isolated_node_ids())} isolated"
    )
