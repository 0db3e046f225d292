"""
Resolve Command - Show everything connected to an entity.

Drives the same controller the map uses: select the layer, apply view
mode and filters, then click the node.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click
from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from ...controller import TopologyController
from ...core.exceptions import TopomapError
from ...core.types import ViewMode
from ..utils import echo_error, echo_info, load_catalog, load_engine_config
from .layout import LAYER_CHOICES

console = Console()


# --- API Models ---
class RelatedNode(BaseModel):
    id: str
    label: str
    layer: str
    color: str
    icon: str


class ResolveResponse(BaseModel):
    selected_node_id: str
    layout_mode: str
    view_mode: str
    related_counts: Dict[str, int] = Field(default_factory=dict)
    layer_totals: Dict[str, int] = Field(default_factory=dict)
    related_nodes: List[RelatedNode] = Field(default_factory=list)
    related_edge_ids: List[str] = Field(default_factory=list)


@click.command()
@click.argument("node_id")
@click.option("-l", "--layer", type=click.Choice(LAYER_CHOICES), default=None,
              help="Layer to select before clicking the node")
@click.option("--seed", type=int, default=None, help="Seed for the cluster generator")
@click.option("--view", type=click.Choice([mode.value for mode in ViewMode]),
              default=ViewMode.TOPOLOGY.value, help="Colouring of the related nodes")
@click.option("-f", "--filter", "filters", multiple=True,
              help="Filter-bar key to activate, e.g. ns:default (repeatable)")
@click.option("-c", "--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Engine configuration YAML (default: .topomap/config.yaml)")
@click.option("--catalog", "catalog_path", type=click.Path(path_type=Path), default=None,
              help="Entity catalog YAML (default: built-in demo estate)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def resolve(
    node_id: str,
    layer: Optional[str],
    seed: Optional[int],
    view: str,
    filters: Tuple[str, ...],
    config_path: Optional[Path],
    catalog_path: Optional[Path],
    as_json: bool,
) -> None:
    """
    Select NODE_ID and list its connected component.
    """
    try:
        controller = TopologyController(
            config=load_engine_config(config_path, seed),
            catalog=load_catalog(catalog_path),
        )
        if layer is not None:
            controller.layer_selected(layer)
        if ViewMode(view) is not controller.state.mode.view_mode:
            controller.view_mode_toggled()
        for key in filters:
            controller.filter_toggled(key)
        state = controller.node_clicked(node_id)
    except TopomapError as e:
        echo_error(str(e))
        sys.exit(1)

    if state.is_idle:
        echo_error(f"Node not found: {node_id}")
        echo_info("Run 'topomap layout --json' to list the node ids of a layout.")
        sys.exit(1)

    response = _build_response(controller)
    if as_json:
        click.echo(response.model_dump_json(indent=2))
        return

    _print_response(response)


def _build_response(controller: TopologyController) -> ResolveResponse:
    state = controller.state
    projection = controller.projection()
    visible = state.visible_layout()
    related = state.selection.related_node_ids

    nodes = [
        RelatedNode(
            id=node.id,
            label=node.label,
            layer=node.layer_type.value,
            color=projection.node_styles[node.id].color,
            icon=projection.node_styles[node.id].icon,
        )
        for node in visible.nodes
        if node.id in related
    ]
    counts = state.selection.counts_for_sidebar() or {}

    return ResolveResponse(
        selected_node_id=state.selection.selected_node_id,
        layout_mode=state.mode.layout_mode.value,
        view_mode=state.mode.view_mode.value,
        related_counts={layer.value: count for layer, count in counts.items()},
        layer_totals={layer.value: total for layer, total in visible.layer_totals().items()},
        related_nodes=nodes,
        related_edge_ids=sorted(state.selection.related_edge_ids),
    )


def _print_response(response: ResolveResponse) -> None:
    console.print(
        f"Selected [bold cyan]{response.selected_node_id}[/bold cyan] "
        f"({response.layout_mode} layout, {response.view_mode} view)"
    )

    counts = Table(title="Related entities")
    counts.add_column("Layer", style="cyan")
    counts.add_column("Related", justify="right", style="green")
    counts.add_column("Total", justify="right", style="dim")
    for layer, total in response.layer_totals.items():
        counts.add_row(layer, str(response.related_counts.get(layer, 0)), str(total))
    console.print(counts)

    nodes = Table(title="Component")
    nodes.add_column("Id", style="cyan")
    nodes.add_column("Label")
    nodes.add_column("Layer", style="dim")
    nodes.add_column("Colour")
    for node in response.related_nodes:
        nodes.add_row(node.id, node.label, node.layer, node.color)
    console.print(nodes)
