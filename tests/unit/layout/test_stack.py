"""
Unit tests for the stack layout generator and the entity catalog.

Tests cover:
- Row offsets and horizontal centring
- Determinism for a given catalog
- Isolated entities and edge ids
- Empty and malformed catalogs
- Catalog loading from YAML
"""

from pathlib import Path

import pytest

from topomap.config import StackLayoutConfig
from topomap.core.exceptions import ConfigError, MalformedGraphError
from topomap.core.types import LAYER_ORDER, LayerType, LayoutMode, NodeStatus
from topomap.layout.catalog import CatalogEntity, EntityCatalog, default_catalog
from topomap.layout.stack import column_x, generate_stack_layout, row_offset

ISOLATED = {"svc-legacy", "proc-cron", "host-spare", "dc-lab"}


@pytest.fixture
def layout():
    return generate_stack_layout()


class TestDefaultCatalog:
    def test_catalog_is_consistent(self):
        catalog = default_catalog()
        assert catalog.check_integrity() is catalog
        assert len(catalog.entities) == 41
        assert len(catalog.dependencies) == 49

    def test_status_derived_from_notifications(self):
        entities = {entity.id: entity for entity in default_catalog().entities}
        assert entities["svc-auth"].status is NodeStatus.CRITICAL
        assert entities["svc-pay"].status is NodeStatus.HEALTHY
        assert entities["svc-legacy"].status is NodeStatus.WARNING


class TestStackLayout:
    """Test generate_stack_layout on the built-in catalog."""

    def test_mode_and_offsets(self, layout):
        assert layout.mode is LayoutMode.STACK
        assert layout.layer_offsets == {
            LayerType.APPLICATION: 0.0,
            LayerType.SERVICE: 250.0,
            LayerType.PROCESS: 500.0,
            LayerType.HOST: 750.0,
            LayerType.DATACENTER: 1000.0,
        }

    def test_nodes_sit_on_their_row(self, layout):
        for node in layout.nodes:
            assert node.position.y == layout.layer_offsets[node.layer_type]

    def test_rows_are_centred(self, layout):
        for layer in LAYER_ORDER:
            xs = [node.position.x for node in layout.nodes_in_layer(layer)]
            assert sum(xs) == pytest.approx(0.0)

    def test_columns_are_evenly_spaced(self, layout):
        xs = [node.position.x for node in layout.nodes_in_layer(LayerType.HOST)]
        gaps = {round(b - a, 6) for a, b in zip(xs, xs[1:])}
        assert gaps == {200.0}

    def test_is_deterministic(self, layout):
        assert generate_stack_layout() == layout

    def test_every_entity_is_placed(self, layout):
        assert layout.node_ids() == default_catalog().entity_ids()
        assert layout.check_integrity() is layout

    def test_isolated_entities_have_no_edges(self, layout):
        assert layout.isolated_node_ids() == ISOLATED

    def test_edge_ids(self, layout):
        ids = [edge.id for edge in layout.edges]
        assert len(ids) == len(set(ids)) == 49
        assert "e-svc-auth-proc-auth-0" in ids


class TestStackGeometry:
    def test_row_offset_honours_base_offset(self):
        config = StackLayoutConfig(row_height=100, base_offset=40)
        assert row_offset(LayerType.APPLICATION, config) == 40
        assert row_offset(LayerType.HOST, config) == 340

    def test_single_column_is_centred(self):
        assert column_x(0, 1, StackLayoutConfig()) == 0

    def test_two_columns(self):
        config = StackLayoutConfig(node_width=100, gutter=20)
        assert [column_x(i, 2, config) for i in range(2)] == [-60.0, 60.0]


class TestCatalogEdgeCases:
    def test_empty_catalog(self):
        layout = generate_stack_layout(EntityCatalog())
        assert layout.is_empty
        assert layout.edges == []
        assert layout.layer_offsets == {}

    def test_missing_layers_get_no_offset(self):
        catalog = EntityCatalog(entities=[
            CatalogEntity(id="h", layer_type=LayerType.HOST, label="h"),
        ])
        layout = generate_stack_layout(catalog)
        assert layout.layer_offsets == {LayerType.HOST: 750.0}

    def test_parallel_dependencies_get_distinct_ids(self):
        catalog = EntityCatalog(
            entities=[
                CatalogEntity(id="a", layer_type=LayerType.APPLICATION, label="a"),
                CatalogEntity(id="s", layer_type=LayerType.SERVICE, label="s"),
            ],
            dependencies=[("a", "s"), ("a", "s")],
        )
        layout = generate_stack_layout(catalog)
        assert [edge.id for edge in layout.edges] == ["e-a-s", "e-a-s-2"]

    def test_unknown_dependency_endpoint(self):
        catalog = EntityCatalog(
            entities=[CatalogEntity(id="a", layer_type=LayerType.APPLICATION, label="a")],
            dependencies=[("a", "ghost")],
        )
        with pytest.raises(MalformedGraphError, match="ghost"):
            generate_stack_layout(catalog)

    def test_dependency_on_isolated_entity(self):
        catalog = EntityCatalog(
            entities=[
                CatalogEntity(id="a", layer_type=LayerType.APPLICATION, label="a"),
                CatalogEntity(id="s", layer_type=LayerType.SERVICE, label="s"),
            ],
            dependencies=[("a", "s")],
            isolated={"s"},
        )
        with pytest.raises(MalformedGraphError, match="isolated"):
            generate_stack_layout(catalog)

    def test_duplicate_entity(self):
        entity = CatalogEntity(id="a", layer_type=LayerType.APPLICATION, label="a")
        with pytest.raises(MalformedGraphError, match="duplicate"):
            generate_stack_layout(EntityCatalog(entities=[entity, entity]))


class TestCatalogYaml:
    def test_from_yaml(self, tmp_path: Path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "entities:\n"
            "  - {id: app-web, layer_type: application, label: web-shop}\n"
            "  - {id: svc-auth, layer_type: service, label: auth, notification_count: 1}\n"
            "  - {id: host-spare, layer_type: host, label: spare}\n"
            "dependencies:\n"
            "  - [app-web, svc-auth]\n"
            "isolated: [host-spare]\n"
        )
        catalog = EntityCatalog.from_yaml(path)
        assert catalog.entity_ids() == {"app-web", "svc-auth", "host-spare"}
        assert catalog.dependencies == [("app-web", "svc-auth")]
        assert catalog.entities[1].status is NodeStatus.CRITICAL

        layout = generate_stack_layout(catalog)
        assert layout.isolated_node_ids() == {"host-spare"}

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="file not found"):
            EntityCatalog.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_layer(self, tmp_path: Path):
        path = tmp_path / "catalog.yaml"
        path.write_text("entities:\n  - {id: x, layer_type: galaxy, label: x}\n")
        with pytest.raises(ConfigError):
            EntityCatalog.from_yaml(path)
