"""
Unit tests for the 'layout' command.
"""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from topomap.cli.commands.layout import layout
from topomap.core.exceptions import MalformedGraphError


class TestLayoutCommand:
    """Integration tests for the layout CLI."""

    def test_default_stack_summary(self):
        result = CliRunner().invoke(layout, [])
        assert result.exit_code == 0
        assert "Stack layout" in result.output
        assert "41 nodes, 49 edges, 4 isolated" in result.output

    def test_json_output(self):
        result = CliRunner().invoke(layout, ["--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["mode"] == "stack"
        assert data["layer_offsets"]["service"] == 250.0
        assert len(data["nodes"]) == 41

    def test_cluster_layer_with_seed(self):
        runner = CliRunner()
        first = runner.invoke(layout, ["--layer", "host", "--seed", "3", "--json"])
        second = runner.invoke(layout, ["--layer", "host", "--seed", "3", "--json"])
        assert first.exit_code == 0
        assert first.output == second.output
        data = json.loads(first.output)
        assert data["mode"] == "cluster"
        assert data["layer_offsets"] is None
        assert len(data["nodes"]) == 31

    def test_invalid_layer_rejected_by_click(self):
        result = CliRunner().invoke(layout, ["--layer", "galaxy"])
        assert result.exit_code == 2

    def test_config_error(self, tmp_path: Path):
        result = CliRunner().invoke(layout, ["--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "file not found" in result.output

    @patch("topomap.cli.commands.layout.generate_stack_layout")
    def test_malformed_graph_reported(self, mock_generate):
        mock_generate.side_effect = MalformedGraphError("edge 'e-a-b' references unknown node(s): b")
        result = CliRunner().invoke(layout, [])
        assert result.exit_code == 1
        assert "unknown node" in result.output

    def test_empty_catalog_warns(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("entities: []\n")
        result = CliRunner().invoke(layout, ["--catalog", str(path)])
        assert result.exit_code == 0
        assert "no entities" in result.output
