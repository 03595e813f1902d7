"""Unit tests for the render CLI command."""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from structgraph import __version__
from structgraph.cli import app


class TestRenderCLI:
    """Test render command."""

    def test_render_to_stdout(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Person", "sample_structs:Address", "-F", "Address",
        ])

        assert result.exit_code == 0
        assert result.stdout.startswith("digraph recordmapping {")
        assert '"cluster_Person"' in result.stdout
        assert "<Name> Name|{<Address> Address |<Address_City> City }" in result.stdout

    def test_render_with_connections(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Person", "sample_structs:Address",
            "--connect", "Person.Address->Address.City=lives in",
            "--connect", "Address->Person",
            "--undirected",
        ])

        assert result.exit_code == 0
        assert result.stdout.startswith("graph recordmapping {")
        assert '"Person":Address -- "Address":City [ label = "lives in" ];' in result.stdout
        assert '"Address" -- "Person";' in result.stdout

    def test_render_rank_and_collapse(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Account",
            "--rank", "Account=3", "--collapse", "Account",
        ])

        assert result.exit_code == 0
        assert "  rank = 3" in result.stdout
        assert '<fields> 4 ...' in result.stdout

    def test_render_to_file(self, tmp_path):
        runner = CliRunner()
        out_file = tmp_path / "graph.dot"
        result = runner.invoke(app, [
            "render", "sample_structs:Point", "--out", str(out_file),
        ])

        assert result.exit_code == 0
        assert out_file.read_text(encoding="utf-8").startswith("digraph recordmapping {")

    def test_render_png_runs_renderer(self, tmp_path):
        runner = CliRunner()
        with patch("structgraph.graph.framework.subprocess.run") as mock_run:
            result = runner.invoke(app, [
                "render", "sample_structs:Point", "--out", str(tmp_path / "points.png"), "--png",
            ])

        assert result.exit_code == 0
        assert (tmp_path / "points.dot").exists()
        mock_run.assert_called_once()

    def test_png_requires_out(self):
        runner = CliRunner()
        result = runner.invoke(app, ["render", "sample_structs:Point", "--png"])
        assert result.exit_code == 1

    def test_render_with_config_file(self, tmp_path):
        config_file = tmp_path / ".structgraph.json"
        config_file.write_text(json.dumps({"layout": {"graphName": "configured"}}))

        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Point", "--config", str(config_file),
        ])

        assert result.exit_code == 0
        assert result.stdout.startswith("digraph configured {")

    def test_invalid_target_format(self):
        runner = CliRunner()
        result = runner.invoke(app, ["render", "sample_structs.Point"])
        assert result.exit_code == 1

    def test_unknown_module(self):
        runner = CliRunner()
        result = runner.invoke(app, ["render", "no_such_module_xyz:Point"])
        assert result.exit_code == 1

    def test_non_structure_target(self):
        runner = CliRunner()
        result = runner.invoke(app, ["render", "json:JSONDecoder"])
        assert result.exit_code == 1

    def test_unknown_connection_endpoint(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Point", "--connect", "Point.x->Missing.y",
        ])
        assert result.exit_code == 1

    def test_malformed_rank(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Point", "--rank", "Point=high",
        ])
        assert result.exit_code == 1

    def test_strict_anchor_collision_reported(self, tmp_path):
        config_file = tmp_path / ".structgraph.json"
        config_file.write_text(json.dumps({"label": {"strictAnchors": True}}))

        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Colliding", "-F", "a", "--config", str(config_file),
        ])
        assert result.exit_code == 1

    def test_same_named_targets_all_rendered(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Item", "deferred_structs:Item",
        ])

        assert result.exit_code == 0
        assert result.stdout.count('"cluster_Item"') == 2
        assert "<sku> sku|<quantity> quantity" in result.stdout
        assert "<label> label" in result.stdout

    def test_repeated_target_rendered_twice(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Point", "sample_structs:Point",
        ])

        assert result.exit_code == 0
        assert result.stdout.count('"cluster_Point"') == 2

    def test_ambiguous_connection_endpoint(self):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Item", "deferred_structs:Item",
            "--connect", "Item->Item",
        ])
        assert result.exit_code == 1
        assert "ambiguous" in result.output

    def test_missing_config_file(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(app, [
            "render", "sample_structs:Point", "--config", str(tmp_path / "missing.json"),
        ])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
