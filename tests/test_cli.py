"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from devcontrol.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def deps_file(tmp_path):
    path = tmp_path / "deps.json"
    path.write_text(json.dumps({
        "dependencies": [
            {"id": "1", "sourceServiceName": "checkout", "targetServiceName": "payments", "isCritical": True},
            {"id": "2", "sourceServiceName": "payments", "targetServiceName": "checkout"},
        ],
    }))
    return path


class TestCLI:
    """Tests for devcontrol commands."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_info(self, runner):
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 0
        assert "DevControl Exports" in result.output

    def test_export_csv_and_inspect(self, runner, deps_file, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(main, ["export", "csv", str(deps_file), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "Detected 1 circular dependency" in result.output
        files = list(out.glob("devcontrol-dependencies-*.csv"))
        assert len(files) == 1

        result = runner.invoke(main, ["inspect", str(files[0])])
        assert result.exit_code == 0
        assert "checkout" in result.output
        assert "Circular dependencies" in result.output

    def test_export_all(self, runner, deps_file, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(main, ["export", "all", str(deps_file), "-o", str(out)])

        assert result.exit_code == 0, result.output
        suffixes = sorted(p.suffix for p in out.iterdir())
        assert suffixes == [".csv", ".pdf", ".png"]

    def test_export_pdf_no_graph(self, runner, deps_file, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(main, ["export", "pdf", str(deps_file), "-o", str(out), "--no-graph"])

        assert result.exit_code == 0, result.output
        assert len(list(out.glob("*.pdf"))) == 1

    def test_export_png_empty_graph_fails(self, runner, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"dependencies": []}))

        result = runner.invoke(main, ["export", "png", str(path), "-o", str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "Graph is empty" in result.output

    def test_init_config(self, runner, tmp_path):
        path = tmp_path / "settings.yaml"

        result = runner.invoke(main, ["init-config", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(main, ["init-config", str(path)])
        assert result.exit_code == 1

    def test_config_option(self, runner, deps_file, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("product: acme\ndownloads_dir: exports\n")

        result = runner.invoke(main, ["export", "csv", str(deps_file), "-c", str(config)])

        assert result.exit_code == 0, result.output
        assert len(list((tmp_path / "exports").glob("acme-dependencies-*.csv"))) == 1
