import json

import pytest
from typer.testing import CliRunner

from docgraph.cli.main import app

runner = CliRunner()


@pytest.fixture
def project_dir(tmp_path, monkeypatch, restore_logging):
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "src"
    src.mkdir()
    (src / "point.ts").write_text(
        "/** A point. */\n"
        "export interface Point {\n"
        "  x: number;\n"
        "  y: number;\n"
        "}\n"
        "export function norm(p: Point): number {\n"
        "  return Math.hypot(p.x, p.y);\n"
        "}\n"
    )
    return tmp_path


class TestConvert:
    def test_writes_the_graph(self, project_dir):
        out = project_dir / "out" / "docs.json"
        result = runner.invoke(app, ["convert", "src", "--out", str(out)])
        assert result.exit_code == 0, result.output
        assert "Wrote" in result.output

        data = json.loads(out.read_text())
        assert [child["name"] for child in data["children"]] == ["Point", "norm"]
        norm = data["children"][1]
        parameter = norm["signatures"][0]["parameters"][0]
        assert parameter["type"]["id"] == data["children"][0]["id"]

    def test_modules_mode(self, project_dir):
        out = project_dir / "docs.json"
        result = runner.invoke(app, ["convert", "src", "-o", str(out), "-m", "modules"])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        module = data["children"][0]
        assert module["name"] == '"point"'
        assert [child["name"] for child in module["children"]] == ["Point", "norm"]

    def test_settings_from_config_file(self, project_dir):
        (project_dir / "docgraph.yaml").write_text("name: Geometry\nentry_points: [src]\nout: graph.json\n")
        result = runner.invoke(app, ["convert"])
        assert result.exit_code == 0, result.output
        assert json.loads((project_dir / "graph.json").read_text())["name"] == "Geometry"

    def test_unknown_mode(self, project_dir):
        result = runner.invoke(app, ["convert", "src", "--mode", "packages"])
        assert result.exit_code == 1
        assert "Unknown mode" in result.output

    def test_missing_input(self, project_dir):
        result = runner.invoke(app, ["convert", "missing.ts"])
        assert result.exit_code == 1
        assert "FRONTEND_READ_ERROR" in result.output

    def test_no_input_at_all(self, project_dir):
        result = runner.invoke(app, ["convert"])
        assert result.exit_code == 1
        assert "FRONTEND_NO_INPUT" in result.output

    def test_bad_config(self, project_dir):
        result = runner.invoke(app, ["convert", "src", "--config", "nope.yaml"])
        assert result.exit_code == 1
        assert "CONFIG_PARSE_ERROR" in result.output

    def test_diagnostics_are_listed(self, project_dir):
        (project_dir / "src" / "dup.ts").write_text(
            "export class Box {\n"
            "  get size() { return 1; }\n"
            "  get size() { return 2; }\n"
            "}\n"
        )
        result = runner.invoke(app, ["convert", "src", "--out", "docs.json"])
        assert result.exit_code == 0, result.output
        assert "1 diagnostics" in result.output


def test_outline(project_dir):
    result = runner.invoke(app, ["outline", "src"])
    assert result.exit_code == 0, result.output
    assert "Point" in result.output
    assert "norm" in result.output


def test_search_index(project_dir):
    result = runner.invoke(app, ["search-index", "src"])
    assert result.exit_code == 0, result.output
    rows = json.loads((project_dir / "search.json").read_text())
    assert [row["fullName"] for row in rows] == ["Point", "Point.x", "Point.y", "norm"]
