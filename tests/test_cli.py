import json
from pathlib import Path

from typer.testing import CliRunner

from dxtflow.cli import app

runner = CliRunner()


def _new(tmp_path: Path, template="source-sink") -> Path:
    result = runner.invoke(app, ["new", "--template", template, "--outdir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    (path,) = tmp_path.glob("*.json")
    return path


def test_new_then_validate(tmp_path: Path):
    path = _new(tmp_path)
    assert path.name == "Source_to_Sink.json"
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 0, result.output


def test_new_unknown_template(tmp_path: Path):
    result = runner.invoke(app, ["new", "--template", "nope", "--outdir", str(tmp_path)])
    assert result.exit_code == 1


def test_validate_reports_schema_errors(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"name": "T", "nodes": [{"id": "n1", "type": "Source"}], "customNodeDefs": [], "wires": []}))
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1


def test_validate_reports_dangling_wire(tmp_path: Path):
    path = _new(tmp_path)
    data = json.loads(path.read_text())
    data["nodes"] = data["nodes"][:1]
    path.write_text(json.dumps(data))
    assert runner.invoke(app, ["validate", str(path)]).exit_code == 1


def test_validate_palette(tmp_path: Path):
    good = tmp_path / "p.json"
    good.write_text('[{"name": "Map", "inputs": ["x"], "outputs": ["y"]}]')
    assert runner.invoke(app, ["validate", "--palette", str(good)]).exit_code == 0
    bad = tmp_path / "q.json"
    bad.write_text("[1, 2")
    assert runner.invoke(app, ["validate", "--palette", str(bad)]).exit_code == 1


def test_explain(tmp_path: Path):
    path = _new(tmp_path)
    result = runner.invoke(app, ["explain", str(path)])
    assert result.exit_code == 0
    assert "node-source [Source]" in result.output
    assert "node-sink.in" in result.output


def test_explain_invalid_file(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{")
    assert runner.invoke(app, ["explain", str(path)]).exit_code == 1


def test_import_and_export_palette(tmp_path: Path):
    diagram = _new(tmp_path)
    palette = tmp_path / "palette.json"
    palette.write_text('[{"name": "Map", "inputs": ["x"], "outputs": ["y"]}, {"name": "Source", "inputs": [], "outputs": ["o"]}]')

    result = runner.invoke(app, ["import-palette", str(diagram), str(palette)])
    assert result.exit_code == 0, result.output
    names = [d["name"] for d in json.loads(diagram.read_text())["customNodeDefs"]]
    assert names == ["Map", "Source1"]

    out = tmp_path / "exported.palette"
    result = runner.invoke(app, ["export-palette", str(diagram), str(out)])
    assert result.exit_code == 0, result.output
    assert [d["name"] for d in json.loads(out.read_text())] == ["Map", "Source1"]


def test_non_utf8_file_is_reported_not_crashed(tmp_path: Path):
    path = tmp_path / "latin.json"
    path.write_bytes(b'{"name": "\xff\xfe"}')
    for args in (["explain", str(path)], ["validate", str(path)], ["export-palette", str(path), str(tmp_path / "p.json")]):
        result = runner.invoke(app, args)
        assert result.exit_code == 1, args
        assert not isinstance(result.exception, UnicodeDecodeError)
