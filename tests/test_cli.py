"""Tests for the keys / check / annotate commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from annotkit.cli import cli
from annotkit.commands.annotate_cmd import run_annotate, run_check, run_keys


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


CYCLIC = """
document_type = "broken"

[[annotations]]
node_type = "Library"

[[annotations.attributes]]
name = "a"
operation = "type_path"
requires = "b"

[[annotations.attributes]]
name = "b"
operation = "type_path"
requires = "a"
"""


def test_keys_json(config_path: Path, capsys) -> None:
    assert run_keys(config_path, output_json=True) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["document_type"] == "library"
    rows = {row["key"]: row for row in data["keys"]}
    assert set(rows) == {"book-count", "derived-id", "shelf", "type-path"}
    assert rows["derived-id"]["requires"] == ["type-path"]
    assert rows["derived-id"]["node_types"] == ["Book", "Shelf"]
    assert rows["type-path"]["operations"] == ["TypePathAnnotator"]


def test_keys_table(config_path: Path, capsys) -> None:
    assert run_keys(config_path) == 0
    output = capsys.readouterr().out
    assert "type-path" in output
    assert "book-count" in output


def test_check_prints_rounds(config_path: Path, capsys) -> None:
    assert run_check(config_path) == 0

    captured = capsys.readouterr()
    assert "4 key(s) configured" in captured.err
    assert "Round 1: book-count, shelf, type-path" in captured.out
    assert "Round 2: derived-id" in captured.out


def test_check_selected_key(config_path: Path, capsys) -> None:
    assert run_check(config_path, ["derived-id"]) == 0

    out = capsys.readouterr().out
    assert "Round 1: type-path" in out
    assert "book-count" not in out


def test_check_unknown_key(config_path: Path, capsys) -> None:
    assert run_check(config_path, ["nope"]) == 1
    assert "Unknown key(s): nope" in capsys.readouterr().err


def test_check_cyclic_config(tmp_path: Path, capsys) -> None:
    path = _write(tmp_path / "cyclic.toml", CYCLIC)
    assert run_check(path) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_annotate_json(config_path: Path, model_path: Path, capsys) -> None:
    assert run_annotate(config_path, model_path, output_json=True) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["executed_keys"] == ["book-count", "derived-id", "shelf", "type-path"]

    nodes = {row["id"]: row["annotations"] for row in data["nodes"]}
    assert nodes["lib"] == {"book-count": "2.0", "type-path": "/Library"}
    assert nodes["s2"] == {"derived-id": "Shelf/Poetry", "type-path": "/Library/Shelf"}
    assert nodes["b1"] == {
        "derived-id": "Book/Dune",
        "shelf": "</Library/Shelf>",
        "type-path": "/Library/Shelf/Book",
    }


def test_annotate_selected_key_and_remove(config_path: Path, model_path: Path, capsys) -> None:
    code = run_annotate(config_path, model_path, ["derived-id"], ["derived-id"], output_json=True)
    assert code == 0

    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert data["executed_keys"] == ["type-path"]
    assert "Removed derived-id" in captured.err


def test_annotate_remove_required_key_fails(config_path: Path, model_path: Path, capsys) -> None:
    assert run_annotate(config_path, model_path, remove_keys=["type-path"]) == 1
    assert "Annotation failed" in capsys.readouterr().err


def test_annotate_unknown_key(config_path: Path, model_path: Path, capsys) -> None:
    assert run_annotate(config_path, model_path, ["ghost"]) == 1
    assert "ghost" in capsys.readouterr().err


def test_annotate_bad_model(config_path: Path, tmp_path: Path, capsys) -> None:
    model = _write(tmp_path / "model.json", "[1, 2")
    assert run_annotate(config_path, model) == 2
    assert "Model error" in capsys.readouterr().err


def test_cli_rejects_missing_config(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "absent.toml"), "keys"])
    assert result.exit_code == 2


def test_cli_annotate_exit_codes(config_path: Path, model_path: Path) -> None:
    runner = CliRunner()

    ok = runner.invoke(cli, ["-c", str(config_path), "annotate", str(model_path), "--json"])
    assert ok.exit_code == 0
    assert "Book/Dune" in ok.output

    failed = runner.invoke(cli, ["-c", str(config_path), "annotate", str(model_path), "--remove", "type-path"])
    assert failed.exit_code == 1
