"""Tests for the querymap command line."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from querymap.cli import main

SCHEMA = {
    "type": "object",
    "fields": {
        "num": {"type": "number", "key": "n"},
        "tags": {"type": "array", "item": {"type": "string", "key": "tag"}},
    },
}


@pytest.fixture()
def schema_path(tmp_path: Path) -> Path:
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(SCHEMA))
    return path


def test_parse_success(schema_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["parse", "--schema", str(schema_path), "n=1.5&tag=a&tag=b%20c"])
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["status"] == "success"
    assert out["data"] == {"num": 1.5, "tags": ["a", "b c"]}


def test_parse_warning_and_strict(schema_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["parse", "--schema", str(schema_path), "n=1&n=2"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["status"] == "warning"
    assert out["kinds"] == {"Key n has remaining unparsed instances": "unconsumed_input"}

    assert main(["parse", "--schema", str(schema_path), "--strict", "n=1&n=2"]) == 1


def test_parse_error(schema_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["parse", "--schema", str(schema_path), "tag=a"])
    captured = capsys.readouterr()
    out = json.loads(captured.out)
    assert code == 1
    assert out["status"] == "error"
    assert "data" not in out
    assert list(out["kinds"].values()) == ["missing_parameter"]
    assert "Parse failed" in captured.err


def test_serialize(schema_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    value_path = tmp_path / "value.json"
    value_path.write_text(json.dumps({"num": 2, "tags": ["x y"]}))
    code = main(["serialize", "--schema", str(schema_path), "--value", str(value_path)])
    assert code == 0
    assert capsys.readouterr().out.strip() == "n=2&tag=x%20y"


def test_serialize_value_mismatch(schema_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    value_path = tmp_path / "value.json"
    value_path.write_text(json.dumps({"tags": []}))
    code = main(["serialize", "--schema", str(schema_path), "--value", str(value_path)])
    assert code == 2
    assert "does not match schema" in capsys.readouterr().err


def test_serialize_value_without_optional_field(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    schema_path = tmp_path / "schema.json"
    schema_path.write_text(json.dumps({
        "type": "object",
        "fields": {
            "query": {"type": "string", "key": "q"},
            "sort": {"type": "optional", "inner": {"type": "string", "key": "sort"}},
        },
    }))
    value_path = tmp_path / "value.json"
    value_path.write_text(json.dumps({"query": "x"}))
    code = main(["serialize", "--schema", str(schema_path), "--value", str(value_path)])
    assert code == 0
    assert capsys.readouterr().out.strip() == "q=x"


def test_check(schema_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", "--schema", str(schema_path)]) == 0
    assert json.loads(capsys.readouterr().out) == SCHEMA


def test_invalid_schema(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"type": "wat"}))
    assert main(["check", "--schema", str(path)]) == 2
    assert "invalid schema" in capsys.readouterr().err


def test_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["check", "--schema", str(tmp_path / "nope.json")]) == 2
    assert "cannot read input" in capsys.readouterr().err


def test_invalid_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    assert main(["check", "--schema", str(path)]) == 2
    assert "invalid JSON" in capsys.readouterr().err
