from __future__ import annotations

import json
from pathlib import Path

import pytest

from protoschema.cli import main


def _write(tmp_path: Path, name: str, src: str) -> Path:
    p = tmp_path / name
    p.write_text(src, encoding="utf-8")
    return p


def test_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = _write(tmp_path, "a.proto", 'syntax = "proto3"; package a; message M {} service S {}')
    assert main([str(p)]) == 0
    out = capsys.readouterr().out
    assert f"{p}: syntax=proto3 package=a types=1 services=1 extends=0" in out


def test_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = _write(
        tmp_path,
        "a.proto",
        "package a;\nmessage M {\n  optional int32 f = 1 [default = 3];\n  reserved 2 to 4, \"x\";\n}\n",
    )
    assert main([str(p), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    pf = payload[str(p)]
    assert pf["package_name"] == "a"
    assert pf["syntax"] is None
    msg = pf["types"][0]
    assert msg["qualified_name"] == "a.M"
    assert msg["fields"][0]["label"] == "optional"
    assert msg["fields"][0]["default_value"] == "3"
    assert msg["fields"][0]["location"]["line"] == 3
    assert msg["reserveds"][0]["values"] == [{"start": 2, "end": 4}, "x"]


def test_parse_error_exit_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = _write(tmp_path, "bad.proto", "package a;\npackage b;\n")
    assert main([str(p)]) == 1
    err = capsys.readouterr().err
    assert ":2:1: too many package names" in err
