from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from pedebug.cli import app
from pe_builder import RDATA_RAW_PTR, _build_pe_with_debug, _entry, _rsds

runner = CliRunner()


def _write_sample(tmp_path: Path) -> Path:
    cv_rel = 0x100
    p = tmp_path / "sample.exe"
    p.write_bytes(_build_pe_with_debug(_entry(2, RDATA_RAW_PTR + cv_rel) + _entry(0xFFFF, 0), extra={cv_rel: _rsds()}))
    return p


def test_info_json_report(tmp_path: Path):
    p = _write_sample(tmp_path)
    result = runner.invoke(app, ["info", str(p), "--json"])
    assert result.exit_code == 0, result.output

    report = json.loads(result.stdout)
    assert report["present"] is True
    assert len(report["entries"]) == 2
    first, second = report["entries"]
    assert first["debug_type"] == "CODEVIEW"
    assert first["code_view"]["pdb_file_name"] == "app.pdb"
    assert first["fields"]["pointer_to_raw_data"] == RDATA_RAW_PTR + 0x100
    assert first["physical_locations"][-1] == {"offset": RDATA_RAW_PTR, "size": 28}
    assert second["debug_type"] == "UNKNOWN"
    assert second["code_view"] is None
    assert any(e["code"] == "W_DEBUG_TYPE_UNKNOWN" for e in report["errors"])


def test_info_text_report(tmp_path: Path):
    p = _write_sample(tmp_path)
    result = runner.invoke(app, ["info", str(p)])
    assert result.exit_code == 0, result.output
    assert "Debug Section" in result.stdout
    assert "app.pdb" in result.stdout


def test_info_non_pe_exits_nonzero(tmp_path: Path):
    p = tmp_path / "benign.txt"
    p.write_text("hello", encoding="utf-8")
    result = runner.invoke(app, ["info", str(p)])
    assert result.exit_code == 1


def test_info_missing_path(tmp_path: Path):
    result = runner.invoke(app, ["info", str(tmp_path / "nope.exe")])
    assert result.exit_code != 0


def test_types_lists_categories():
    result = runner.invoke(app, ["types"])
    assert result.exit_code == 0
    assert "CODEVIEW" in result.stdout
