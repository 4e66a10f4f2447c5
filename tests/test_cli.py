from __future__ import annotations

"""CLI 子命令测试（通过子进程运行 python -m unirank.cli）。"""

import json
import subprocess
import sys
from pathlib import Path

import unirank.config as cfg

UTHM = "Universiti Tun Hussein Onn University of Malaysia (UTHM)"


def _run_cli(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "unirank.cli", *args],
        cwd=cfg.PROJECT_ROOT,
        capture_output=True,
        text=True,
    )


def test_cli_help_shows_subcommands() -> None:
    proc = _run_cli(["--help"])
    assert proc.returncode == 0
    for name in ("calc", "import", "sample", "export", "load"):
        assert name in proc.stdout


def test_cli_calc_prints_result_json() -> None:
    proc = _run_cli(["calc", "fsr", "--staff", "100", "--students", "2000"])
    assert proc.returncode == 0
    assert json.loads(proc.stdout) == {"ratio": 20.0, "percentage": 5.0, "score": 100.0}

    proc = _run_cli(["calc", "isr", "--international-students", "30", "--total-students", "100"])
    assert json.loads(proc.stdout) == {"ratio": 0.3, "percentage": 30.0, "score": 90.0}


def test_cli_calc_invalid_input_exits_non_zero() -> None:
    proc = _run_cli(["calc", "ifr", "--international-staff", "150", "--total-staff", "100"])
    assert proc.returncode == 1
    assert "cannot exceed" in proc.stderr


def test_cli_sample_import_load_roundtrip(tmp_path: Path) -> None:
    """sample -> export（追加一所学校）-> import -> load --csv。"""
    db = str(tmp_path / "unirank.sqlite3")
    sample = tmp_path / "sample.xlsx"
    assert _run_cli(["sample", str(sample)]).returncode == 0
    assert sample.exists()

    records_json = tmp_path / "records.json"
    records_json.write_text(
        json.dumps([{"Name": UTHM, "Rank": 801, "AR SCORE": "12.5", "Size": "M", "Column2": 20.3456}]),
        encoding="utf-8",
    )
    exported = tmp_path / "uthm.xlsx"
    assert _run_cli(["export", str(records_json), str(exported)]).returncode == 0

    for path in (sample, exported):
        proc = _run_cli(["--db", db, "import", str(path), "--user", "u-1"])
        assert proc.returncode == 0, proc.stderr
    assert "Successfully imported 1 records" in proc.stdout

    out_csv = tmp_path / "university-data.csv"
    proc = _run_cli(["--db", db, "load", UTHM, "--user", "u-1", "--csv", str(out_csv)])
    assert proc.returncode == 0, proc.stderr
    record = json.loads(proc.stdout)
    assert record["ranking"] == 801
    assert record["academic_reputation"] == 12.5
    assert record["overall_score"] == 20.35
    assert "size,M" in out_csv.read_text(encoding="utf-8").splitlines()


def test_cli_import_errors_are_reported(tmp_path: Path) -> None:
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"not a workbook")
    proc = _run_cli(["--db", str(tmp_path / "db.sqlite3"), "import", str(bad), "--user", "u-1"])
    assert proc.returncode == 1
    assert "Error: Unable to read Excel file" in proc.stderr

    proc = _run_cli(["--db", str(tmp_path / "db.sqlite3"), "load", "Nobody", "--user", "u-1"])
    assert proc.returncode == 1
    assert "No data found for Nobody" in proc.stderr


def test_cli_export_bad_records_file_is_reported(tmp_path: Path) -> None:
    bad = tmp_path / "records.json"
    bad.write_text("{not json", encoding="utf-8")
    proc = _run_cli(["export", str(bad), str(tmp_path / "out.xlsx")])
    assert proc.returncode == 1
    assert "Error: cannot read records file" in proc.stderr
    assert "Traceback" not in proc.stderr

    proc = _run_cli(["export", str(tmp_path / "missing.json"), str(tmp_path / "out.xlsx")])
    assert proc.returncode == 1
    assert "Error: cannot read records file" in proc.stderr
