from pathlib import Path
import json
import os
from .conftest import run_cli, assert_exit_failed

def test_missing_file_does_not_stop_other_files(dataset_dir: Path):
    missing = dataset_dir / "missing.do"
    proc = run_cli(["check", missing, dataset_dir / "clean.do", "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    payload = json.loads(proc.stdout)
    assert payload["violations"] == []
    assert [Path(e["path"]).name for e in payload["errors"]] == ["missing.do"]
    assert "not found" in payload["errors"][0]["message"]
    assert "Skipping" in proc.stderr

def test_binary_file_does_not_crash(dataset_dir: Path):
    bin_path = dataset_dir / "binary.do"
    bin_path.write_bytes(b"\x00" + os.urandom(1024))
    proc = run_cli(["check", bin_path, dataset_dir / "clean.do", "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    payload = json.loads(proc.stdout)
    assert [Path(e["path"]).name for e in payload["errors"]] == ["binary.do"]

def test_negative_line_length_is_fatal(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "clean.do", "--max-line-length", "-5", "--no-progress"])
    assert proc.returncode == 2
    assert "must be positive" in proc.stderr
    assert proc.stdout == ""

def test_unknown_rule_in_config_file_is_fatal(dataset_dir: Path, tmp_path: Path):
    config = tmp_path / "dolint.json"
    config.write_text(json.dumps({"enabled_rules": ["line-length", "no-such-rule"]}))
    proc = run_cli(["check", dataset_dir / "clean.do", "--config", config, "--no-progress"])
    assert proc.returncode == 2
    assert "no-such-rule" in proc.stderr

def test_config_file_thresholds(dataset_dir: Path, tmp_path: Path):
    config = tmp_path / "dolint.json"
    config.write_text(json.dumps({"max_line_length": 20, "enabled_rules": ["line-length"]}))
    proc = run_cli(["check", dataset_dir / "clean.do", "--config", config, "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    payload = json.loads(proc.stdout)
    assert payload["violations"]
    assert {v["rule_id"] for v in payload["violations"]} == {"line-length"}

def test_empty_rule_selection_is_fatal(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "messy.do", "--rules", "", "--no-progress"])
    assert proc.returncode == 2
    assert "No rules left" in proc.stderr
