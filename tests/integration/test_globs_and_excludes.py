from pathlib import Path
import json
from .conftest import run_cli, assert_exit_ok, assert_exit_failed

def _paths(proc):
    payload = json.loads(proc.stdout)
    return {Path(v["path"]).name for v in payload["violations"]}

def test_glob_pattern_is_expanded(dataset_dir: Path):
    # quoted pattern, expanded by dolint rather than a shell
    proc = run_cli(["check", str(dataset_dir / "*.do"), "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    assert _paths(proc) == {"messy.do", "unclosed.do"}

def test_exclude_dirs(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir, "--exclude", "vendor,legacy", "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    assert "third_party.do" not in _paths(proc)
    assert "Bad-Name.do" not in _paths(proc)

def test_rule_selection_limits_checks(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "messy.do", "--rules", "line-length,hard-tab", "--no-progress"])
    assert_exit_ok(proc)

def test_disable_rules(dataset_dir: Path):
    proc = run_cli([
        "check", dataset_dir / "vendor" / "third_party.do",
        "--disable", "command-abbreviation", "--no-progress",
    ])
    assert_exit_ok(proc)
