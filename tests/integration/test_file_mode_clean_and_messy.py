from pathlib import Path
import json
from .conftest import run_cli, assert_exit_ok, assert_exit_failed

def test_clean_file_passes(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "clean.do", "--no-progress"])
    assert_exit_ok(proc)
    assert "All 1 file(s) passed." in proc.stdout

def test_messy_file_reports_each_rule(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "messy.do", "--no-progress", "--format", "json"])
    assert_exit_failed(proc)

    payload = json.loads(proc.stdout)
    assert payload["passed"] is False
    found = [(v["line"], v["rule_id"]) for v in payload["violations"]]
    assert found == [
        (1, "comment-marker"),
        (2, "naming"),
        (2, "operator-spacing"),
        (3, "command-abbreviation"),
        (4, "loop-brace"),
        (5, "command-abbreviation"),
        (5, "path-separator"),
        (7, "semicolon"),
    ]
    for v in payload["violations"]:
        assert Path(v["path"]).name == "messy.do"
        assert v["message"]

def test_text_output_lists_locations(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "messy.do", "--no-progress"])
    assert_exit_failed(proc)
    assert "messy.do:2:9: operator-spacing" in proc.stdout
    assert "8 violation(s) in 1 file(s)." in proc.stdout
