from pathlib import Path
import json
from .conftest import run_cli, load_json, assert_exit_failed, assert_file

def test_dir_mode_writes_artifacts(dataset_dir: Path, out_dir: Path):
    proc = run_cli(["check", dataset_dir, "--no-progress", "--out", out_dir])
    assert_exit_failed(proc)

    assert_file(out_dir / "report.md")
    index = load_json(assert_file(out_dir / "index.json"))
    by_name = {Path(item["path"]).name: item for item in index}
    # notes.txt does not match the default include globs
    assert set(by_name) == {
        "clean.do", "delimit.do", "messy.do", "unclosed.do", "Bad-Name.do", "third_party.do",
    }
    assert by_name["clean.do"]["passed"] is True
    assert by_name["delimit.do"]["passed"] is True
    assert by_name["messy.do"]["violations"] == 8

    violations = load_json(assert_file(out_dir / "violations.json"))
    assert len(violations) == 8 + 1 + 1 + 1
    for item in violations:
        assert {"path", "line", "column", "rule_id", "severity", "message"} <= set(item)

def test_unclosed_block_comment_is_reported_as_parse_error(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "unclosed.do", "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    payload = json.loads(proc.stdout)
    assert [(v["rule_id"], v["line"], v["severity"]) for v in payload["violations"]] == [
        ("parse-error", 3, "error"),
    ]

def test_file_naming_in_subdirectory(dataset_dir: Path):
    proc = run_cli(["check", dataset_dir / "legacy", "--no-progress", "--format", "json"])
    assert_exit_failed(proc)
    payload = json.loads(proc.stdout)
    assert [v["rule_id"] for v in payload["violations"]] == ["file-naming"]
