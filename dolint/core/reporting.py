\
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .models import FileResult, RunResult, Violation

FORMATS = ("text", "json")


def format_violation(v: Violation, path: Path | str | None = None) -> str:
    location = f"{path or v.path or '<stdin>'}:{v.line}"
    if v.column is not None:
        location += f":{v.column}"
    return f"{location}: {v.rule_id} [{v.severity}] {v.message}"


class Reporter:
    """Render a run's results in a stable order and write report artifacts."""

    def __init__(self, result: RunResult) -> None:
        self.result = result

    @classmethod
    def for_file(cls, path: Path | str, violations: Sequence[Violation]) -> "Reporter":
        return cls(RunResult(files=(FileResult(path=Path(path), violations=list(violations)),)))

    @property
    def passed(self) -> bool:
        return self.result.passed

    def records(self) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for file_result in self.result.files:
            for v in sorted(file_result.violations, key=Violation.sort_key):
                record = v.to_dict()
                record["path"] = str(file_result.path)
                out.append(record)
        return out

    def errors(self) -> List[Dict[str, str]]:
        return [
            {"path": str(f.path), "message": f.error}
            for f in self.result.files
            if f.error is not None
        ]

    def summary_line(self) -> str:
        files = len(self.result.files)
        count = self.result.violation_count
        errors = self.result.error_count
        if self.passed:
            return f"All {files} file(s) passed."
        parts = [f"{count} violation(s) in {files} file(s)"]
        if errors:
            parts.append(f"{errors} file(s) could not be read")
        return "; ".join(parts) + "."

    def render_text(self) -> str:
        lines: List[str] = []
        for file_result in self.result.files:
            if file_result.error is not None:
                lines.append(f"{file_result.path}: error: {file_result.error}")
            lines.extend(
                format_violation(v, file_result.path)
                for v in sorted(file_result.violations, key=Violation.sort_key)
            )
        lines.append(self.summary_line())
        return "\n".join(lines)

    def render_json(self) -> str:
        payload = {
            "passed": self.passed,
            "files": len(self.result.files),
            "violations": self.records(),
            "errors": self.errors(),
        }
        return json.dumps(payload, indent=2)

    def render(self, fmt: str = "text") -> str:
        if fmt == "json":
            return self.render_json()
        if fmt == "text":
            return self.render_text()
        raise ValueError(f"Unsupported format: {fmt}")

    def index(self) -> List[Dict[str, Any]]:
        return [
            {
                "path": str(f.path),
                "violations": len(f.violations),
                "error": f.error,
                "passed": f.passed,
            }
            for f in self.result.files
        ]

    def write_all(self, out_dir: Path) -> Dict[str, int]:
        out_dir.mkdir(parents=True, exist_ok=True)
        records = self.records()
        (out_dir / "violations.json").write_text(json.dumps(records, indent=2))
        (out_dir / "index.json").write_text(json.dumps(self.index(), indent=2))

        lines = ["# Style Check Report", "", self.summary_line(), ""]
        for file_result in self.result.files:
            lines.extend(_markdown_section(file_result))
        (out_dir / "report.md").write_text("\n".join(lines))
        return {"violations": len(records), "artifacts": 3}


def _markdown_section(file_result: FileResult) -> Sequence[str]:
    if file_result.passed:
        return []
    lines = [f"## {file_result.path}", ""]
    if file_result.error is not None:
        lines.append(f"- **error**: {file_result.error}")
    for v in sorted(file_result.violations, key=Violation.sort_key):
        col = f":{v.column}" if v.column is not None else ""
        lines.append(f"- **line**: {v.line}{col}  ")
        lines.append(f"  **rule**: `{v.rule_id}` ({v.severity})  ")
        lines.append(f"  **message**: {v.message}  ")
    lines.append("")
    return lines
