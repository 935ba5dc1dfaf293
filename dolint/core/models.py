\
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class Region(str, Enum):
    CODE = "code"
    LINE_COMMENT = "line-comment"
    BLOCK_COMMENT = "block-comment"
    STRING = "string"


# one character per region, used for SourceLine.mask
REGION_CODES: Dict[Region, str] = {
    Region.CODE: "c",
    Region.LINE_COMMENT: "l",
    Region.BLOCK_COMMENT: "b",
    Region.STRING: "s",
}
CODE_REGIONS: Dict[str, Region] = {v: k for k, v in REGION_CODES.items()}


@dataclass(frozen=True)
class SourceLine:
    """A physical line of a do-file with its region classification.

    ``mask`` holds one region code per character of ``text`` so that rules can
    tell code from comments and string literals column by column.
    """
    text: str
    number: int
    region: Region
    mask: str
    continued: bool = False  # statement started on an earlier line
    semicolon_mode: bool = False  # under `#delimit ;`

    @property
    def code(self) -> str:
        """The text with every non-code character blanked, columns preserved."""
        return "".join(
            ch if m == "c" else " " for ch, m in zip(self.text, self.mask)
        )

    @property
    def content(self) -> str:
        """The text with only comments blanked; string literals stay as operands."""
        return "".join(
            ch if m in ("c", "s") else " " for ch, m in zip(self.text, self.mask)
        )

    def region_at(self, col: int) -> Region:
        return CODE_REGIONS[self.mask[col]]

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def comment_text(self) -> str:
        return "".join(
            ch for ch, m in zip(self.text, self.mask) if m in ("l", "b")
        )


@dataclass(frozen=True)
class Violation:
    rule_id: str
    line: int
    message: str
    severity: str = "warning"
    column: Optional[int] = None
    path: Optional[str] = None

    def sort_key(self) -> Tuple[int, str, int]:
        return (self.line, self.rule_id, self.column or 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "rule_id": self.rule_id,
            "severity": self.severity,
            "message": self.message,
        }


DEFAULT_INCLUDE: Tuple[str, ...] = ("*.do", "*.ado", "*.doh", "*.mata")
DEFAULT_EXCLUDE: Tuple[str, ...] = (".git", ".venv", "venv", "__pycache__", ".tox")


@dataclass(frozen=True)
class RuleConfig:
    max_line_length: int = 80
    min_command_chars: int = 3
    enabled_rules: Optional[FrozenSet[str]] = None  # None enables every rule
    include: Tuple[str, ...] = DEFAULT_INCLUDE
    exclude: Tuple[str, ...] = DEFAULT_EXCLUDE
    max_file_size: int = 5_000_000

    def is_enabled(self, rule_id: str) -> bool:
        return self.enabled_rules is None or rule_id in self.enabled_rules

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["enabled_rules"] = "all" if self.enabled_rules is None else sorted(self.enabled_rules)
        data["include"] = list(self.include)
        data["exclude"] = list(self.exclude)
        return data


@dataclass
class FileResult:
    path: Path
    violations: List[Violation] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return not self.violations and self.error is None


@dataclass
class RunResult:
    files: Tuple[FileResult, ...] = ()

    @property
    def violations(self) -> List[Violation]:
        return [v for f in self.files for v in f.violations]

    @property
    def violation_count(self) -> int:
        return sum(len(f.violations) for f in self.files)

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.files if f.error is not None)

    @property
    def passed(self) -> bool:
        return all(f.passed for f in self.files)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1
