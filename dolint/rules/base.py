\
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from ..core.models import Region, RuleConfig, SourceLine, Violation


LineCheck = Callable[[Sequence[SourceLine], RuleConfig], List[Violation]]
FileCheck = Callable[[Path, RuleConfig], List[Violation]]


@dataclass(frozen=True)
class Rule:
    id: str
    check: "LineCheck | FileCheck"
    severity: str = "warning"
    description: str = ""
    scope: str = "lines"  # "lines" rules get the classified lines, "file" rules the path


# rule id -> Rule; filled in as the modules of this package are imported
REGISTRY: Dict[str, Rule] = {}

PARSE_ERROR_ID = "parse-error"


def rule(rule_id: str, *, severity: str = "warning", description: str = "", scope: str = "lines"):
    """Register a plain function as a rule under ``rule_id``."""

    def decorator(func: Callable[..., List[Violation]]) -> Callable[..., List[Violation]]:
        if rule_id in REGISTRY and REGISTRY[rule_id].check is not func:
            raise ValueError(f"duplicate rule id: {rule_id}")
        doc = (func.__doc__ or "").strip()
        REGISTRY[rule_id] = Rule(
            id=rule_id,
            check=func,
            severity=severity,
            description=description or (doc.splitlines()[0] if doc else ""),
            scope=scope,
        )
        return func

    return decorator


def report(
    rule_id: str,
    line: SourceLine | int,
    message: str,
    column: Optional[int] = None,
) -> Violation:
    number = line.number if isinstance(line, SourceLine) else line
    severity = REGISTRY[rule_id].severity if rule_id in REGISTRY else "error"
    return Violation(rule_id=rule_id, line=number, message=message, severity=severity, column=column)


def code_lines(lines: Sequence[SourceLine]) -> Iterator[Tuple[SourceLine, str]]:
    """Lines that carry code, paired with their comment/string-blanked text."""
    for line in lines:
        if line.region is not Region.CODE or line.is_blank:
            continue
        code = line.code
        if code.strip():
            yield line, code


def statement_starts(lines: Sequence[SourceLine]) -> Iterator[Tuple[SourceLine, str]]:
    """Code lines that begin a new statement (not continuations)."""
    for line, code in code_lines(lines):
        if line.continued:
            continue
        yield line, code


def mask_global_braces(code: str) -> str:
    """Blank `${name}` global-macro references, keeping columns."""
    out = list(code)
    i = code.find("${")
    while i != -1:
        end = code.find("}", i + 2)
        if end == -1:
            break
        for j in range(i, end + 1):
            out[j] = " "
        i = code.find("${", end + 1)
    return "".join(out)
