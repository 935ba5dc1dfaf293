\
from __future__ import annotations
from typing import List, Sequence

from .base import code_lines, report, rule
from ..core.models import RuleConfig, SourceLine, Violation
from ..parsers.stata import is_delimit_directive


@rule("semicolon", description="Semicolon outside '#delimit ;' or statements joined on one line.")
def check_semicolons(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line, code in code_lines(lines):
        if is_delimit_directive(code):
            continue
        for i, ch in enumerate(code):
            if ch != ";":
                continue
            if code[i + 1:].strip():
                message = "Multiple statements joined by ';' on one line"
            elif not line.semicolon_mode:
                message = "';' terminates a statement outside '#delimit ;' mode"
            else:
                continue
            out.append(report("semicolon", line, message, column=i + 1))
    return out
