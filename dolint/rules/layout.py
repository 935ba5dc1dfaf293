\
from __future__ import annotations
from typing import List, Sequence

from .base import report, rule
from ..core.models import RuleConfig, SourceLine, Violation


@rule("line-length", description="Line is longer than max_line_length (trailing whitespace ignored).")
def check_line_length(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    # physical length: string literals and comments count too
    limit = config.max_line_length
    out: List[Violation] = []
    for line in lines:
        length = len(line.text.rstrip())
        if length > limit:
            out.append(
                report(
                    "line-length",
                    line,
                    f"Line is {length} characters long; the limit is {limit}",
                    column=limit + 1,
                )
            )
    return out


@rule("hard-tab", description="Indentation uses tab characters instead of spaces.")
def check_hard_tabs(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line in lines:
        if line.is_blank:
            continue
        indent = line.text[: len(line.text) - len(line.text.lstrip())]
        if "\t" in indent:
            out.append(
                report(
                    "hard-tab",
                    line,
                    "Indent with spaces, not tabs",
                    column=indent.index("\t") + 1,
                )
            )
    return out
