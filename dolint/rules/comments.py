\
from __future__ import annotations
from typing import List, Sequence

from .base import report, rule
from ..core.models import RuleConfig, SourceLine, Violation


@rule("comment-marker", description="Single-line comment opened with '*' instead of '//'.")
def check_comment_marker(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line in lines:
        start = line.mask.find("l")
        if start == -1 or line.text[start] != "*":
            continue
        out.append(
            report(
                "comment-marker",
                line,
                "Use '//' for single-line comments, not '*'",
                column=start + 1,
            )
        )
    return out
