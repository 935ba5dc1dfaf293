\
from __future__ import annotations
from typing import List, Sequence

from .base import code_lines, mask_global_braces, report, rule
from ..core.models import RuleConfig, SourceLine, Violation


@rule("loop-brace", description="Badly placed '{' or '}' around a loop or block.")
def check_loop_braces(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line, code in code_lines(lines):
        code = mask_global_braces(code)
        text = line.text
        for i, ch in enumerate(code):
            if ch == "{":
                before = text[:i]
                if not code[:i].strip():
                    out.append(
                        report(
                            "loop-brace",
                            line,
                            "Opening '{' belongs at the end of the line that opens the block",
                            column=i + 1,
                        )
                    )
                    continue
                gap = before[len(before.rstrip()):]
                if gap != " ":
                    detail = "missing space" if not gap else "expected exactly one space"
                    out.append(
                        report(
                            "loop-brace",
                            line,
                            f"Opening '{{' must be preceded by one space ({detail})",
                            column=i + 1,
                        )
                    )
                if code[i + 1:].strip():
                    out.append(
                        report(
                            "loop-brace",
                            line,
                            "Code after an opening '{' must start on a new line",
                            column=i + 1,
                        )
                    )
            elif ch == "}" and code.strip() != "}":
                out.append(
                    report(
                        "loop-brace",
                        line,
                        "Closing '}' must be alone on its own line",
                        column=i + 1,
                    )
                )
    return out
