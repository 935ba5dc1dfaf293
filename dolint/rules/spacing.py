\
from __future__ import annotations
import re
from typing import List, Optional, Sequence, Tuple

from .base import code_lines, report, rule
from .commands import leading_command
from ..core.models import RuleConfig, SourceLine, Violation

TWO_CHAR_OPERATORS = ("==", "!=", "~=", ">=", "<=", "||", "&&")
ONE_CHAR_OPERATORS = "=<>+&|"
# characters after which `+` or `(` starts an operand instead of following one
EXPRESSION_OPENERS = "=+-*/^(,<>&|!~"
# a numeric literal's exponent, `1e+5` or `2.5E+3`, but not a name like `var2e`
EXPONENT_RE = re.compile(r"(?:^|[^A-Za-z0-9_.`$])(?:\d+\.?\d*|\.\d+)[eE]$")
CALL_RE = re.compile(r"([A-Za-z_][A-Za-z0-9_.]*)(\s+)\(")
IF_KEYWORD_RE = re.compile(r"(?<![A-Za-z0-9_])if$")

NON_FUNCTION_WORDS = frozenset({
    "if", "in", "else", "while", "using", "of", "by", "bysort", "bys",
    "foreach", "forvalues", "forval", "varlist", "newlist", "numlist", "local", "global",
})
DISPLAY_COMMANDS = frozenset({"display", "displa", "displ", "disp", "dis", "di"})


def _whitespace_before(text: str, i: int) -> str:
    before = text[:i]
    return before[len(before.rstrip()):]


def _whitespace_after(text: str, i: int) -> str:
    after = text[i:]
    return after[: len(after) - len(after.lstrip())]


def find_operators(code: str, content: Optional[str] = None) -> List[Tuple[str, int]]:
    """Binary operator occurrences in blanked code, as (operator, 0-based column).

    ``content`` is the line with string literals left in place; it decides
    whether a `+` follows an operand. Defaults to ``code``.
    """
    if content is None:
        content = code
    found: List[Tuple[str, int]] = []
    i = 0
    n = len(code)
    while i < n:
        pair = code[i:i + 2]
        if pair in TWO_CHAR_OPERATORS:
            found.append((pair, i))
            i += 2
            continue
        ch = code[i]
        if ch in ONE_CHAR_OPERATORS:
            if ch == "=" and i > 0 and code[i - 1] == "`":
                # `=exp' macro evaluation
                i += 1
                continue
            if ch == "+":
                if pair == "++" or (i > 0 and code[i - 1] == "+"):
                    i += 1
                    continue
                prev = content[:i].rstrip()
                if not prev or prev[-1] in EXPRESSION_OPENERS or EXPONENT_RE.search(code[:i]):
                    i += 1
                    continue
            found.append((ch, i))
        i += 1
    return found


@rule("operator-spacing", description="Binary operator without exactly one space on each side.")
def check_operator_spacing(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line, code in code_lines(lines):
        text = line.text
        content = line.content
        for op, i in find_operators(code, content):
            problems: List[str] = []
            if content[:i].strip():
                before = _whitespace_before(text, i)
                if not before:
                    problems.append("missing space before")
                elif before != " ":
                    problems.append("extra space before")
            end = i + len(op)
            if content[end:].strip():
                after = _whitespace_after(text, end)
                if not after:
                    problems.append("missing space after")
                elif after != " ":
                    problems.append("extra space after")
            if problems:
                out.append(
                    report(
                        "operator-spacing",
                        line,
                        f"Operator '{op}' needs exactly one space on each side "
                        f"({', '.join(problems)})",
                        column=i + 1,
                    )
                )
    return out


def _is_display(code: str) -> bool:
    command = leading_command(code)
    return command is not None and command[0].lower() in DISPLAY_COMMANDS


def _in_expression(prev: str, name: str, display: bool) -> bool:
    # `recode x (1 = 2)` and `collapse (mean) y` take parenthesised arguments,
    # not calls
    if not prev:
        return False
    if prev[-1] in EXPRESSION_OPENERS or IF_KEYWORD_RE.search(prev):
        return True
    # display directives such as `_col(5)` are not functions
    return display and not name.startswith("_")


@rule("call-parenthesis", description="Space before a call's '(' or padding inside parentheses.")
def check_call_parenthesis(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line, code in code_lines(lines):
        text = line.text
        content = line.content
        display = not line.continued and _is_display(code)
        for m in CALL_RE.finditer(code):
            name = m.group(1)
            if name.lower() in NON_FUNCTION_WORDS:
                continue
            if not _in_expression(content[: m.start(1)].rstrip(), name, display):
                continue
            out.append(
                report(
                    "call-parenthesis",
                    line,
                    f"No space between function '{name}' and '('",
                    column=m.start(2) + 1,
                )
            )

        for i, ch in enumerate(code):
            if ch == "(":
                rest = content[i + 1:]
                if rest.strip() and not rest.lstrip().startswith(")") and _whitespace_after(text, i + 1):
                    out.append(
                        report("call-parenthesis", line, "No space after '('", column=i + 2)
                    )
            elif ch == ")":
                head = content[:i]
                if head.strip() and not head.rstrip().endswith("(") and _whitespace_before(text, i):
                    out.append(
                        report("call-parenthesis", line, "No space before ')'", column=i)
                    )
    return out


@rule("comma-spacing", description="Comma preceded by a space or not followed by one.")
def check_comma_spacing(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line, code in code_lines(lines):
        text = line.text
        content = line.content
        for i, ch in enumerate(code):
            if ch != ",":
                continue
            problems: List[str] = []
            if content[:i].strip() and _whitespace_before(text, i):
                problems.append("space before comma")
            if i + 1 < len(text) and not text[i + 1].isspace():
                problems.append("missing space after comma")
            if problems:
                out.append(
                    report(
                        "comma-spacing",
                        line,
                        f"Comma spacing: {', '.join(problems)}",
                        column=i + 1,
                    )
                )
    return out
