\
from __future__ import annotations
import re
from typing import List, Sequence, Tuple

from .base import report, rule, statement_starts
from ..core.models import RuleConfig, SourceLine, Violation

WORD_RE = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_]*)")
COLON_RE = re.compile(r"\s*:")

# prefix commands are followed by the command they modify
PREFIX_COMMANDS = frozenset({
    "quietly", "quietl", "quiet", "quie", "qui",
    "capture", "captur", "captu", "capt", "cap",
    "noisily", "noisil", "noisi", "noi",
})
BY_COMMANDS = frozenset({"by", "bys", "byso", "bysor", "bysort"})

# complete command names that are short on their own, not abbreviations
FULL_COMMAND_NAMES = frozenset({
    "by", "ca", "cc", "cd", "cf", "ci", "cs", "db", "do", "ds", "if", "ir",
    "ls", "mi", "ml", "nl", "rm", "xi",
    "use", "set", "log", "run", "ado", "net", "ssc",
    "drop", "keep", "sort", "save", "list", "help", "exit", "else", "egen",
    "merge", "clear", "count", "local", "macro", "while",
})


def command_tokens(code: str) -> List[Tuple[str, int]]:
    """Leading command words of a statement with their 0-based columns.

    A prefix such as ``quietly:`` or ``bysort id:`` is returned together with
    the command it applies to.
    """
    tokens: List[Tuple[str, int]] = []
    pos = 0
    while True:
        m = WORD_RE.match(code, pos)
        if not m:
            break
        word = m.group(1)
        tokens.append((word, m.start(1)))
        pos = m.end(1)
        lower = word.lower()
        if lower in PREFIX_COMMANDS:
            colon = COLON_RE.match(code, pos)
            if colon:
                pos = colon.end()
            continue
        if lower in BY_COMMANDS:
            colon = code.find(":", pos)
            if colon == -1:
                break
            pos = colon + 1
            continue
        break
    return tokens


def leading_command(code: str) -> Tuple[str, int] | None:
    tokens = command_tokens(code)
    return tokens[-1] if tokens else None


@rule("command-abbreviation", description="Command name abbreviated below min_command_chars.")
def check_command_abbreviation(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    minimum = config.min_command_chars
    out: List[Violation] = []
    for line, code in statement_starts(lines):
        for word, col in command_tokens(code):
            if len(word) >= minimum or word.lower() in FULL_COMMAND_NAMES:
                continue
            out.append(
                report(
                    "command-abbreviation",
                    line,
                    f"Command '{word}' is abbreviated to {len(word)} characters; "
                    f"use at least {minimum}",
                    column=col + 1,
                )
            )
    return out
