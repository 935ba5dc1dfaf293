\
from __future__ import annotations
import re
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

from .base import report, rule, statement_starts
from .commands import command_tokens
from ..core.models import RuleConfig, SourceLine, Violation

NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")
MAX_NAME_LENGTH = 32  # Stata's own limit for variable and macro names

GENERATE = frozenset({"g", "ge", "gen", "gene", "gener", "genera", "generat", "generate"})
SINGLE_NAME_COMMANDS = GENERATE | frozenset({
    "egen", "clonevar",
    "loc", "loca", "local",
    "gl", "glo", "glob", "globa", "global",
    "sca", "scal", "scala", "scalar",
})
MULTI_NAME_COMMANDS = frozenset({"tempvar", "tempname", "tempfile"})
RENAME = frozenset({"ren", "rena", "renam", "rename"})
LOOPS = frozenset({"foreach", "forv", "forva", "forval", "forvalu", "forvalue", "forvalues"})

STORAGE_TYPE_RE = re.compile(r"\s*(?:byte|int|long|float|double|strL|str\d+)\s+")
NAME_TOKEN_RE = re.compile(r"\s*([^\s=,:;(){}]+)")
FILE_STEM_RE = re.compile(r"^[a-z0-9_]+$")


def _names_after(code: str, pos: int, limit: int | None = 1) -> Iterator[Tuple[str, int]]:
    count = 0
    while limit is None or count < limit:
        m = NAME_TOKEN_RE.match(code, pos)
        if not m:
            return
        yield m.group(1), m.start(1)
        pos = m.end(1)
        count += 1


def assigned_names(code: str) -> List[Tuple[str, int]]:
    """Names created by an assignment statement, with their 0-based columns."""
    tokens = command_tokens(code)
    if not tokens:
        return []
    command, col = tokens[-1]
    command = command.lower()
    pos = col + len(command)

    if command in GENERATE:
        m = STORAGE_TYPE_RE.match(code, pos)
        if m:
            pos = m.end()
        return list(_names_after(code, pos))
    if command in ("sca", "scal", "scala", "scalar"):
        m = re.compile(r"\s*def(?:ine)?\b").match(code, pos)
        if m:
            pos = m.end()
        return list(_names_after(code, pos))
    if command in SINGLE_NAME_COMMANDS or command in LOOPS:
        return list(_names_after(code, pos))
    if command in MULTI_NAME_COMMANDS:
        return list(_names_after(code, pos, limit=None))
    if command in RENAME:
        names = list(_names_after(code, pos, limit=2))
        if len(names) == 2 and not code[pos:].lstrip().startswith("("):
            return names[1:]
    return []


def name_problems(name: str) -> List[str]:
    problems: List[str] = []
    if any(ch.isupper() for ch in name):
        problems.append("contains uppercase letters")
    if not NAME_RE.match(name.lower()):
        problems.append("must start with a letter or underscore and use only [a-z0-9_]")
    if len(name) > MAX_NAME_LENGTH:
        problems.append(f"is {len(name)} characters long (max {MAX_NAME_LENGTH})")
    return problems


@rule("naming", description="Assigned name is not lowercase snake_case or is too long.")
def check_naming(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line, code in statement_starts(lines):
        for name, col in assigned_names(code):
            # names built from macros are resolved at run time
            if "`" in name or "$" in name or name[0] in "+-":
                continue
            problems = name_problems(name)
            if problems:
                out.append(
                    report(
                        "naming",
                        line,
                        f"Name '{name}' " + "; ".join(problems),
                        column=col + 1,
                    )
                )
    return out


@rule(
    "file-naming",
    description="File name is not a lowercase snake_case stem.",
    scope="file",
)
def check_file_naming(path: Path, config: RuleConfig) -> List[Violation]:
    stem = path.stem
    if FILE_STEM_RE.match(stem):
        return []
    return [
        report(
            "file-naming",
            1,
            f"File name '{path.name}' should be lowercase letters, digits and "
            f"underscores only",
        )
    ]
