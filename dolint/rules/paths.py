\
from __future__ import annotations
import re
from typing import Iterator, List, Sequence, Tuple

from .base import report, rule
from .commands import leading_command
from ..core.models import RuleConfig, SourceLine, Violation

WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]|^\\\\")
UNIX_HOME_RE = re.compile(r"^/(?:Users|home|mnt|Volumes|media)/")
BACKSLASH_PATH_RE = re.compile(r"[\w.$`'}~]\\[\w.$`{]")

PATH_COMMANDS = frozenset({
    "cd", "use", "save", "sav", "do", "run", "include", "log",
    "import", "export", "insheet", "outsheet", "infile", "mkdir", "erase", "copy",
})


def _string_spans(line: SourceLine) -> Iterator[Tuple[int, str]]:
    start = None
    for i, m in enumerate(line.mask + " "):
        if m == "s" and start is None:
            start = i
        elif m != "s" and start is not None:
            yield start, line.text[start:i].strip("`\"'")
            start = None


def _path_arguments(line: SourceLine) -> Iterator[Tuple[int, str]]:
    """Unquoted path arguments: tokens of path commands and after `using`."""
    code = line.code
    command = leading_command(code)
    tokens = list(re.finditer(r"\S+", code))
    take_all = command is not None and command[0].lower() in PATH_COMMANDS
    for idx, m in enumerate(tokens):
        after_using = idx > 0 and tokens[idx - 1].group(0).lower() == "using"
        if take_all or after_using:
            yield m.start(), m.group(0).rstrip(",")


def path_problems(value: str) -> List[str]:
    problems: List[str] = []
    if WINDOWS_DRIVE_RE.search(value) or UNIX_HOME_RE.search(value):
        problems.append("hard-coded absolute path; build paths from a root global")
    if BACKSLASH_PATH_RE.search(value):
        problems.append("use '/' as the path separator, not '\\'")
    return problems


@rule("path-separator", description="Backslash separators or hard-coded absolute paths.")
def check_paths(lines: Sequence[SourceLine], config: RuleConfig) -> List[Violation]:
    out: List[Violation] = []
    for line in lines:
        if line.is_blank:
            continue
        seen = set()
        candidates = list(_string_spans(line))
        if line.code.strip():
            candidates.extend(_path_arguments(line))
        for col, value in candidates:
            problems = path_problems(value)
            if problems and col not in seen:
                seen.add(col)
                out.append(
                    report(
                        "path-separator",
                        line,
                        f"Path '{value}': {'; '.join(problems)}",
                        column=col + 1,
                    )
                )
    return out
