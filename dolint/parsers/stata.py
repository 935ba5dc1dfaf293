\
from __future__ import annotations
import re
from pathlib import Path
from typing import Iterable, Iterator, List

from .base import ParserPlugin
from ..core.errors import ParseError
from ..core.models import Region, SourceLine
from ..core.utils import iter_lines, read_source

# `#delimit ;`, `#delim cr`, `#d ;` ...
DELIMIT_RE = re.compile(r"^\s*#d(?:e(?:l(?:i(?:m(?:i(?:t)?)?)?)?)?)?\s+(;|cr)\s*$", re.IGNORECASE)


def is_delimit_directive(code: str) -> bool:
    return DELIMIT_RE.match(code) is not None


def _dominant_region(text: str, mask: List[str]) -> Region:
    first = None
    for ch, m in zip(text, mask):
        if ch.isspace():
            continue
        if m == "c":
            return Region.CODE
        if first is None:
            first = m
    if first is None:
        return Region.CODE
    return {
        "l": Region.LINE_COMMENT,
        "b": Region.BLOCK_COMMENT,
        "s": Region.STRING,
    }[first]


def classify_lines(lines: Iterable[str]) -> Iterator[SourceLine]:
    """Classify each physical line into code, comment and string regions.

    Block comments nest as they do in Stata. String literals never span lines.
    If a block comment is still open at end of input, every line is yielded
    first and ParseError is raised afterwards with the line where the
    outermost unterminated comment began.
    """
    depth = 0
    block_start = 0
    semicolon_mode = False
    continued = False
    statement_open = False

    number = 0
    for number, text in enumerate(lines, start=1):
        mask: List[str] = []
        n = len(text)
        i = 0
        in_string = False
        compound = False
        ends_with_continuation = False
        first_code_seen = False

        while i < n:
            ch = text[i]
            pair = text[i:i + 2]

            if depth > 0:
                if pair == "/*":
                    depth += 1
                    mask.extend("bb")
                    i += 2
                elif pair == "*/":
                    depth -= 1
                    mask.extend("bb")
                    i += 2
                else:
                    mask.append("b")
                    i += 1
                continue

            if in_string:
                mask.append("s")
                if compound and pair == "\"'":
                    mask.append("s")
                    in_string = False
                    i += 2
                    continue
                if not compound and ch == '"':
                    in_string = False
                i += 1
                continue

            if ch == '"':
                compound = i > 0 and text[i - 1] == "`" and mask[-1] == "c"
                if compound:
                    mask[-1] = "s"
                mask.append("s")
                in_string = True
                i += 1
                continue

            if pair == "/*":
                depth = 1
                block_start = number
                mask.extend("bb")
                i += 2
                continue

            if pair == "//" and (i == 0 or text[i - 1].isspace()):
                ends_with_continuation = text.startswith("///", i)
                mask.extend("l" * (n - i))
                break

            if ch == "*" and not first_code_seen and not continued:
                mask.extend("l" * (n - i))
                break

            if not ch.isspace():
                first_code_seen = True
            mask.append("c")
            i += 1

        line = SourceLine(
            text=text,
            number=number,
            region=_dominant_region(text, mask),
            mask="".join(mask),
            continued=continued,
            semicolon_mode=semicolon_mode,
        )
        yield line

        code = line.code.strip()
        directive = DELIMIT_RE.match(code)
        if directive:
            semicolon_mode = directive.group(1) == ";"
            statement_open = False
            continued = False
        elif ends_with_continuation:
            continued = True
        elif semicolon_mode:
            if code:
                statement_open = not code.endswith(";")
            continued = statement_open
        else:
            continued = False

    if depth > 0:
        raise ParseError(
            f"block comment opened on line {block_start} is never closed "
            f"(reached end of file at line {number})",
            line=block_start,
        )


class StataParser(ParserPlugin):
    NAME = "stata"
    SUPPORTED_EXTENSIONS = ["do", "ado", "doh", "mata"]

    def parse(self, path: Path, max_bytes: int = 5_000_000) -> Iterator[SourceLine]:
        content = read_source(path, max_bytes=max_bytes)
        yield from classify_lines(iter_lines(content))


# Alias for dynamic discovery
Stata = StataParser
