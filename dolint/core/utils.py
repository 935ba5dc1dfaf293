\
from __future__ import annotations
import io
from pathlib import Path
from typing import Iterator

import chardet  # type: ignore

from .errors import InputError

BINARY_BYTES = bytes(range(0, 32)) + b"\x7f"
UTF8_BOM = b"\xef\xbb\xbf"


def is_likely_binary(
    data: bytes, control_threshold: float = 0.30, high_bit_threshold: float = 0.60
) -> bool:
    if not data:
        return False
    total = len(data)
    if 0 in data:
        return True
    # tab, newline, carriage return and form feed occur in ordinary do-files
    control = sum(1 for b in data if b in BINARY_BYTES and b not in (9, 10, 12, 13))
    if (control / total) > control_threshold:
        return True
    high = sum(1 for b in data if b >= 0x80)
    if (high / total) > high_bit_threshold:
        return True
    return False


def decode_bytes(data: bytes) -> str | None:
    """Decode file content: utf-8, then chardet's guess, then cp1252.

    Stata 14+ writes utf-8, older do-files are usually latin-1 or cp1252.
    """
    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM):]
    candidates = ["utf-8"]
    enc = chardet.detect(data).get("encoding")
    if enc and enc.lower() not in ("utf-8", "ascii"):
        candidates.append(enc)
    candidates.append("cp1252")
    for candidate in candidates:
        try:
            return data.decode(candidate, errors="strict")
        except (LookupError, UnicodeDecodeError):
            continue
    return None


def read_source(path: Path, max_bytes: int = 5_000_000) -> str:
    """Read a source file as text or raise InputError."""
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        raise InputError(path, "file not found") from None
    except OSError as exc:
        raise InputError(path, f"unable to stat: {exc.strerror or exc}") from exc
    if path.is_dir():
        raise InputError(path, "is a directory")
    if size > max_bytes:
        raise InputError(path, f"file is {size:,} bytes, larger than the {max_bytes:,} byte limit")
    try:
        with path.open("rb") as f:
            data = f.read()
    except OSError as exc:
        raise InputError(path, f"unreadable: {exc.strerror or exc}") from exc
    if is_likely_binary(data[:4096]) or is_likely_binary(data):
        raise InputError(path, "looks like a binary file")
    text = decode_bytes(data)
    if text is None:
        raise InputError(path, "unable to decode file content")
    return text


def iter_lines(text: str) -> Iterator[str]:
    buf = io.StringIO(text, newline="")
    for line in buf:
        yield line.rstrip("\r\n")
