"""Line splitting and tokenisation of RASM source text."""

from __future__ import annotations

import re
from itertools import takewhile
from string import hexdigits
from typing import Iterable

_C_SPACE = " \t\n\v\f\r"
_MAX_TOKENS = 4
_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1

_LEXEME = re.compile(
    r'[ \t\n\v\f\r]*'
    r'(?:("[^"]*")'
    r'|(\[[^\]]*\])'
    r'|([^ \t\n\v\f\r"\[][^ \t\n\v\f\r]*))'
)


def _strtol(text: str) -> int:
    """Parse the leading integer of text with base prefixes, 0 if there is none."""
    rest = text.lstrip(_C_SPACE)
    sign = 1
    if rest[:1] in ("+", "-"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    if rest[:2].lower() == "0x" and rest[2:3] and rest[2] in hexdigits:
        base, digits, rest = 16, hexdigits, rest[2:]
    elif rest.startswith("0"):
        base, digits = 8, "01234567"
    else:
        base, digits = 10, "0123456789"
    run = "".join(takewhile(digits.__contains__, rest))
    if not run:
        return 0
    return max(_LONG_MIN, min(_LONG_MAX, sign * int(run, base)))


def parse_hex_string(text: str) -> bytes:
    """Parse space-separated numbers (hex, octal or decimal) into bytes."""
    return bytes(_strtol(part) & 0xFF for part in text.split(" ") if part)


def split_lines(raw_code: str) -> list[str]:
    """Split source text on newlines, dropping the empty piece after a final newline."""
    lines = raw_code.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_line(line: str) -> list[str] | None:
    """Tokenise one source line into at most four tokens.

    Returns None for blank and comment-only lines. Quoted strings and
    bracketed lists are kept whole with their delimiters; commas are dropped.
    """
    code = line.split(";", 1)[0].strip(_C_SPACE)
    if not code:
        return None
    code = code.replace(",", "")

    parts: list[str] = []
    pos = 0
    while len(parts) < _MAX_TOKENS:
        match = _LEXEME.match(code, pos)
        if match is None:
            break
        parts.append(match.group(match.lastindex))
        pos = match.end()
    return parts


def parse_all_lines(lines: Iterable[str]) -> list[list[str]]:
    """Tokenise every line, leaving out blank and comment-only lines."""
    return [parts for line in lines if (parts := parse_line(line)) is not None]