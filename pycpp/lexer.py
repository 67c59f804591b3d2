"""
Character-level scanners for the macro preprocessor.

The preprocessor works on raw text rather than a token stream, so every
recognizer here is a pure function that looks at ``text`` from a cursor
position and reports how far the construct extends.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from pycpp.errors import LexerError


_PASTE_RE = re.compile(r"[ \t]*##[ \t]*")
_STRINGIFY_RE = re.compile(r"#[ \t]*")


def is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def is_ident_continue(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def is_line_terminator(ch: str) -> bool:
    return ch == "\n" or ch == "\r"


def scan_identifier(text: str, pos: int) -> int:
    """Return the end of the identifier starting at ``pos`` (``pos`` if none)."""
    n = len(text)
    if pos >= n or not is_ident_start(text[pos]):
        return pos
    i = pos + 1
    while i < n and is_ident_continue(text[i]):
        i += 1
    return i


def scan_word(text: str, pos: int) -> int:
    """Return the end of a run of identifier characters.

    Used for digit-led pp-numbers such as ``0x1F`` or ``10UL`` so their
    letters are not mistaken for identifiers.
    """
    n = len(text)
    i = pos
    while i < n and is_ident_continue(text[i]):
        i += 1
    return i


def line_terminator_length(text: str, pos: int) -> int:
    """Length of the line terminator at ``pos``: 0, 1 or 2 for ``\\r\\n``."""
    if pos >= len(text):
        return 0
    ch = text[pos]
    if ch == "\n":
        return 1
    if ch == "\r":
        return 2 if text.startswith("\n", pos + 1) else 1
    return 0


def skip_horizontal_space(text: str, pos: int) -> int:
    n = len(text)
    while pos < n and text[pos] in " \t":
        pos += 1
    return pos


def at_line_start(text: str, pos: int) -> bool:
    """True if only spaces/tabs separate ``pos`` from the previous line break."""
    i = pos
    while i > 0 and text[i - 1] in " \t":
        i -= 1
    return i == 0 or is_line_terminator(text[i - 1])


def location(text: str, pos: int) -> Tuple[int, int]:
    """1-based line and column of ``pos``."""
    line = text.count("\n", 0, pos) + 1
    column = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return line, column


def match_comment(text: str, pos: int) -> Optional[int]:
    """Return the end of a comment starting at ``pos``, or None.

    A line comment stops before its line terminator. An unterminated block
    comment raises LexerError.
    """
    if not text.startswith("/", pos):
        return None
    if text.startswith("//", pos):
        i = pos + 2
        n = len(text)
        while i < n and not is_line_terminator(text[i]):
            i += 1
        return i
    if text.startswith("/*", pos):
        end = text.find("*/", pos + 2)
        if end < 0:
            line, column = location(text, pos)
            raise LexerError("unterminated comment", line, column)
        return end + 2
    return None


def match_stringify(text: str, pos: int) -> Optional[Tuple[str, int]]:
    """Match ``# name`` (not ``##``); return the name and the end position."""
    if not text.startswith("#", pos) or text.startswith("##", pos):
        return None
    start = _STRINGIFY_RE.match(text, pos).end()
    end = scan_identifier(text, start)
    if end == start:
        return None
    return text[start:end], end


def match_paste_operator(text: str, pos: int) -> Optional[int]:
    """Match ``##`` with surrounding blanks at ``pos``; return the end position."""
    m = _PASTE_RE.match(text, pos)
    if m is None:
        return None
    return m.end()


# ============== Macro call arguments ==============

@dataclass
class CallArguments:
    """Result of scanning ``( arg, arg, ... )`` after a macro name.

    Each argument is a list of ``(text, tag)`` runs, where ``tag`` is whatever
    the caller attached to the characters it fed in (the engine uses it to
    remember which pending frame a character came from).
    """
    args: List[List[Tuple[str, Any]]]
    length: int
    rparen_tag: Any = None


@dataclass
class _ArgBuilder:
    runs: List[List[Any]] = field(default_factory=list)

    def add(self, ch: str, tag: Any) -> None:
        if self.runs and self.runs[-1][1] is tag:
            self.runs[-1][0].append(ch)
        else:
            self.runs.append([[ch], tag])

    def finish(self) -> List[Tuple[str, Any]]:
        runs = [("".join(chars), tag) for chars, tag in self.runs]
        while runs and not runs[0][0].lstrip():
            runs.pop(0)
        if runs:
            runs[0] = (runs[0][0].lstrip(), runs[0][1])
        while runs and not runs[-1][0].rstrip():
            runs.pop()
        if runs:
            runs[-1] = (runs[-1][0].rstrip(), runs[-1][1])
        return runs


class _Lookahead:
    """Random access over a lazily consumed character stream"""

    def __init__(self, items: Iterable[Tuple[str, Any]]) -> None:
        self._it: Iterator[Tuple[str, Any]] = iter(items)
        self._buf: List[Tuple[str, Any]] = []

    def __getitem__(self, i: int) -> Tuple[Optional[str], Any]:
        while len(self._buf) <= i:
            nxt = next(self._it, None)
            if nxt is None:
                return None, None
            self._buf.append(nxt)
        return self._buf[i]

    def char(self, i: int) -> Optional[str]:
        return self[i][0]


def _skip_comment(chars: _Lookahead, i: int) -> Optional[int]:
    # i points at the '/' of '//' or '/*'
    if chars.char(i + 1) == "/":
        i += 2
        while True:
            ch = chars.char(i)
            if ch is None or is_line_terminator(ch):
                return i
            i += 1
    i += 2
    while True:
        ch = chars.char(i)
        if ch is None:
            return None
        if ch == "*" and chars.char(i + 1) == "/":
            return i + 2
        i += 1


def _is_comment_start(chars: _Lookahead, i: int) -> bool:
    return chars.char(i) == "/" and chars.char(i + 1) in ("/", "*")


def scan_call_arguments(items: Iterable[Tuple[str, Any]]) -> Optional[CallArguments]:
    """Scan a parenthesized, comma-separated argument list.

    ``items`` yields ``(char, tag)`` pairs starting right after the macro
    name. Whitespace and comments may precede the ``(``. Commas only split
    at parenthesis depth zero; comments inside the list are dropped (a block
    comment counts as one space). Returns None when no ``(`` follows or the
    list is never closed.
    """
    chars = _Lookahead(items)
    i = 0
    while True:
        ch = chars.char(i)
        if ch is None:
            return None
        if ch.isspace():
            i += 1
            continue
        if _is_comment_start(chars, i):
            end = _skip_comment(chars, i)
            if end is None:
                return None
            i = end
            continue
        break
    if ch != "(":
        return None
    i += 1

    args: List[List[Tuple[str, Any]]] = []
    current = _ArgBuilder()
    depth = 0
    while True:
        ch, tag = chars[i]
        if ch is None:
            return None
        if _is_comment_start(chars, i):
            block = chars.char(i + 1) == "*"
            end = _skip_comment(chars, i)
            if end is None or chars.char(end) is None:
                return None
            if block:
                current.add(" ", tag)
            i = end
            continue
        if depth == 0 and ch in ",)":
            args.append(current.finish())
            if ch == ")":
                return CallArguments(args=args, length=i + 1, rparen_tag=tag)
            current = _ArgBuilder()
            i += 1
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current.add(ch, tag)
        i += 1
