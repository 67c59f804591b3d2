"""
Parsing of ``#define`` and ``#undef`` directives.

Only these two directives are understood. Every function here is pure: it
reads the source text from a position and returns what it found together
with the position just past the directive (its line terminator included).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pycpp.errors import DirectiveError
from pycpp.lexer import (
    is_line_terminator,
    line_terminator_length,
    location,
    match_comment,
    scan_identifier,
    skip_horizontal_space,
)
from pycpp.macros import VA_ARGS, VARIADIC_MARKER, FunctionMacro, Macro, ObjectMacro


_DIRECTIVE_RE = re.compile(r"#[ \t]*(define|undef)(?![A-Za-z0-9_])")


@dataclass
class Directive:
    """A recognized directive.

    ``start`` is the position of the ``#``, ``end`` the position after the
    line terminator. ``extra`` holds unexpected text after an ``#undef`` name.
    """
    kind: str
    name: str
    start: int
    end: int
    macro: Optional[Macro] = None
    extra: str = ""


def _error(text: str, pos: int, message: str) -> DirectiveError:
    line, column = location(text, pos)
    return DirectiveError(message, line, column)


def match_directive(text: str, pos: int) -> Optional[Directive]:
    """Recognize ``#define`` / ``#undef`` at ``pos``.

    Returns None for any other ``#`` line so the caller can treat it as
    ordinary text. Raises DirectiveError when the directive is malformed.
    """
    m = _DIRECTIVE_RE.match(text, pos)
    if m is None:
        return None
    if m.group(1) == "define":
        return parse_define(text, m.end(), start=pos)
    return parse_undef(text, m.end(), start=pos)


def _parse_name(text: str, pos: int, directive: str) -> Tuple[str, int]:
    start = skip_horizontal_space(text, pos)
    end = scan_identifier(text, start)
    if end == start:
        if start >= len(text) or is_line_terminator(text[start]):
            raise _error(text, start, f"no macro name given in #{directive} directive")
        raise _error(text, start, "macro names must be identifiers")
    return text[start:end], end


def parse_define(text: str, pos: int, *, start: int = 0) -> Directive:
    """Parse what follows ``#define``.

    A ``(`` directly after the name makes the macro function-like; any
    whitespace in between makes it object-like with a body starting at ``(``.
    """
    name, pos = _parse_name(text, pos, "define")
    if text.startswith("(", pos):
        params, pos = parse_parameters(text, pos)
        body, end = parse_body(text, pos, start=start)
        macro: Macro = FunctionMacro(params=params, body=body)
    else:
        body, end = parse_body(text, pos, start=start)
        macro = ObjectMacro(body=body)
    return Directive(kind="define", name=name, start=start, end=end, macro=macro)


def _skip_blanks(text: str, pos: int) -> int:
    # Spaces, tabs and line continuations.
    while True:
        pos = skip_horizontal_space(text, pos)
        if text.startswith("\\", pos):
            tl = line_terminator_length(text, pos + 1)
            if tl:
                pos += 1 + tl
                continue
        return pos


def parse_parameters(text: str, pos: int) -> Tuple[List[str], int]:
    """Parse ``(p1, p2, ...)`` starting at the ``(``; return params and end."""
    params: List[str] = []
    i = _skip_blanks(text, pos + 1)
    if text.startswith(")", i):
        return params, i + 1
    while True:
        i = _skip_blanks(text, i)
        if text.startswith(VARIADIC_MARKER, i):
            param = VARIADIC_MARKER
            i += len(VARIADIC_MARKER)
        else:
            end = scan_identifier(text, i)
            if end == i:
                if i >= len(text) or is_line_terminator(text[i]):
                    raise _error(text, i, "missing ')' in macro parameter list")
                raise _error(text, i, f"expected parameter name, found {text[i]!r}")
            param = text[i:end]
            if param == VA_ARGS:
                raise _error(text, i, "__VA_ARGS__ can not be used as a parameter name")
            i = end
        if param in params:
            raise _error(text, i, f"duplicate macro parameter {param!r}")
        params.append(param)

        i = _skip_blanks(text, i)
        if text.startswith(")", i):
            return params, i + 1
        if param == VARIADIC_MARKER:
            raise _error(text, i, "missing ')' after \"...\"")
        if text.startswith(",", i):
            i += 1
            continue
        if i >= len(text) or is_line_terminator(text[i]):
            raise _error(text, i, "missing ')' in macro parameter list")
        raise _error(text, i, f"expected ',' or ')', found {text[i]!r}")


def _logical_line_end(text: str, pos: int) -> int:
    n = len(text)
    while pos < n:
        if text[pos] == "\\":
            tl = line_terminator_length(text, pos + 1)
            if tl:
                pos += 1 + tl
                continue
        if is_line_terminator(text[pos]):
            return pos
        pos += 1
    return n


def parse_body(text: str, pos: int, *, start: int = 0) -> Tuple[str, int]:
    """Collect a macro body up to the first line terminator not continued.

    - backslash + line terminator joins the next line; leading spaces of
      that line are dropped
    - any other backslash is kept as is
    - ``/* */`` becomes one space, ``//`` runs to the end of the logical line
    """
    out: List[str] = []
    n = len(text)
    i = pos
    after_splice = False
    while i < n:
        ch = text[i]
        if ch == "\\":
            tl = line_terminator_length(text, i + 1)
            if tl:
                i += 1 + tl
                after_splice = True
                continue
            out.append(ch)
            i += 1
            after_splice = False
            continue
        if after_splice and ch == " ":
            i += 1
            continue
        after_splice = False

        tl = line_terminator_length(text, i)
        if tl:
            return "".join(out).strip(), i + tl
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close < 0:
                raise _error(text, i, "unterminated comment")
            out.append(" ")
            i = close + 2
            continue
        if text.startswith("//", i):
            i = _logical_line_end(text, i + 2)
            continue
        out.append(ch)
        i += 1
    raise _error(text, start, "unterminated #define directive")


def parse_undef(text: str, pos: int, *, start: int = 0) -> Directive:
    """Parse what follows ``#undef``; the line ends the directive."""
    name, i = _parse_name(text, pos, "undef")
    extra: List[str] = []
    n = len(text)
    while i < n:
        tl = line_terminator_length(text, i)
        if tl:
            i += tl
            break
        if text[i] == "\\":
            tl = line_terminator_length(text, i + 1)
            if tl:
                i += 1 + tl
                continue
        end = match_comment(text, i)
        if end is not None:
            i = end
            continue
        extra.append(text[i])
        i += 1
    return Directive(kind="undef", name=name, start=start, end=i, extra="".join(extra).strip())


def parse_define_option(option: str) -> Tuple[str, Macro]:
    """Build a macro from a ``-D`` option: ``NAME``, ``NAME=VALUE`` or ``F(x)=VALUE``."""
    name, sep, value = option.partition("=")
    if not sep:
        value = "1"
    text = f"#define {name} {value}\n"
    try:
        directive = match_directive(text, 0)
    except DirectiveError as e:
        raise DirectiveError(f"invalid macro option {option!r}: {e.message}", 1, 1) from e
    return directive.name, directive.macro
