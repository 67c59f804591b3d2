"""
Replacement-list substitution: binding arguments to parameters and applying
the ``#`` (stringify) and ``##`` (paste) operators.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from pycpp.lexer import (
    is_ident_continue,
    is_ident_start,
    match_paste_operator,
    match_stringify,
    scan_identifier,
    scan_word,
    skip_horizontal_space,
)
from pycpp.macros import VA_ARGS, FunctionMacro
from pycpp.tape import Fragment

Bindings = Dict[str, List[Fragment]]
Prescan = Callable[[List[Fragment]], List[Fragment]]


class FragmentBuilder:
    """Accumulates fragments, merging adjacent unpainted text.

    Unpainted text is collected as pieces and joined only when a painted
    fragment follows or the fragments are read.
    """

    def __init__(self) -> None:
        self._fragments: List[Fragment] = []
        self._pending: List[str] = []

    def _flush(self) -> None:
        if self._pending:
            self._fragments.append(Fragment("".join(self._pending)))
            self._pending = []

    @property
    def fragments(self) -> List[Fragment]:
        self._flush()
        return self._fragments

    def text(self, s: str) -> None:
        if s:
            self._pending.append(s)

    def painted(self, text: str) -> None:
        self._flush()
        self._fragments.append(Fragment(text, painted=True))

    def extend(self, fragments: Sequence[Fragment]) -> None:
        for fragment in fragments:
            if fragment.painted:
                self.painted(fragment.text)
            else:
                self.text(fragment.text)

    def rstrip(self) -> None:
        fragments = self.fragments
        while fragments:
            last = fragments[-1]
            if last.painted:
                return
            stripped = last.text.rstrip()
            if stripped:
                fragments[-1] = Fragment(stripped)
                return
            fragments.pop()

    def endswith(self, suffix: str) -> bool:
        fragments = self.fragments
        return bool(fragments) and not fragments[-1].painted and fragments[-1].text.endswith(suffix)

    def drop_last_char(self) -> None:
        fragments = self.fragments
        last = fragments.pop()
        if len(last.text) > 1:
            fragments.append(Fragment(last.text[:-1]))

    def getvalue(self) -> str:
        return "".join(f.text for f in self.fragments)


def raw_text(fragments: Sequence[Fragment]) -> str:
    return "".join(f.text for f in fragments)


def stringify(text: str) -> str:
    """``#arg``: collapse whitespace, escape ``\\`` and ``"``, add quotes."""
    collapsed = " ".join(text.split())
    escaped = collapsed.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def bind_arguments(macro: FunctionMacro, args: Sequence[List[Fragment]]) -> Bindings:
    """Map parameter names to call arguments.

    Arguments past the named parameters of a variadic macro are joined with
    ``", "`` under ``__VA_ARGS__``. A parameter without an argument stays
    unbound and its name is copied through by ``substitute``.
    """
    named = macro.named_params
    bindings: Bindings = {param: list(args[i]) for i, param in enumerate(named) if i < len(args)}
    if macro.variadic:
        joined: List[Fragment] = []
        for i, arg in enumerate(args[len(named):]):
            if i:
                joined.append(Fragment(", "))
            joined.extend(arg)
        bindings[VA_ARGS] = joined
    return bindings


def substitute(body: str, bindings: Optional[Bindings] = None, prescan: Optional[Prescan] = None) -> List[Fragment]:
    """Substitute ``bindings`` into ``body``.

    Parameters next to ``#`` or ``##`` use the raw argument text; all other
    occurrences use ``prescan(argument)``, evaluated once per parameter.
    Without ``prescan`` every occurrence is raw.
    """
    bindings = bindings or {}
    expanded: Dict[str, List[Fragment]] = {}
    out = FragmentBuilder()
    pos = 0
    n = len(body)
    while pos < n:
        ch = body[pos]
        if ch == "#":
            if body.startswith("##", pos):
                out.rstrip()
                pos = skip_horizontal_space(body, pos + 2)
                end = scan_identifier(body, pos)
                name = body[pos:end]
                if end > pos and name in bindings:
                    value = raw_text(bindings[name])
                    # GNU: ", ## __VA_ARGS__" drops the comma when there are no variadic arguments
                    if name == VA_ARGS and not value and out.endswith(","):
                        out.drop_last_char()
                    out.text(value)
                    pos = end
                continue
            m = match_stringify(body, pos)
            if m is not None and m[0] in bindings:
                # a string literal; its contents are never rescanned
                out.painted(stringify(raw_text(bindings[m[0]])))
                pos = m[1]
                continue
            out.text(ch)
            pos += 1
            continue

        if is_ident_start(ch):
            end = scan_identifier(body, pos)
            name = body[pos:end]
            if name not in bindings:
                out.text(name)
            elif prescan is None or match_paste_operator(body, end) is not None:
                out.text(raw_text(bindings[name]))
            else:
                if name not in expanded:
                    expanded[name] = prescan(bindings[name])
                out.extend(expanded[name])
            pos = end
            continue

        if is_ident_continue(ch):
            end = scan_word(body, pos)
            out.text(body[pos:end])
            pos = end
            continue

        out.text(ch)
        pos += 1
    return out.fragments
