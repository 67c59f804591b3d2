"""
Macro-expansion engine.

The engine repeatedly looks at the front of the pending text and decides
whether to drop a comment, expand a macro call, expand an object-like macro,
or copy text through. Expansions are pushed back onto the tape so they are
rescanned; the frame hide sets keep a macro from expanding inside its own
replacement.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from pycpp.errors import MacroNestingError
from pycpp.lexer import (
    is_ident_continue,
    is_ident_start,
    location,
    match_comment,
    scan_call_arguments,
    scan_identifier,
    scan_word,
)
from pycpp.macros import FunctionMacro, MacroTable
from pycpp.substitute import FragmentBuilder, bind_arguments, raw_text, substitute
from pycpp.tape import EMPTY_HIDESET, Fragment, Frame, HideSet, Tape

logger = logging.getLogger(__name__)


def _is_plain(ch: str) -> bool:
    return not is_ident_continue(ch) and ch != "/" and ch != "#"


class Expander:
    """Expands macros in text without ever interpreting directives.

    This is what macro arguments are pre-expanded with. The table is only
    read.
    """

    def __init__(self, table: MacroTable) -> None:
        self.table = table

    def expand(self, text: str) -> str:
        """Expand ``text``.

        Raises MacroNestingError when calls nest deeper than the interpreter
        stack allows.
        """
        out = FragmentBuilder()
        tape = Tape.from_text(text)
        try:
            self._run(tape, out)
        except RecursionError:
            line, column = location(text, tape.base_pos)
            raise MacroNestingError("macro nesting too deep", line, column) from None
        return out.getvalue()

    def expand_fragments(self, fragments: Sequence[Fragment], hideset: HideSet = EMPTY_HIDESET) -> List[Fragment]:
        """Expand ``fragments`` as if every macro in ``hideset`` were disabled."""
        out = FragmentBuilder()
        self._run(Tape.from_fragments(fragments, hideset), out)
        return out.fragments

    def _run(self, tape: Tape, out: FragmentBuilder) -> None:
        while not tape.at_end:
            frame = tape.top
            text = frame.text
            pos = frame.pos
            if frame.painted:
                out.painted(text[pos:])
                tape.skip(len(text) - pos)
                continue

            ch = text[pos]
            if ch == "/":
                end = match_comment(text, pos)
                if end is not None:
                    tape.skip(end - pos)
                    continue
            elif ch == "#" and self._directive(tape, frame):
                continue

            if is_ident_start(ch):
                end = scan_identifier(text, pos)
                self._identifier(tape, frame, text[pos:end], out)
                continue

            if is_ident_continue(ch):
                end = scan_word(text, pos)
            else:
                end = pos + 1
                while end < len(text) and _is_plain(text[end]):
                    end += 1
            out.text(text[pos:end])
            tape.skip(end - pos)

    def _directive(self, tape: Tape, frame: Frame) -> bool:
        """Hook for the top-level driver; arguments have no directives."""
        return False

    def _identifier(self, tape: Tape, frame: Frame, name: str, out: FragmentBuilder) -> None:
        macro = self.table.lookup(name)
        if macro is None:
            out.text(name)
            tape.skip(len(name))
            return
        if frame.is_hidden(name):
            out.painted(name)
            tape.skip(len(name))
            return

        if isinstance(macro, FunctionMacro):
            call = scan_call_arguments(tape.chars(len(name)))
            if call is None:
                # Not invoked here; it may still be called once more text follows.
                out.text(name)
                tape.skip(len(name))
                return
            tape.skip(len(name) + call.length)
            hideset = call.rparen_tag.hideset
            args = [[Fragment(text, tag.painted) for text, tag in arg] for arg in call.args]
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("calling %s(%s)", name, ", ".join(raw_text(a) for a in args))
            expansion = substitute(
                macro.body,
                bind_arguments(macro, args),
                lambda arg: self._prescan(arg, hideset),
            )
        else:
            tape.skip(len(name))
            hideset = frame.hideset
            expansion = substitute(macro.body)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s -> %r", name, raw_text(expansion))
        tape.push(expansion, hideset | {name})

    def _prescan(self, arg: List[Fragment], hideset: HideSet) -> List[Fragment]:
        expanded = Expander(self.table).expand_fragments(arg, hideset)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("pre-expanded %r -> %r", raw_text(arg), raw_text(expanded))
        return expanded


def expand_pure(table: MacroTable, text: str) -> str:
    """Fully expand ``text`` with ``table``; ``#`` lines are plain text."""
    return Expander(table).expand(text)
