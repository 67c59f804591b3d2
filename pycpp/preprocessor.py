"""
Top-level driver.

Runs the expansion engine over a whole translation unit, interpreting
``#define`` and ``#undef`` lines as it meets them so that each definition is
visible from its line onwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from pycpp.directives import Directive, match_directive, parse_define_option
from pycpp.errors import PreprocessorError
from pycpp.expander import Expander
from pycpp.lexer import at_line_start, location
from pycpp.macros import MacroTable, format_definition
from pycpp.tape import Frame, Tape

logger = logging.getLogger(__name__)


class DirectiveExpander(Expander):
    """Expander that also executes directives found in the source text.

    A ``#`` only starts a directive at the beginning of a line of the
    source text; text produced by an expansion never does.
    """

    def __init__(self, table: MacroTable, warnings: Optional[List[str]] = None) -> None:
        super().__init__(table)
        self.warnings: List[str] = warnings if warnings is not None else []

    def _directive(self, tape: Tape, frame: Frame) -> bool:
        if tape.depth != 1 or not at_line_start(frame.text, frame.pos):
            return False
        directive = match_directive(frame.text, frame.pos)
        if directive is None:
            return False
        if directive.kind == "define":
            self._define(frame.text, directive)
        else:
            self._undef(frame.text, directive)
        tape.skip(directive.end - directive.start)
        return True

    def _define(self, text: str, directive: Directive) -> None:
        previous = self.table.define(directive.name, directive.macro)
        logger.debug("defined %s", format_definition(directive.name, directive.macro))
        if previous is not None and previous != directive.macro:
            self._warn(text, directive.start, f"{directive.name!r} redefined")

    def _undef(self, text: str, directive: Directive) -> None:
        if self.table.undefine(directive.name):
            logger.debug("undefined %s", directive.name)
        if directive.extra:
            self._warn(text, directive.start, "extra tokens at end of #undef directive")

    def _warn(self, text: str, pos: int, message: str) -> None:
        line, column = location(text, pos)
        self.warnings.append(f"{message} at {line}:{column}")


def expand_toplevel(table: MacroTable, text: str, warnings: Optional[List[str]] = None) -> str:
    """Expand a whole source text, updating ``table`` with its directives.

    Raises PreprocessorError on malformed input. Warnings are appended to
    ``warnings`` when given.
    """
    return DirectiveExpander(table, warnings).expand(text)


@dataclass
class PreprocessResult:
    success: bool
    text: str = ""
    errors: List[str] = None
    warnings: List[str] = None

    def __post_init__(self) -> None:
        if self.errors is None:
            self.errors = []
        if self.warnings is None:
            self.warnings = []


class Preprocessor:
    """Macro preprocessor for a single source file.

    ``defines`` are gcc-style ``-D`` options (``NAME``, ``NAME=VALUE`` or
    ``F(x)=VALUE``) applied in order before the run; ``undefines`` are then
    removed. After a run ``macros`` holds the table as the source left it.
    """

    def __init__(self, *, defines: Optional[Sequence[str]] = None, undefines: Optional[Sequence[str]] = None) -> None:
        self.defines = list(defines or [])
        self.undefines = list(undefines or [])
        self.macros = MacroTable()
        self._seed: Optional[MacroTable] = None

    def _initial_macros(self) -> MacroTable:
        table = MacroTable()
        for option in self.defines:
            name, macro = parse_define_option(option)
            table.define(name, macro)
        for name in self.undefines:
            table.undefine(name)
        return table

    def preprocess(self, path: str) -> PreprocessResult:
        try:
            # newline="" keeps \r\n and \r line endings as written
            with open(path, "r", encoding="utf-8", newline="") as f:
                text = f.read()
        except OSError as e:
            return PreprocessResult(success=False, errors=[f"cannot read {path}: {e}"])
        return self.preprocess_text(text)

    def preprocess_text(self, text: str) -> PreprocessResult:
        warnings: List[str] = []
        try:
            if self._seed is None:
                self._seed = self._initial_macros()
            self.macros = self._seed.copy()
            out = expand_toplevel(self.macros, text, warnings)
        except PreprocessorError as e:
            return PreprocessResult(success=False, errors=[str(e)], warnings=warnings)
        return PreprocessResult(success=True, text=out, warnings=warnings)
