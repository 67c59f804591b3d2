"""
Preprocessor diagnostics.

Errors carry the line and column of the offending construct so the driver
can report them the same way for every stage.
"""

from __future__ import annotations


class PreprocessorError(Exception):
    """Fatal preprocessing error with line and column information"""

    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at {line}:{column}")


class LexerError(PreprocessorError):
    """Malformed source text (unterminated comment)"""


class DirectiveError(PreprocessorError):
    """Malformed #define / #undef directive or -D option"""


class MacroNestingError(PreprocessorError):
    """Macro calls nested deeper than the expander can follow"""
