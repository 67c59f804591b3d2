"""
pycpp - C macro preprocessor in pure Python

Expands #define / #undef directives and macro invocations with the
semantics of a standard C preprocessor, including the corner cases that
macro metaprogramming relies on.
"""

__version__ = "0.1.0"
__author__ = "pycpp Contributors"
__license__ = "MIT"

from .errors import DirectiveError, LexerError, MacroNestingError, PreprocessorError
from .macros import FunctionMacro, MacroTable, ObjectMacro
from .expander import Expander, expand_pure
from .preprocessor import PreprocessResult, Preprocessor, expand_toplevel

__all__ = [
    'PreprocessorError',
    'LexerError',
    'DirectiveError',
    'MacroNestingError',
    'ObjectMacro',
    'FunctionMacro',
    'MacroTable',
    'Expander',
    'expand_pure',
    'expand_toplevel',
    'Preprocessor',
    'PreprocessResult',
]
