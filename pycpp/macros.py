"""
Macro definitions and the macro table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union

VARIADIC_MARKER = "..."
VA_ARGS = "__VA_ARGS__"


@dataclass
class ObjectMacro:
    """``#define NAME body``"""
    body: str


@dataclass
class FunctionMacro:
    """``#define NAME(params) body``

    ``params`` keeps the declared order and may end with ``...``.
    """
    params: List[str] = field(default_factory=list)
    body: str = ""

    @property
    def variadic(self) -> bool:
        return bool(self.params) and self.params[-1] == VARIADIC_MARKER

    @property
    def named_params(self) -> List[str]:
        if self.variadic:
            return self.params[:-1]
        return list(self.params)


Macro = Union[ObjectMacro, FunctionMacro]


def format_definition(name: str, macro: Macro) -> str:
    """Render a definition back as a ``#define`` line (without newline)."""
    if isinstance(macro, FunctionMacro):
        head = f"{name}({', '.join(macro.params)})"
    else:
        head = name
    if macro.body:
        return f"#define {head} {macro.body}"
    return f"#define {head}"


class MacroTable:
    """Mapping from macro name to its current definition.

    Redefinition silently replaces the old entry and undefining an unknown
    name is a no-op, so neither operation can fail.
    """

    def __init__(self) -> None:
        self._macros: Dict[str, Macro] = {}

    def define(self, name: str, macro: Macro) -> Optional[Macro]:
        """Insert or replace ``name``; return the definition it replaced."""
        previous = self._macros.get(name)
        self._macros[name] = macro
        return previous

    def undefine(self, name: str) -> bool:
        return self._macros.pop(name, None) is not None

    def lookup(self, name: str) -> Optional[Macro]:
        return self._macros.get(name)

    def copy(self) -> MacroTable:
        table = MacroTable()
        table._macros = dict(self._macros)
        return table

    def dump(self) -> str:
        """All definitions as ``#define`` lines, sorted by name."""
        return "".join(format_definition(name, self._macros[name]) + "\n" for name in self)

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._macros))

    def __len__(self) -> int:
        return len(self._macros)
