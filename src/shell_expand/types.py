"""Public types for shell-expand."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .parser.ranges import Select


Array = list[str]
"""Ordered expansion result. Order is significant and preserved end-to-end."""


@dataclass(frozen=True)
class Expander:
    """Capabilities the host shell provides to the word expander.

    Every capability is optional. A missing capability is an explicit None
    and behaves like a lookup that found nothing.
    """

    tilde: Optional[Callable[[str], Optional[str]]] = None
    """Expand a tilde word such as ``~`` or ``~user/dir``."""

    array: Optional[Callable[[str, "Select"], Optional[Array]]] = None
    """Look up an array variable, applying the given selection."""

    string: Optional[Callable[[str, bool], Optional[str]]] = None
    """Look up a string variable; the flag tells whether it was quoted."""

    command: Optional[Callable[[str], Optional[str]]] = None
    """Run a command substitution and return its raw output."""

    def expand_tilde(self, text: str) -> Optional[str]:
        if self.tilde is None:
            return None
        return self.tilde(text)

    def lookup_array(self, name: str, selection: "Select") -> Optional[Array]:
        if self.array is None:
            return None
        return self.array(name, selection)

    def lookup_string(self, name: str, quoted: bool) -> Optional[str]:
        if self.string is None:
            return None
        return self.string(name, quoted)

    def run_command(self, command: str) -> Optional[str]:
        if self.command is None:
            return None
        return self.command(command)


@dataclass(frozen=True)
class ExpansionLimits:
    """Limits that bound the work a single expansion may do.

    Nested expansions beyond max_nesting_depth are left unexpanded, and
    brace products stop after max_brace_expansions words.
    """

    max_nesting_depth: int = 64
    """Maximum recursion depth through arrays, braces and methods."""

    max_brace_expansions: int = 100_000
    """Maximum number of words a single brace expansion may produce."""
