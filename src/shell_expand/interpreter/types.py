"""Interpreter types for shell-expand."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..types import Expander, ExpansionLimits


@dataclass(frozen=True)
class ExpansionContext:
    """Context passed to every expansion function."""

    expander: Expander = field(default_factory=Expander)
    """Capabilities provided by the host shell."""

    limits: ExpansionLimits = field(default_factory=ExpansionLimits)
    """Expansion limits."""

    depth: int = 0
    """Current nesting depth (arrays, brace alternatives, method arguments)."""

    def nested(self) -> ExpansionContext:
        """Context for expanding a nested word."""
        return replace(self, depth=self.depth + 1)

    @property
    def too_deep(self) -> bool:
        return self.depth > self.limits.max_nesting_depth
