"""shell-expand: word expansion for command shells."""

from .errors import ArithmeticEvalError, ExpansionError, GlobPatternError
from .parser.ranges import (
    SELECT_ALL,
    SELECT_NONE,
    Backward,
    Forward,
    Key,
    Range,
    Select,
    SelectAll,
    SelectNone,
)
from .shell import Shell, expand, run_command
from .types import Array, Expander, ExpansionLimits

__all__ = [
    # Main API
    "Shell",
    "expand",
    "run_command",
    # Capabilities and configuration
    "Array",
    "Expander",
    "ExpansionLimits",
    # Selections
    "Select",
    "SelectNone",
    "SelectAll",
    "Forward",
    "Backward",
    "Range",
    "Key",
    "SELECT_NONE",
    "SELECT_ALL",
    # Errors
    "ExpansionError",
    "ArithmeticEvalError",
    "GlobPatternError",
]
