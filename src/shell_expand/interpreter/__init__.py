"""Interpreter module for shell-expand."""

from .expansion import (
    array_expand,
    expand_arithmetic,
    expand_process,
    expand_string,
    expand_string_no_glob,
    expand_tokens,
    glob_expand,
    slice_string,
)
from .types import ExpansionContext

__all__ = [
    "ExpansionContext",
    "expand_string",
    "expand_string_no_glob",
    "expand_tokens",
    "array_expand",
    "slice_string",
    "expand_process",
    "expand_arithmetic",
    "glob_expand",
]
