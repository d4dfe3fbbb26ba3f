"""String and array methods.

    $len(name)              number of graphemes (or elements of an array)
    $join(@array, ', ')     elements joined by the pattern
    @split(name, ',')       value split on the pattern
    @chars(name)[0]         first character

The first argument is expanded when it is an expression and looked up as a
variable name otherwise. The second argument, the pattern, is always
expanded.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Callable, Optional

from ..parser.lexer import ArrayMethod, StringMethod, is_expression
from ..parser.ranges import SELECT_ALL, select
from ..types import Array

if TYPE_CHECKING:
    from .types import ExpansionContext

logger = logging.getLogger(__name__)


def _expand(ctx: "ExpansionContext", text: str) -> Array:
    from .expansion import expand_string

    return expand_string(ctx.nested(), text)


def _graphemes(text: str) -> list[str]:
    from .expansion import graphemes

    return graphemes(text)


def resolve_string(ctx: "ExpansionContext", variable: str) -> str:
    """Resolve a method's first argument as a single string."""
    if is_expression(variable):
        return " ".join(_expand(ctx, variable))
    value = ctx.expander.lookup_string(variable, False)
    return value if value is not None else ""


def resolve_array(ctx: "ExpansionContext", variable: str) -> Array:
    """Resolve a method's first argument as an array."""
    if is_expression(variable):
        return _expand(ctx, variable)
    array = ctx.expander.lookup_array(variable, SELECT_ALL)
    if array is not None:
        return array
    value = ctx.expander.lookup_string(variable, False)
    return [value] if value is not None else []


def resolve_pattern(ctx: "ExpansionContext", pattern: str) -> Optional[str]:
    """Expand a method's pattern argument; None when it was omitted."""
    if not pattern:
        return None
    return " ".join(_expand(ctx, pattern))


def _parse_count(method: str, pattern: Optional[str]) -> Optional[int]:
    try:
        return int(pattern or "")
    except ValueError:
        logger.warning("%s: invalid count %r", method, pattern)
        return None


# String methods

def _len(ctx, variable, pattern):
    if variable.startswith(("@", "[")):
        return str(len(resolve_array(ctx, variable)))
    return str(len(_graphemes(resolve_string(ctx, variable))))


def _len_bytes(ctx, variable, pattern):
    return str(len(resolve_string(ctx, variable).encode("utf-8")))


def _join(ctx, variable, pattern):
    separator = resolve_pattern(ctx, pattern)
    return (" " if separator is None else separator).join(resolve_array(ctx, variable))


def _to_lowercase(ctx, variable, pattern):
    return resolve_string(ctx, variable).lower()


def _to_uppercase(ctx, variable, pattern):
    return resolve_string(ctx, variable).upper()


def _reverse(ctx, variable, pattern):
    return "".join(reversed(_graphemes(resolve_string(ctx, variable))))


def _repeat(ctx, variable, pattern):
    times = _parse_count("repeat", resolve_pattern(ctx, pattern))
    if times is None:
        return ""
    return resolve_string(ctx, variable) * max(times, 0)


def _replace(ctx, variable, pattern):
    value = resolve_string(ctx, variable)
    args = (resolve_pattern(ctx, pattern) or "").split(" ", 1)
    if not args[0]:
        return value
    replacement = args[1] if len(args) > 1 else ""
    return value.replace(args[0], replacement)


def _starts_with(ctx, variable, pattern):
    prefix = resolve_pattern(ctx, pattern) or ""
    return "1" if resolve_string(ctx, variable).startswith(prefix) else "0"


def _ends_with(ctx, variable, pattern):
    suffix = resolve_pattern(ctx, pattern) or ""
    return "1" if resolve_string(ctx, variable).endswith(suffix) else "0"


def _contains(ctx, variable, pattern):
    needle = resolve_pattern(ctx, pattern) or ""
    return "1" if needle in resolve_string(ctx, variable) else "0"


def _find(ctx, variable, pattern):
    needle = resolve_pattern(ctx, pattern) or ""
    return str(resolve_string(ctx, variable).find(needle))


def _basename(ctx, variable, pattern):
    return os.path.basename(resolve_string(ctx, variable))


def _filename(ctx, variable, pattern):
    return os.path.splitext(os.path.basename(resolve_string(ctx, variable)))[0]


def _extension(ctx, variable, pattern):
    return os.path.splitext(os.path.basename(resolve_string(ctx, variable)))[1][1:]


def _parent(ctx, variable, pattern):
    return os.path.dirname(resolve_string(ctx, variable))


StringMethodFn = Callable[["ExpansionContext", str, str], str]

STRING_METHODS: dict[str, StringMethodFn] = {
    "len": _len,
    "len_bytes": _len_bytes,
    "join": _join,
    "to_lowercase": _to_lowercase,
    "to_uppercase": _to_uppercase,
    "reverse": _reverse,
    "repeat": _repeat,
    "replace": _replace,
    "starts_with": _starts_with,
    "ends_with": _ends_with,
    "contains": _contains,
    "find": _find,
    "basename": _basename,
    "filename": _filename,
    "extension": _extension,
    "parent": _parent,
}


# Array methods

def _split(ctx, variable, pattern):
    value = resolve_string(ctx, variable)
    separator = resolve_pattern(ctx, pattern)
    if not separator:
        return value.split()
    return value.split(separator)


def _split_at(ctx, variable, pattern):
    position = _parse_count("split_at", resolve_pattern(ctx, pattern))
    if position is None:
        return []
    clusters = _graphemes(resolve_string(ctx, variable))
    if not 0 <= position <= len(clusters):
        logger.warning("split_at: index %d out of range", position)
        return []
    return ["".join(clusters[:position]), "".join(clusters[position:])]


def _chars(ctx, variable, pattern):
    return list(resolve_string(ctx, variable))


def _graphemes_method(ctx, variable, pattern):
    return _graphemes(resolve_string(ctx, variable))


def _bytes(ctx, variable, pattern):
    return [str(b) for b in resolve_string(ctx, variable).encode("utf-8")]


def _lines(ctx, variable, pattern):
    return resolve_string(ctx, variable).splitlines()


def _reverse_array(ctx, variable, pattern):
    return list(reversed(resolve_array(ctx, variable)))


ArrayMethodFn = Callable[["ExpansionContext", str, str], Array]

ARRAY_METHODS: dict[str, ArrayMethodFn] = {
    "split": _split,
    "split_at": _split_at,
    "chars": _chars,
    "graphemes": _graphemes_method,
    "bytes": _bytes,
    "lines": _lines,
    "reverse": _reverse_array,
}


def handle_string_method(ctx: "ExpansionContext", token: StringMethod) -> str:
    """Evaluate a $method(...) token, applying its selection."""
    from .expansion import slice_string

    method = STRING_METHODS.get(token.method)
    if method is None:
        logger.warning("unknown string method: %s", token.method)
        return ""
    return slice_string(method(ctx, token.variable, token.pattern), token.selection)


def handle_array_method(ctx: "ExpansionContext", token: ArrayMethod) -> Array:
    """Evaluate an @method(...) token, applying its selection."""
    method = ARRAY_METHODS.get(token.method)
    if method is None:
        logger.warning("unknown array method: %s", token.method)
        return []
    return select(method(ctx, token.variable, token.pattern), token.selection)
