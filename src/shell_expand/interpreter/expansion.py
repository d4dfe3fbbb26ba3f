"""Word Expansion System.

Expands one shell word into its final, ordered list of arguments:
- Variable expansion ($VAR, ${VAR}) with grapheme slicing ($VAR[0..2])
- Array expansion (@array, [a b c]) with index, range and key selection
- Command substitution $(...) and @(...)
- Arithmetic expansion $((...))
- String and array methods ($len(...), @split(...))
- Tilde expansion (~)
- Brace expansion {a,b,c} and ranges {1..5}
- Glob expansion (*)

Failures never propagate: an unresolved variable expands to nothing, a glob
without matches stays literal and a bad arithmetic expression expands to its
error message.
"""

from __future__ import annotations

import logging
import string
from typing import Optional

import regex

from ..errors import ArithmeticEvalError, GlobPatternError
from ..parser.lexer import (
    Arithmetic,
    ArrayLiteral,
    ArrayMethod,
    ArrayProcess,
    ArrayVariable,
    Brace,
    Literal,
    Process,
    StringMethod,
    Variable,
    Whitespace,
    WordToken,
    tokenize,
)
from ..parser.ranges import (
    Key,
    Select,
    SelectAll,
    SelectNone,
    parse_range,
    parse_select,
    select,
)
from ..types import Array
from . import arithmetic, braces, globbing
from .methods import handle_array_method, handle_string_method
from .types import ExpansionContext

logger = logging.getLogger(__name__)

_GRAPHEME = regex.compile(r"\X")

# Only these separate fields in unquoted command output
_FIELD_SEPARATORS = " \t\n"
_FIELD_SPLIT = regex.compile(r"[ \t\n]+")


def graphemes(text: str) -> list[str]:
    """Split text into extended grapheme clusters."""
    return _GRAPHEME.findall(text)


# Selection

def slice_string(text: str, selection: Select) -> str:
    """Apply a selection to the graphemes of a string.

    SelectNone and Key select nothing; out-of-range selections give "".
    """
    if isinstance(selection, SelectAll):
        return text
    return "".join(select(graphemes(text), selection))


def array_expand(ctx: ExpansionContext, elements: tuple[str, ...], selection: Select) -> Array:
    """Expand the elements of an array literal and apply a selection.

    Each element is expanded on its own and the results are flattened in
    source order before the selection is applied.
    """
    if isinstance(selection, (SelectNone, Key)):
        return []
    nested = ctx.nested()
    expanded = [word for element in elements for word in expand_string(nested, element)]
    return select(expanded, selection)


# Command substitution

def split_fields(output: str) -> list[str]:
    """Split command output on runs of spaces, tabs and newlines."""
    stripped = output.strip(_FIELD_SEPARATORS)
    if not stripped:
        return []
    return _FIELD_SPLIT.split(stripped)


def expand_process(ctx: ExpansionContext, command: str, selection: Select, quoted: bool) -> str:
    """Expand $(command).

    Quoted output only loses its trailing newlines. Unquoted output is
    field split: every run of spaces, tabs and newlines becomes one space
    and the ends are stripped. Other whitespace, such as a no-break space,
    is kept.
    """
    output = ctx.expander.run_command(command)
    if not output:
        return ""
    if quoted:
        text = output.rstrip("\n")
    else:
        text = " ".join(split_fields(output))
    return slice_string(text, selection)


def _array_process(ctx: ExpansionContext, command: str, selection: Select) -> Array:
    """Expand @(command): the field-split output as an array."""
    if isinstance(selection, (SelectNone, Key)):
        return []
    output = ctx.expander.run_command(command)
    words = split_fields(output) if output else []
    return select(words, selection)


# Arithmetic

_IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def expand_arithmetic(ctx: ExpansionContext, expression: str) -> str:
    """Expand $((expression)).

    ASCII identifier runs are replaced with their variable values when the
    variable exists and kept as-is otherwise. On failure the evaluator's
    error message is returned in place of the number.
    """
    intermediate: list[str] = []
    identifier: list[str] = []

    def flush() -> None:
        if identifier:
            name = "".join(identifier)
            value = ctx.expander.lookup_string(name, False)
            intermediate.append(name if value is None else value)
            identifier.clear()

    for c in expression:
        if c in _IDENTIFIER_CHARS:
            identifier.append(c)
        else:
            flush()
            intermediate.append(c)
    flush()

    substituted = "".join(intermediate)
    try:
        return str(arithmetic.evaluate(substituted))
    except ArithmeticEvalError as error:
        logger.debug("arithmetic expansion failed for %r: %s", substituted, error)
        return str(error)


# Globbing

def glob_expand(word: str) -> Array:
    """Replace a word containing '*' with the paths it matches.

    Words without '*', malformed patterns and patterns without matches are
    kept as the single element.
    """
    if "*" not in word:
        return [word]
    try:
        matches = list(globbing.glob(word))
    except GlobPatternError as error:
        logger.debug("glob pattern rejected: %s", error)
        return [word]
    return matches or [word]


def _expand_literal(
    ctx: ExpansionContext,
    output: list[str],
    expanded_words: Array,
    token: Literal,
    do_glob: bool,
) -> None:
    text = token.text
    if token.tilde:
        expanded = ctx.expander.expand_tilde(text)
        if expanded is not None:
            text = expanded

    if do_glob:
        expanded_words.extend(glob_expand(text))
    else:
        output.append(text)


# Tokens

def _append_token(
    ctx: ExpansionContext, output: list[str], token: WordToken, reverse_quoting: bool
) -> None:
    """Append the expansion of a token to a word buffer.

    Array-valued tokens are joined with single spaces. Literal and Brace
    tokens are handled by the callers.
    """
    if isinstance(token, ArrayLiteral):
        output.append(" ".join(array_expand(ctx, token.elements, token.selection)))
    elif isinstance(token, ArrayVariable):
        array = ctx.expander.lookup_array(token.name, token.selection)
        if array is not None:
            output.append(" ".join(array))
    elif isinstance(token, ArrayProcess):
        output.append(" ".join(_array_process(ctx, token.command, token.selection)))
    elif isinstance(token, ArrayMethod):
        output.append(" ".join(handle_array_method(ctx, token)))
    elif isinstance(token, StringMethod):
        output.append(handle_string_method(ctx, token))
    elif isinstance(token, Whitespace):
        output.append(token.text)
    elif isinstance(token, Process):
        quoted = token.quoted != reverse_quoting
        output.append(expand_process(ctx, token.command, token.selection, quoted))
    elif isinstance(token, Variable):
        quoted = token.quoted != reverse_quoting
        value = ctx.expander.lookup_string(token.name, quoted)
        if value is not None:
            output.append(slice_string(value, token.selection))
    elif isinstance(token, Arithmetic):
        output.append(expand_arithmetic(ctx, token.expression))
    else:
        raise TypeError(f"unexpected token: {token!r}")


def _expand_single_array_token(ctx: ExpansionContext, token: WordToken) -> Optional[Array]:
    """Expand a lone array-shaped token; None if the token is not one."""
    if isinstance(token, ArrayLiteral):
        return array_expand(ctx, token.elements, token.selection)
    if isinstance(token, ArrayVariable):
        array = ctx.expander.lookup_array(token.name, token.selection)
        if array is None:
            return []
        if token.quoted:
            return [" ".join(array)]
        return list(array)
    if isinstance(token, ArrayProcess):
        return _array_process(ctx, token.command, token.selection)
    if isinstance(token, ArrayMethod):
        return handle_array_method(ctx, token)
    return None


def _expand_single_string_token(
    ctx: ExpansionContext, token: WordToken, reverse_quoting: bool
) -> Array:
    """Expand a lone scalar token into zero or one words."""
    output: list[str] = []
    expanded_words: Array = []

    if isinstance(token, Literal):
        _expand_literal(ctx, output, expanded_words, token, token.glob)
    else:
        _append_token(ctx, output, token, reverse_quoting)

    text = "".join(output)
    if text:
        expanded_words.append(text)
    return expanded_words


# Braces

def _expand_brace(
    ctx: ExpansionContext,
    output: list[str],
    layout: list[braces.BraceToken],
    candidates: list[Array],
    alternatives: tuple[str, ...],
    reverse_quoting: bool,
) -> None:
    nested = ctx.nested()
    options: Array = []
    for alternative in alternatives:
        for word in expand_string_no_glob(nested, alternative, reverse_quoting):
            members = parse_range(word, ctx.limits.max_brace_expansions)
            if members is None:
                options.append(word)
            else:
                options.extend(members)

    if not options:
        output.append("{}")
        return

    if output:
        layout.append(braces.Segment("".join(output)))
        output.clear()
    layout.append(braces.PLACEHOLDER)
    candidates.append(options)


def _expand_braces(ctx: ExpansionContext, tokens: list[WordToken], reverse_quoting: bool) -> Array:
    """Expand a word containing brace groups.

    Globbing is deferred until every combination has been generated.
    """
    expanded_words: Array = []
    output: list[str] = []
    layout: list[braces.BraceToken] = []
    candidates: list[Array] = []

    for token in tokens:
        if isinstance(token, Brace):
            _expand_brace(ctx, output, layout, candidates, token.alternatives, reverse_quoting)
        elif isinstance(token, Literal):
            _expand_literal(ctx, output, expanded_words, token, do_glob=False)
        else:
            _append_token(ctx, output, token, reverse_quoting)

    if not candidates:
        expanded_words.append("".join(output))
    else:
        if output:
            layout.append(braces.Segment("".join(output)))
        limit = ctx.limits.max_brace_expansions
        total = braces.count(candidates)
        if total > limit:
            logger.warning(
                "brace expansion truncated to %d of %d words", limit, total
            )
        expanded_words.extend(braces.expand(layout, candidates, limit))

    return [path for word in expanded_words for path in glob_expand(word)]


# Dispatch

def _collect_tokens(original: str, do_glob: bool) -> tuple[list[WordToken], bool]:
    """Tokenize a word, splitting multi-key array lookups.

    @map[a b] becomes @map[a], a space and @map[b], so several keys behave
    exactly like several single-key lookups.
    """
    token_buffer: list[WordToken] = []
    contains_brace = False

    for token in tokenize(original, do_glob):
        if isinstance(token, Brace):
            contains_brace = True
            token_buffer.append(token)
        elif (
            isinstance(token, ArrayVariable)
            and isinstance(token.selection, Key)
            and " " in token.selection.key
        ):
            for key in token.selection.key.split(" "):
                token_buffer.append(ArrayVariable(token.name, token.quoted, parse_select(key)))
                token_buffer.append(Whitespace(" "))
            token_buffer.pop()
        else:
            token_buffer.append(token)

    if not original:
        token_buffer.append(Literal("", glob=True))
    return token_buffer, contains_brace


def expand_tokens(
    ctx: ExpansionContext,
    token_buffer: list[WordToken],
    reverse_quoting: bool = False,
    contains_brace: bool = False,
) -> Array:
    """Expand a tokenized word.

    Routing:
    - No tokens: no words
    - Any brace: brace expansion
    - One token: array-shaped expansion, else a single word
    - Several tokens: folded into one word; globbed literals are added as
      words of their own
    """
    if not token_buffer:
        return []
    if contains_brace:
        return _expand_braces(ctx, token_buffer, reverse_quoting)
    if len(token_buffer) == 1:
        token = token_buffer[0]
        array = _expand_single_array_token(ctx, token)
        if array is not None:
            return array
        return _expand_single_string_token(ctx, token, reverse_quoting)

    output: list[str] = []
    expanded_words: Array = []
    for token in token_buffer:
        if isinstance(token, Brace):
            raise TypeError("brace token outside brace expansion")
        if isinstance(token, Literal):
            _expand_literal(ctx, output, expanded_words, token, token.glob)
        else:
            _append_token(ctx, output, token, reverse_quoting)

    text = "".join(output)
    if text:
        expanded_words.append(text)
    return expanded_words


def _expand(ctx: ExpansionContext, original: str, reverse_quoting: bool, do_glob: bool) -> Array:
    if ctx.too_deep:
        logger.warning(
            "expansion nested deeper than %d levels, leaving %r unexpanded",
            ctx.limits.max_nesting_depth,
            original,
        )
        return [original]
    token_buffer, contains_brace = _collect_tokens(original, do_glob)
    return expand_tokens(ctx, token_buffer, reverse_quoting, contains_brace)


def expand_string(ctx: ExpansionContext, original: str, reverse_quoting: bool = False) -> Array:
    """Expand a word into its final list of arguments."""
    return _expand(ctx, original, reverse_quoting, do_glob=True)


def expand_string_no_glob(
    ctx: ExpansionContext, original: str, reverse_quoting: bool = False
) -> Array:
    """Expand a word without marking its literals for globbing.

    Used for brace alternatives, whose combinations are globbed afterwards.
    """
    return _expand(ctx, original, reverse_quoting, do_glob=False)
