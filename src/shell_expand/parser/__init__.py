"""Parser module for shell-expand."""

from .lexer import (
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
    WordLexer,
    WordToken,
    is_expression,
    tokenize,
)
from .ranges import (
    parse_index_range,
    parse_range,
    parse_select,
)

__all__ = [
    # Lexer
    "WordLexer",
    "WordToken",
    "tokenize",
    "is_expression",
    # Tokens
    "Literal",
    "Whitespace",
    "Variable",
    "ArrayLiteral",
    "ArrayVariable",
    "ArrayProcess",
    "Process",
    "ArrayMethod",
    "StringMethod",
    "Brace",
    "Arithmetic",
    # Ranges
    "parse_select",
    "parse_index_range",
    "parse_range",
]
