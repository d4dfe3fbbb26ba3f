"""Word lexer.

Splits one shell word into the tokens the word expander works on. Quoting
and escaping are resolved here, so the expander only ever sees literal text
and typed expansion requests:

    ~/src/*.py          Literal (tilde and glob flags set)
    $name ${name}       Variable
    @name @{name}       ArrayVariable
    $(cmd) @(cmd)       Process / ArrayProcess
    $((expr))           Arithmetic
    $len(x) @split(x)   StringMethod / ArrayMethod
    [a b c]             ArrayLiteral
    {a,b,c}             Brace

Any expansion other than a brace or arithmetic may be followed by a
selection suffix such as [0], [-1], [1..3] or [key].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .ranges import SELECT_ALL, Select, parse_select


@dataclass(frozen=True)
class Literal:
    """Plain text, with quoting already removed."""

    text: str
    glob: bool = False
    tilde: bool = False


@dataclass(frozen=True)
class Whitespace:
    """An unquoted run of whitespace."""

    text: str


@dataclass(frozen=True)
class Variable:
    """$name or ${name}."""

    name: str
    quoted: bool
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class ArrayLiteral:
    """[a b c] - elements are expanded when the token is."""

    elements: tuple[str, ...]
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class ArrayVariable:
    """@name or @{name}."""

    name: str
    quoted: bool
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class ArrayProcess:
    """@(command) - command output split into words."""

    command: str
    quoted: bool
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class Process:
    """$(command)."""

    command: str
    quoted: bool
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class ArrayMethod:
    """@method(variable, pattern)."""

    method: str
    variable: str
    pattern: str
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class StringMethod:
    """$method(variable, pattern)."""

    method: str
    variable: str
    pattern: str
    selection: Select = SELECT_ALL


@dataclass(frozen=True)
class Brace:
    """{a,b,c} - the raw text of each alternative."""

    alternatives: tuple[str, ...]


@dataclass(frozen=True)
class Arithmetic:
    """$((expression))."""

    expression: str


WordToken = Union[
    Literal,
    Whitespace,
    Variable,
    ArrayLiteral,
    ArrayVariable,
    ArrayProcess,
    Process,
    ArrayMethod,
    StringMethod,
    Brace,
    Arithmetic,
]


WHITESPACE = " \t\n"
_PAIRS = {"(": ")", "[": "]", "{": "}"}


def is_name_char(c: str) -> bool:
    """Check if a character may appear in a variable or method name."""
    return c == "_" or ("a" <= c <= "z") or ("A" <= c <= "Z") or ("0" <= c <= "9")


def is_expression(s: str) -> bool:
    """Check whether text is an expression rather than a bare word.

    Strings starting with '$', '@', '[', '"' or "'" are expressions.
    """
    return s[:1] in ("$", "@", "[", '"', "'")


def find_closing(data: str, start: int, opener: str, closer: str) -> int:
    """Find the closer matching an opener whose content begins at start.

    Nested pairs, quoted sections and backslash escapes are skipped.
    Returns -1 when there is no matching closer.
    """
    depth = 0
    i = start
    while i < len(data):
        c = data[i]
        if c == "\\":
            i += 2
            continue
        if c == "'" or c == '"':
            end = data.find(c, i + 1)
            if end < 0:
                return -1
            i = end + 1
            continue
        if c == opener:
            depth += 1
        elif c == closer:
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return -1


def split_top_level(data: str, separators: str) -> list[str]:
    """Split text on separators that are not nested or quoted.

    Consecutive whitespace separators are collapsed; other separators
    always produce a field, even an empty one.
    """
    fields: list[str] = []
    current: list[str] = []
    depth = 0
    quote: Optional[str] = None
    whitespace_split = any(c in WHITESPACE for c in separators)
    i = 0
    while i < len(data):
        c = data[i]
        if quote:
            current.append(c)
            if c == quote:
                quote = None
            elif c == "\\" and quote == '"' and i + 1 < len(data):
                current.append(data[i + 1])
                i += 1
        elif c == "\\" and i + 1 < len(data):
            current.append(c)
            current.append(data[i + 1])
            i += 1
        elif c in "'\"":
            quote = c
            current.append(c)
        elif c in "([{":
            depth += 1
            current.append(c)
        elif c in ")]}":
            depth -= 1
            current.append(c)
        elif depth == 0 and c in separators:
            if c in WHITESPACE:
                if current:
                    fields.append("".join(current))
                    current = []
            else:
                fields.append("".join(current))
                current = []
        else:
            current.append(c)
        i += 1
    if current or not whitespace_split:
        fields.append("".join(current))
    return fields


class WordLexer:
    """Lexer for a single shell word.

    Tokens are produced lazily and in order; a lexer instance can only be
    consumed once.
    """

    def __init__(self, data: str, do_glob: bool = True):
        self.data = data
        self.pos = 0
        self.do_glob = do_glob
        self.quoted = False

        # The literal currently being accumulated
        self._literal: list[str] = []
        self._quoted_tokens = 0
        self._glob = False
        self._tilde = False

    def __iter__(self) -> Iterator[WordToken]:
        return self.tokens()

    def peek(self, offset: int = 0) -> str:
        """Look at the character at current position + offset."""
        idx = self.pos + offset
        if idx < len(self.data):
            return self.data[idx]
        return ""

    def tokens(self) -> Iterator[WordToken]:
        """Yield the tokens of the word."""
        data = self.data
        while self.pos < len(data):
            c = data[self.pos]

            if self.quoted:
                if c == '"':
                    # "" on its own is still an (empty) literal
                    if not self._quoted_tokens and not self._literal:
                        self._literal.append("")
                    self.quoted = False
                    self.pos += 1
                elif c == "\\" and self.peek(1) in ('"', "\\", "$", "@"):
                    self._append(self.peek(1))
                    self.pos += 2
                elif c in "$@":
                    token = self._read_expansion()
                    if token is None:
                        self._append(c)
                        self.pos += 1
                    else:
                        self._quoted_tokens += 1
                        yield from self._flush()
                        yield token
                else:
                    self._append(c)
                    self.pos += 1
                continue

            if c == "'":
                end = data.find("'", self.pos + 1)
                if end < 0:
                    end = len(data)
                self._append(data[self.pos + 1:end])
                self.pos = end + 1
            elif c == '"':
                self.quoted = True
                self._quoted_tokens = 0
                self.pos += 1
            elif c == "\\":
                self._append(self.peek(1) or "\\")
                self.pos += 2
            elif c in WHITESPACE:
                yield from self._flush()
                start = self.pos
                while self.pos < len(data) and data[self.pos] in WHITESPACE:
                    self.pos += 1
                yield Whitespace(data[start:self.pos])
            elif c in "$@":
                token = self._read_expansion()
                if token is None:
                    self._append(c)
                    self.pos += 1
                else:
                    yield from self._flush()
                    yield token
            elif c == "{":
                alternatives = self._read_brace()
                if alternatives is None:
                    self._append(c)
                    self.pos += 1
                else:
                    yield from self._flush()
                    yield Brace(alternatives)
            elif c == "[" and not self._literal:
                token = self._read_array_literal()
                if token is None:
                    self._append(c, glob=True)
                    self.pos += 1
                else:
                    yield token
            elif c == "~" and self.pos == 0:
                self._tilde = True
                self._append(c)
                self.pos += 1
            elif c in "*?[":
                self._append(c, glob=True)
                self.pos += 1
            else:
                self._append(c)
                self.pos += 1

        yield from self._flush()

    # Literal accumulation

    def _append(self, text: str, glob: bool = False) -> None:
        self._literal.append(text)
        if glob and self.do_glob:
            self._glob = True

    def _flush(self) -> Iterator[WordToken]:
        if self._literal:
            yield Literal("".join(self._literal), self._glob, self._tilde)
        self._literal = []
        self._glob = False
        self._tilde = False

    # Expansions

    def _read_enclosed(self, opener: str) -> Optional[str]:
        """Read text enclosed by opener and its closer, starting at pos."""
        closer = _PAIRS[opener]
        end = find_closing(self.data, self.pos + 1, opener, closer)
        if end < 0:
            return None
        content = self.data[self.pos + 1:end]
        self.pos = end + 1
        return content

    def _read_selection(self) -> Select:
        if self.peek() != "[":
            return SELECT_ALL
        saved = self.pos
        content = self._read_enclosed("[")
        if content is None:
            self.pos = saved
            return SELECT_ALL
        return parse_select(content)

    def _read_name(self) -> str:
        start = self.pos
        while self.pos < len(self.data) and is_name_char(self.data[self.pos]):
            self.pos += 1
        return self.data[start:self.pos]

    def _read_arithmetic(self) -> Optional[str]:
        """Read $((...)); pos is on the '$'."""
        depth = 0
        i = self.pos + 3
        while i < len(self.data):
            c = self.data[i]
            if c == "(":
                depth += 1
            elif c == ")":
                if depth == 0:
                    if self.data[i + 1:i + 2] == ")":
                        expression = self.data[self.pos + 3:i]
                        self.pos = i + 2
                        return expression
                    return None
                depth -= 1
            i += 1
        return None

    def _read_expansion(self) -> Optional[WordToken]:
        """Read a $ or @ expansion at pos.

        Returns None, leaving pos untouched, when the sigil does not start
        an expansion.
        """
        sigil = self.data[self.pos]
        is_array = sigil == "@"
        quoted = self.quoted
        start = self.pos
        nxt = self.peek(1)

        if nxt == "(":
            if not is_array and self.peek(2) == "(":
                expression = self._read_arithmetic()
                if expression is not None:
                    return Arithmetic(expression)
            self.pos += 1
            command = self._read_enclosed("(")
            if command is None:
                self.pos = start
                return None
            selection = self._read_selection()
            if is_array:
                return ArrayProcess(command, quoted, selection)
            return Process(command, quoted, selection)

        if nxt == "{":
            self.pos += 1
            name = self._read_enclosed("{")
            if not name:
                self.pos = start
                return None
            selection = self._read_selection()
            if is_array:
                return ArrayVariable(name, quoted, selection)
            return Variable(name, quoted, selection)

        if not nxt or not is_name_char(nxt):
            return None

        self.pos += 1
        name = self._read_name()

        if self.peek() == "(":
            saved = self.pos
            args = self._read_enclosed("(")
            if args is None:
                self.pos = saved
            else:
                variable, pattern = _split_method_args(args)
                selection = self._read_selection()
                if is_array:
                    return ArrayMethod(name, variable, pattern, selection)
                return StringMethod(name, variable, pattern, selection)

        selection = self._read_selection()
        if is_array:
            return ArrayVariable(name, quoted, selection)
        return Variable(name, quoted, selection)

    def _read_brace(self) -> Optional[tuple[str, ...]]:
        content = self._read_enclosed("{")
        if content is None:
            return None
        if not content:
            return ()
        return tuple(split_top_level(content, ","))

    def _read_array_literal(self) -> Optional[ArrayLiteral]:
        content = self._read_enclosed("[")
        if content is None:
            return None
        elements = tuple(split_top_level(content, WHITESPACE))
        return ArrayLiteral(elements, self._read_selection())


def _split_method_args(args: str) -> tuple[str, str]:
    """Split method arguments into the variable and the pattern."""
    fields = split_top_level(args, ",")
    variable = fields[0].strip()
    pattern = ",".join(fields[1:]).strip()
    return variable, pattern


def tokenize(data: str, do_glob: bool = True) -> Iterator[WordToken]:
    """Tokenize a shell word.

    Args:
        data: The word to tokenize.
        do_glob: Whether unquoted wildcards mark literals for globbing.

    Returns:
        An iterator over the word's tokens, in order.
    """
    return WordLexer(data, do_glob).tokens()
