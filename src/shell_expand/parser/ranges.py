"""Selections and ranges.

A selection narrows an expansion down to none, all, one, a contiguous range
or a keyed subset of its values:

    $string[0]      first grapheme
    @array[-1]      last element
    @array[1..3]    elements 1 and 2
    @array[1...3]   elements 1, 2 and 3
    @map[foo bar]   values stored under the keys foo and bar

The same module parses the range literals accepted inside braces, such as
{1..10}, {a...e} or {0..2..10}.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Forward:
    """Index counted from the start, 0 being the first element."""

    n: int


@dataclass(frozen=True)
class Backward:
    """Index counted from the end, 0 being the last element."""

    n: int


Index = Union[Forward, Backward]


def index_from_int(value: int) -> Index:
    """Map a signed index onto Forward/Backward (-1 is the last element)."""
    if value >= 0:
        return Forward(value)
    return Backward(-value - 1)


def resolve_index(index: Index, length: int) -> Optional[int]:
    """Resolve an index against a sequence length.

    Forward indices are returned as-is (callers clamp when slicing);
    Backward indices past the start of the sequence resolve to None.
    """
    if isinstance(index, Forward):
        return index.n
    if index.n >= length:
        return None
    return length - (index.n + 1)


@dataclass(frozen=True)
class Range:
    """A contiguous range of indices."""

    start: Index
    end: Index
    inclusive: bool = False

    def resolve(self, length: int) -> Optional[tuple[int, int]]:
        """Resolve against a sequence length, returning (start, count).

        Returns None when either end falls outside the sequence or the range
        runs backwards.
        """
        start = resolve_index(self.start, length)
        end = resolve_index(self.end, length)
        if start is None or end is None or end < start:
            return None
        if self.inclusive:
            return start, end - start + 1
        return start, end - start


@dataclass(frozen=True)
class SelectNone:
    """Select nothing."""


@dataclass(frozen=True)
class SelectAll:
    """Select every value."""


@dataclass(frozen=True)
class Key:
    """Select by key; may hold several space-separated keys."""

    key: str


Select = Union[SelectNone, SelectAll, Forward, Backward, Range, Key]

SELECT_NONE = SelectNone()
SELECT_ALL = SelectAll()


_INTEGER = re.compile(r"^[+-]?\d+$")


def _to_int(text: str) -> Optional[int]:
    if not _INTEGER.match(text):
        return None
    try:
        return int(text)
    except ValueError:
        # Past the interpreter's integer string conversion limit
        return None


def _parse_index(text: str) -> Optional[Index]:
    value = _to_int(text)
    if value is None:
        return None
    return index_from_int(value)


def parse_index_range(text: str) -> Optional[Range]:
    """Parse an index range such as 1..3, 1...3, 1..=3, ..-2 or 2..

    A missing start means the first element; a missing end means the range
    runs through the last element.
    """
    pos = text.find("..")
    if pos < 0:
        return None

    first = text[:pos]
    rest = text[pos + 2:]
    inclusive = False
    if rest[:1] in (".", "="):
        inclusive = True
        rest = rest[1:]

    start = _parse_index(first) if first else Forward(0)
    if start is None:
        return None

    if not rest:
        # Open-ended: through the last element
        return Range(start, Backward(0), inclusive=True)

    end = _parse_index(rest)
    if end is None:
        return None
    return Range(start, end, inclusive=inclusive)


def parse_select(text: str) -> Select:
    """Parse the text between the brackets of a selection suffix."""
    if text == "..":
        return SELECT_ALL
    index = _parse_index(text)
    if index is not None:
        return index
    index_range = parse_index_range(text)
    if index_range is not None:
        return index_range
    return Key(text)


def select(values: list[str], selection: Select) -> list[str]:
    """Apply a selection to an already expanded sequence.

    Out-of-range selections produce an empty list, never an error.
    """
    if isinstance(selection, SelectAll):
        return list(values)
    if isinstance(selection, (Forward, Backward)):
        position = resolve_index(selection, len(values))
        if position is None or position >= len(values):
            return []
        return [values[position]]
    if isinstance(selection, Range):
        bounds = selection.resolve(len(values))
        if bounds is None:
            return []
        start, count = bounds
        return values[start:start + count]
    # SelectNone and Key select nothing from a plain sequence
    return []


# Brace range literals

_RANGE_LITERAL = re.compile(
    r"^(?P<start>-?\w+?)\.\.(?:(?P<step>-?\d+)\.\.)?(?P<inclusive>[.=])?(?P<end>-?\w+)$"
)


def _sequence(start: int, end: int, step: int, inclusive: bool, limit: Optional[int]) -> range:
    direction = 1 if start <= end else -1
    stop = end + direction if inclusive else end
    count = (abs(stop - start) + step - 1) // step
    if limit is not None and count > limit:
        logger.warning("brace range truncated to %d of %d members", limit, count)
        count = limit
    return range(start, start + direction * step * count, direction * step)


def _pad_width(*endpoints: str) -> int:
    width = 0
    for endpoint in endpoints:
        digits = endpoint.lstrip("+-")
        if len(digits) > 1 and digits.startswith("0"):
            width = max(width, len(endpoint))
    return width


def parse_range(word: str, limit: Optional[int] = None) -> Optional[list[str]]:
    """Parse a brace range literal into its members.

    Supports:
    - Exclusive ranges: 1..4 -> 1 2 3
    - Inclusive ranges: 1...4 or 1..=4 -> 1 2 3 4
    - Steps: 0..2..7 -> 0 2 4 6
    - Descending ranges: 3...1 -> 3 2 1
    - Zero padding: 01...03 -> 01 02 03
    - Character ranges: a...e -> a b c d e

    At most limit members are generated.

    Returns None when the word is not a range literal.
    """
    match = _RANGE_LITERAL.match(word)
    if not match:
        return None

    start_str = match.group("start")
    end_str = match.group("end")
    inclusive = match.group("inclusive") is not None
    step = 1
    if match.group("step") is not None:
        step = abs(_to_int(match.group("step")) or 0)
        if step == 0:
            return None

    start = _to_int(start_str)
    end = _to_int(end_str)
    if start is not None and end is not None:
        width = _pad_width(start_str, end_str)
        members = _sequence(start, end, step, inclusive, limit)
        if width:
            return [str(n).zfill(width) for n in members]
        return [str(n) for n in members]

    if len(start_str) == 1 and len(end_str) == 1:
        members = _sequence(ord(start_str), ord(end_str), step, inclusive, limit)
        return [chr(n) for n in members]

    return None
