"""Brace combination.

The brace coordinator reduces a word like pre{a,b}mid{1,2} to a layout of
fixed segments and placeholders plus one candidate list per placeholder:

    [Segment("pre"), PLACEHOLDER, Segment("mid"), PLACEHOLDER]
    [["a", "b"], ["1", "2"]]

expand() then yields every combination, left to right, with the last
placeholder varying fastest: preamid1 preamid2 prebmid1 prebmid2.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Union


@dataclass(frozen=True)
class Segment:
    """Fixed text between placeholders."""

    text: str


@dataclass(frozen=True)
class Placeholder:
    """Position filled from the next candidate list."""


PLACEHOLDER = Placeholder()

BraceToken = Union[Segment, Placeholder]


def expand(
    layout: Sequence[BraceToken],
    candidates: Sequence[Sequence[str]],
    limit: Optional[int] = None,
) -> Iterator[str]:
    """Yield every combination of the layout's placeholders.

    Args:
        layout: Segments and placeholders in word order.
        candidates: One candidate list per placeholder, in the same order.
        limit: Stop after this many words.
    """
    combinations = itertools.product(*candidates)
    if limit is not None:
        combinations = itertools.islice(combinations, limit)

    for combination in combinations:
        chosen = iter(combination)
        parts = []
        for token in layout:
            if isinstance(token, Segment):
                parts.append(token.text)
            else:
                parts.append(next(chosen))
        yield "".join(parts)


def count(candidates: Sequence[Sequence[str]]) -> int:
    """Number of words expand() would produce without a limit."""
    total = 1
    for options in candidates:
        total *= len(options)
    return total
