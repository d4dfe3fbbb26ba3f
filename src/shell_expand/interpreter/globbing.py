"""Filesystem glob matching."""

import glob as _glob
from typing import Iterator

from ..errors import GlobPatternError


def validate_pattern(pattern: str) -> None:
    """Reject patterns the matcher cannot interpret.

    Raises GlobPatternError for an unclosed character class or a '**'
    that is not a whole path component.
    """
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "[":
            # A ']' directly after '[' or '[!' is part of the class
            j = i + 1
            if j < len(pattern) and pattern[j] in "!^":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end < 0:
                raise GlobPatternError(pattern, "unclosed character class")
            i = end + 1
            continue
        if c == "*" and pattern[i + 1:i + 2] == "*":
            run_end = i
            while run_end < len(pattern) and pattern[run_end] == "*":
                run_end += 1
            before = pattern[i - 1] if i > 0 else "/"
            after = pattern[run_end] if run_end < len(pattern) else "/"
            if run_end - i > 2 or before != "/" or after != "/":
                raise GlobPatternError(
                    pattern, "recursive wildcards must form a single path component"
                )
            i = run_end
            continue
        i += 1


def glob(pattern: str) -> Iterator[str]:
    """Match a pattern against the filesystem.

    Matches are yielded lazily in directory enumeration order; they are not
    sorted.
    """
    validate_pattern(pattern)
    return _glob.iglob(pattern, recursive=True)
