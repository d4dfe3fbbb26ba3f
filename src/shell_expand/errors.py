"""Exceptions raised by the expansion collaborators.

None of these escape ``expand``: the word expander catches them and degrades
to an inline result instead.
"""


class ExpansionError(Exception):
    """Base class for expansion errors."""


class ArithmeticEvalError(ExpansionError):
    """Raised when an arithmetic expression cannot be evaluated."""

    def __init__(self, message: str, expression: str = ""):
        super().__init__(message)
        self.message = message
        self.expression = expression

    def __str__(self) -> str:
        return self.message


class GlobPatternError(ExpansionError):
    """Raised for malformed glob patterns."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"{pattern}: {reason}")
        self.pattern = pattern
        self.reason = reason
