"""Arithmetic evaluation for $((...)).

Integer arithmetic with shell operator precedence, lowest first:

    ,  ?:  ||  &&  |  ^  &  == !=  < > <= >=  << >>  + -  * / %  **  unary

Numbers may be decimal, hex (0x1f), octal (017) or base-N (2#1010).
Identifiers that reach the evaluator (variables the caller could not
resolve) evaluate to 0. Evaluation never mutates variables, so assignment
operators are rejected as syntax errors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from ..errors import ArithmeticEvalError


# Tokens

_NUMBER = re.compile(r"[0-9][0-9A-Za-z_#@]*")
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_OPERATORS = (
    "**", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||",
    "+", "-", "*", "/", "%", "<", ">", "&", "|", "^", "!", "~", "?", ":", "(", ")", ",",
)


@dataclass(frozen=True)
class ArithToken:
    kind: str  # NUMBER, IDENT, OP or EOF
    value: str
    pos: int


def tokenize(expression: str) -> list[ArithToken]:
    """Split an arithmetic expression into tokens."""
    tokens = []
    i = 0
    while i < len(expression):
        c = expression[i]
        if c.isspace():
            i += 1
            continue
        match = _NUMBER.match(expression, i)
        if match:
            tokens.append(ArithToken("NUMBER", match.group(), i))
            i = match.end()
            continue
        match = _IDENT.match(expression, i)
        if match:
            tokens.append(ArithToken("IDENT", match.group(), i))
            i = match.end()
            continue
        for op in _OPERATORS:
            if expression.startswith(op, i):
                tokens.append(ArithToken("OP", op, i))
                i += len(op)
                break
        else:
            raise ArithmeticEvalError(
                f"{expression}: syntax error: invalid arithmetic operator "
                f"(error token is \"{expression[i:]}\")",
                expression,
            )
    tokens.append(ArithToken("EOF", "", len(expression)))
    return tokens


# Number parsing

_INT_BITS = 64
_INT_MODULUS = 1 << _INT_BITS
_INT_MIN = -(1 << (_INT_BITS - 1))

# Maximum nesting of parentheses, unary operators, powers and conditionals
MAX_NESTING = 32


def wrap(value: int) -> int:
    """Wrap an integer to a signed 64-bit value, as shell arithmetic does."""
    return (value - _INT_MIN) % _INT_MODULUS + _INT_MIN


def _parse_base_n_value(value_str: str, base: int) -> int:
    """Parse a value in base N (2-64).

    Digits:
    - 0-9 = values 0-9
    - a-z = values 10-35
    - A-Z = values 36-61 (or 10-35 if base <= 36)
    - @ = 62, _ = 63
    """
    result = 0
    for char in value_str:
        if char.isdigit():
            digit = int(char)
        elif "a" <= char <= "z":
            digit = ord(char) - ord("a") + 10
        elif "A" <= char <= "Z":
            if base <= 36:
                digit = ord(char.lower()) - ord("a") + 10
            else:
                digit = ord(char) - ord("A") + 36
        elif char == "@":
            digit = 62
        elif char == "_":
            digit = 63
        else:
            raise ValueError(f"Invalid digit {char} for base {base}")

        if digit >= base:
            raise ValueError(f"Digit {char} out of range for base {base}")

        result = wrap(result * base + digit)
    return result


def parse_number(text: str) -> int:
    """Parse an arithmetic constant (decimal, 0x hex, 0 octal, base#value).

    Values that do not fit in 64 bits wrap around.
    """
    try:
        if text.startswith(("0x", "0X")):
            return wrap(int(text[2:], 16))
        if "#" in text:
            base_str, digits = text.split("#", 1)
            base = int(base_str)
            if not 2 <= base <= 64 or not digits:
                raise ValueError(f"invalid arithmetic base {base}")
            return _parse_base_n_value(digits, base)
        if text.startswith("0") and len(text) > 1:
            return wrap(int(text, 8))
        return wrap(int(text, 10))
    except ValueError:
        raise ArithmeticEvalError(
            f"{text}: value too great for base (error token is \"{text}\")", text
        ) from None


# AST

@dataclass(frozen=True)
class ArithNumber:
    value: int


@dataclass(frozen=True)
class ArithVariable:
    name: str


@dataclass(frozen=True)
class ArithUnary:
    operator: str
    operand: "ArithNode"


@dataclass(frozen=True)
class ArithBinary:
    operator: str
    left: "ArithNode"
    right: "ArithNode"


@dataclass(frozen=True)
class ArithTernary:
    condition: "ArithNode"
    consequent: "ArithNode"
    alternate: "ArithNode"


ArithNode = Union[ArithNumber, ArithVariable, ArithUnary, ArithBinary, ArithTernary]


# Binary operators by precedence level, lowest first
_BINARY_LEVELS = (
    ("||",),
    ("&&",),
    ("|",),
    ("^",),
    ("&",),
    ("==", "!="),
    ("<", ">", "<=", ">="),
    ("<<", ">>"),
    ("+", "-"),
    ("*", "/", "%"),
)


class Parser:
    """Recursive descent parser for arithmetic expressions.

    Nesting deeper than MAX_NESTING is rejected before it can exhaust the
    interpreter stack.
    """

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.pos = 0
        self.depth = 0

    def peek(self) -> ArithToken:
        return self.tokens[self.pos]

    def advance(self) -> ArithToken:
        tok = self.tokens[self.pos]
        if tok.kind != "EOF":
            self.pos += 1
        return tok

    def check_op(self, *ops: str) -> bool:
        tok = self.peek()
        return tok.kind == "OP" and tok.value in ops

    def error(self, message: str) -> ArithmeticEvalError:
        remaining = self.expression[self.peek().pos:]
        return ArithmeticEvalError(
            f"{self.expression}: {message} (error token is \"{remaining}\")",
            self.expression,
        )

    def descend(self) -> None:
        """Enter one nesting level."""
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise self.error("expression recursion level exceeded")

    def parse(self) -> ArithNode:
        """Parse the entire expression."""
        if self.peek().kind == "EOF":
            raise self.error("syntax error: operand expected")
        node = self.parse_comma()
        if self.peek().kind != "EOF":
            raise self.error("syntax error in expression")
        return node

    def parse_comma(self) -> ArithNode:
        left = self.parse_ternary()
        while self.check_op(","):
            self.advance()
            right = self.parse_ternary()
            left = ArithBinary(",", left, right)
        return left

    def parse_ternary(self) -> ArithNode:
        condition = self.parse_binary(0)
        if not self.check_op("?"):
            return condition
        self.advance()
        self.descend()
        try:
            consequent = self.parse_comma()
            if not self.check_op(":"):
                raise self.error("syntax error: `:' expected for conditional expression")
            self.advance()
            alternate = self.parse_ternary()
        finally:
            self.depth -= 1
        return ArithTernary(condition, consequent, alternate)

    def parse_binary(self, level: int) -> ArithNode:
        if level == len(_BINARY_LEVELS):
            return self.parse_power()
        left = self.parse_binary(level + 1)
        while self.check_op(*_BINARY_LEVELS[level]):
            op = self.advance().value
            right = self.parse_binary(level + 1)
            left = ArithBinary(op, left, right)
        return left

    def parse_power(self) -> ArithNode:
        base = self.parse_unary()
        if not self.check_op("**"):
            return base
        self.advance()
        self.descend()
        try:
            # Right associative: 2**3**2 == 2**9
            return ArithBinary("**", base, self.parse_power())
        finally:
            self.depth -= 1

    def parse_unary(self) -> ArithNode:
        if not self.check_op("+", "-", "!", "~"):
            return self.parse_primary()
        op = self.advance().value
        self.descend()
        try:
            return ArithUnary(op, self.parse_unary())
        finally:
            self.depth -= 1

    def parse_primary(self) -> ArithNode:
        tok = self.peek()
        if tok.kind == "NUMBER":
            self.advance()
            return ArithNumber(parse_number(tok.value))
        if tok.kind == "IDENT":
            self.advance()
            return ArithVariable(tok.value)
        if self.check_op("("):
            self.advance()
            self.descend()
            try:
                node = self.parse_comma()
            finally:
                self.depth -= 1
            if not self.check_op(")"):
                raise self.error("missing `)'")
            self.advance()
            return node
        raise self.error("syntax error: operand expected")


# Evaluation

def _shift(op: str, left: int, right: int) -> int:
    if right < 0:
        raise ArithmeticEvalError("shift count less than 0")
    if op == "<<":
        if right >= _INT_BITS:
            return 0
        return wrap(left << right)
    if right >= _INT_BITS:
        return -1 if left < 0 else 0
    return left >> right


def _binary(op: str, left: int, right: int) -> int:
    if op == ",":
        return right
    elif op == "+":
        return wrap(left + right)
    elif op == "-":
        return wrap(left - right)
    elif op == "*":
        return wrap(left * right)
    elif op == "/":
        if right == 0:
            raise ArithmeticEvalError("division by 0")
        # C-style truncation toward zero (not Python floor division)
        quotient = abs(left) // abs(right)
        return wrap(quotient if (left < 0) == (right < 0) else -quotient)
    elif op == "%":
        if right == 0:
            raise ArithmeticEvalError("division by 0")
        # C-style modulo: sign follows dividend
        remainder = abs(left) % abs(right)
        return wrap(-remainder if left < 0 else remainder)
    elif op == "**":
        if right < 0:
            raise ArithmeticEvalError("exponent less than 0")
        return wrap(pow(left, right, _INT_MODULUS))
    elif op == "<":
        return 1 if left < right else 0
    elif op == ">":
        return 1 if left > right else 0
    elif op == "<=":
        return 1 if left <= right else 0
    elif op == ">=":
        return 1 if left >= right else 0
    elif op == "==":
        return 1 if left == right else 0
    elif op == "!=":
        return 1 if left != right else 0
    elif op == "&":
        return left & right
    elif op == "|":
        return left | right
    elif op == "^":
        return left ^ right
    elif op in ("<<", ">>"):
        return _shift(op, left, right)
    raise ArithmeticEvalError(f"unknown operator {op}")


def _apply(op: str, left: int, right: ArithNode) -> int:
    # Short-circuit for && and ||
    if op == "&&":
        if not left:
            return 0
        return 1 if evaluate_node(right) else 0
    if op == "||":
        if left:
            return 1
        return 1 if evaluate_node(right) else 0
    return _binary(op, left, evaluate_node(right))


def evaluate_node(node: ArithNode) -> int:
    """Evaluate a parsed arithmetic expression.

    Every intermediate result is a signed 64-bit value.
    """
    if isinstance(node, ArithNumber):
        return node.value
    if isinstance(node, ArithVariable):
        # Names the caller could not resolve count as unset
        return 0
    if isinstance(node, ArithTernary):
        if evaluate_node(node.condition):
            return evaluate_node(node.consequent)
        return evaluate_node(node.alternate)
    if isinstance(node, ArithUnary):
        operand = evaluate_node(node.operand)
        op = node.operator
        if op == "-":
            return wrap(-operand)
        elif op == "+":
            return operand
        elif op == "!":
            return 0 if operand else 1
        return ~operand

    # Left-associative chains such as 1+1+...+1 are folded in a loop
    chain = []
    while isinstance(node, ArithBinary):
        chain.append(node)
        node = node.left
    value = evaluate_node(node)
    for binary in reversed(chain):
        value = _apply(binary.operator, value, binary.right)
    return value


def evaluate(expression: str) -> int:
    """Evaluate an arithmetic expression.

    Raises:
        ArithmeticEvalError: On syntax errors, nesting deeper than
            MAX_NESTING, division by zero and negative exponents or shift
            counts. The message is suitable for showing inline.
    """
    return evaluate_node(Parser(expression).parse())
