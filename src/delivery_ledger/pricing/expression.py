# src/delivery_ledger/pricing/expression.py
"""
Restricted arithmetic for operator-typed quantities ("50 + 30*2").

Rules:
- Only digits, + - * / ( ) . and whitespace are accepted
- The text is tokenized and parsed into a small AST, then evaluated
- Nothing is ever handed to eval/exec/compile
- Results are finite Decimals; negatives are allowed here and
  rejected (if at all) by the caller

Grammar:
    expr    := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := ('-' | '+') unary | primary
    primary := NUMBER | '(' expr ')'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, DecimalException
from typing import List, Union

from delivery_ledger.domain.errors import InvalidExpression

ALLOWED_CHARS = re.compile(r"^[0-9+\-*/().\s]+$")
TOKEN_RE = re.compile(r"\s*(?:(\d+\.?\d*|\.\d+)|(.))")

# Deep nesting is never legitimate operator input
MAX_DEPTH = 100


# ----------------------------
# AST
# ----------------------------

@dataclass(frozen=True)
class Number:
    value: Decimal


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


Node = Union[Number, UnaryOp, BinaryOp]


# ----------------------------
# Tokenizer
# ----------------------------

@dataclass(frozen=True)
class Token:
    kind: str  # "num" | "op" | "end"
    text: str
    pos: int


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    stripped_end = len(text.rstrip())

    while pos < stripped_end:
        m = TOKEN_RE.match(text, pos)
        if m is None:
            raise InvalidExpression(text)
        number, op = m.group(1), m.group(2)
        if number is not None:
            tokens.append(Token("num", number, m.start(1)))
        elif op in "+-*/()":
            tokens.append(Token("op", op, m.start(2)))
        else:
            # a lone '.' lands here
            raise InvalidExpression(text, f"Unexpected character {op!r}")
        pos = m.end()

    tokens.append(Token("end", "", stripped_end))
    return tokens


# ----------------------------
# Parser
# ----------------------------

class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _fail(self, reason: str) -> InvalidExpression:
        return InvalidExpression(self.text, reason)

    def parse(self) -> Node:
        node = self._expr()
        if self.current.kind != "end":
            raise self._fail(f"Unexpected {self.current.text!r} at position {self.current.pos}")
        return node

    def _expr(self) -> Node:
        node = self._term()
        while self.current.kind == "op" and self.current.text in "+-":
            op = self._advance().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self.current.kind == "op" and self.current.text in "*/":
            op = self._advance().text
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        if self.current.kind == "op" and self.current.text in "+-":
            op = self._advance().text
            self._enter()
            try:
                return UnaryOp(op, self._unary())
            finally:
                self.depth -= 1
        return self._primary()

    def _primary(self) -> Node:
        token = self.current
        if token.kind == "num":
            self._advance()
            return Number(Decimal(token.text))
        if token.kind == "op" and token.text == "(":
            self._advance()
            self._enter()
            try:
                node = self._expr()
            finally:
                self.depth -= 1
            if not (self.current.kind == "op" and self.current.text == ")"):
                raise self._fail("Missing closing parenthesis")
            self._advance()
            return node
        if token.kind == "end":
            raise self._fail("Unexpected end of expression")
        raise self._fail(f"Unexpected {token.text!r} at position {token.pos}")

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self._fail("Expression is nested too deeply")


def parse(text: str) -> Node:
    """Validate and parse `text` into an AST. Raises InvalidExpression."""
    if text is None or not ALLOWED_CHARS.match(text.strip()):
        raise InvalidExpression(text or "", "Invalid characters in expression")
    return _Parser(text).parse()


# ----------------------------
# Evaluation
# ----------------------------

def _apply(op: str, left: Decimal, right: Decimal, text: str) -> Decimal:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        raise InvalidExpression(text, "Division by zero")
    return left / right


def _eval(root: Node, text: str) -> Decimal:
    """Post-order walk with an explicit stack; long operator chains nest deeply."""
    values: List[Decimal] = []
    pending = [(root, False)]

    while pending:
        node, children_done = pending.pop()
        if isinstance(node, Number):
            values.append(node.value)
        elif isinstance(node, UnaryOp):
            if children_done:
                value = values.pop()
                values.append(-value if node.op == "-" else value)
            else:
                pending.append((node, True))
                pending.append((node.operand, False))
        elif children_done:
            right = values.pop()
            left = values.pop()
            values.append(_apply(node.op, left, right, text))
        else:
            pending.append((node, True))
            pending.append((node.right, False))
            pending.append((node.left, False))

    return values[0]


def evaluate(text: str) -> Decimal:
    """
    Evaluate a restricted arithmetic expression.

    >>> evaluate("50 + 30 * 2")
    Decimal('110')
    """
    tree = parse(text)
    try:
        result = _eval(tree, text)
    except DecimalException:
        raise InvalidExpression(text) from None
    if not result.is_finite():
        raise InvalidExpression(text, "Result is not a finite number")
    return result


def quantity_from_input(text: str | None) -> Decimal:
    """
    Quantity typed by an operator.
    Blank input means 0 and never reaches the evaluator.
    """
    if text is None or text.strip() == "":
        return Decimal(0)
    return evaluate(text)
