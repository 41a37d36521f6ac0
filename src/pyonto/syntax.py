"""Class-expression parsing for the query engine.

``ParseMode.TEXTUAL`` (the default) splits first-match-wins: on
``" and "``, else on ``" or "``, else try the ``some`` and ``value``
patterns, else take the whole string as a name. It honors neither
precedence nor parentheses, so ``A or B and C`` is ``(A or B) and C``.

``ParseMode.STRUCTURED`` parses a restricted Manchester-like grammar::

    expr         ::= conj ('or' conj)*
    conj         ::= restriction ('and' restriction)*
    restriction  ::= PROP 'some' restriction
                   | PROP 'value' name
                   | primary
    primary      ::= '(' expr ')' | name
    name         ::= WORD+

Keywords are case-insensitive whole words. ``or`` binds loosest, so
``A or B and C`` is ``A or (B and C)``; parentheses group explicitly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union as _Union

KEYWORDS = frozenset({"and", "or", "some", "value"})


class ParseMode(str, Enum):
    STRUCTURED = "structured"
    TEXTUAL = "textual"


class ExpressionSyntaxError(ValueError):
    """Raised for malformed class expressions."""


@dataclass(frozen=True, slots=True)
class Name:
    """A named entity reference."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Intersection:
    operands: tuple[Expression, ...]

    def __str__(self) -> str:
        return " and ".join(_wrap(op, (Union,)) for op in self.operands)


@dataclass(frozen=True, slots=True)
class Union:
    operands: tuple[Expression, ...]

    def __str__(self) -> str:
        return " or ".join(str(op) for op in self.operands)


@dataclass(frozen=True, slots=True)
class Existential:
    """``prop some filler``."""

    prop: str
    filler: Expression

    def __str__(self) -> str:
        return f"{self.prop} some {_wrap(self.filler, (Union, Intersection))}"


@dataclass(frozen=True, slots=True)
class Value:
    """``prop value target``."""

    prop: str
    target: str

    def __str__(self) -> str:
        return f"{self.prop} value {self.target}"


Expression = _Union[Name, Intersection, Union, Existential, Value]


def _wrap(expr: Expression, kinds: tuple[type, ...]) -> str:
    return f"({expr})" if isinstance(expr, kinds) else str(expr)


def walk(expr: Expression) -> Iterator[Expression]:
    """Yield *expr* and all of its sub-expressions, depth-first."""
    yield expr
    if isinstance(expr, (Intersection, Union)):
        for op in expr.operands:
            yield from walk(op)
    elif isinstance(expr, Existential):
        yield from walk(expr.filler)


# -------------------------------------------------------------------
# Structured (recursive-descent) parser
# -------------------------------------------------------------------

_TOKEN_RE = re.compile(r"\(|\)|[^\s()]+")


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _TOKEN_RE.findall(text)
        self.pos = 0

    def peek(self, offset: int = 0) -> str | None:
        i = self.pos + offset
        return self.tokens[i] if i < len(self.tokens) else None

    def is_keyword(self, token: str | None, keyword: str) -> bool:
        return token is not None and token.lower() == keyword

    def next(self) -> str:
        token = self.peek()
        if token is None:
            raise ExpressionSyntaxError(f"Unexpected end of expression: {self.text!r}")
        self.pos += 1
        return token

    def parse(self) -> Expression:
        if not self.tokens:
            raise ExpressionSyntaxError("Cannot parse empty expression")
        expr = self.parse_or()
        if self.peek() is not None:
            raise ExpressionSyntaxError(
                f"Unexpected {self.peek()!r} in expression: {self.text!r}"
            )
        return expr

    def parse_or(self) -> Expression:
        operands = [self.parse_and()]
        while self.is_keyword(self.peek(), "or"):
            self.pos += 1
            operands.append(self.parse_and())
        return operands[0] if len(operands) == 1 else Union(tuple(operands))

    def parse_and(self) -> Expression:
        operands = [self.parse_restriction()]
        while self.is_keyword(self.peek(), "and"):
            self.pos += 1
            operands.append(self.parse_restriction())
        return operands[0] if len(operands) == 1 else Intersection(tuple(operands))

    def parse_restriction(self) -> Expression:
        token = self.peek()
        following = self.peek(1)
        if token is not None and token not in ("(", ")") and token.lower() not in KEYWORDS:
            if self.is_keyword(following, "some"):
                self.pos += 2
                return Existential(token, self.parse_restriction())
            if self.is_keyword(following, "value"):
                self.pos += 2
                return Value(token, self.parse_name())
        return self.parse_primary()

    def parse_primary(self) -> Expression:
        if self.peek() == "(":
            self.pos += 1
            expr = self.parse_or()
            if self.next() != ")":
                raise ExpressionSyntaxError(f"Expected ')' in expression: {self.text!r}")
            return expr
        return Name(self.parse_name())

    def parse_name(self) -> str:
        words: list[str] = []
        while True:
            token = self.peek()
            if token is None or token in ("(", ")") or token.lower() in KEYWORDS:
                break
            words.append(token)
            self.pos += 1
        if not words:
            raise ExpressionSyntaxError(
                f"Expected a name at {self.peek()!r} in expression: {self.text!r}"
            )
        return " ".join(words)


# -------------------------------------------------------------------
# Textual (first-match-wins) parser
# -------------------------------------------------------------------

_SOME_RE = re.compile(r"^(\w+)\s+some\s+(.+)$")
_VALUE_RE = re.compile(r"^(\w+)\s+value\s+(.+)$")


def _parse_textual(s: str) -> Expression:
    s = s.strip()
    if " and " in s:
        return Intersection(tuple(_parse_textual(p) for p in s.split(" and ")))
    if " or " in s:
        return Union(tuple(_parse_textual(p) for p in s.split(" or ")))
    m = _SOME_RE.match(s)
    if m:
        return Existential(m.group(1), _parse_textual(m.group(2)))
    m = _VALUE_RE.match(s)
    if m:
        return Value(m.group(1), m.group(2).strip())
    return Name(s)


def parse_expression(s: str, mode: ParseMode | str = ParseMode.TEXTUAL) -> Expression:
    """Parse a class expression into an expression tree.

    Raises ExpressionSyntaxError on empty input, and in structured mode on
    unbalanced parentheses, dangling operators or missing operands.
    """
    if not s or not s.strip():
        raise ExpressionSyntaxError("Cannot parse empty expression")
    if ParseMode(mode) is ParseMode.TEXTUAL:
        return _parse_textual(s)
    return _Parser(s.strip()).parse()
