"""Boolean predicate expressions over collected answers.

Prompt visibility (``when``) and file inclusion (``filters``) are written as
small JavaScript-flavoured expressions::

    isNotTest && !isAuth
    unit && runner === 'karma'
    isAuth || isVuexStore

Expressions are parsed once into a tiny AST and evaluated by recursive
interpretation.  Nothing is ever handed to ``eval``.

Evaluation is permissive: an identifier with no answer resolves to ``None``
and is falsy.  ``&&`` and ``||`` short-circuit and yield one of their
operands, ``===`` / ``!==`` compare strictly (type and value).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


class PredicateSyntaxError(ValueError):
    """Raised when a predicate expression cannot be parsed."""

    def __init__(self, expression: str, position: int, reason: str) -> None:
        self.expression = expression
        self.position = position
        self.reason = reason
        super().__init__(f"{reason} at position {position} in predicate {expression!r}")


# ---------------------------------------------------------------------------
# Truthiness / equality
# ---------------------------------------------------------------------------


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness: ``None``, ``False``, ``0`` and ``""`` are falsy."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def strict_equals(left: Any, right: Any) -> bool:
    if type(left) is not type(right):
        return False
    return left == right


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Literal:
    value: Any

    def evaluate(self, answers: Mapping[str, Any]) -> Any:
        return self.value

    def identifiers(self) -> frozenset[str]:
        return frozenset()


@dataclass(frozen=True)
class Identifier:
    name: str

    def evaluate(self, answers: Mapping[str, Any]) -> Any:
        return answers.get(self.name)

    def identifiers(self) -> frozenset[str]:
        return frozenset({self.name})


@dataclass(frozen=True)
class Not:
    operand: Node

    def evaluate(self, answers: Mapping[str, Any]) -> Any:
        return not is_truthy(self.operand.evaluate(answers))

    def identifiers(self) -> frozenset[str]:
        return self.operand.identifiers()


@dataclass(frozen=True)
class And:
    left: Node
    right: Node

    def evaluate(self, answers: Mapping[str, Any]) -> Any:
        value = self.left.evaluate(answers)
        if not is_truthy(value):
            return value
        return self.right.evaluate(answers)

    def identifiers(self) -> frozenset[str]:
        return self.left.identifiers() | self.right.identifiers()


@dataclass(frozen=True)
class Or:
    left: Node
    right: Node

    def evaluate(self, answers: Mapping[str, Any]) -> Any:
        value = self.left.evaluate(answers)
        if is_truthy(value):
            return value
        return self.right.evaluate(answers)

    def identifiers(self) -> frozenset[str]:
        return self.left.identifiers() | self.right.identifiers()


@dataclass(frozen=True)
class Equals:
    left: Node
    right: Node
    negated: bool = False

    def evaluate(self, answers: Mapping[str, Any]) -> Any:
        result = strict_equals(self.left.evaluate(answers), self.right.evaluate(answers))
        return not result if self.negated else result

    def identifiers(self) -> frozenset[str]:
        return self.left.identifiers() | self.right.identifiers()


Node = Literal | Identifier | Not | And | Or | Equals


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<op>===|!==|&&|\|\||!|\(|\))
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<ident>[A-Za-z_$][A-Za-z0-9_$]*)
    """,
    re.VERBOSE,
)

_KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None, "undefined": None}


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    position: int


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise PredicateSyntaxError(source, pos, f"Unexpected character {source[pos]!r}")
        kind = match.lastgroup or ""
        if kind != "ws":
            tokens.append(_Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(_Token("end", "", len(source)))
    return tokens


def _unquote(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text[1:-1])


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    """Recursive-descent parser using JavaScript operator precedence."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens = _tokenize(source)
        self.index = 0

    @property
    def current(self) -> _Token:
        return self.tokens[self.index]

    def _accept(self, text: str) -> bool:
        if self.current.kind == "op" and self.current.text == text:
            self.index += 1
            return True
        return False

    def _error(self, reason: str) -> PredicateSyntaxError:
        return PredicateSyntaxError(self.source, self.current.position, reason)

    def parse(self) -> Node:
        if self.current.kind == "end":
            raise self._error("Empty predicate")
        node = self._or()
        if self.current.kind != "end":
            raise self._error(f"Unexpected token {self.current.text!r}")
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._accept("||"):
            node = Or(node, self._and())
        return node

    def _and(self) -> Node:
        node = self._equality()
        while self._accept("&&"):
            node = And(node, self._equality())
        return node

    def _equality(self) -> Node:
        node = self._unary()
        while True:
            if self._accept("==="):
                node = Equals(node, self._unary())
            elif self._accept("!=="):
                node = Equals(node, self._unary(), negated=True)
            else:
                return node

    def _unary(self) -> Node:
        if self._accept("!"):
            return Not(self._unary())
        return self._primary()

    def _primary(self) -> Node:
        token = self.current
        if self._accept("("):
            node = self._or()
            if not self._accept(")"):
                raise self._error("Expected ')'")
            return node
        if token.kind == "string":
            self.index += 1
            return Literal(_unquote(token.text))
        if token.kind == "ident":
            self.index += 1
            if token.text in _KEYWORDS:
                return Literal(_KEYWORDS[token.text])
            return Identifier(token.text)
        if token.kind == "end":
            raise self._error("Unexpected end of predicate")
        raise self._error(f"Unexpected token {token.text!r}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Predicate:
    """A parsed predicate together with its source text."""

    source: str | bool
    node: Node

    def evaluate(self, answers: Mapping[str, Any]) -> bool:
        """Evaluate against *answers* and coerce the result to ``bool``."""
        return is_truthy(self.node.evaluate(answers))

    def identifiers(self) -> frozenset[str]:
        """Names of all answers this predicate reads."""
        return self.node.identifiers()

    def __str__(self) -> str:
        if isinstance(self.source, bool):
            return "true" if self.source else "false"
        return self.source


ALWAYS = Predicate(True, Literal(True))


def parse_predicate(source: str | bool) -> Predicate:
    """Parse *source* into a ``Predicate``.

    A literal boolean yields a constant predicate (``True`` means "always").

    Raises:
        PredicateSyntaxError: If *source* is not a well-formed expression.
    """
    if isinstance(source, bool):
        return Predicate(source, Literal(source))
    return Predicate(source, _Parser(source).parse())


def evaluate(source: str | bool, answers: Mapping[str, Any]) -> bool:
    """Parse and evaluate *source* in one step."""
    return parse_predicate(source).evaluate(answers)
