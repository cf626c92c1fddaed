"""Tokenizer and precedence-climbing parser for infix arithmetic.

The grammar is driven entirely by an `OperatorTable`: numbers, parentheses,
and whatever symbols the table defines, any of which may also appear in
prefix position.

>>> unparse(parse("1 + 2 * 3"))
'(1 + (2 * 3))'
>>> unparse(parse("10 - 3 - 2"))
'((10 - 3) - 2)'
>>> unparse(parse("2^3^2"))
'(2 ^ (3 ^ 2))'
>>> parse("-(4)")
Node(token='-', children=(Node(token='4', children=()),))
"""
import logging
from contextlib import contextmanager
from typing import Mapping, NamedTuple, Tuple

from operators import STANDARD_OPS, Associativity, OperatorTable

log = logging.getLogger(__name__)

DIGITS = "0123456789"
DEFAULT_MAX_DEPTH = 200


class MalformedExpression(ValueError):
    """Base class for everything that can go wrong with an expression string."""

    def __init__(self, message, text=None, position=None):
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.text = text
        self.position = position


class UnexpectedEndOfInput(MalformedExpression):
    pass


class UnbalancedParentheses(MalformedExpression):
    pass


class UnexpectedCharacter(MalformedExpression):
    pass


class NonAssociativeChain(MalformedExpression):
    pass


class ExpressionTooDeep(MalformedExpression):
    pass


class Node(NamedTuple):
    """A leaf (no children), unary (one child) or binary (two children) node."""

    token: str
    children: Tuple["Node", ...] = ()

    @property
    def arity(self):
        return len(self.children)


class Cursor:
    """A position in `text`; `next_token` scans forward from it."""

    def __init__(self, text: str, operators: OperatorTable):
        self.text = text
        self.position = 0
        self.operators = operators

    @property
    def at_end(self):
        return not self.text[self.position :].strip()

    def skip_whitespace(self):
        while self.position < len(self.text) and self.text[self.position].isspace():
            self.position += 1

    def next_token(self) -> str:
        """Consume and return the next token, or "" if nothing here is one."""
        self.skip_whitespace()
        text, start = self.text, self.position
        if start >= len(text):
            return ""
        if text[start] in DIGITS:
            end = start
            # No check for repeated periods; "1.2.3" fails when evaluated.
            while end < len(text) and (text[end] in DIGITS or text[end] == "."):
                end += 1
            self.position = end
            return text[start:end]
        if text[start] in "()":
            self.position += 1
            return text[start]
        for symbol in self.operators.symbols_longest_first:
            if text.startswith(symbol, start):
                self.position += len(symbol)
                return symbol
        return ""

    def push_back(self, token: str):
        self.position -= len(token)


class Parser:
    def __init__(
        self,
        text: str,
        operators: Mapping = STANDARD_OPS,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        if not isinstance(operators, OperatorTable):
            operators = OperatorTable(operators)
        self.operators = operators
        self.cursor = Cursor(text, operators)
        self.max_depth = max_depth
        self.depth = 0

    def _error(self, exc_type, message):
        return exc_type(message, self.cursor.text, self.cursor.position)

    @contextmanager
    def _nested(self):
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise self._error(
                    ExpressionTooDeep, f"expression nests deeper than {self.max_depth}"
                )
            yield
        finally:
            self.depth -= 1

    def parse(self) -> Node:
        try:
            node = self.parse_binary_expression(0)
        except RecursionError:
            raise self._error(ExpressionTooDeep, "expression nests too deeply") from None
        if not self.cursor.at_end:
            self.cursor.skip_whitespace()
            char = self.cursor.text[self.cursor.position]
            if char == ")":
                raise self._error(UnbalancedParentheses, "unmatched ')'")
            raise self._error(UnexpectedCharacter, f"unexpected {char!r}")
        if log.isEnabledFor(logging.DEBUG):
            log.debug("parsed %r as %s", self.cursor.text, unparse(node))
        return node

    def parse_simple_expression(self) -> Node:
        with self._nested():
            self.cursor.skip_whitespace()
            opened_at = self.cursor.position
            token = self.cursor.next_token()
            if token == "(":
                node = self.parse_binary_expression(0)
                closing = self.cursor.next_token()
                if closing == ")":
                    return node
                if not closing and self.cursor.at_end:
                    raise self._error(
                        UnexpectedEndOfInput, f"'(' at {opened_at} is never closed"
                    )
                raise self._error(
                    UnbalancedParentheses, f"expected ')' to close '(' at {opened_at}"
                )
            if token == ")":
                raise self._error(UnbalancedParentheses, "')' where an operand was expected")
            if not token:
                if self.cursor.at_end:
                    raise self._error(UnexpectedEndOfInput, "expected an operand")
                char = self.cursor.text[self.cursor.position]
                raise self._error(UnexpectedCharacter, f"unexpected {char!r}")
            if token[0] in DIGITS:
                return Node(token)
            # Any symbol is accepted as a prefix operator here; whether it
            # means anything unary is up to the evaluator.
            return Node(token, (self.parse_simple_expression(),))

    def parse_binary_expression(self, min_priority: int) -> Node:
        with self._nested():
            left = self.parse_simple_expression()
            previous = None
            while True:
                token = self.cursor.next_token()
                op = self.operators.get(token)
                if op is None or op.precedence <= min_priority:
                    self.cursor.push_back(token)
                    return left
                if (
                    previous is not None
                    and previous.precedence == op.precedence
                    and Associativity.NONE in (previous.associativity, op.associativity)
                ):
                    self.cursor.push_back(token)
                    raise self._error(
                        NonAssociativeChain,
                        f"cannot chain {previous.symbol!r} and {op.symbol!r}"
                        " without parentheses",
                    )
                right = self.parse_binary_expression(op.floor())
                left = Node(token, (left, right))
                previous = op


def parse(text: str, operators: Mapping = STANDARD_OPS, max_depth=DEFAULT_MAX_DEPTH):
    return Parser(text, operators, max_depth).parse()


def unparse(node: Node) -> str:
    """Render `node` as a string, with every binary application parenthesized."""
    if node.arity == 0:
        return node.token
    if node.arity == 1:
        return f"{node.token}{unparse(node.children[0])}"
    left, right = map(unparse, node.children)
    return f"({left} {node.token} {right})"
