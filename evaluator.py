"""Tree-walking evaluator for parsed expressions.

Everything is computed as a python float. Binary nodes are reduced with the
operator table's functions. Where python would raise instead of producing
the IEEE-754 answer, evaluation carries on with that answer: division or
exponentiation by zero give inf or nan, and an overflowing or complex result
(``10^400``, ``(0-8)^0.5``) gives nan.

>>> from parser import parse
>>> evaluate(parse("3 + (8 - 7.5) * 10 / 5"))
4.0
>>> evaluate(parse("-1/0"))
-inf
>>> evaluate(parse("3 + -1/(1/0)"))
3.0
>>> evaluate(parse("0^(0-1)"))
inf
"""
import math
import operator
from typing import Mapping

from operators import STANDARD_OPS
from parser import MalformedExpression, Node


class InvalidLiteral(MalformedExpression):
    def __init__(self, token):
        super().__init__(f"{token!r} is not a valid number")
        self.token = token


class UnknownOperatorEffect(MalformedExpression):
    def __init__(self, token, arity):
        kind = "unary" if arity == 1 else "binary"
        super().__init__(f"{token!r} has no meaning as a {kind} operator")
        self.token = token
        self.arity = arity


UNARY = {
    "+": lambda a: a,
    "-": lambda a: -a,
}


def handle_zero_div(fun, a, b):
    """The IEEE-754 result of ``fun(a, b)`` where python raised ZeroDivisionError.

    Only division and exponentiation have one; for anything else the error
    stands.
    """
    if fun is operator.pow:
        return math.copysign(float("inf"), a)
    if fun is not operator.truediv:
        raise ZeroDivisionError(f"{fun!r} has no IEEE result for {a!r}, {b!r}")
    if a == 0 or math.isnan(a):
        # NB, can't just raise, since nan doesn't *always* propagate
        return float("nan")
    return math.copysign(float("inf"), a) * math.copysign(1, b)


def literal(token):
    try:
        return float(token)
    except ValueError:
        raise InvalidLiteral(token) from None


def reduce_node(expr, args, operators):
    if len(args) == 1:
        fun = UNARY.get(expr.token)
    else:
        op = operators.get(expr.token)
        fun = op.fun if op is not None else None
    if fun is None:
        raise UnknownOperatorEffect(expr.token, len(args))
    try:
        ans = fun(*args)
    except ZeroDivisionError:
        return handle_zero_div(fun, *args)
    except OverflowError:
        return float("nan")
    # e.g. a negative base to a fractional power
    if isinstance(ans, complex):
        return float("nan")
    return float(ans)


def evaluate(expr: Node, operators: Mapping = STANDARD_OPS) -> float:
    """Reduce `expr` bottom-up; the walk keeps its own stack, not python's."""
    values = []
    todo = [(expr, False)]
    while todo:
        node, children_done = todo.pop()
        if not node.children:
            values.append(literal(node.token))
        elif children_done:
            n = len(node.children)
            values[-n:] = [reduce_node(node, values[-n:], operators)]
        else:
            todo.append((node, True))
            todo.extend((child, False) for child in reversed(node.children))
    (ans,) = values
    return ans
