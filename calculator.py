"""Calculators: parse a string with an operator table, then evaluate it.

>>> IntegerCalculator(STANDARD_OPS).evaluate("4*(2*3)+10")
34
>>> RealCalculator(STANDARD_OPS).evaluate("4*((2*3)+10)")
64.0
>>> calculate("7/2", number_type=int)
3
"""
import logging
import math
import os
from typing import Mapping

from evaluator import evaluate
from operators import STANDARD_OPS, OperatorTable
from parser import DEFAULT_MAX_DEPTH, Parser

DEBUG = bool(os.getenv("DEBUG", False))

log = logging.getLogger(__name__)


def enable_debug_logging(stream=None):
    """Send this library's debug output to `stream` (stderr by default).

    Only the calculator's own loggers are touched, never the root logger.
    """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    for name in ("parser", __name__):
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)
    return handler


if DEBUG:
    enable_debug_logging()


class NonFiniteResult(ArithmeticError):
    pass


class Calculator:
    """Evaluates expression strings against a fixed operator table.

    The table is copied into an immutable `OperatorTable` on construction, so
    a calculator can be shared freely, including between threads.
    """

    number_type = float

    def __init__(self, operators: Mapping = STANDARD_OPS, max_depth: int = DEFAULT_MAX_DEPTH):
        self.operators = OperatorTable(operators)
        self.max_depth = max_depth

    def __repr__(self):
        return f"{type(self).__name__}({self.operators!r})"

    def convert(self, value: float):
        return self.number_type(value)

    def evaluate(self, text: str):
        tree = Parser(text, self.operators, self.max_depth).parse()
        result = self.convert(evaluate(tree, self.operators))
        log.debug("%r = %r", text, result)
        return result


class RealCalculator(Calculator):
    number_type = float


class IntegerCalculator(Calculator):
    """Computes in floating point, truncating the final result toward zero."""

    number_type = int

    def convert(self, value: float) -> int:
        if not math.isfinite(value):
            raise NonFiniteResult(f"{value} has no integer value")
        return int(value)


CALCULATORS = {int: IntegerCalculator, float: RealCalculator}


def calculate(text: str, operators: Mapping = STANDARD_OPS, number_type=float):
    return CALCULATORS[number_type](operators).evaluate(text)
