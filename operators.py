"""Operator tables for the calculator.

An operator table maps a symbol to its precedence, associativity and binary
reduction function. Tables are immutable once built; one table can back any
number of calculators.

>>> STANDARD_OPS.precedence("*") > STANDARD_OPS.precedence("+")
True
>>> STANDARD_OPS.precedence("?")
0
>>> STANDARD_OPS["^"].apply(2, 10)
1024
"""
import operator
import re
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, NamedTuple, Union


class Associativity(Enum):
    LEFT = "l"
    RIGHT = "r"
    NONE = "n"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if value.lower() in (member.value, member.name.lower()):
                    return member
        return None


class Operator(NamedTuple):
    symbol: str
    precedence: int
    associativity: Associativity
    fun: Callable

    def __call__(self, lhs, rhs):
        return self.apply(lhs, rhs)

    def __repr__(self):
        return f"op({self.symbol!r:})"

    def apply(self, lhs, rhs):
        return self.fun(lhs, rhs)

    def floor(self):
        """The minimum precedence for parsing this operator's right operand."""
        if self.associativity is Associativity.RIGHT:
            return self.precedence - 1
        return self.precedence


_UNMATCHABLE = re.compile(r"[\d\s()]")

OperatorSpec = Union[Operator, tuple]


class OperatorTable(Mapping):
    """An immutable ``symbol -> Operator`` mapping.

    Accepts a mapping whose values are either `Operator`s or
    ``(precedence, associativity, fun)`` triples, or an iterable of
    `Operator`s. Nothing about the table's consistency is checked beyond
    every symbol being something the tokenizer can actually match.
    """

    def __init__(self, ops: Union[Mapping[str, OperatorSpec], Iterable[Operator]] = ()):
        if isinstance(ops, OperatorTable):
            ops = ops._ops
        items = ops.items() if isinstance(ops, Mapping) else ((o.symbol, o) for o in ops)
        table = {}
        for symbol, spec in items:
            if not symbol or _UNMATCHABLE.search(symbol):
                raise ValueError(f"Cannot use {symbol!r} as an operator symbol")
            if not isinstance(spec, Operator):
                prec, assoc, fun = spec
                spec = Operator(symbol, prec, assoc, fun)
            table[symbol] = spec._replace(
                symbol=symbol, associativity=Associativity(spec.associativity)
            )
        self._ops = MappingProxyType(table)
        self.symbols_longest_first = tuple(sorted(table, key=len, reverse=True))

    def __getitem__(self, symbol):
        return self._ops[symbol]

    def __iter__(self):
        return iter(self._ops)

    def __len__(self):
        return len(self._ops)

    def __repr__(self):
        return f"OperatorTable({list(self._ops.values())!r})"

    def precedence(self, symbol: str) -> int:
        # 0 doubles as the floor for anything that isn't an operator, the
        # empty end-of-input token included.
        op = self._ops.get(symbol)
        return op.precedence if op is not None else 0


# One group per line, loosest-binding first: <function><symbol><associativity>.
OP_GROUPS = """
add+l sub-l
mul*l truediv/l
pow^r
""".strip()


def table_from_groups(groups: str, step: int = 10) -> OperatorTable:
    """Build a table from `OP_GROUPS`-style text; functions come from `operator`.

    >>> table_from_groups("mul*l")["*"]
    op('*')
    """
    return OperatorTable(
        Operator(o, (prec + 1) * step, Associativity(assoc), getattr(operator, fun))
        for prec, op_groups in enumerate(groups.split("\n"))
        for [(fun, o, assoc)] in map(
            re.compile(r"^(\w+)(\W+)(\w+)$").findall, op_groups.split()
        )
    )


STANDARD_OPS = table_from_groups(OP_GROUPS)
