"""Syntax tree of simplang. The set of Expression variants is closed: evaluator.py and printer.py each keep one rule
per variant and check at import time that they cover exactly VARIANTS.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from simplang.lang.tokens import Location, Operator


class Expression:
    """Superclass of every syntax tree node. Nodes are immutable once parsed."""


@dataclass(frozen=True)
class Integer(Expression):
    value: int


@dataclass(frozen=True)
class If(Expression):
    condition: Expression
    consequent: Expression
    alternative: Expression


@dataclass(frozen=True)
class Parenthesized(Expression):
    inner: Expression


@dataclass(frozen=True)
class Unary(Expression):
    op: Operator
    operand: Expression


@dataclass(frozen=True)
class Binary(Expression):
    op: Operator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Binding:
    """name = expression, as introduced by let and loop."""
    name: str
    expression: Expression


@dataclass(frozen=True)
class Let(Expression):
    bindings: Tuple[Binding, ...]
    body: Expression


@dataclass(frozen=True)
class Loop(Expression):
    bindings: Tuple[Binding, ...]
    body: Expression


@dataclass(frozen=True)
class Recur(Expression):
    args: Tuple[Expression, ...]
    location: Optional[Location] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Identifier(Expression):
    name: str
    location: Optional[Location] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Invocation(Expression):
    name: str
    args: Tuple[Expression, ...]
    location: Optional[Location] = field(default=None, compare=False, repr=False)


VARIANTS = frozenset(Expression.__subclasses__())


@dataclass(frozen=True)
class Function:
    """A declared function: let <name> <params>+ = <body> end."""
    name: str
    params: Tuple[str, ...]
    body: Expression

    @property
    def arity(self):
        return len(self.params)
