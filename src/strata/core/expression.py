"""Tagged-variant expression trees built from tensor arithmetic.

``A + 2 * B`` does not compute anything; it builds a tree of :class:`Leaf`,
:class:`Scalar`, :class:`BinaryOp` and :class:`UnaryOp` nodes that an
evaluator walks when the tree is assigned into a tensor.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Number
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from .tensor import TensorBase

BINARY_OPS = ("+", "-", "*", "/")
UNARY_OPS = ("neg", "abs")


class ExpressionOps:
    """Operator overloads shared by expression nodes and tensors."""

    __slots__ = ()
    # Make numpy scalars defer to the reflected operators below.
    __array_ufunc__ = None

    def __add__(self, other: Any) -> "BinaryOp":
        return _binary("+", self, other)

    def __radd__(self, other: Any) -> "BinaryOp":
        return _binary("+", other, self)

    def __sub__(self, other: Any) -> "BinaryOp":
        return _binary("-", self, other)

    def __rsub__(self, other: Any) -> "BinaryOp":
        return _binary("-", other, self)

    def __mul__(self, other: Any) -> "BinaryOp":
        return _binary("*", self, other)

    def __rmul__(self, other: Any) -> "BinaryOp":
        return _binary("*", other, self)

    def __truediv__(self, other: Any) -> "BinaryOp":
        return _binary("/", self, other)

    def __rtruediv__(self, other: Any) -> "BinaryOp":
        return _binary("/", other, self)

    def __neg__(self) -> "UnaryOp":
        return UnaryOp("neg", as_expression(self))

    def __pos__(self) -> "Expression":
        return as_expression(self)

    def __abs__(self) -> "UnaryOp":
        return UnaryOp("abs", as_expression(self))


class Expression(ExpressionOps):
    __slots__ = ()


@dataclass(frozen=True, eq=False)
class Leaf(Expression):
    tensor: "TensorBase"


@dataclass(frozen=True)
class Scalar(Expression):
    value: Any


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: str
    left: Expression
    right: Expression

    def __post_init__(self):
        if self.op not in BINARY_OPS:
            raise ValueError(f"Unsupported binary operator '{self.op}'")


@dataclass(frozen=True)
class UnaryOp(Expression):
    op: str
    operand: Expression

    def __post_init__(self):
        if self.op not in UNARY_OPS:
            raise ValueError(f"Unsupported unary operator '{self.op}'")


def as_expression(value: Any) -> Expression:
    from .tensor import TensorBase

    if isinstance(value, Expression):
        return value
    if isinstance(value, TensorBase):
        return Leaf(value)
    if isinstance(value, (Number, np.number, np.bool_)):
        return Scalar(value)
    raise TypeError(f"Cannot use {type(value).__name__} in a tensor expression")


def _binary(op: str, left: Any, right: Any) -> BinaryOp:
    try:
        lhs = as_expression(left)
        rhs = as_expression(right)
    except TypeError:
        return NotImplemented
    return BinaryOp(op, lhs, rhs)
