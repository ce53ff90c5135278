from __future__ import annotations

import logging
import string
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import ShapeError
from .expression import BinaryOp, Expression, Leaf, Scalar, UnaryOp, as_expression
from .index import Contraction, Index, IndexBinding
from .tensor import Tensor, TensorBase

logger = logging.getLogger(__name__)

# Map placeholder indices to letters for einsum
EINSUM_LABELS = list(string.ascii_letters)

_BINARY = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.true_divide,
}

_UNARY = {
    "neg": np.negative,
    "abs": np.abs,
}


class ExpressionEvaluator:
    """Visitor computing an expression tree over tensors of fixed extents."""

    def __init__(self, extents: Tuple[int, ...]):
        self.extents = tuple(extents)

    def visit(self, node: Expression) -> Any:
        if isinstance(node, Leaf):
            return self.visit_leaf(node)
        if isinstance(node, Scalar):
            return node.value
        if isinstance(node, BinaryOp):
            left = self.visit(node.left)
            right = self.visit(node.right)
            return _BINARY[node.op](left, right)
        if isinstance(node, UnaryOp):
            return _UNARY[node.op](self.visit(node.operand))
        raise ValueError(f"Unknown expr type: {type(node)}")

    def visit_leaf(self, node: Leaf) -> np.ndarray:
        extents = node.tensor.extents()
        if extents != self.extents:
            raise ShapeError(
                f"Expression operand with extents {extents} does not conform "
                f"to destination extents {self.extents}"
            )
        return node.tensor.to_numpy()


def extents_of(expression: Any) -> Optional[Tuple[int, ...]]:
    """Extents of the first tensor leaf, or ``None`` for scalar-only trees."""
    node = as_expression(expression)
    if isinstance(node, Leaf):
        return node.tensor.extents()
    if isinstance(node, BinaryOp):
        found = extents_of(node.left)
        return found if found is not None else extents_of(node.right)
    if isinstance(node, UnaryOp):
        return extents_of(node.operand)
    return None


def evaluate(destination: TensorBase, expression: Any) -> TensorBase:
    """Write every element of ``destination`` from ``expression``.

    The full result is computed before the destination is touched, so a
    failing evaluation leaves it unchanged.
    """
    node = as_expression(expression)
    evaluator = ExpressionEvaluator(destination.extents())
    result = np.asarray(evaluator.visit(node))
    logger.debug(
        "Evaluated %s into extents=%s", type(node).__name__, destination.extents()
    )
    destination._write_logical(result)
    return destination


# Contractions -----------------------------------------------------------------


Operand = Union[IndexBinding, Contraction]


def _factors_of(operands: Sequence[Operand]) -> List[IndexBinding]:
    factors: List[IndexBinding] = []
    for operand in operands:
        if isinstance(operand, IndexBinding):
            factors.append(operand)
        elif isinstance(operand, Contraction):
            factors.extend(operand.factors)
        else:
            raise TypeError(f"Cannot contract {type(operand).__name__}")
    if not factors:
        raise ValueError("Contraction requires at least one bound tensor")
    return factors


def einsum_equation(
    factors: Sequence[IndexBinding],
    output: Sequence[Index],
) -> Tuple[str, Dict[Index, int]]:
    labels: Dict[Index, str] = {}
    dims: Dict[Index, int] = {}
    inputs: List[str] = []
    for factor in factors:
        extents = factor.tensor.extents()
        spec = []
        for idx, extent in zip(factor.indices, extents):
            if idx not in labels:
                if len(labels) >= len(EINSUM_LABELS):
                    raise ShapeError("Too many distinct placeholder indices for a contraction")
                labels[idx] = EINSUM_LABELS[len(labels)]
            if idx in dims and dims[idx] != extent:
                raise ShapeError(
                    f"Conflicting extents for index {idx!r}: {dims[idx]} and {extent}"
                )
            dims[idx] = extent
            spec.append(labels[idx])
        inputs.append("".join(spec))
    out_spec = []
    for idx in output:
        if idx not in labels:
            raise ShapeError(f"Output index {idx!r} does not appear in any operand")
        if labels[idx] in out_spec:
            raise ShapeError(f"Output index {idx!r} appears more than once")
        out_spec.append(labels[idx])
    return ",".join(inputs) + "->" + "".join(out_spec), dims


def _contract_array(factors: Sequence[IndexBinding], output: Sequence[Index]) -> np.ndarray:
    equation, _ = einsum_equation(factors, output)
    logger.debug("Contracting %d operands with einsum '%s'", len(factors), equation)
    return np.asarray(np.einsum(equation, *[f.tensor.to_numpy() for f in factors]))


def contract(*operands: Operand, output: Sequence[Index] = ()) -> Tensor:
    """Einstein summation over bound tensors, returned as a new tensor.

    Placeholders shared between operands and absent from ``output`` are
    summed over.
    """
    factors = _factors_of(operands)
    result = _contract_array(factors, tuple(output))
    first = factors[0].tensor
    return Tensor.from_array(result, layout=first.layout)


def assign_contraction(destination: IndexBinding, source: Operand) -> TensorBase:
    """Evaluate ``source`` with the destination's placeholders as output order."""
    factors = _factors_of([source])
    result = _contract_array(factors, destination.indices)
    target = destination.tensor
    if result.shape != target.extents():
        raise ShapeError(
            f"Contraction result with extents {result.shape} does not conform "
            f"to destination extents {target.extents()}"
        )
    target._write_logical(result)
    return target
