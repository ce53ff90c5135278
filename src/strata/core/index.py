from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Tuple

if TYPE_CHECKING:
    from .tensor import TensorBase


@dataclass(frozen=True)
class Index:
    """Placeholder index used to declare an Einstein contraction."""

    name: str

    def __repr__(self) -> str:
        return f"_{self.name}"


def indices(names: str) -> Tuple[Index, ...]:
    """Build placeholders from a whitespace or comma separated list of names."""
    parts = names.replace(",", " ").split()
    return tuple(Index(part) for part in parts)


@dataclass(eq=False)
class IndexBinding:
    """A tensor paired with the placeholders it was called with.

    Nothing is computed when the binding is created; a contraction evaluator
    consumes it later (see :meth:`assign` and :func:`strata.core.evaluator.contract`).
    """

    tensor: "TensorBase"
    indices: Tuple[Index, ...]

    @property
    def arity(self) -> int:
        return len(self.indices)

    def __mul__(self, other: Any) -> "Contraction":
        return Contraction([self]) * other

    def assign(self, source: Any) -> "TensorBase":
        from .evaluator import assign_contraction

        return assign_contraction(self, source)

    def __repr__(self) -> str:
        labels = ",".join(idx.name for idx in self.indices)
        return f"IndexBinding(rank={self.tensor.rank()}, indices=({labels}))"


@dataclass
class Contraction:
    # A product of bound factors compiled into a single einsum
    factors: List[IndexBinding] = field(default_factory=list)

    def __mul__(self, other: Any) -> "Contraction":
        if isinstance(other, IndexBinding):
            return Contraction(self.factors + [other])
        if isinstance(other, Contraction):
            return Contraction(self.factors + other.factors)
        return NotImplemented

    def placeholders(self) -> List[Index]:
        seen: dict = {}
        for factor in self.factors:
            for idx in factor.indices:
                seen.setdefault(idx, None)
        return list(seen.keys())


# Predefined placeholders ``_a`` .. ``_z``.
_a, _b, _c, _d, _e, _f, _g, _h, _i, _j, _k, _l, _m = (
    Index(name) for name in string.ascii_lowercase[:13]
)
_n, _o, _p, _q, _r, _s, _t, _u, _v, _w, _x, _y, _z = (
    Index(name) for name in string.ascii_lowercase[13:]
)
