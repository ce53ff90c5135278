from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Integral
from typing import Iterable, Sequence, Tuple, Union

from .exceptions import ConfigError


class Layout(Enum):
    """Which dimension varies fastest in linear storage."""

    FIRST_ORDER = "first_order"  # column-major
    LAST_ORDER = "last_order"  # row-major

    def order(self, rank: int) -> Tuple[int, ...]:
        dims = tuple(range(rank))
        if self is Layout.LAST_ORDER:
            return dims[::-1]
        return dims

    def __repr__(self) -> str:
        return f"Layout.{self.name}"


@dataclass(frozen=True)
class PermutedLayout:
    """Explicit dimension order, listed from fastest to slowest varying."""

    dims: Tuple[int, ...]

    def __post_init__(self):
        dims = tuple(int(d) for d in self.dims)
        if sorted(dims) != list(range(len(dims))):
            raise ConfigError(f"PermutedLayout requires a permutation of 0..n-1; received {dims}")
        object.__setattr__(self, "dims", dims)

    def order(self, rank: int) -> Tuple[int, ...]:
        if rank != len(self.dims):
            raise ConfigError(
                f"PermutedLayout{self.dims} cannot describe a rank-{rank} tensor"
            )
        return self.dims


LayoutLike = Union[Layout, PermutedLayout, str]

_LAYOUT_ALIASES = {
    "first_order": Layout.FIRST_ORDER,
    "column_major": Layout.FIRST_ORDER,
    "f": Layout.FIRST_ORDER,
    "last_order": Layout.LAST_ORDER,
    "row_major": Layout.LAST_ORDER,
    "c": Layout.LAST_ORDER,
}


def resolve_layout(value: LayoutLike) -> Union[Layout, PermutedLayout]:
    if isinstance(value, (Layout, PermutedLayout)):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_")
        layout = _LAYOUT_ALIASES.get(key)
        if layout is None:
            raise ConfigError(f"Unsupported layout: {value!r}")
        return layout
    raise ConfigError(f"Unsupported layout: {value!r}")


def product(extents: Iterable[int]) -> int:
    result = 1
    for extent in extents:
        result *= int(extent)
    return result


def to_strides(extents: Sequence[int], layout: LayoutLike = Layout.FIRST_ORDER) -> Tuple[int, ...]:
    """Strides such that stepping index ``r`` by one moves ``strides[r]`` slots."""
    order = resolve_layout(layout).order(len(extents))
    strides = [0] * len(extents)
    step = 1
    for dim in order:
        strides[dim] = step
        # Empty dimensions still need a usable stride.
        step *= max(int(extents[dim]), 1)
    return tuple(strides)


def to_index(strides: Sequence[int], *indices: int) -> int:
    """Flat offset ``sum(strides[r] * indices[r])``; no bounds checking."""
    return sum(int(s) * int(i) for s, i in zip(strides, indices))


def to_multi_index(
    strides: Sequence[int],
    extents: Sequence[int],
    offset: int,
    layout: LayoutLike = Layout.FIRST_ORDER,
) -> Tuple[int, ...]:
    """Invert :func:`to_index` for dense strides produced by :func:`to_strides`."""
    order = resolve_layout(layout).order(len(extents))
    result = [0] * len(extents)
    remaining = int(offset)
    for dim in reversed(order):
        stride = int(strides[dim])
        result[dim], remaining = divmod(remaining, stride)
    return tuple(result)


def normalize_extents(sizes: Iterable[object]) -> Tuple[int, ...]:
    extents = []
    for size in sizes:
        if isinstance(size, bool) or not isinstance(size, Integral):
            raise TypeError(f"Tensor extents must be integers; received {type(size).__name__}")
        if int(size) < 0:
            raise ValueError(f"Tensor extents must be non-negative; received {int(size)}")
        extents.append(int(size))
    return tuple(extents)
