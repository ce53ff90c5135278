"""Affine range descriptors used to select and compose slices of a dimension.

A :class:`Span` describes the subsequence ``first, first + step, ...`` of one
dimension, bounded by ``last`` (half-open).  Spans compose: a span expressed
relative to another span can be rewritten in absolute coordinates, which is
what lets ``A(s1)(s2)`` collapse to a single descriptor.
"""

from __future__ import annotations

import sys
from numbers import Integral
from typing import Any, Tuple

from .exceptions import SpanError

# Sentinel for "until the extent of the dimension"; resolved by consumers.
MAX = sys.maxsize


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"Span {name} must be an integer; received {type(value).__name__}")
    return int(value)


class Span:
    """Immutable ``(first, step, last)`` triple.

    ``Span()`` covers a whole dimension, ``Span(l)`` covers ``[0, l)``,
    ``Span(f, l)`` covers ``[f, l)`` and ``Span(f, s, l)`` is an arbitrary
    affine range.  A zero step is only accepted when ``first == last``.
    """

    __slots__ = ("_first", "_step", "_last")

    def __init__(self, *args: int):
        if len(args) == 0:
            first, step, last = 0, 1, MAX
        elif len(args) == 1:
            first, step, last = 0, 1, args[0]
        elif len(args) == 2:
            first, step, last = args[0], 1, args[1]
        elif len(args) == 3:
            first, step, last = args
        else:
            raise TypeError(f"Span takes at most 3 arguments ({len(args)} given)")
        first = _as_int(first, "first")
        step = _as_int(step, "step")
        last = _as_int(last, "last")
        if step == 0 and first != last:
            raise SpanError(
                f"Cannot construct span [{first}:{step}:{last}]: "
                "step must be non-zero unless first equals last"
            )
        self._first = first
        self._step = step
        self._last = last

    @property
    def first(self) -> int:
        return self._first

    @property
    def step(self) -> int:
        return self._step

    @property
    def last(self) -> int:
        return self._last

    def __setattr__(self, name: str, value: Any) -> None:
        if name in Span.__slots__ and not hasattr(self, name):
            object.__setattr__(self, name, value)
            return
        raise AttributeError(f"Span is immutable; cannot set '{name}'")

    def element_at(self, idx: int) -> int:
        """Absolute coordinate of position ``idx``; ``last`` is not checked."""
        return self._first + idx * self._step

    def __getitem__(self, idx: int) -> int:
        return self.element_at(idx)

    def compose(self, other: "Span") -> "Span":
        """Reinterpret ``other`` (relative to ``self``) in absolute coordinates.

        A full-range ``other`` keeps ``self.last`` so that composing with
        ``Span()`` is the identity.
        """
        if not isinstance(other, Span):
            raise TypeError(f"Cannot compose Span with {type(other).__name__}")
        first = other._first * self._step + self._first
        step = self._step * other._step
        if other._last == MAX:
            last = self._last
        else:
            last = other._last * self._step + self._first
        return Span(first, step, last)

    def __call__(self, other: "Span") -> "Span":
        return self.compose(other)

    def is_full(self) -> bool:
        return self._last == MAX

    def resolve(self, extent: int) -> "Span":
        """Replace the ``MAX`` sentinel with a concrete ``extent``."""
        if self._last != MAX:
            return self
        return Span(self._first, self._step, int(extent))

    def count(self) -> int:
        """Number of positions in ``[first, last)`` walked with ``step``."""
        if self._last == MAX:
            raise SpanError(f"Span {self} is unbounded; resolve it against an extent first")
        if self._step > 0:
            distance = self._last - self._first
            step = self._step
        elif self._step < 0:
            distance = self._first - self._last
            step = -self._step
        else:
            return 0
        if distance <= 0:
            return 0
        return -(-distance // step)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self._first, self._step, self._last)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Span):
            return NotImplemented
        return (
            self._first == other._first
            and self._last == other._last
            and self._step == other._step
        )

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __str__(self) -> str:
        return f"[{self._first}:{self._step}:{self._last}]"

    def __repr__(self) -> str:
        return f"Span({self._first}, {self._step}, {self._last})"

    def __reduce__(self):
        return (Span, self.as_tuple())


def ran(*args: int) -> Span:
    """Shorthand for ``Span(f, l)`` or ``Span(f, s, l)``."""
    if len(args) not in (2, 3):
        raise TypeError(f"ran() takes 2 or 3 arguments ({len(args)} given)")
    return Span(*args)


def as_span(value: Any) -> Span:
    """Coerce an integer, ``slice`` or ``Span`` into a ``Span``.

    An integer ``i`` selects the single position ``[i, i + 1)``.
    """
    if isinstance(value, Span):
        return value
    if isinstance(value, slice):
        start = 0 if value.start is None else value.start
        step = 1 if value.step is None else value.step
        stop = MAX if value.stop is None else value.stop
        return Span(start, step, stop)
    if isinstance(value, Integral) and not isinstance(value, bool):
        return Span(int(value), int(value) + 1)
    raise TypeError(f"Cannot interpret {type(value).__name__} as a span")
