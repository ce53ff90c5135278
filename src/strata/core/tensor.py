"""Strided tensors: an owning :class:`Tensor` and a borrowing :class:`TensorView`.

Both share one capability set (:class:`TensorBase`): element access through a
multi-index or a flat index, bulk assignment, iteration over physical storage
order, and deferred index binding for Einstein contractions.  A ``Tensor``
exclusively owns its :class:`~strata.core.storage.Storage`; a ``TensorView``
addresses its parent's storage at a base offset with its own extents and
strides, so writes through a view are visible in the parent.
"""

from __future__ import annotations

import logging
from numbers import Integral, Number
from typing import Any, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from .config import TensorConfig, resolve_config
from .exceptions import ArityError, OutOfRangeError, ShapeError, SpanError
from .expression import Expression, ExpressionOps
from .index import Index, IndexBinding
from .layout import (
    LayoutLike,
    normalize_extents,
    product,
    to_index,
    to_multi_index,
    to_strides,
)
from .span import Span, as_span
from .storage import Storage

logger = logging.getLogger(__name__)

SpanLike = Union[Span, slice, int]


def _is_integral(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


class TensorBase(ExpressionOps):
    """Capability set shared by owning tensors and views."""

    _storage: Storage
    _extents: Tuple[int, ...]
    _strides: Tuple[int, ...]
    _offset: int
    _config: TensorConfig

    # Queries ---------------------------------------------------------------

    def rank(self) -> int:
        return len(self._extents)

    def order(self) -> int:
        return self.rank()

    def size(self, r: Optional[int] = None) -> int:
        if r is None:
            return product(self._extents)
        if not _is_integral(r) or r < 0 or r >= len(self._extents):
            raise OutOfRangeError(
                f"Dimension {r} out of range for tensor of rank {len(self._extents)}"
            )
        return self._extents[r]

    def extents(self) -> Tuple[int, ...]:
        return self._extents

    def strides(self) -> Tuple[int, ...]:
        return self._strides

    def empty(self) -> bool:
        return self.size() == 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def layout(self):
        return self._config.layout

    @property
    def dtype(self) -> np.dtype:
        return self._storage.dtype

    @property
    def config(self) -> TensorConfig:
        return self._config

    @property
    def owns_data(self) -> bool:
        raise NotImplementedError

    def data(self, readonly: bool = False) -> np.ndarray:
        """The contiguous buffer backing this tensor (shared with views)."""
        buffer = self._storage.data()
        if readonly:
            buffer = buffer.view()
            buffer.flags.writeable = False
        return buffer

    def __len__(self) -> int:
        return self.size()

    # Addressing ------------------------------------------------------------

    def _multi_offset(self, indices: Sequence[int]) -> int:
        return self._offset + to_index(self._strides, *indices)

    def _flat_offset(self, i: int) -> int:
        raise NotImplementedError

    def _checked_offset(self, indices: Tuple[Any, ...], caller: str) -> int:
        for value in indices:
            if not _is_integral(value):
                raise TypeError(
                    f"{caller}: indices must be integers; received {type(value).__name__}"
                )
        if len(indices) == 1:
            return self._flat_offset(int(indices[0]))
        if len(indices) != self.rank():
            raise ArityError(
                f"{caller}: Cannot access tensor with multi-index. "
                "Number of provided indices does not match with tensor order.",
                expected=self.rank(),
                received=len(indices),
            )
        return self._multi_offset(indices)

    def at(self, *indices: int) -> Any:
        """Bounds-checked element read.

        One index addresses the flat element sequence; otherwise the number of
        indices must equal ``rank()``.  Owning tensors only check that the
        resulting offset lies inside storage, so ``at(3, 0)`` on a ``(3, 4)``
        first-order tensor reads element ``(0, 1)``.  Views check every
        dimension against its extent.
        """
        return self._storage.at(self._checked_offset(indices, "Tensor.at"))

    def set_at(self, value: Any, *indices: int) -> None:
        self._storage.set_at(self._checked_offset(indices, "Tensor.set_at"), value)

    def _unchecked_offset(self, indices: Tuple[int, ...]) -> int:
        if len(indices) == 1 and self.rank() != 1:
            return self._flat_offset(int(indices[0]))
        return self._multi_offset(indices)

    def __call__(self, *args: Any) -> Any:
        if args and any(isinstance(arg, Index) for arg in args):
            return self.bind(*args)
        if any(isinstance(arg, (Span, slice)) for arg in args):
            return self.view(*args)
        if self._config.checked_access:
            return self.at(*args)
        return self._storage[self._unchecked_offset(args)]

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, tuple):
            return self(*key)
        if isinstance(key, (Span, slice, Index)):
            return self(key)
        return self.at(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        args = key if isinstance(key, tuple) else (key,)
        if any(isinstance(arg, (Span, slice)) for arg in args):
            self.view(*args).assign(value)
            return
        if self._config.checked_access:
            self.set_at(value, *args)
            return
        self._storage[self._unchecked_offset(args)] = value

    # Deferred index binding --------------------------------------------------

    def bind(self, *placeholders: Index) -> IndexBinding:
        """Pair this tensor with placeholder indices for a later contraction."""
        if not all(isinstance(p, Index) for p in placeholders):
            raise TypeError("Cannot mix placeholder indices with concrete indices")
        if len(placeholders) != self.rank():
            raise ArityError(
                "Cannot multiply using Einstein notation. "
                "Number of provided indices does not match with tensor order.",
                expected=self.rank(),
                received=len(placeholders),
            )
        return IndexBinding(self, tuple(placeholders))

    # Views -----------------------------------------------------------------

    def view(self, *spans: SpanLike) -> "TensorView":
        return TensorView(self, spans)

    def select(self, text: str) -> "TensorView":
        """View selected with span notation, e.g. ``t.select("1:3, :, 0:2:8")``."""
        from .parser import parse_selection

        return self.view(*parse_selection(text))

    def _root_spans(self) -> Tuple[Span, ...]:
        raise NotImplementedError

    def _root(self) -> "Tensor":
        raise NotImplementedError

    # Bulk data movement ----------------------------------------------------

    def _offset_grid(self) -> np.ndarray:
        grid = np.asarray(self._offset, dtype=np.intp)
        for extent, stride in zip(self._extents, self._strides):
            grid = np.add.outer(grid, np.arange(extent, dtype=np.intp) * stride)
        return grid

    def to_numpy(self) -> np.ndarray:
        """Logical multi-dimensional copy of the elements."""
        return np.asarray(self._storage.data()[self._offset_grid()])

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        arr = self.to_numpy()
        if dtype is not None:
            arr = arr.astype(dtype, copy=False)
        return arr

    def _write_logical(self, values: Any, casting: str = "same_kind") -> None:
        arr = np.asarray(values)
        _check_cast(arr.dtype, self.dtype, casting)
        if arr.shape != self._extents:
            arr = np.broadcast_to(arr, self._extents)
        self._storage.data()[self._offset_grid()] = arr.astype(self.dtype, copy=False)

    def copy(self, *, layout: Optional[LayoutLike] = None, dtype: Any = None) -> "Tensor":
        """Owning copy, optionally in a different layout or dtype."""
        config = resolve_config(self._config, dtype=dtype, layout=layout)
        return Tensor.from_array(self.to_numpy(), config=config)

    # Assignment ------------------------------------------------------------

    def assign(self, source: Any) -> "TensorBase":
        """Assign a scalar, another tensor, an array or an expression."""
        if isinstance(source, (Number, np.number, np.bool_)):
            self.fill(source)
            return self
        if isinstance(source, TensorBase):
            self._assign_tensor(source)
            return self
        if isinstance(source, Expression):
            from .evaluator import evaluate

            evaluate(self, source)
            return self
        if isinstance(source, np.ndarray):
            if source.shape != self._extents:
                raise ShapeError(
                    f"Cannot assign array of shape {source.shape} to tensor with extents {self._extents}"
                )
            self._write_logical(source)
            return self
        raise TypeError(f"Cannot assign {type(source).__name__} to a tensor")

    def _assign_tensor(self, source: "TensorBase") -> None:
        raise NotImplementedError

    def fill(self, value: Any) -> None:
        raise NotImplementedError

    def __iadd__(self, other: Any) -> "TensorBase":
        return self.assign(self + other)

    def __isub__(self, other: Any) -> "TensorBase":
        return self.assign(self - other)

    def __imul__(self, other: Any) -> "TensorBase":
        return self.assign(self * other)

    def __itruediv__(self, other: Any) -> "TensorBase":
        return self.assign(self / other)

    # Iteration -------------------------------------------------------------

    def _physical_offsets(self) -> np.ndarray:
        return np.sort(self._offset_grid().reshape(-1), kind="stable")

    def __iter__(self) -> Iterator[Any]:
        data = self._storage.data()
        for offset in self._physical_offsets():
            yield data[offset]

    def __reversed__(self) -> Iterator[Any]:
        data = self._storage.data()
        for offset in self._physical_offsets()[::-1]:
            yield data[offset]

    def values(self) -> Iterator[Any]:
        """Read-only iteration yielding plain Python scalars."""
        for value in self:
            yield value.item()


class Tensor(TensorBase):
    """Dense tensor that exclusively owns its storage.

    ``Tensor(3, 4, 2)`` allocates 24 zero-initialized elements with strides
    derived from the configured layout (first index fastest by default).
    """

    def __init__(
        self,
        *sizes: int,
        dtype: Any = None,
        layout: Optional[LayoutLike] = None,
        config: Optional[TensorConfig] = None,
    ):
        if len(sizes) == 1 and isinstance(sizes[0], (tuple, list)):
            sizes = tuple(sizes[0])
        self._config = resolve_config(config, dtype=dtype, layout=layout)
        self._extents = normalize_extents(sizes)
        self._strides = to_strides(self._extents, self._config.layout)
        self._storage = Storage(product(self._extents), dtype=self._config.dtype)
        self._offset = 0
        logger.debug(
            "Allocated tensor extents=%s strides=%s layout=%s dtype=%s",
            self._extents,
            self._strides,
            self._config.layout,
            self._config.dtype,
        )

    @classmethod
    def from_array(
        cls,
        array: Any,
        *,
        dtype: Any = None,
        layout: Optional[LayoutLike] = None,
        config: Optional[TensorConfig] = None,
    ) -> "Tensor":
        arr = np.asarray(array)
        if dtype is None and config is None:
            dtype = arr.dtype
        tensor = cls(*arr.shape, dtype=dtype, layout=layout, config=config)
        tensor._write_logical(arr, casting="unsafe")
        return tensor

    @classmethod
    def full(
        cls,
        extents: Sequence[int],
        value: Any,
        *,
        dtype: Any = None,
        layout: Optional[LayoutLike] = None,
    ) -> "Tensor":
        tensor = cls(*extents, dtype=dtype, layout=layout)
        tensor.fill(value)
        return tensor

    @property
    def owns_data(self) -> bool:
        return True

    def _flat_offset(self, i: int) -> int:
        return i

    def _root_spans(self) -> Tuple[Span, ...]:
        return tuple(Span(0, 1, extent) for extent in self._extents)

    def _root(self) -> "Tensor":
        return self

    def fill(self, value: Any) -> None:
        self._storage.fill(value)

    def _assign_tensor(self, source: TensorBase) -> None:
        if source.extents() != self._extents:
            raise ShapeError(
                f"Cannot assign tensor with extents {source.extents()} "
                f"to tensor with extents {self._extents}"
            )
        if source is self:
            return
        _check_cast(source.dtype, self.dtype, "same_kind")
        # Build the replacement fully before touching the receiver.
        replacement = source.copy(layout=self._config.layout, dtype=self.dtype)
        self.swap(replacement)
        logger.debug("Swap-assigned tensor extents=%s", self._extents)

    def swap(self, other: "Tensor") -> None:
        """Exchange extents, strides, layout and storage without copying elements."""
        if not isinstance(other, Tensor):
            raise TypeError(f"Cannot swap Tensor with {type(other).__name__}")
        self._extents, other._extents = other._extents, self._extents
        self._strides, other._strides = other._strides, self._strides
        self._storage, other._storage = other._storage, self._storage
        self._config, other._config = other._config, self._config

    def __iter__(self) -> Iterator[Any]:
        return iter(self._storage)

    def __reversed__(self) -> Iterator[Any]:
        return reversed(self._storage)

    def __repr__(self) -> str:
        return f"Tensor(extents={self._extents}, layout={_layout_name(self.layout)}, dtype={self.dtype})"


class TensorView(TensorBase):
    """Non-owning window onto another tensor's storage.

    Spans are resolved against the parent's extents and composed with the
    parent's own spans, so a view of a view addresses the root storage
    directly.
    """

    def __init__(self, parent: TensorBase, spans: Sequence[SpanLike]):
        if not isinstance(parent, TensorBase):
            raise TypeError(f"Cannot view {type(parent).__name__}")
        spans = tuple(spans)
        if len(spans) != parent.rank():
            raise ArityError(
                "Cannot create view. Number of provided spans does not match with tensor order.",
                expected=parent.rank(),
                received=len(spans),
            )
        root = parent._root()
        parent_spans = parent._root_spans()
        absolute = []
        for dim, raw in enumerate(spans):
            extent = parent.size(dim)
            if isinstance(raw, slice):
                # Python slice semantics: negative bounds count from the end.
                raw = Span(*_slice_fields(raw, extent))
            relative = as_span(raw).resolve(extent)
            _check_span_bounds(relative, extent, dim)
            absolute.append(parent_spans[dim].compose(relative))

        self._parent = parent
        self._root_tensor = root
        self._root_extents = root._extents
        self._root_strides = root._strides
        self._spans = tuple(absolute)
        self._extents = tuple(span.count() for span in self._spans)
        self._strides = tuple(
            stride * span.step for stride, span in zip(root._strides, self._spans)
        )
        self._offset = sum(stride * span.first for stride, span in zip(root._strides, self._spans))
        logger.debug(
            "Created view spans=%s extents=%s offset=%d",
            [str(span) for span in self._spans],
            self._extents,
            self._offset,
        )

    # Resolved through the root so a swap-assignment on the root stays visible.
    @property
    def _storage(self) -> Storage:
        return self._root_tensor._storage

    @property
    def _config(self) -> TensorConfig:
        return self._root_tensor._config

    @property
    def owns_data(self) -> bool:
        return False

    @property
    def parent(self) -> TensorBase:
        return self._parent

    def spans(self) -> Tuple[Span, ...]:
        """Spans in the coordinates of the owning tensor."""
        return self._spans

    def _root_spans(self) -> Tuple[Span, ...]:
        return self._spans

    def _root(self) -> Tensor:
        return self._root_tensor

    def _flat_offset(self, i: int) -> int:
        size = self.size()
        if i < 0 or i >= size:
            raise OutOfRangeError(f"Flat index {i} out of range for view of size {size}")
        dense = to_strides(self._extents, self._config.layout)
        multi = to_multi_index(dense, self._extents, i, self._config.layout)
        return self._multi_offset(multi)

    def _check_root(self) -> None:
        root = self._root_tensor
        if root._extents != self._root_extents or root._strides != self._root_strides:
            raise ShapeError(
                f"View over extents {self._root_extents} is stale; the owning tensor now has "
                f"extents {root._extents} and strides {root._strides}"
            )

    def _offset_grid(self) -> np.ndarray:
        self._check_root()
        return super()._offset_grid()

    def _multi_offset(self, indices: Sequence[int]) -> int:
        for dim, (value, extent) in enumerate(zip(indices, self._extents)):
            if value < 0 or value >= extent:
                raise OutOfRangeError(
                    f"Index {value} out of range for dimension {dim} of view with extent {extent}"
                )
        self._check_root()
        return super()._multi_offset(indices)

    def fill(self, value: Any) -> None:
        self._storage.data()[self._offset_grid()] = value

    def _assign_tensor(self, source: TensorBase) -> None:
        if source.extents() != self._extents:
            raise ShapeError(
                f"Cannot assign tensor with extents {source.extents()} "
                f"to view with extents {self._extents}"
            )
        # Views cannot swap storage; materialize first, then write through.
        self._write_logical(source.to_numpy())

    def __repr__(self) -> str:
        spans = ", ".join(str(span) for span in self._spans)
        return f"TensorView(extents={self._extents}, spans=({spans}), offset={self._offset})"


def _check_span_bounds(span: Span, extent: int, dim: int) -> None:
    count = span.count()
    if count == 0:
        return
    tail = span.element_at(count - 1)
    for value in (span.first, tail):
        if value < 0 or value >= extent:
            raise OutOfRangeError(
                f"Span {span} exceeds dimension {dim} with extent {extent}"
            )


def _check_cast(source: np.dtype, target: np.dtype, casting: str) -> None:
    if not np.can_cast(source, target, casting=casting):
        raise TypeError(
            f"Cannot write {source} values into a {target} tensor under '{casting}' casting"
        )


def _slice_fields(key: slice, extent: int) -> Tuple[int, int, int]:
    if key.step == 0:
        raise SpanError("Slice step must be non-zero")
    start, stop, step = key.indices(extent)
    if (stop - start) * step <= 0:
        return 0, 1, 0
    return start, step, stop


def _layout_name(layout: Any) -> str:
    if hasattr(layout, "value"):
        return layout.value
    return repr(layout)


def swap(lhs: Tensor, rhs: Tensor) -> None:
    lhs.swap(rhs)
