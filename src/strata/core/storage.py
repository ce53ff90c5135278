"""Contiguous, linearly addressable element buffer backing tensors."""

from __future__ import annotations

from numbers import Integral
from typing import Any, Iterator, Optional

import numpy as np

from .exceptions import OutOfRangeError


class Storage:
    """Raw one-dimensional numpy buffer.

    ``at`` is bounds-checked and raises :class:`OutOfRangeError`; item access
    through ``[]`` goes straight to numpy.
    """

    __slots__ = ("_data",)

    def __init__(self, size: int, dtype: Any = np.float64, data: Optional[np.ndarray] = None):
        if data is not None:
            arr = np.ascontiguousarray(data, dtype=dtype).reshape(-1)
            if arr.size != size:
                raise ValueError(f"Storage expects {size} elements; received {arr.size}")
            self._data = arr.copy() if np.shares_memory(arr, data) else arr
        else:
            self._data = np.zeros(int(size), dtype=dtype)

    @classmethod
    def wrap(cls, array: np.ndarray) -> "Storage":
        """Adopt ``array`` (already flat and contiguous) without copying."""
        if array.ndim != 1 or not array.flags.c_contiguous:
            raise ValueError("Storage.wrap requires a flat contiguous array")
        storage = cls.__new__(cls)
        storage._data = array
        return storage

    def size(self) -> int:
        return int(self._data.size)

    def __len__(self) -> int:
        return int(self._data.size)

    def empty(self) -> bool:
        return self._data.size == 0

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def _check(self, idx: Any) -> int:
        if isinstance(idx, bool) or not isinstance(idx, Integral):
            raise TypeError(f"Storage index must be an integer; received {type(idx).__name__}")
        idx = int(idx)
        if idx < 0 or idx >= self._data.size:
            raise OutOfRangeError(
                f"Storage offset {idx} out of range for storage of size {self._data.size}"
            )
        return idx

    def at(self, idx: int) -> Any:
        return self._data[self._check(idx)]

    def set_at(self, idx: int, value: Any) -> None:
        self._data[self._check(idx)] = value

    def __getitem__(self, idx: Any) -> Any:
        return self._data[idx]

    def __setitem__(self, idx: Any, value: Any) -> None:
        self._data[idx] = value

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __reversed__(self) -> Iterator[Any]:
        return iter(self._data[::-1])

    def fill(self, value: Any) -> None:
        self._data.fill(value)

    def copy(self) -> "Storage":
        return Storage.wrap(self._data.copy())

    def data(self) -> np.ndarray:
        return self._data

    @property
    def data_ptr(self) -> int:
        return self._data.ctypes.data

    def __repr__(self) -> str:
        return f"Storage(size={self._data.size}, dtype={self._data.dtype})"
