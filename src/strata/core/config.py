from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Iterator, Optional

import numpy as np

from .exceptions import ConfigError
from .layout import Layout, LayoutLike, resolve_layout


@dataclass(frozen=True)
class TensorConfig:
    """
    Construction-time switches shared by tensors and views.

    Key behaviors:
    * ``dtype`` is any value accepted by ``numpy.dtype`` and defaults to ``"float64"``.
    * ``layout`` picks the stride policy (``"first_order"``/``"last_order"`` or a
      :class:`~strata.core.layout.PermutedLayout`).
    * ``checked_access`` makes the call operator validate arity and storage bounds;
      ``at`` is always checked regardless of this flag.
    """

    dtype: Any = "float64"
    layout: LayoutLike = Layout.FIRST_ORDER
    checked_access: bool = True

    def normalized(self) -> "TensorConfig":
        try:
            dtype = np.dtype(self.dtype)
        except TypeError as exc:
            raise ConfigError(f"Unsupported dtype: {self.dtype!r}") from exc
        if dtype == np.dtype(object):
            raise ConfigError("Object dtype is not supported for tensor storage")
        layout = resolve_layout(self.layout)
        return replace(
            self,
            dtype=dtype,
            layout=layout,
            checked_access=bool(self.checked_access),
        )


_DEFAULT_CONFIG = TensorConfig().normalized()


def default_config() -> TensorConfig:
    return _DEFAULT_CONFIG


def set_default_config(config: TensorConfig) -> TensorConfig:
    """Install ``config`` as the process default and return the previous one."""
    global _DEFAULT_CONFIG
    previous = _DEFAULT_CONFIG
    _DEFAULT_CONFIG = config.normalized()
    return previous


@contextmanager
def using_config(config: TensorConfig) -> Iterator[TensorConfig]:
    previous = set_default_config(config)
    try:
        yield _DEFAULT_CONFIG
    finally:
        set_default_config(previous)


def resolve_config(
    config: Optional[TensorConfig] = None,
    *,
    dtype: Any = None,
    layout: Optional[LayoutLike] = None,
) -> TensorConfig:
    cfg = config or _DEFAULT_CONFIG
    if dtype is not None:
        cfg = replace(cfg, dtype=dtype)
    if layout is not None:
        cfg = replace(cfg, layout=layout)
    return cfg.normalized()
