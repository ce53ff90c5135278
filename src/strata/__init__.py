try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _load_version
except ImportError:  # pragma: no cover
    from importlib_metadata import (  # type: ignore
        PackageNotFoundError,
    )
    from importlib_metadata import (
        version as _load_version,
    )

from .core.config import TensorConfig, default_config, set_default_config, using_config
from .core.evaluator import ExpressionEvaluator, contract, evaluate
from .core.exceptions import (
    ArityError,
    ConfigError,
    OutOfRangeError,
    ParseError,
    ShapeError,
    SpanError,
    StrataError,
)
from .core.expression import BinaryOp, Expression, Leaf, Scalar, UnaryOp
from .core.index import (
    Contraction,
    Index,
    IndexBinding,
    _a,
    _b,
    _c,
    _d,
    _e,
    _f,
    _g,
    _h,
    _i,
    _j,
    _k,
    _l,
    _m,
    _n,
    _o,
    _p,
    _q,
    _r,
    _s,
    _t,
    _u,
    _v,
    _w,
    _x,
    _y,
    _z,
    indices,
)
from .core.layout import Layout, PermutedLayout, product, to_index, to_strides
from .core.parser import parse_selection, parse_span
from .core.span import MAX, Span, ran
from .core.storage import Storage
from .core.tensor import Tensor, TensorBase, TensorView, swap

try:
    __version__ = _load_version("strata-tensor")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Span",
    "ran",
    "MAX",
    "Layout",
    "PermutedLayout",
    "to_strides",
    "to_index",
    "product",
    "Storage",
    "Tensor",
    "TensorBase",
    "TensorView",
    "swap",
    "Index",
    "IndexBinding",
    "Contraction",
    "indices",
    "Expression",
    "Leaf",
    "Scalar",
    "BinaryOp",
    "UnaryOp",
    "ExpressionEvaluator",
    "evaluate",
    "contract",
    "TensorConfig",
    "default_config",
    "set_default_config",
    "using_config",
    "parse_span",
    "parse_selection",
    "StrataError",
    "SpanError",
    "ArityError",
    "OutOfRangeError",
    "ShapeError",
    "ParseError",
    "ConfigError",
    "__version__",
]
