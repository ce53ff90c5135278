from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .core.exceptions import StrataError
from .core.layout import resolve_layout, to_index, to_strides
from .core.parser import parse_span


def _cmd_strides(args: argparse.Namespace) -> None:
    strides = to_strides(args.extents, resolve_layout(args.layout))
    print(" ".join(str(s) for s in strides))


def _cmd_offset(args: argparse.Namespace) -> None:
    if len(args.index) != len(args.extents):
        raise SystemExit(
            f"Expected {len(args.extents)} indices for extents {tuple(args.extents)}; "
            f"received {len(args.index)}"
        )
    strides = to_strides(args.extents, resolve_layout(args.layout))
    print(to_index(strides, *args.index))


def _cmd_span(args: argparse.Namespace) -> None:
    span = parse_span(args.text)
    if args.compose is not None:
        span = span.compose(parse_span(args.compose))
    print(span)
    if args.at is not None:
        print(span.element_at(args.at))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Strata command line utilities")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="cmd")

    strides_parser = subparsers.add_parser("strides", help="Print strides for extents")
    strides_parser.add_argument("extents", type=int, nargs="+", help="Dimension sizes")
    strides_parser.add_argument(
        "--layout",
        default="first_order",
        help="Layout name (first_order/last_order; default: first_order)",
    )

    offset_parser = subparsers.add_parser("offset", help="Print the flat offset of a multi-index")
    offset_parser.add_argument("--extents", type=int, nargs="+", required=True)
    offset_parser.add_argument("--index", type=int, nargs="+", required=True)
    offset_parser.add_argument("--layout", default="first_order")

    span_parser = subparsers.add_parser("span", help="Parse and compose span notation")
    span_parser.add_argument("text", help="Span such as 2:3:20")
    span_parser.add_argument(
        "--compose",
        default=None,
        help="Span relative to TEXT; prints the composed absolute span",
    )
    span_parser.add_argument("--at", type=int, default=None, help="Print the element at a position")
    return parser


_COMMANDS = {
    "strides": _cmd_strides,
    "offset": _cmd_offset,
    "span": _cmd_span,
}


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler = _COMMANDS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return
    try:
        handler(args)
    except StrataError as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
