from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional, Tuple

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import LarkError, UnexpectedInput, VisitError

from .exceptions import ParseError
from .span import MAX, Span

GRAMMAR_PATH = Path(__file__).with_name("span_grammar.lark")


@lru_cache(maxsize=1)
def _build_lark() -> Lark:
    grammar = GRAMMAR_PATH.read_text(encoding="utf-8")
    return Lark(
        grammar,
        parser="lalr",
        start="start",
        propagate_positions=True,
        maybe_placeholders=False,
    )


class SelectionTransformer(Transformer):
    def __init__(self, text: str):
        super().__init__()
        self._text = text
        self._lines = text.splitlines() or [""]

    def _error(self, message: str, meta) -> ParseError:
        line = getattr(meta, "line", None) or 1
        column = getattr(meta, "column", None) or 1
        line_text = self._lines[line - 1] if 1 <= line <= len(self._lines) else ""
        return ParseError(message, line=line, column=column, line_text=line_text)

    def part(self, items: List[Token]) -> Optional[int]:
        if not items:
            return None
        return int(items[0])

    @v_args(meta=True)
    def selector(self, meta, parts: List[Optional[int]]) -> Span:
        if len(parts) == 1:
            if parts[0] is None:
                raise self._error("Empty selector", meta)
            # A lone integer selects a single position.
            return Span(parts[0], parts[0] + 1)
        if len(parts) == 2:
            first, last = parts
            return Span(0 if first is None else first, 1, MAX if last is None else last)
        if len(parts) == 3:
            first, step, last = parts
            return Span(
                0 if first is None else first,
                1 if step is None else step,
                MAX if last is None else last,
            )
        raise self._error(f"Selector has {len(parts)} fields; expected at most 3", meta)

    def selection(self, spans: List[Span]) -> Tuple[Span, ...]:
        return tuple(spans)


def _parse(text: str) -> Tuple[Span, ...]:
    parser = _build_lark()
    lines = text.splitlines()
    try:
        tree = parser.parse(text)
    except UnexpectedInput as exc:
        line = exc.line if exc.line and exc.line > 0 else 1
        column = exc.column if exc.column and exc.column > 0 else 1
        line_text = lines[line - 1] if 1 <= line <= len(lines) else ""
        raise ParseError(
            "Syntax error while parsing span notation",
            line=line,
            column=column,
            line_text=line_text,
        ) from exc
    except LarkError as exc:  # pragma: no cover
        raise ParseError(str(exc)) from exc

    try:
        return SelectionTransformer(text).transform(tree)
    except VisitError as exc:
        # Surface ParseError/SpanError raised inside rule callbacks unchanged.
        raise exc.orig_exc from None


def parse_selection(text: str) -> Tuple[Span, ...]:
    """Parse ``"1:3, :, 0:2:8"`` into one span per dimension."""
    return _parse(text)


def parse_span(text: str) -> Span:
    spans = _parse(text)
    if len(spans) != 1:
        raise ParseError(f"Expected a single span; received {len(spans)} selectors")
    return spans[0]


def format_span(span: Any) -> str:
    """Render a span back into selection notation."""
    last = "" if span.last == MAX else str(span.last)
    if span.step == 1:
        return f"{span.first}:{last}"
    return f"{span.first}:{span.step}:{last}"
