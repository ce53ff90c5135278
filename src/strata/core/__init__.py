"""Core runtime modules for Strata."""

__all__ = [
    "config",
    "evaluator",
    "exceptions",
    "expression",
    "index",
    "layout",
    "parser",
    "span",
    "storage",
    "tensor",
]
