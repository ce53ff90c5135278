"""Setuptools build hooks for Strata."""

from __future__ import annotations

from setuptools import setup

# Metadata lives in pyproject.toml.  The package is pure Python (plus the
# lark grammar shipped as package data), so the default wheel command is kept
# and the wheel is tagged ``py3-none-any``.
setup()
