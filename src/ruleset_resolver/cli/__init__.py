"""Command-line interface package for the ruleset resolver."""

from .app import build_parser, main, render_table, run

__all__ = [
    "build_parser",
    "main",
    "render_table",
    "run",
]
