"""Locating, reading and parsing ruleset sources."""

from .finder import LocatorNotFoundError, find_file
from .reader import (
    ContentParseError,
    ReadError,
    RulesetReadOptions,
    parse_content,
    read_file,
    read_parsable,
)

__all__ = [
    "ContentParseError",
    "LocatorNotFoundError",
    "ReadError",
    "RulesetReadOptions",
    "find_file",
    "parse_content",
    "read_file",
    "read_parsable",
]
