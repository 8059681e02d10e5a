"""Ruleset resolution: validation, merging, function binding and the recursive reader."""

from ..fs import RulesetReadOptions
from .functions import FunctionBinder, functions_base_dir
from .mergers import merge_exceptions, merge_formats, merge_functions, merge_rules
from .reader import (
    CycleGuard,
    ResolutionContext,
    RulesetReadError,
    effective_severity,
    read_ruleset,
    read_ruleset_sync,
    resolve_ruleset,
)
from .validation import RulesetValidationError, assert_valid_ruleset, parse_ruleset

__all__ = [
    "CycleGuard",
    "FunctionBinder",
    "ResolutionContext",
    "RulesetReadError",
    "RulesetReadOptions",
    "RulesetValidationError",
    "assert_valid_ruleset",
    "effective_severity",
    "functions_base_dir",
    "merge_exceptions",
    "merge_formats",
    "merge_functions",
    "merge_rules",
    "parse_ruleset",
    "read_ruleset",
    "read_ruleset_sync",
    "resolve_ruleset",
]
