"""Resolve ruleset documents and their ``extends`` graph into one rule table."""

from .models import ResolvedFunction, ResolvedRuleset, RuleEntry, Severity
from .rulesets import RulesetReadOptions, read_ruleset, read_ruleset_sync

__all__ = [
    "ResolvedFunction",
    "ResolvedRuleset",
    "RuleEntry",
    "RulesetReadOptions",
    "Severity",
    "read_ruleset",
    "read_ruleset_sync",
]
