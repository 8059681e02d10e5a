"""Data models shared by the ruleset loader, merge engine and CLI."""

from .ruleset import (
    ExtendsEdge,
    FunctionDeclaration,
    PlainEdge,
    PlainFunction,
    ResolvedFunction,
    ResolvedRuleset,
    RuleDefinition,
    RuleEntry,
    RulesetDefinition,
    SchemaFunction,
    SeverityEdge,
    SeverityOverride,
    ToggleOverride,
)
from .severity import Severity

__all__ = [
    "ExtendsEdge",
    "FunctionDeclaration",
    "PlainEdge",
    "PlainFunction",
    "ResolvedFunction",
    "ResolvedRuleset",
    "RuleDefinition",
    "RuleEntry",
    "RulesetDefinition",
    "SchemaFunction",
    "Severity",
    "SeverityEdge",
    "SeverityOverride",
    "ToggleOverride",
]
