"""Ruleset models: parsed definitions on the way in, resolved tables on the way out."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .severity import Severity


@dataclass(frozen=True, slots=True)
class PlainEdge:
    """An ``extends`` entry without a forced severity."""

    locator: str

    @property
    def severity(self) -> Optional[Severity]:
        return None


@dataclass(frozen=True, slots=True)
class SeverityEdge:
    """An ``extends`` entry forcing ``severity`` onto everything it inherits."""

    locator: str
    severity: Severity


ExtendsEdge = Union[PlainEdge, SeverityEdge]


@dataclass(frozen=True, slots=True)
class PlainFunction:
    """A custom function declared by name only."""

    name: str

    @property
    def schema(self) -> Optional[Mapping[str, Any]]:
        return None


@dataclass(frozen=True, slots=True)
class SchemaFunction:
    """A custom function declared together with its options schema."""

    name: str
    schema: Mapping[str, Any]


FunctionDeclaration = Union[PlainFunction, SchemaFunction]


@dataclass(slots=True)
class RuleEntry:
    """A named rule definition.

    ``definition`` carries the rule-specific fields (``given``, ``then``,
    ``message`` and so on) untouched. ``declared_severity`` is the severity the
    rule currently pins (overrides may change it), ``default_severity`` the one
    written in the rule definition and ``severity`` the effective one after
    inheritance.
    """

    name: str
    definition: Dict[str, Any] = field(default_factory=dict)
    declared_severity: Optional[Severity] = None
    default_severity: Optional[Severity] = None
    recommended: bool = True
    formats: Optional[Tuple[str, ...]] = None
    severity: Optional[Severity] = None

    def copy(self) -> "RuleEntry":
        return replace(self, definition=dict(self.definition))

    @property
    def function_names(self) -> List[str]:
        """Names of the functions referenced by the rule's ``then`` clauses."""

        then = self.definition.get("then")
        clauses = then if isinstance(then, list) else [then]
        names: List[str] = []
        for clause in clauses:
            if isinstance(clause, Mapping) and isinstance(clause.get("function"), str):
                names.append(clause["function"])
        return names

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.definition)
        payload["severity"] = self.severity.value if self.severity else None
        payload["recommended"] = self.recommended
        if self.formats is not None:
            payload["formats"] = list(self.formats)
        return payload


@dataclass(frozen=True, slots=True)
class SeverityOverride:
    """``rules: {name: <severity>}`` adjusting an inherited rule."""

    name: str
    severity: Severity


@dataclass(frozen=True, slots=True)
class ToggleOverride:
    """``rules: {name: true|false}`` enabling or disabling an inherited rule."""

    name: str
    enabled: bool


RuleDefinition = Union[RuleEntry, SeverityOverride, ToggleOverride]


@dataclass(frozen=True, slots=True)
class ResolvedFunction:
    """Source of a custom function located and read for a ruleset."""

    name: str
    code: str
    source: str
    schema: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "schema": dict(self.schema) if self.schema is not None else None,
        }


@dataclass(slots=True)
class RulesetDefinition:
    """A validated ruleset document before its ``extends`` graph is resolved."""

    extends: List[ExtendsEdge] = field(default_factory=list)
    rules: Dict[str, RuleDefinition] = field(default_factory=dict)
    functions: Optional[List[FunctionDeclaration]] = None
    functions_dir: Optional[str] = None
    exceptions: Optional[Dict[str, List[str]]] = None
    formats: Optional[List[str]] = None


@dataclass(slots=True)
class ResolvedRuleset:
    """Flattened rules, functions and exceptions of one or more rulesets."""

    rules: Dict[str, RuleEntry] = field(default_factory=dict)
    functions: Dict[str, ResolvedFunction] = field(default_factory=dict)
    exceptions: Dict[str, List[str]] = field(default_factory=dict)

    def update(self, other: "ResolvedRuleset") -> None:
        """Union ``other`` into this ruleset, ``other`` winning on conflicts."""

        self.rules.update(other.rules)
        self.functions.update(other.functions)
        self.exceptions.update(other.exceptions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rules": {name: rule.to_dict() for name, rule in self.rules.items()},
            "functions": {name: fn.to_dict() for name, fn in self.functions.items()},
            "exceptions": {key: list(value) for key, value in self.exceptions.items()},
        }
