"""Structural validation of ruleset documents and their typed parse."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from jsonschema import Draft202012Validator

from ..models import (
    ExtendsEdge,
    FunctionDeclaration,
    PlainEdge,
    PlainFunction,
    RuleDefinition,
    RuleEntry,
    RulesetDefinition,
    SchemaFunction,
    Severity,
    SeverityEdge,
    SeverityOverride,
    ToggleOverride,
)
from ..models.severity import RULE_SEVERITIES


class RulesetValidationError(RuntimeError):
    """Raised when a ruleset document does not have the expected shape."""

    def __init__(self, errors: List[str], source: str | None = None) -> None:
        prefix = f"Invalid ruleset {source}" if source else "Invalid ruleset"
        super().__init__(f"{prefix}: " + "; ".join(errors))
        self.errors = errors
        self.source = source


_RULE_SEVERITY_NAMES = sorted(severity.value for severity in RULE_SEVERITIES)

RULESET_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "anyOf": [{"required": ["extends"]}, {"required": ["rules"]}],
    "properties": {
        "description": {"type": "string"},
        "documentationUrl": {"type": "string"},
        "extends": {
            "anyOf": [
                {"$ref": "#/$defs/extendsEntry"},
                {"type": "array", "items": {"$ref": "#/$defs/extendsEntry"}},
            ]
        },
        "rules": {"type": "object", "additionalProperties": {"$ref": "#/$defs/rule"}},
        "functions": {"type": "array", "items": {"$ref": "#/$defs/functionEntry"}},
        "functionsDir": {"type": "string", "minLength": 1},
        "except": {
            "type": "object",
            "propertyNames": {"minLength": 1},
            "additionalProperties": {
                "type": "array",
                "minItems": 1,
                "items": {"type": "string", "minLength": 1},
            },
        },
        "formats": {"type": "array", "items": {"type": "string", "minLength": 1}},
    },
    "$defs": {
        "extendsEntry": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {
                    "type": "array",
                    "prefixItems": [
                        {"type": "string", "minLength": 1},
                        {"enum": [severity.value for severity in Severity]},
                    ],
                    "minItems": 2,
                    "maxItems": 2,
                },
            ]
        },
        "ruleSeverity": {
            "oneOf": [
                {"enum": _RULE_SEVERITY_NAMES},
                {"type": "integer", "minimum": -1, "maximum": 3},
            ]
        },
        "rule": {
            "oneOf": [
                {"type": "boolean"},
                {"$ref": "#/$defs/ruleSeverity"},
                {
                    "type": "object",
                    "properties": {
                        "severity": {"$ref": "#/$defs/ruleSeverity"},
                        "recommended": {"type": "boolean"},
                        "formats": {"type": "array", "items": {"type": "string"}},
                        "given": {
                            "oneOf": [
                                {"type": "string"},
                                {"type": "array", "items": {"type": "string"}},
                            ]
                        },
                        "then": {
                            "oneOf": [
                                {"$ref": "#/$defs/then"},
                                {"type": "array", "items": {"$ref": "#/$defs/then"}},
                            ]
                        },
                    },
                },
            ]
        },
        "then": {
            "type": "object",
            "properties": {
                "field": {"type": "string"},
                "function": {"type": "string", "minLength": 1},
            },
        },
        "functionEntry": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {
                    "type": "array",
                    "prefixItems": [{"type": "string", "minLength": 1}, {"type": "object"}],
                    "minItems": 2,
                    "maxItems": 2,
                },
            ]
        },
    },
}

_VALIDATOR = Draft202012Validator(RULESET_SCHEMA)


def validate_ruleset_safe(value: Any) -> List[str]:
    """Return readable validation errors for ``value`` (empty when valid)."""

    errors: List[str] = []
    for error in sorted(_VALIDATOR.iter_errors(value), key=lambda e: [str(p) for p in e.path]):
        if error.path:
            path_str = ".".join(str(part) for part in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def assert_valid_ruleset(value: Any, source: str | None = None) -> Mapping[str, Any]:
    """Return ``value`` unchanged when it is a well-formed ruleset."""

    errors = validate_ruleset_safe(value)
    if errors:
        raise RulesetValidationError(errors, source)
    return value


def parse_ruleset(value: Mapping[str, Any]) -> RulesetDefinition:
    """Convert a validated ruleset document into a :class:`RulesetDefinition`."""

    definition = RulesetDefinition()

    extends = value.get("extends")
    if extends is not None:
        # ``[locator, severity]`` at the top level is a single forced edge.
        entries = [extends] if isinstance(extends, str) or _is_pair(extends) else extends
        definition.extends = [_parse_edge(entry) for entry in entries]

    for name, rule in (value.get("rules") or {}).items():
        definition.rules[str(name)] = _parse_rule(str(name), rule)

    if value.get("functions") is not None:
        definition.functions = [_parse_function(entry) for entry in value["functions"]]

    definition.functions_dir = value.get("functionsDir")

    if value.get("except") is not None:
        definition.exceptions = {
            str(location): [str(rule) for rule in rules]
            for location, rules in value["except"].items()
        }

    if isinstance(value.get("formats"), list):
        definition.formats = [str(fmt) for fmt in value["formats"]]

    return definition


# ------------------------------------------------------------------
def _is_pair(entry: Any) -> bool:
    return (
        isinstance(entry, list)
        and len(entry) == 2
        and isinstance(entry[0], str)
        and isinstance(entry[1], str)
        and entry[1] in {severity.value for severity in Severity}
    )


def _parse_edge(entry: Any) -> ExtendsEdge:
    if isinstance(entry, str):
        return PlainEdge(entry)
    return SeverityEdge(entry[0], Severity.parse(entry[1]))


def _parse_function(entry: Any) -> FunctionDeclaration:
    if isinstance(entry, str):
        return PlainFunction(entry)
    return SchemaFunction(entry[0], dict(entry[1]))


def _parse_rule(name: str, rule: Any) -> RuleDefinition:
    if isinstance(rule, bool):
        return ToggleOverride(name, rule)

    if not isinstance(rule, Mapping):
        return SeverityOverride(name, Severity.parse(rule))

    body = dict(rule)
    severity = body.pop("severity", None)
    recommended = body.pop("recommended", True)
    formats = body.pop("formats", None)
    declared = Severity.parse(severity) if severity is not None else None
    return RuleEntry(
        name=name,
        definition=body,
        declared_severity=declared,
        default_severity=declared,
        recommended=bool(recommended),
        formats=tuple(formats) if formats is not None else None,
    )


__all__ = [
    "RULESET_SCHEMA",
    "RulesetValidationError",
    "assert_valid_ruleset",
    "parse_ruleset",
    "validate_ruleset_safe",
]
