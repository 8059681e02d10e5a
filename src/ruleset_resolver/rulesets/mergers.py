"""Merge rules, functions, exceptions and formats into a resolved ruleset.

Every merge is last-writer-wins per key and therefore order sensitive: parents
are merged before the ruleset itself, extends edges in declaration order.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, MutableMapping, Sequence

from ..fs import locators
from ..models import (
    ResolvedFunction,
    RuleDefinition,
    RuleEntry,
    Severity,
    SeverityOverride,
    ToggleOverride,
)
from .validation import RulesetValidationError

logger = logging.getLogger(__name__)


def severity_for_rule(rule: RuleEntry, ruleset_severity: Severity) -> Severity:
    """Return the effective severity of ``rule`` inherited with ``ruleset_severity``."""

    if ruleset_severity is Severity.OFF:
        return Severity.OFF

    if ruleset_severity is Severity.RECOMMENDED:
        if not rule.recommended:
            return Severity.OFF
        return rule.declared_severity or Severity.RECOMMENDED

    if ruleset_severity is Severity.ALL:
        return rule.declared_severity or Severity.RECOMMENDED

    return rule.declared_severity or ruleset_severity


def merge_rules(
    target: MutableMapping[str, RuleEntry],
    incoming: Mapping[str, RuleDefinition],
    severity: Severity,
) -> MutableMapping[str, RuleEntry]:
    """Write every rule of ``incoming`` into ``target``.

    Full rule definitions replace whatever ``target`` held under the same name
    and receive the severity derived from ``severity``. Bare severities and
    booleans adjust a rule that is already present.
    """

    for name, rule in incoming.items():
        if isinstance(rule, RuleEntry):
            merged = rule.copy()
            merged.severity = severity_for_rule(merged, severity)
            target[name] = merged
            continue

        existing = target.get(name)
        if existing is None:
            logger.debug("Ignoring override of unknown rule '%s'", name)
            continue

        if isinstance(rule, SeverityOverride):
            existing.declared_severity = rule.severity
            existing.severity = rule.severity
            existing.recommended = True
        elif isinstance(rule, ToggleOverride):
            existing.declared_severity = existing.default_severity if rule.enabled else Severity.OFF
            existing.severity = existing.declared_severity or Severity.RECOMMENDED
            existing.recommended = existing.recommended or rule.enabled

    return target


def merge_functions(
    target: MutableMapping[str, ResolvedFunction],
    incoming: Mapping[str, ResolvedFunction],
    rules: Mapping[str, RuleEntry],
) -> List[str]:
    """Union ``incoming`` into ``target`` and return the functions no rule uses."""

    target.update(incoming)

    referenced = {name for rule in rules.values() for name in rule.function_names}
    unused = [name for name in incoming if name not in referenced]
    for name in unused:
        logger.warning("Function '%s' is not referenced by any rule", name)
    return unused


def merge_exceptions(
    target: MutableMapping[str, List[str]],
    incoming: Mapping[str, Iterable[str]],
    scope_base: str,
) -> MutableMapping[str, List[str]]:
    """Union exception entries, scoping relative targets to ``scope_base``'s directory."""

    base_dir = locators.dirname(scope_base)
    for location, rule_names in incoming.items():
        normalized = _normalize_location(location, base_dir)
        names = list(rule_names)
        if not names:
            raise RulesetValidationError([f"except.{location}: no rules listed"], scope_base)

        combined = set(target.get(normalized, []))
        combined.update(names)
        target[normalized] = sorted(combined)

    return target


def merge_formats(rules: Mapping[str, RuleEntry], formats: Sequence[str]) -> None:
    """Restrict every rule that has no format filter of its own to ``formats``."""

    for rule in rules.values():
        if rule.formats is None:
            rule.formats = tuple(formats)


def _normalize_location(location: str, base_dir: str) -> str:
    path, separator, pointer = location.partition("#")
    if not path:
        raise RulesetValidationError([f"except.{location}: missing document path"])

    resolved = locators.join(base_dir, path)
    return f"{resolved}{separator}{pointer}"


__all__ = [
    "merge_exceptions",
    "merge_formats",
    "merge_functions",
    "merge_rules",
    "severity_for_rule",
]
