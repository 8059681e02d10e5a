import logging

import pytest

from ruleset_resolver.models import (
    ResolvedFunction,
    RuleEntry,
    Severity,
    SeverityOverride,
    ToggleOverride,
)
from ruleset_resolver.rulesets import (
    RulesetValidationError,
    merge_exceptions,
    merge_formats,
    merge_functions,
    merge_rules,
)


def make_rule(name: str, severity: Severity | None = None, **kwargs) -> RuleEntry:
    return RuleEntry(name=name, declared_severity=severity, default_severity=severity, **kwargs)


def test_recommended_keeps_declared_severity_and_defaults_the_rest():
    target = {}
    merge_rules(
        target,
        {
            "pinned": make_rule("pinned", Severity.ERROR),
            "unpinned": make_rule("unpinned"),
            "optional": make_rule("optional", Severity.WARN, recommended=False),
        },
        Severity.RECOMMENDED,
    )

    assert target["pinned"].severity is Severity.ERROR
    assert target["unpinned"].severity is Severity.RECOMMENDED
    assert target["optional"].severity is Severity.OFF


def test_off_disables_every_rule():
    target = {}
    merge_rules(target, {"pinned": make_rule("pinned", Severity.ERROR)}, Severity.OFF)

    assert target["pinned"].severity is Severity.OFF


def test_all_enables_non_recommended_rules():
    target = {}
    merge_rules(
        target,
        {"optional": make_rule("optional", Severity.HINT, recommended=False)},
        Severity.ALL,
    )

    assert target["optional"].severity is Severity.HINT


def test_rule_level_severity_applies_to_unpinned_rules():
    target = {}
    merge_rules(
        target,
        {"pinned": make_rule("pinned", Severity.INFO), "unpinned": make_rule("unpinned")},
        Severity.ERROR,
    )

    assert target["pinned"].severity is Severity.INFO
    assert target["unpinned"].severity is Severity.ERROR


def test_merge_rules_copies_incoming_rules():
    incoming = {"foo": make_rule("foo", definition={"given": "$"})}
    target = {}

    merge_rules(target, incoming, Severity.OFF)
    target["foo"].definition["given"] = "$.info"

    assert incoming["foo"].severity is None
    assert incoming["foo"].definition == {"given": "$"}


def test_later_rules_overwrite_earlier_ones():
    target = {}
    merge_rules(target, {"r": make_rule("r", Severity.WARN)}, Severity.RECOMMENDED)
    merge_rules(target, {"r": make_rule("r", Severity.ERROR)}, Severity.RECOMMENDED)

    assert target["r"].severity is Severity.ERROR


def test_severity_and_toggle_overrides_adjust_existing_rules():
    target = {}
    merge_rules(
        target,
        {"a": make_rule("a", Severity.WARN), "b": make_rule("b", Severity.INFO)},
        Severity.RECOMMENDED,
    )

    merge_rules(
        target,
        {"a": SeverityOverride("a", Severity.ERROR), "b": ToggleOverride("b", False)},
        Severity.RECOMMENDED,
    )
    assert target["a"].severity is Severity.ERROR
    assert target["b"].severity is Severity.OFF

    merge_rules(target, {"b": ToggleOverride("b", True)}, Severity.RECOMMENDED)
    assert target["b"].severity is Severity.INFO


def test_disabled_rule_stays_off_when_merged_again():
    child = {}
    merge_rules(child, {"a": make_rule("a", Severity.WARN)}, Severity.RECOMMENDED)
    merge_rules(child, {"a": ToggleOverride("a", False)}, Severity.RECOMMENDED)

    parent = {}
    merge_rules(parent, child, Severity.RECOMMENDED)

    assert parent["a"].severity is Severity.OFF


def test_overrides_of_unknown_rules_are_ignored():
    target = {}
    merge_rules(target, {"ghost": SeverityOverride("ghost", Severity.ERROR)}, Severity.RECOMMENDED)

    assert target == {}


def test_merge_functions_reports_unreferenced_functions(caplog):
    rules = {"uses-truthy": make_rule("uses-truthy", definition={"then": [{"function": "truthy"}]})}
    truthy = ResolvedFunction(name="truthy", code="", source="/f/truthy.py")
    unused = ResolvedFunction(name="unused", code="", source="/f/unused.py")
    target = {}

    with caplog.at_level(logging.WARNING, logger="ruleset_resolver.rulesets.mergers"):
        result = merge_functions(target, {"truthy": truthy, "unused": unused}, rules)

    assert result == ["unused"]
    assert target == {"truthy": truthy, "unused": unused}
    assert "unused" in caplog.text


def test_merge_exceptions_scopes_relative_locations(tmp_path):
    scope = str(tmp_path / "rules" / "ruleset.yaml")
    target = {}

    merge_exceptions(target, {"../docs/api.yaml#/info": ["foo", "bar"]}, scope)
    merge_exceptions(target, {"../docs/api.yaml#/info": ["foo", "baz"]}, scope)

    expected_key = f"{tmp_path / 'docs' / 'api.yaml'}#/info"
    assert target == {expected_key: ["bar", "baz", "foo"]}


def test_merge_exceptions_keeps_absolute_locations(tmp_path):
    absolute = f"{tmp_path / 'api.yaml'}#/paths"
    target = {}

    merge_exceptions(target, {absolute: ["foo"]}, "/unrelated/ruleset.yaml")

    assert target == {absolute: ["foo"]}


def test_merge_exceptions_rejects_empty_entries(tmp_path):
    scope = str(tmp_path / "ruleset.yaml")

    with pytest.raises(RulesetValidationError):
        merge_exceptions({}, {"#/info": ["foo"]}, scope)

    with pytest.raises(RulesetValidationError):
        merge_exceptions({}, {"api.yaml#/info": []}, scope)


def test_merge_formats_only_fills_rules_without_formats():
    rules = {
        "plain": make_rule("plain"),
        "scoped": make_rule("scoped", formats=("oas2",)),
    }

    merge_formats(rules, ["oas3", "oas3.1"])

    assert rules["plain"].formats == ("oas3", "oas3.1")
    assert rules["scoped"].formats == ("oas2",)
