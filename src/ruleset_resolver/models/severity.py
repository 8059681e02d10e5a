"""Severity levels understood by rulesets and their rules."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Severity levels that affect rule inheritance.

    ``RECOMMENDED``, ``ALL`` and ``OFF`` may be forced onto a whole extended
    ruleset. ``ERROR``, ``WARN``, ``INFO``, ``HINT`` and ``OFF`` may be pinned
    by a single rule. A rule whose severity is ``RECOMMENDED`` is enabled at
    the default level of whatever evaluates it.
    """

    RECOMMENDED = "recommended"
    ALL = "all"
    OFF = "off"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    HINT = "hint"

    @classmethod
    def parse(cls, value: object) -> "Severity":
        """Return the severity for ``value`` or raise :class:`ValueError`."""

        if isinstance(value, Severity):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, int):
            try:
                return _NUMERIC_SEVERITIES[value]
            except KeyError:
                raise ValueError(f"Invalid severity: {value!r}") from None
        if isinstance(value, str):
            return cls(value.strip().lower())
        raise ValueError(f"Invalid severity: {value!r}")


_NUMERIC_SEVERITIES = {
    -1: Severity.OFF,
    0: Severity.ERROR,
    1: Severity.WARN,
    2: Severity.INFO,
    3: Severity.HINT,
}

RULE_SEVERITIES = frozenset(
    {Severity.ERROR, Severity.WARN, Severity.INFO, Severity.HINT, Severity.OFF}
)
