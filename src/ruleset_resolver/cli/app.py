"""Command-line interface for resolving rulesets."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from ..fs import RulesetReadOptions
from ..models import ResolvedRuleset
from ..rulesets import RulesetReadError, read_ruleset_sync
from ..rulesets.reader import RESOLUTION_ERRORS


def render_table(ruleset: ResolvedRuleset) -> str:
    """Render the resolved rules as a simple text table for terminal output."""

    if not ruleset.rules:
        lines = ["No rules resolved."]
    else:
        headers = ("Rule", "Severity", "Formats")
        rows = [headers]
        for name in sorted(ruleset.rules):
            rule = ruleset.rules[name]
            rows.append(
                (
                    name,
                    rule.severity.value if rule.severity else "-",
                    ", ".join(rule.formats) if rule.formats else "-",
                )
            )

        widths = [max(len(str(row[idx])) for row in rows) for idx in range(len(headers))]

        def format_row(values: tuple[str, str, str]) -> str:
            return "  ".join(
                value.ljust(width) for value, width in zip(values, widths, strict=True)
            ).rstrip()

        lines = [format_row(headers)]
        lines.append("  ".join("=" * width for width in widths))
        for row in rows[1:]:
            lines.append(format_row(row))

    if ruleset.functions:
        lines.extend(["", "Functions:"])
        for name in sorted(ruleset.functions):
            lines.append(f"  {name}  {ruleset.functions[name].source}")

    if ruleset.exceptions:
        lines.extend(["", "Exceptions:"])
        for location in sorted(ruleset.exceptions):
            lines.append(f"  {location}: {', '.join(ruleset.exceptions[location])}")

    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="ruleset-resolver", description="Resolve lint rulesets and their extends graph"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Emit debug logging while resolving.",
    )
    subparsers = parser.add_subparsers(dest="command")

    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve one or more rulesets into a single flattened rule table."
    )
    resolve_parser.add_argument(
        "rulesets",
        nargs="+",
        help="Ruleset locators: local paths, http(s) URLs or pkg:<package>/<path>.",
    )
    resolve_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each ruleset or function source to be read.",
    )
    resolve_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format for the resolved ruleset.",
    )

    return parser


def _format_ruleset(ruleset: ResolvedRuleset, *, output_format: str) -> str:
    if output_format not in {"table", "json"}:
        raise ValueError("format must be either 'table' or 'json'")

    if output_format == "json":
        return json.dumps(ruleset.to_dict(), indent=2, default=str)
    return render_table(ruleset)


def _handle_resolve(args: argparse.Namespace) -> int:
    if args.timeout is not None and args.timeout <= 0:
        print("Error: --timeout must be a positive number of seconds", file=sys.stderr)
        return 2

    options = RulesetReadOptions(timeout=args.timeout)

    try:
        ruleset = read_ruleset_sync(list(args.rulesets), options)
    except RulesetReadError as exc:
        for uri, error in exc.failures:
            print(f"Error: {uri}: {error}", file=sys.stderr)
        return 2
    except RESOLUTION_ERRORS as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(_format_ruleset(ruleset, output_format=args.format))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the ``python -m`` invocation."""

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "resolve":
        return _handle_resolve(args)

    parser.print_help()
    return 0


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()
