"""Read rulesets and resolve their ``extends`` graph into one rule table."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from ..codegen import (
    Module,
    ModuleLoader,
    ModuleLoaderError,
    UnresolvablePointerError,
    reference_resolve,
)
from ..fs import (
    ContentParseError,
    LocatorNotFoundError,
    ReadError,
    RulesetReadOptions,
    find_file,
    locators,
    parse_content,
    read_parsable,
)
from ..models import ExtendsEdge, ResolvedRuleset, RulesetDefinition, Severity
from .functions import FunctionBinder, functions_base_dir
from .mergers import merge_exceptions, merge_formats, merge_functions, merge_rules
from .validation import RulesetValidationError, assert_valid_ruleset, parse_ruleset

logger = logging.getLogger(__name__)

# Schemas read as raw text, never parsed nor reference-resolved.
RAW_SCHEMA_SUFFIXES = (
    "oas/schemas/schema.oas2.json",
    "oas/schemas/schema.oas3.json",
)

RESOLUTION_ERRORS = (
    ContentParseError,
    LocatorNotFoundError,
    ModuleLoaderError,
    ReadError,
    RulesetValidationError,
    UnresolvablePointerError,
)


class RulesetReadError(RuntimeError):
    """Raised when one or more of several requested rulesets failed to resolve.

    ``ruleset`` holds the union of the rulesets that did resolve.
    """

    def __init__(self, failures: List[Tuple[str, Exception]], ruleset: ResolvedRuleset) -> None:
        details = "; ".join(f"{uri}: {exc}" for uri, exc in failures)
        super().__init__(f"Failed to read {len(failures)} ruleset(s): {details}")
        self.failures = failures
        self.ruleset = ruleset


class CycleGuard:
    """Remember which rulesets a top-level read has already visited."""

    def __init__(self) -> None:
        self._visited: Set[str] = set()

    def visit(self, identity: str) -> bool:
        """Record ``identity`` and return ``True`` unless it was seen before."""

        if identity in self._visited:
            return False
        self._visited.add(identity)
        return True

    def clear(self) -> None:
        self._visited.clear()


@dataclass(slots=True)
class ResolutionContext:
    """State threaded through every recursive call of one top-level read."""

    options: RulesetReadOptions = field(default_factory=RulesetReadOptions)
    guard: CycleGuard = field(default_factory=CycleGuard)
    binder: FunctionBinder = field(init=False)

    def __post_init__(self) -> None:
        self.binder = FunctionBinder(self.options)


def effective_severity(edge: ExtendsEdge, caller_severity: Optional[Severity]) -> Severity:
    """Severity passed down an extends edge; an ancestor's choice always wins."""

    if caller_severity is not None:
        return caller_severity
    if edge.severity is not None:
        return edge.severity
    return Severity.RECOMMENDED


def is_raw_schema(locator: str) -> bool:
    return locator.endswith(RAW_SCHEMA_SUFFIXES)


async def load_ruleset_definition(
    identity: str,
    options: RulesetReadOptions | None = None,
) -> RulesetDefinition:
    """Reference-resolve, instantiate, validate and parse the ruleset at ``identity``."""

    output: Dict[str, Module] = {}

    async def read(source: str) -> Any:
        content = await read_parsable(source, options)
        if is_raw_schema(source):
            return content
        return parse_content(content, source)

    async def write(target: str, module: Module) -> None:
        output[target] = module

    generated = await reference_resolve(
        identity,
        read=read,
        write=write,
        should_resolve=lambda source: not is_raw_schema(source),
    )

    document = ModuleLoader(output).instantiate(generated.key)
    return parse_ruleset(assert_valid_ruleset(document, identity))


async def resolve_ruleset(
    context: ResolutionContext,
    base_identity: str,
    target: str,
    severity: Optional[Severity] = None,
) -> Optional[ResolvedRuleset]:
    """Resolve the ruleset ``target`` refers to from ``base_identity``.

    Returns ``None`` when the ruleset was already visited during this read.
    """

    identity = find_file(locators.dirname(base_identity), target)
    if not context.guard.visit(identity):
        logger.debug("Skipping already processed ruleset %s", identity)
        return None

    ruleset = await load_ruleset_definition(identity, context.options)
    resolved = ResolvedRuleset()

    for edge in ruleset.extends:
        parent_severity = effective_severity(edge, severity)
        extended = await resolve_ruleset(context, identity, edge.locator, parent_severity)
        if extended is None:
            continue

        merge_rules(resolved.rules, extended.rules, parent_severity)
        resolved.functions.update(extended.functions)
        merge_exceptions(resolved.exceptions, extended.exceptions, base_identity)

    if ruleset.rules:
        merge_rules(resolved.rules, ruleset.rules, severity or Severity.RECOMMENDED)

    if ruleset.exceptions is not None:
        merge_exceptions(resolved.exceptions, ruleset.exceptions, base_identity)

    if ruleset.formats is not None:
        merge_formats(resolved.rules, ruleset.formats)

    if ruleset.functions is not None:
        base_dir = functions_base_dir(identity, ruleset.functions_dir)
        functions = await context.binder.bind(ruleset.functions, base_dir)
        merge_functions(resolved.functions, functions, resolved.rules)

    return resolved


async def read_ruleset(
    uris: str | Sequence[str],
    options: RulesetReadOptions | None = None,
) -> ResolvedRuleset:
    """Resolve every ruleset in ``uris`` and union them into one ruleset.

    Each URI is resolved independently, with its own visited set; a failure
    does not stop the remaining URIs from being read. When a single URI was
    requested its error is raised unchanged, otherwise all failures are
    reported together through :class:`RulesetReadError`.
    """

    requested = [uris] if isinstance(uris, str) else list(dict.fromkeys(uris))
    context = ResolutionContext(options=options or RulesetReadOptions())
    base = ResolvedRuleset()
    failures: List[Tuple[str, Exception]] = []

    for uri in requested:
        context.guard.clear()
        identity = locators.normalize(uri)
        try:
            resolved = await resolve_ruleset(context, identity, identity)
        except RESOLUTION_ERRORS as exc:
            logger.error("Failed to read ruleset %s: %s", uri, exc)
            failures.append((uri, exc))
            continue

        if resolved is not None:
            base.update(resolved)

    if failures:
        if len(requested) == 1:
            raise failures[0][1]
        raise RulesetReadError(failures, base)

    return base


def read_ruleset_sync(
    uris: str | Sequence[str],
    options: RulesetReadOptions | None = None,
) -> ResolvedRuleset:
    """Blocking wrapper around :func:`read_ruleset`."""

    return asyncio.run(read_ruleset(uris, options))


__all__ = [
    "RAW_SCHEMA_SUFFIXES",
    "CycleGuard",
    "ResolutionContext",
    "RulesetReadError",
    "effective_severity",
    "load_ruleset_definition",
    "read_ruleset",
    "read_ruleset_sync",
    "resolve_ruleset",
]
