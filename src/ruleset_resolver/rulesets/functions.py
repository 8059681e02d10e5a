"""Bind custom function declarations of a ruleset to their sources."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Sequence

from ..fs import (
    LocatorNotFoundError,
    ReadError,
    RulesetReadOptions,
    find_file,
    locators,
    read_file,
)
from ..models import FunctionDeclaration, ResolvedFunction

logger = logging.getLogger(__name__)

DEFAULT_FUNCTIONS_DIR = "functions"
FUNCTION_SUFFIX = ".py"


def functions_base_dir(ruleset_identity: str, functions_dir: Optional[str] = None) -> str:
    """Return the directory custom functions of ``ruleset_identity`` live in.

    Package-sourced rulesets look relative to their package root, everything
    else relative to the directory holding the ruleset.
    """

    if locators.is_package_source(ruleset_identity):
        root = locators.package_root(ruleset_identity)
    else:
        root = locators.dirname(ruleset_identity)
    return locators.join(root, functions_dir or DEFAULT_FUNCTIONS_DIR)


class FunctionBinder:
    """Resolve function declarations to :class:`ResolvedFunction` objects.

    Declarations are resolved concurrently. One whose source cannot be
    located or read is logged and left out; it never fails the ruleset.
    """

    def __init__(self, options: RulesetReadOptions | None = None) -> None:
        self._options = options or RulesetReadOptions()

    async def bind(
        self,
        declarations: Sequence[FunctionDeclaration],
        base_dir: str,
    ) -> Dict[str, ResolvedFunction]:
        results = await asyncio.gather(
            *(self._bind_one(declaration, base_dir) for declaration in declarations)
        )

        resolved: Dict[str, ResolvedFunction] = {}
        for function in results:
            if function is not None:
                resolved[function.name] = function
        return resolved

    # ------------------------------------------------------------------
    async def _bind_one(
        self,
        declaration: FunctionDeclaration,
        base_dir: str,
    ) -> Optional[ResolvedFunction]:
        name = declaration.name
        try:
            source = find_file(base_dir, f"./{name}{FUNCTION_SUFFIX}")
            code = await read_file(source, self._options)
        except (LocatorNotFoundError, ReadError) as exc:
            logger.warning("Function '%s' could not be loaded: %s", name, exc)
            return None

        return ResolvedFunction(name=name, code=code, source=source, schema=declaration.schema)


__all__ = ["DEFAULT_FUNCTIONS_DIR", "FunctionBinder", "functions_base_dir"]
