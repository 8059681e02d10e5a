"""In-memory loader instantiating generated modules on demand.

The loader mirrors a tiny synchronous module system: a module is evaluated in
a scope holding exactly a ``require`` function and a :class:`ModuleExports`
cell, and the value it assigns to the cell is cached by identifier. Built-in
runtime helpers are consulted before generated sources, and every dependency a
module declares must exist before it is evaluated. Nothing is ever read from
disk; all sources are injected.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Set

from .ir import ArrayLiteral, Module, Node, ObjectLiteral, Primitive, ReferenceLink
from .pointer import resolve_pointer
from .runtime import CREATE_ARRAY, RUNTIME_MODULES

Require = Callable[[str], Any]


class ModuleLoaderError(RuntimeError):
    """Base class for internal loader failures."""


class VirtualModuleNotFoundError(ModuleLoaderError):
    """Raised when an identifier matches neither a built-in nor a generated module."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"{identifier} does not exist")
        self.identifier = identifier


class CircularModuleError(ModuleLoaderError):
    """Raised when a module is required again while it is still being evaluated."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Circular require of module {identifier}")
        self.identifier = identifier


class ModuleExports:
    """Mutable cell a module assigns its exported value to."""

    __slots__ = ("exports",)

    def __init__(self) -> None:
        self.exports: Any = None


class ModuleLoader:
    """Instantiate generated modules, resolving their ``require`` calls."""

    def __init__(
        self,
        sources: Mapping[str, Module],
        builtins: Mapping[str, Any] | None = None,
    ) -> None:
        self._builtins = dict(RUNTIME_MODULES if builtins is None else builtins)
        self._sources = dict(sources)
        self._evaluated: Dict[str, Any] = {}
        self._pending: Set[str] = set()

    # ------------------------------------------------------------------
    def instantiate(self, identifier: str) -> Any:
        """Return the exports of ``identifier``, evaluating it on first use."""

        if identifier in self._builtins:
            return self._builtins[identifier]

        if identifier in self._evaluated:
            return self._evaluated[identifier]

        source = self._sources.get(identifier)
        if source is None:
            raise VirtualModuleNotFoundError(identifier)

        if identifier in self._pending:
            raise CircularModuleError(identifier)

        for dependency in source.dependencies:
            if dependency not in self._builtins and dependency not in self._sources:
                raise VirtualModuleNotFoundError(dependency)

        self._pending.add(identifier)
        try:
            module = ModuleExports()
            _run_module(source, self.instantiate, module)
        finally:
            self._pending.discard(identifier)

        self._evaluated[identifier] = module.exports
        return module.exports


def _run_module(source: Module, require: Require, module: ModuleExports) -> None:
    module.exports = _Evaluator(require).evaluate(source.body)


class _Evaluator:
    def __init__(self, require: Require) -> None:
        self._require = require

    def evaluate(self, node: Node) -> Any:
        if isinstance(node, Primitive):
            return node.value
        if isinstance(node, ObjectLiteral):
            return {key: self.evaluate(value) for key, value in node.entries}
        if isinstance(node, ArrayLiteral):
            create_array = self._require(CREATE_ARRAY)
            return create_array(self.evaluate(item) for item in node.items)
        if isinstance(node, ReferenceLink):
            return resolve_pointer(self._require(node.module), node.pointer)
        raise TypeError(f"Unknown module node: {type(node).__name__}")


__all__ = [
    "CircularModuleError",
    "ModuleExports",
    "ModuleLoader",
    "ModuleLoaderError",
    "VirtualModuleNotFoundError",
]
