"""Reference resolution: turn a document with ``$ref`` links into generated modules.

Every document reached from the entry locator becomes one :class:`Module`.
Local references (``#/pointer``) are inlined; references to other documents
become :class:`ReferenceLink` nodes pointing at that document's module, which
the :class:`~ruleset_resolver.codegen.loader.ModuleLoader` resolves later.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from ..fs import locators
from .ir import ArrayLiteral, Module, Node, ObjectLiteral, Primitive, ReferenceLink
from .pointer import resolve_pointer

Reader = Callable[[str], Awaitable[Any]]
Writer = Callable[[str, Module], Awaitable[None]]
ShouldResolve = Callable[[str], bool]


def module_key(module_id: str) -> str:
    return f"./{module_id}"


@dataclass(frozen=True, slots=True)
class GeneratedModule:
    """Handle to the entry module produced by :func:`reference_resolve`."""

    id: str

    @property
    def key(self) -> str:
        return module_key(self.id)


async def reference_resolve(
    entry: str,
    *,
    read: Reader,
    write: Writer,
    should_resolve: ShouldResolve,
) -> GeneratedModule:
    """Generate modules for ``entry`` and everything it references.

    ``read`` returns the parsed value of a locator, ``write`` receives every
    generated module under its key. Documents rejected by ``should_resolve``
    are still read, but their value is exported verbatim without following
    any reference inside it.
    """

    return await _ReferenceResolver(read, write, should_resolve).generate(entry)


class _ReferenceResolver:
    def __init__(self, read: Reader, write: Writer, should_resolve: ShouldResolve) -> None:
        self._read = read
        self._write = write
        self._should_resolve = should_resolve
        self._ids: Dict[str, str] = {}

    async def generate(self, locator: str) -> GeneratedModule:
        locator = locators.normalize(locator)
        if locator in self._ids:
            return GeneratedModule(self._ids[locator])

        module_id = f"m{len(self._ids)}"
        self._ids[locator] = module_id

        document = await self._read(locator)
        dependencies: List[str] = []
        if self._should_resolve(locator):
            body = await self._convert(document, locator, document, dependencies, ())
        else:
            body = Primitive(document)

        module = Module(body=body, dependencies=tuple(dict.fromkeys(dependencies)))
        await self._write(module_key(module_id), module)
        return GeneratedModule(module_id)

    # ------------------------------------------------------------------
    async def _convert(
        self,
        node: Any,
        locator: str,
        document: Any,
        dependencies: List[str],
        local_refs: Tuple[str, ...],
    ) -> Node:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                return await self._convert_ref(ref, locator, document, dependencies, local_refs)

            entries = []
            for key, value in node.items():
                converted = await self._convert(value, locator, document, dependencies, local_refs)
                entries.append((str(key), converted))
            return ObjectLiteral(tuple(entries))

        if isinstance(node, list):
            items = []
            for item in node:
                items.append(await self._convert(item, locator, document, dependencies, local_refs))
            return ArrayLiteral(tuple(items))

        return Primitive(node)

    async def _convert_ref(
        self,
        ref: str,
        locator: str,
        document: Any,
        dependencies: List[str],
        local_refs: Tuple[str, ...],
    ) -> Node:
        target, _, pointer = ref.partition("#")

        if not target:
            # A local reference looping back onto itself stays an unresolved $ref.
            if ref in local_refs:
                return Primitive({"$ref": ref})
            value = resolve_pointer(document, pointer)
            return await self._convert(value, locator, document, dependencies, local_refs + (ref,))

        target_locator = locators.join(locators.dirname(locator), target)
        dependency = await self.generate(target_locator)
        dependencies.append(dependency.key)
        if not self._should_resolve(target_locator):
            pointer = ""
        return ReferenceLink(module=dependency.key, pointer=pointer)


__all__ = ["GeneratedModule", "module_key", "reference_resolve"]
