"""Intermediate representation emitted by the reference resolver.

A generated module is a :class:`Module` wrapping a tree of four node kinds.
The tree is plain data: instantiating it never evaluates script text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True, slots=True)
class Primitive:
    """A scalar (or an opaque value kept verbatim, such as raw schema text)."""

    value: Any


@dataclass(frozen=True, slots=True)
class ObjectLiteral:
    entries: Tuple[Tuple[str, "Node"], ...]


@dataclass(frozen=True, slots=True)
class ArrayLiteral:
    items: Tuple["Node", ...]


@dataclass(frozen=True, slots=True)
class ReferenceLink:
    """A pointer into the exports of another generated module.

    ``pointer`` is a JSON pointer (``""`` for the whole export).
    """

    module: str
    pointer: str = ""


Node = Union[Primitive, ObjectLiteral, ArrayLiteral, ReferenceLink]


@dataclass(frozen=True, slots=True)
class Module:
    """A generated module: its exported value and the modules it requires."""

    body: Node
    dependencies: Tuple[str, ...] = ()


__all__ = [
    "ArrayLiteral",
    "Module",
    "Node",
    "ObjectLiteral",
    "Primitive",
    "ReferenceLink",
]
