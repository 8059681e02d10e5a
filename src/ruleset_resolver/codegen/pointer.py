"""JSON pointer helpers used for ``$ref`` fragments."""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence
from urllib.parse import unquote


class UnresolvablePointerError(RuntimeError):
    """Raised when a JSON pointer does not address a value."""


def parse_pointer(pointer: str) -> List[str]:
    """Split a pointer such as ``/paths/~1pets`` into unescaped tokens."""

    pointer = unquote(pointer.lstrip("#"))
    if not pointer:
        return []
    if not pointer.startswith("/"):
        raise UnresolvablePointerError(f"JSON pointer must start with '/': {pointer}")
    return [token.replace("~1", "/").replace("~0", "~") for token in pointer[1:].split("/")]


def resolve_pointer(document: Any, pointer: str) -> Any:
    value = document
    for token in parse_pointer(pointer):
        if isinstance(value, Mapping) and token in value:
            value = value[token]
        elif isinstance(value, Sequence) and not isinstance(value, str) and token.isdigit():
            index = int(token)
            if index >= len(value):
                raise UnresolvablePointerError(f"Index {index} out of range in pointer {pointer}")
            value = value[index]
        else:
            raise UnresolvablePointerError(f"Cannot resolve '{token}' in pointer {pointer}")
    return value


__all__ = ["UnresolvablePointerError", "parse_pointer", "resolve_pointer"]
