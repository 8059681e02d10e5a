"""Built-in runtime helpers every generated module may require."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping

CREATE_ARRAY = "runtime/create-array"


def create_array(items: Iterable[Any]) -> List[Any]:
    """Construct the list value of an array literal."""

    return list(items)


RUNTIME_MODULES: Mapping[str, Any] = {
    CREATE_ARRAY: create_array,
}

__all__ = ["CREATE_ARRAY", "RUNTIME_MODULES", "create_array"]
