import pytest

from ruleset_resolver.codegen import (
    ArrayLiteral,
    CircularModuleError,
    Module,
    ModuleLoader,
    ObjectLiteral,
    Primitive,
    ReferenceLink,
    VirtualModuleNotFoundError,
)
from ruleset_resolver.codegen.runtime import CREATE_ARRAY, create_array


def test_instantiate_builds_nested_values():
    sources = {
        "./m0": Module(
            ObjectLiteral(
                (
                    ("rules", ObjectLiteral((("foo", ObjectLiteral((("severity", Primitive("warn")),))),))),
                    ("formats", ArrayLiteral((Primitive("oas2"), Primitive("oas3")))),
                )
            )
        )
    }

    value = ModuleLoader(sources).instantiate("./m0")

    assert value == {"rules": {"foo": {"severity": "warn"}}, "formats": ["oas2", "oas3"]}


def test_reference_links_resolve_through_other_modules():
    sources = {
        "./m0": Module(
            ObjectLiteral((("shared", ReferenceLink("./m1", "/definitions/given")),)),
            dependencies=("./m1",),
        ),
        "./m1": Module(
            ObjectLiteral(
                (("definitions", ObjectLiteral((("given", Primitive("$.paths[*]")),))),)
            )
        ),
    }

    assert ModuleLoader(sources).instantiate("./m0") == {"shared": "$.paths[*]"}


def test_modules_are_evaluated_once_and_cached():
    calls = []

    def counting_create_array(items):
        calls.append(1)
        return create_array(items)

    sources = {"./m0": Module(ArrayLiteral((Primitive(1),)))}
    loader = ModuleLoader(sources, builtins={CREATE_ARRAY: counting_create_array})

    first = loader.instantiate("./m0")
    second = loader.instantiate("./m0")

    assert first is second
    assert len(calls) == 1


def test_builtins_take_precedence_over_generated_sources():
    sources = {CREATE_ARRAY: Module(Primitive("shadowed"))}
    loader = ModuleLoader(sources)

    assert loader.instantiate(CREATE_ARRAY) is create_array


def test_unknown_identifier_raises_module_not_found():
    loader = ModuleLoader({})

    with pytest.raises(VirtualModuleNotFoundError) as excinfo:
        loader.instantiate("./missing")

    assert excinfo.value.identifier == "./missing"
    assert "./missing" in str(excinfo.value)


def test_circular_modules_raise():
    sources = {
        "./m0": Module(ReferenceLink("./m1")),
        "./m1": Module(ReferenceLink("./m0")),
    }

    with pytest.raises(CircularModuleError):
        ModuleLoader(sources).instantiate("./m0")


def test_missing_declared_dependency_is_reported_before_evaluation():
    calls = []

    def counting_create_array(items):
        calls.append(1)
        return list(items)

    sources = {
        "./m0": Module(
            ArrayLiteral((ReferenceLink("./m1"),)),
            dependencies=("./m1",),
        ),
    }
    loader = ModuleLoader(sources, builtins={CREATE_ARRAY: counting_create_array})

    with pytest.raises(VirtualModuleNotFoundError) as excinfo:
        loader.instantiate("./m0")

    assert excinfo.value.identifier == "./m1"
    assert calls == []
