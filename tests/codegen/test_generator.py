import asyncio
import json
from pathlib import Path
from typing import Any, Dict

from ruleset_resolver.codegen import Module, ModuleLoader, Primitive, ReferenceLink, reference_resolve
from ruleset_resolver.fs import parse_content


def _generate(entry: str, *, raw_suffix: str | None = None) -> tuple[str, Dict[str, Module]]:
    output: Dict[str, Module] = {}

    def is_raw(source: str) -> bool:
        return raw_suffix is not None and source.endswith(raw_suffix)

    async def read(source: str) -> Any:
        content = Path(source).read_text(encoding="utf-8")
        if is_raw(source):
            return content
        return parse_content(content, source)

    async def write(target: str, module: Module) -> None:
        output[target] = module

    generated = asyncio.run(
        reference_resolve(entry, read=read, write=write, should_resolve=lambda s: not is_raw(s))
    )
    return generated.key, output


def test_document_without_references_becomes_single_module(tmp_path: Path):
    entry = tmp_path / "ruleset.yaml"
    entry.write_text("rules:\n  foo:\n    severity: warn\n", encoding="utf-8")

    key, output = _generate(str(entry))

    assert list(output) == [key]
    assert ModuleLoader(output).instantiate(key) == {"rules": {"foo": {"severity": "warn"}}}


def test_local_references_are_inlined(tmp_path: Path):
    entry = tmp_path / "ruleset.yaml"
    entry.write_text(
        "definitions:\n"
        "  truthy:\n"
        "    function: truthy\n"
        "rules:\n"
        "  foo:\n"
        "    given: $\n"
        "    then:\n"
        "      $ref: '#/definitions/truthy'\n",
        encoding="utf-8",
    )

    key, output = _generate(str(entry))

    assert len(output) == 1
    document = ModuleLoader(output).instantiate(key)
    assert document["rules"]["foo"]["then"] == {"function": "truthy"}


def test_external_references_become_module_links(tmp_path: Path):
    (tmp_path / "shared.json").write_text(
        json.dumps({"then": {"function": "pattern", "functionOptions": {"match": "^x-"}}}),
        encoding="utf-8",
    )
    entry = tmp_path / "ruleset.yaml"
    entry.write_text(
        "rules:\n  foo:\n    given: $.info\n    then:\n      $ref: ./shared.json#/then\n",
        encoding="utf-8",
    )

    key, output = _generate(str(entry))

    assert len(output) == 2
    assert output[key].dependencies and output[key].dependencies[0] in output
    document = ModuleLoader(output).instantiate(key)
    assert document["rules"]["foo"]["then"] == {
        "function": "pattern",
        "functionOptions": {"match": "^x-"},
    }


def test_shared_documents_are_generated_once(tmp_path: Path):
    (tmp_path / "shared.yaml").write_text("a: 1\nb: 2\n", encoding="utf-8")
    entry = tmp_path / "ruleset.yaml"
    entry.write_text(
        "first:\n  $ref: shared.yaml#/a\nsecond:\n  $ref: ./shared.yaml#/b\n",
        encoding="utf-8",
    )

    key, output = _generate(str(entry))

    assert len(output) == 2
    assert ModuleLoader(output).instantiate(key) == {"first": 1, "second": 2}


def test_raw_documents_are_exported_verbatim(tmp_path: Path):
    schema_dir = tmp_path / "oas" / "schemas"
    schema_dir.mkdir(parents=True)
    raw_text = '{"$ref": "#/definitions/never-followed"}'
    (schema_dir / "schema.oas3.json").write_text(raw_text, encoding="utf-8")
    entry = tmp_path / "ruleset.yaml"
    entry.write_text("schema:\n  $ref: ./oas/schemas/schema.oas3.json\n", encoding="utf-8")

    key, output = _generate(str(entry), raw_suffix="oas/schemas/schema.oas3.json")

    raw_modules = [module for module in output.values() if isinstance(module.body, Primitive)]
    assert [module.body.value for module in raw_modules] == [raw_text]
    assert isinstance(dict(output[key].body.entries)["schema"], ReferenceLink)
    assert ModuleLoader(output).instantiate(key) == {"schema": raw_text}


def test_self_referencing_local_ref_is_left_unresolved(tmp_path: Path):
    entry = tmp_path / "ruleset.yaml"
    entry.write_text("loop:\n  $ref: '#/loop'\n", encoding="utf-8")

    key, output = _generate(str(entry))

    assert ModuleLoader(output).instantiate(key) == {"loop": {"$ref": "#/loop"}}
