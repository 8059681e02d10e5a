"""Read and parse ruleset sources from disk, packages or HTTP."""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any
from urllib.error import URLError
from urllib.request import OpenerDirector, Request, urlopen

import yaml

from . import locators

_BOM = "\ufeff"


class RulesetYamlLoader(yaml.SafeLoader):
    """Safe loader that only treats ``true`` and ``false`` spellings as booleans.

    Plain ``on``, ``off``, ``yes`` and ``no`` stay strings, as in YAML 1.2.
    """


RulesetYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
RulesetYamlLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


class ReadError(RuntimeError):
    """Raised when a source cannot be fetched or read."""

    def __init__(self, locator: str, message: str) -> None:
        super().__init__(message)
        self.locator = locator


class ContentParseError(RuntimeError):
    """Raised when a source is not valid YAML or JSON."""


@dataclass(slots=True)
class RulesetReadOptions:
    """Options forwarded verbatim to every read performed while resolving."""

    timeout: float | None = None
    agent: OpenerDirector | None = None


async def read_file(locator: str, options: RulesetReadOptions | None = None) -> str:
    """Return the text behind ``locator`` exactly as stored."""

    opts = options or RulesetReadOptions()
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_read_sync, locator, opts),
            timeout=opts.timeout,
        )
    except asyncio.TimeoutError as exc:
        raise ReadError(locator, f"Timed out after {opts.timeout}s reading {locator}") from exc


async def read_parsable(locator: str, options: RulesetReadOptions | None = None) -> str:
    """Return the text behind ``locator`` ready to be handed to a parser."""

    content = await read_file(locator, options)
    if content.startswith(_BOM):
        return content[len(_BOM):]
    return content


def parse_content(content: str, source: str) -> Any:
    """Parse ``content`` as JSON when ``source`` ends in ``.json``, YAML otherwise."""

    if locators.extension(source) == ".json":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            raise ContentParseError(f"Invalid JSON in {source}: {exc}") from exc

    try:
        return yaml.load(content, Loader=RulesetYamlLoader)  # noqa: S506 - safe loader subclass
    except yaml.YAMLError as exc:
        raise ContentParseError(f"Invalid YAML in {source}: {exc}") from exc


# Blocking readers, run off the event loop -------------------------------------
def _read_sync(locator: str, options: RulesetReadOptions) -> str:
    if locators.is_url(locator):
        return _fetch_url(locator, options)

    if locators.is_package_source(locator):
        return _read_package_resource(locator)

    try:
        return Path(locator).read_text(encoding="utf-8")
    except OSError as exc:
        raise ReadError(locator, f"Failed to read {locator}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ReadError(locator, f"Could not decode {locator}: {exc}") from exc


def _read_package_resource(locator: str) -> str:
    package, resource = locators.split_package_locator(locator)
    try:
        return resources.files(package).joinpath(resource).read_text(encoding="utf-8")
    except ModuleNotFoundError as exc:
        raise ReadError(locator, f"Package not installed: {package}") from exc
    except OSError as exc:
        raise ReadError(locator, f"Failed to read {locator}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ReadError(locator, f"Could not decode {locator}: {exc}") from exc


def _fetch_url(locator: str, options: RulesetReadOptions) -> str:
    request = Request(locator, headers={"Accept": "application/json, application/yaml, */*"})
    try:
        if options.agent is not None:
            response = options.agent.open(request, timeout=options.timeout)
        else:
            response = urlopen(request, timeout=options.timeout)  # noqa: S310 - http(s) only
        with response:
            charset = response.headers.get_content_charset() or "utf-8"
            return response.read().decode(charset)
    except (URLError, OSError) as exc:
        raise ReadError(locator, f"Failed to fetch {locator}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ReadError(locator, f"Could not decode {locator}: {exc}") from exc


__all__ = [
    "ContentParseError",
    "ReadError",
    "RulesetReadOptions",
    "RulesetYamlLoader",
    "parse_content",
    "read_file",
    "read_parsable",
]
