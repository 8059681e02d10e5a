"""Helpers for normalizing ruleset and function locators.

Three kinds of locator are supported:

* local filesystem paths, normalized to absolute paths;
* ``http://`` and ``https://`` URLs;
* package-sourced locators of the form ``pkg:<package>/<resource path>``,
  read through :mod:`importlib.resources`.

A normalized locator doubles as the identity of a ruleset: two rulesets are
the same iff their normalized locators compare equal.
"""

from __future__ import annotations

import os
import posixpath
from typing import Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

PACKAGE_PREFIX = "pkg:"
_URL_SCHEMES = frozenset({"http", "https"})


def is_url(locator: str) -> bool:
    return urlsplit(locator).scheme.lower() in _URL_SCHEMES


def is_package_source(locator: str) -> bool:
    return locator.startswith(PACKAGE_PREFIX)


def is_absolute(locator: str) -> bool:
    return is_url(locator) or is_package_source(locator) or os.path.isabs(locator)


def split_package_locator(locator: str) -> Tuple[str, str]:
    """Return ``(package, resource_path)`` for a ``pkg:`` locator."""

    if not is_package_source(locator):
        raise ValueError(f"Not a package locator: {locator}")

    remainder = locator[len(PACKAGE_PREFIX):].lstrip("/")
    package, _, resource = remainder.partition("/")
    if not package:
        raise ValueError(f"Package locator is missing a package name: {locator}")
    return package, posixpath.normpath(resource) if resource else ""


def package_root(locator: str) -> str:
    package, _ = split_package_locator(locator)
    return f"{PACKAGE_PREFIX}{package}"


def normalize(locator: str) -> str:
    """Return the canonical form of an absolute or cwd-relative ``locator``."""

    if is_url(locator):
        parts = urlsplit(locator)
        path = posixpath.normpath(parts.path) if parts.path else "/"
        if parts.path.endswith("/") and not path.endswith("/"):
            path += "/"
        return urlunsplit((parts.scheme.lower(), parts.netloc, path, parts.query, ""))

    if is_package_source(locator):
        package, resource = split_package_locator(locator)
        if not resource or resource == ".":
            return f"{PACKAGE_PREFIX}{package}"
        return f"{PACKAGE_PREFIX}{package}/{resource}"

    return os.path.normpath(os.path.abspath(locator))


def dirname(locator: str) -> str:
    """Return the locator of the directory containing ``locator``."""

    if is_url(locator):
        return urljoin(locator, ".")

    if is_package_source(locator):
        package, resource = split_package_locator(locator)
        return normalize(f"{PACKAGE_PREFIX}{package}/{posixpath.dirname(resource)}")

    return os.path.dirname(normalize(locator))


def join(base: str, ref: str) -> str:
    """Resolve ``ref`` against the directory locator ``base``."""

    if is_absolute(ref):
        return normalize(ref)

    if is_url(base):
        directory = base if base.endswith("/") else f"{base}/"
        return normalize(urljoin(directory, ref))

    if is_package_source(base):
        package, resource = split_package_locator(base)
        return normalize(f"{PACKAGE_PREFIX}{package}/{posixpath.join(resource, ref)}")

    return normalize(os.path.join(base, ref))


def extension(locator: str) -> str:
    """Return the lower-cased file extension of ``locator`` (``".yaml"`` etc.)."""

    if is_url(locator):
        path = urlsplit(locator).path
    elif is_package_source(locator):
        _, path = split_package_locator(locator)
    else:
        path = locator
    return posixpath.splitext(path)[1].lower()


__all__ = [
    "PACKAGE_PREFIX",
    "dirname",
    "extension",
    "is_absolute",
    "is_package_source",
    "is_url",
    "join",
    "normalize",
    "package_root",
    "split_package_locator",
]
