"""Locate ruleset and function sources relative to a base directory."""

from __future__ import annotations

import os
from importlib import resources

from . import locators


class LocatorNotFoundError(RuntimeError):
    """Raised when a locator does not resolve to any readable source."""

    def __init__(self, locator: str, message: str | None = None) -> None:
        super().__init__(message or f"No such file: {locator}")
        self.locator = locator


def find_file(base_dir: str, ref: str) -> str:
    """Return the normalized locator ``ref`` points to from ``base_dir``.

    URLs cannot be probed without fetching them, so they are returned as is and
    a missing document surfaces later as a read failure.
    """

    target = locators.join(base_dir, ref)

    if locators.is_url(target):
        return target

    if locators.is_package_source(target):
        if not _package_resource_exists(target):
            raise LocatorNotFoundError(target)
        return target

    if not os.path.isfile(target):
        raise LocatorNotFoundError(target)

    return target


def _package_resource_exists(locator: str) -> bool:
    package, resource = locators.split_package_locator(locator)
    if not resource:
        return False

    try:
        return resources.files(package).joinpath(resource).is_file()
    except (ModuleNotFoundError, TypeError):
        return False


__all__ = ["LocatorNotFoundError", "find_file"]
