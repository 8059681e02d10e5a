"""Minimal smoke tests for the ruleset resolver package."""


def test_package_importable() -> None:
    """Ensure the top-level package exposes the expected namespace."""
    import ruleset_resolver

    assert callable(ruleset_resolver.read_ruleset)
    assert callable(ruleset_resolver.read_ruleset_sync)
