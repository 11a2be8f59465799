"""Tests for slug and SKU helpers."""

from axgbolt.catalog.identifiers import make_sku, sku_prefix, slugify


def test_slugify_strips_punctuation() -> None:
    """Slugs keep letters, digits and single dashes."""
    assert slugify("Circular Polarizing Filter 67mm!") == "circular-polarizing-filter-67mm"
    assert slugify("  ND -- Filter  ") == "nd-filter"


def test_slugify_fallback() -> None:
    """Names without usable characters still get a slug."""
    assert slugify("!!!") == "product"


def test_sku_prefix() -> None:
    """SKU prefixes are the first three letters of the category."""
    assert sku_prefix("Card Readers") == "CAR"
    assert sku_prefix("58mm") == "MM"
    assert sku_prefix("123") == "PRD"


def test_make_sku() -> None:
    """SKUs have six zero-padded digits."""
    assert make_sku("Batteries", 42) == "BAT000042"
    assert make_sku("Chargers", 1_000_001) == "CHA000001"
