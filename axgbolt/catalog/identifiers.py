"""Slug and SKU helpers for catalog products."""

import re

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def slugify(name: str) -> str:
    """Turn a product name into a URL slug.

    >>> slugify("Circular Polarizing Filter 67mm!")
    'circular-polarizing-filter-67mm'
    """
    slug = _NON_SLUG_CHARS.sub("", name.lower())
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _DASHES.sub("-", slug).strip("-")
    return slug or "product"


def sku_prefix(category: str) -> str:
    """Three-letter upper-case code for a category."""
    letters = "".join(c for c in category if c.isalpha())[:3].upper()
    return letters or "PRD"


def make_sku(category: str, number: int) -> str:
    """Build a SKU of the form ``<CAT><6 digits>``.

    >>> make_sku("Batteries", 42)
    'BAT000042'
    """
    return f"{sku_prefix(category)}{number % 1_000_000:06d}"
