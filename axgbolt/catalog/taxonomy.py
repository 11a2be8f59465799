"""Camera-accessory category taxonomy.

The storefront navigation is a flat list of top-level categories, some
with a submenu. This module holds the default category tree used for
seeding, plus the lookup rules navigation relies on:

    Batteries
    Chargers
    Card Readers
    Lens Filters > 58mm | 67mm | 77mm
    Camera Backpacks
"""

import re
from dataclasses import dataclass, field
from typing import Any

# Categories whose sidebar entries do not follow their stored submenu
LENS_FILTERS = "Lens Filters"
LENS_FILTER_SIZES = ("58mm", "67mm", "77mm")
BATTERIES = "Batteries"

_FILTER_SIZE_PATTERN = re.compile(r"^\s*(\d+\s*mm)\s+filters\s*$", re.IGNORECASE)


@dataclass
class SubmenuEntry:
    """One submenu item under a category.

    Attributes:
        name: Label shown in navigation.
        category: Facet value the entry selects.
    """

    name: str
    category: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"name": self.name, "category": self.category}


@dataclass
class CategoryNode:
    """A category in the navigation taxonomy.

    Attributes:
        name: Category name (unique, case-insensitive).
        submenu: Ordered submenu entries.
        is_active: Whether the category is shown.
    """

    name: str
    submenu: list[SubmenuEntry] = field(default_factory=list)
    is_active: bool = True

    @property
    def has_submenu(self) -> bool:
        """Whether the category expands into a submenu."""
        return bool(self.submenu)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CategoryNode":
        """Build a node from an API or database record."""
        submenu = [
            SubmenuEntry(name=entry["name"], category=entry.get("category") or entry["name"])
            for entry in data.get("submenu") or []
        ]
        return cls(
            name=data["name"],
            submenu=submenu,
            is_active=data.get("is_active", True),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "has_submenu": self.has_submenu,
            "submenu": [entry.to_dict() for entry in self.submenu],
            "is_active": self.is_active,
        }


DEFAULT_CATEGORIES: list[CategoryNode] = [
    CategoryNode(name=BATTERIES),
    CategoryNode(name="Chargers"),
    CategoryNode(name="Card Readers"),
    CategoryNode(
        name=LENS_FILTERS,
        submenu=[SubmenuEntry(name=size, category=size) for size in LENS_FILTER_SIZES],
    ),
    CategoryNode(name="Camera Backpacks"),
]


def filter_size_from_navigation(label: str) -> str | None:
    """Extract the bare size key from a ``"<size>mm Filters"`` label.

    >>> filter_size_from_navigation("67mm Filters")
    '67mm'
    """
    match = _FILTER_SIZE_PATTERN.match(label)
    if match is None:
        return None
    return match.group(1).replace(" ", "")


class CatalogTaxonomy:
    """Lookup helpers over a list of categories.

    Example usage:
        taxonomy = CatalogTaxonomy(DEFAULT_CATEGORIES)
        taxonomy.resolve_navigation("67mm Filters")   # ["67mm"]
        taxonomy.resolve_navigation("card readers")   # ["Card Readers"]
        taxonomy.sidebar_subcategories("Lens Filters")
    """

    def __init__(self, categories: list[CategoryNode] | None = None) -> None:
        self._categories = list(categories if categories is not None else DEFAULT_CATEGORIES)

    def get_all(self) -> list[CategoryNode]:
        """Get all categories in navigation order."""
        return list(self._categories)

    def get_by_name(self, name: str) -> CategoryNode | None:
        """Get category by name, ignoring case."""
        wanted = name.strip().lower()
        for category in self._categories:
            if category.name.lower() == wanted:
                return category
        return None

    def find_partial(self, name: str) -> CategoryNode | None:
        """Find the first category whose name contains, or is contained in, ``name``."""
        wanted = name.strip().lower()
        if not wanted:
            return None
        for category in self._categories:
            candidate = category.name.lower()
            if wanted in candidate or candidate in wanted:
                return category
        return None

    def resolve_navigation(self, label: str) -> list[str] | None:
        """Translate a navigation label into a sidebar selection.

        ``"<size>mm Filters"`` selects the bare size key. Any other label
        is matched against category names exactly (ignoring case), then by
        partial match.

        Returns:
            The selection to apply, or None when nothing matches.
        """
        size = filter_size_from_navigation(label)
        if size is not None:
            return [size]

        category = self.get_by_name(label) or self.find_partial(label)
        if category is None:
            return None
        return [category.name]

    def sidebar_subcategories(self, name: str) -> list[SubmenuEntry]:
        """Get the sub-entries the sidebar shows under a category.

        Lens Filters always lists the filter sizes and Batteries lists
        none, whatever their stored submenu says.
        """
        if name == BATTERIES:
            return []
        if name == LENS_FILTERS:
            return [SubmenuEntry(name=size, category=size) for size in LENS_FILTER_SIZES]

        category = self.get_by_name(name)
        if category is None:
            return []
        return list(category.submenu)

    def expandable_categories(self) -> list[str]:
        """Names of categories the sidebar renders as expandable."""
        names = [
            category.name
            for category in self._categories
            if self.sidebar_subcategories(category.name)
        ]
        return names
