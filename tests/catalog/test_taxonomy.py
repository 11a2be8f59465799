"""Tests for the camera-accessory category taxonomy."""

import pytest

from axgbolt.catalog.taxonomy import (
    DEFAULT_CATEGORIES,
    CatalogTaxonomy,
    CategoryNode,
    SubmenuEntry,
    filter_size_from_navigation,
)


class TestFilterSizeFromNavigation:
    """Tests for filter_size_from_navigation."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("67mm Filters", "67mm"),
            ("58mm filters", "58mm"),
            ("  77 mm Filters ", "77mm"),
            ("Lens Filters", None),
            ("67mm", None),
        ],
    )
    def test_labels(self, label: str, expected: str | None) -> None:
        """Only '<size>mm Filters' labels yield a size key."""
        assert filter_size_from_navigation(label) == expected


class TestCatalogTaxonomy:
    """Tests for CatalogTaxonomy."""

    @pytest.fixture
    def taxonomy(self) -> CatalogTaxonomy:
        """Taxonomy over the default categories."""
        return CatalogTaxonomy()

    def test_default_order(self, taxonomy: CatalogTaxonomy) -> None:
        """Categories keep navigation order."""
        assert [c.name for c in taxonomy.get_all()] == [
            "Batteries",
            "Chargers",
            "Card Readers",
            "Lens Filters",
            "Camera Backpacks",
        ]

    def test_get_by_name_ignores_case(self, taxonomy: CatalogTaxonomy) -> None:
        """Lookup is case-insensitive."""
        category = taxonomy.get_by_name("card readers")
        assert category is not None
        assert category.name == "Card Readers"

    def test_resolve_filter_size(self, taxonomy: CatalogTaxonomy) -> None:
        """Filter-size labels select the bare size."""
        assert taxonomy.resolve_navigation("67mm Filters") == ["67mm"]

    def test_resolve_exact_then_partial(self, taxonomy: CatalogTaxonomy) -> None:
        """Exact names win, then partial matches."""
        assert taxonomy.resolve_navigation("CHARGERS") == ["Chargers"]
        assert taxonomy.resolve_navigation("Backpacks") == ["Camera Backpacks"]

    def test_resolve_unknown(self, taxonomy: CatalogTaxonomy) -> None:
        """Unknown labels resolve to nothing."""
        assert taxonomy.resolve_navigation("Tripods") is None

    def test_sidebar_overrides(self) -> None:
        """Lens Filters always lists sizes and Batteries never expands."""
        taxonomy = CatalogTaxonomy(
            [
                CategoryNode(name="Batteries", submenu=[SubmenuEntry("Grips", "Grips")]),
                CategoryNode(name="Lens Filters"),
                CategoryNode(name="Straps", submenu=[SubmenuEntry("Wrist", "Wrist Straps")]),
            ]
        )
        assert taxonomy.sidebar_subcategories("Batteries") == []
        assert [e.name for e in taxonomy.sidebar_subcategories("Lens Filters")] == [
            "58mm",
            "67mm",
            "77mm",
        ]
        assert taxonomy.sidebar_subcategories("Straps")[0].category == "Wrist Straps"
        assert taxonomy.expandable_categories() == ["Lens Filters", "Straps"]


class TestCategoryNode:
    """Tests for CategoryNode conversions."""

    def test_from_dict_defaults_entry_category(self) -> None:
        """Submenu entries without a category use their name."""
        node = CategoryNode.from_dict(
            {"name": "Lens Filters", "submenu": [{"name": "67mm"}], "is_active": True}
        )
        assert node.has_submenu is True
        assert node.submenu[0].category == "67mm"

    def test_round_trip_of_defaults(self) -> None:
        """Default categories survive conversion to and from dictionaries."""
        for node in DEFAULT_CATEGORIES:
            assert CategoryNode.from_dict(node.to_dict()) == node
