"""Product catalog generator with deterministic seeding.

Produces the curated launch products plus synthetic camera accessories
for every default category. Uses seeded random for reproducibility.
"""

import hashlib
import random
from dataclasses import dataclass
from typing import Any, Iterator

from axgbolt.catalog.identifiers import make_sku, slugify
from axgbolt.catalog.models import Product
from axgbolt.catalog.taxonomy import DEFAULT_CATEGORIES, LENS_FILTER_SIZES, LENS_FILTERS, CategoryNode


# ============================================================================
# Constants
# ============================================================================

CAMERA_BRANDS = ["Canon", "Sony", "Nikon", "Fujifilm", "Panasonic", "Olympus"]

# Price ranges by category (major units)
PRICE_RANGES: dict[str, tuple[int, int]] = {
    "Batteries": (29, 99),
    "Chargers": (19, 79),
    "Card Readers": (19, 89),
    "Lens Filters": (24, 149),
    "Camera Backpacks": (59, 249),
    "default": (19, 99),
}

# Product name templates by category
PRODUCT_TEMPLATES: dict[str, list[str]] = {
    "Batteries": [
        "{adj} Rechargeable Battery for {brand}",
        "{brand} Compatible {adj} Battery Pack",
    ],
    "Chargers": [
        "{adj} Dual Charger for {brand} Batteries",
        "USB-C {adj} Travel Charger for {brand}",
    ],
    "Card Readers": [
        "{adj} SD/microSD Card Reader",
        "{adj} CFexpress Card Reader",
    ],
    "Lens Filters": [
        "{adj} UV Filter {size}",
        "{adj} Circular Polarizing Filter {size}",
        "{adj} ND Filter {size}",
    ],
    "Camera Backpacks": [
        "{adj} Camera Backpack 20L",
        "{adj} Photo Daypack for {brand} Mirrorless",
    ],
    "default": [
        "{adj} Camera Accessory",
    ],
}

ADJECTIVES = ["Pro", "Compact", "Premium", "Rugged", "Slim", "Travel", "Studio", "Ultra"]

SUBCATEGORIES: dict[str, list[str]] = {
    "Batteries": ["Camera Batteries"],
    "Chargers": ["USB-C Chargers", "Dual Chargers"],
    "Card Readers": ["USB-C Card Readers"],
    "Camera Backpacks": [],
}

# Curated launch products
SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "LP-E6NH Rechargeable Battery for Canon",
        "description": (
            "High-capacity lithium-ion battery compatible with Canon EOS R5, R6, "
            "5D Mark IV, 6D Mark II, 7D Mark II, 80D, and 90D cameras."
        ),
        "features": [
            "2130mAh high capacity",
            "Advanced battery management system",
            "Overcharge and overdischarge protection",
            "Temperature monitoring",
        ],
        "image_url": "https://example.com/images/lp-e6nh-battery.jpg",
        "category": "Batteries",
        "subcategory": "Camera Batteries",
        "is_featured": True,
        "price": 79.99,
        "stock": 25,
        "tags": ["canon", "battery", "lp-e6nh", "rechargeable"],
    },
    {
        "name": "NP-FZ100 Battery for Sony Alpha Cameras",
        "description": (
            "Premium replacement battery for Sony Alpha series cameras including "
            "A7 III, A7R III, A7R IV, A9, and A6600."
        ),
        "features": [
            "2280mAh ultra-high capacity",
            "Premium lithium-ion cells",
            "Extended shooting time",
            "Built-in safety circuits",
        ],
        "image_url": "https://example.com/images/np-fz100-battery.jpg",
        "category": "Batteries",
        "subcategory": "Camera Batteries",
        "is_featured": True,
        "price": 89.99,
        "stock": 30,
        "tags": ["sony", "battery", "np-fz100", "alpha", "mirrorless"],
    },
    {
        "name": "Dual USB-C Fast Charger for Canon LP-E6N/LP-E6NH",
        "description": (
            "Dual-slot USB-C charger for Canon LP-E6N and LP-E6NH batteries with "
            "LED indicators and overcharge protection."
        ),
        "features": [
            "Dual-slot simultaneous charging",
            "USB-C input for modern devices",
            "LED charging indicators",
            "Compact portable design",
        ],
        "image_url": "https://example.com/images/dual-usb-c-charger.jpg",
        "category": "Chargers",
        "subcategory": "USB-C Chargers",
        "is_featured": True,
        "price": 49.99,
        "stock": 40,
        "tags": ["charger", "usb-c", "canon", "dual", "fast-charging"],
    },
    {
        "name": "Professional USB-C Multi-Card Reader",
        "description": (
            "High-speed card reader supporting SD, microSD, CF, and XQD cards for "
            "photographers and videographers."
        ),
        "features": [
            "USB-C 3.2 Gen 2 interface",
            "Supports multiple card formats",
            "Durable aluminum construction",
            "LED activity indicator",
        ],
        "image_url": "https://example.com/images/professional-card-reader.jpg",
        "category": "Card Readers",
        "subcategory": "USB-C Card Readers",
        "is_featured": True,
        "price": 59.99,
        "stock": 35,
        "tags": ["card-reader", "usb-c", "professional", "multi-format"],
    },
    {
        "name": "Premium UV Protection Filter 77mm",
        "description": (
            "Professional-grade UV filter with multi-coating. Protects your lens "
            "from UV rays, dust, and scratches."
        ),
        "features": [
            "16-layer multi-coating",
            "Premium optical glass",
            "Color-neutral performance",
            "Ultra-slim frame design",
        ],
        "image_url": "https://example.com/images/uv-filter-77mm.jpg",
        "category": LENS_FILTERS,
        "subcategory": "77mm",
        "is_featured": False,
        "price": 39.99,
        "stock": 50,
        "tags": ["filter", "uv", "77mm", "lens-protection"],
    },
    {
        "name": "Circular Polarizing Filter 67mm",
        "description": (
            "Circular polarizing filter that reduces reflections, increases "
            "contrast, and enhances color saturation."
        ),
        "features": [
            "Reduces reflections and glare",
            "Enhances color saturation",
            "Rotatable polarizing element",
            "Slim profile design",
        ],
        "image_url": "https://example.com/images/cpl-filter-67mm.jpg",
        "category": LENS_FILTERS,
        "subcategory": "67mm",
        "is_featured": False,
        "price": 54.99,
        "stock": 25,
        "tags": ["filter", "polarizing", "67mm", "cpl", "landscape"],
    },
]


# ============================================================================
# Generator Configuration
# ============================================================================


@dataclass
class GeneratorConfig:
    """Configuration for product generation.

    Attributes:
        seed: Random seed for reproducibility.
        products_per_category: Synthetic products per category.
        include_samples: Whether to include the curated launch products.
    """

    seed: int = 42
    products_per_category: int = 4
    include_samples: bool = True

    @classmethod
    def small(cls) -> "GeneratorConfig":
        """Create config for a small catalog (~20 products)."""
        return cls(seed=42, products_per_category=3, include_samples=True)

    @classmethod
    def full(cls) -> "GeneratorConfig":
        """Create config for a full catalog (~60+ products)."""
        return cls(seed=42, products_per_category=12, include_samples=True)

    @classmethod
    def samples_only(cls) -> "GeneratorConfig":
        """Create config for the curated products only."""
        return cls(seed=42, products_per_category=0, include_samples=True)


# ============================================================================
# Product Generator
# ============================================================================


class ProductGenerator:
    """Generates product catalogs with deterministic seeding.

    Example usage:
        generator = ProductGenerator(GeneratorConfig.small())
        for product in generator.generate():
            print(product.name)
    """

    def __init__(
        self,
        config: GeneratorConfig,
        categories: list[CategoryNode] | None = None,
    ) -> None:
        """Initialize generator with configuration.

        Args:
            config: Generator configuration.
            categories: Categories to generate for. Defaults to the
                default navigation categories.
        """
        self.config = config
        self.categories = categories if categories is not None else DEFAULT_CATEGORIES
        self._sku_counter = 0

    def _deterministic_seed(self, *args: str | int) -> int:
        """Create deterministic seed from arguments."""
        data = "|".join(str(a) for a in args)
        hash_bytes = hashlib.md5(data.encode()).digest()
        return int.from_bytes(hash_bytes[:4], "big")

    def _next_sku(self, category: str) -> str:
        self._sku_counter += 1
        return make_sku(category, self._sku_counter)

    def _subcategory_for(self, category: CategoryNode, rng: random.Random) -> str | None:
        if category.name == LENS_FILTERS:
            return rng.choice(LENS_FILTER_SIZES)
        options = SUBCATEGORIES.get(category.name)
        if options is None:
            options = [entry.category for entry in category.submenu]
        return rng.choice(options) if options else None

    def _build_sample(self, data: dict[str, Any]) -> Product:
        return Product(
            name=data["name"],
            slug=slugify(data["name"]),
            sku=self._next_sku(data["category"]),
            description=data["description"],
            features=list(data["features"]),
            image_url=data["image_url"],
            category=data["category"],
            subcategory=data.get("subcategory"),
            price=data["price"],
            stock=data["stock"],
            tags=list(data["tags"]),
            is_active=True,
            is_featured=data["is_featured"],
        )

    def _generate_product(self, category: CategoryNode, index: int) -> Product:
        """Generate a single synthetic product."""
        rng = random.Random(self._deterministic_seed(self.config.seed, category.name, index))

        brand = rng.choice(CAMERA_BRANDS)
        adj = rng.choice(ADJECTIVES)
        subcategory = self._subcategory_for(category, rng)
        templates = PRODUCT_TEMPLATES.get(category.name, PRODUCT_TEMPLATES["default"])
        name = rng.choice(templates).format(brand=brand, adj=adj, size=subcategory or "")
        name = f"{name.strip()} #{index + 1}"

        min_price, max_price = PRICE_RANGES.get(category.name, PRICE_RANGES["default"])
        price = rng.randint(min_price, max_price) + 0.99

        tags = sorted({brand.lower(), adj.lower(), slugify(category.name)})
        if subcategory:
            tags.append(subcategory.lower())

        return Product(
            name=name,
            slug=slugify(name),
            sku=self._next_sku(category.name),
            description=(
                f"{adj} {category.name.lower()} built for {brand} shooters. "
                f"Tested for everyday field use."
            ),
            features=[f"{adj} build quality", f"Works with {brand} systems"],
            image_url=f"https://picsum.photos/seed/{self._deterministic_seed(name)}/400/400",
            category=category.name,
            subcategory=subcategory,
            price=price,
            stock=rng.randint(0, 120),
            tags=tags,
            is_active=rng.random() > 0.1,
            is_featured=rng.random() > 0.85,
        )

    def generate(self) -> Iterator[Product]:
        """Generate all products.

        Yields:
            Generated Product instances.
        """
        if self.config.include_samples:
            for data in SAMPLE_PRODUCTS:
                yield self._build_sample(data)

        for category in self.categories:
            for i in range(self.config.products_per_category):
                yield self._generate_product(category, i)

    def generate_list(self) -> list[Product]:
        """Generate all products as a list."""
        return list(self.generate())

    @property
    def expected_count(self) -> int:
        """Get expected number of products."""
        samples = len(SAMPLE_PRODUCTS) if self.config.include_samples else 0
        return samples + len(self.categories) * self.config.products_per_category
