#!/usr/bin/env python3
"""Seed product catalog script.

Creates the default category tree and a deterministic set of camera
accessories.

Usage:
    python scripts/seed_catalog.py --mode small
    python scripts/seed_catalog.py --mode full
    python scripts/seed_catalog.py --mode samples --no-clear
"""

import argparse
import asyncio

from axgbolt.catalog.service import CatalogService
from axgbolt.infrastructure.database import async_session_factory, create_tables


async def seed(mode: str, clear: bool = True) -> dict:
    """Seed the catalog.

    Args:
        mode: Catalog size (samples/small/full).
        clear: Whether to clear existing products, reviews and categories.

    Returns:
        Seeding result.
    """
    async with async_session_factory() as session:
        service = CatalogService(session)
        return await service.seed_catalog(mode=mode, clear_existing=clear)


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the AXG Bolt product catalog",
    )
    parser.add_argument(
        "--mode",
        choices=["samples", "small", "full"],
        default="small",
        help="Catalog size: samples (hand-written only), small or full",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't clear existing products before seeding",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("AXG Bolt Catalog Seeder")
    print("=" * 60)
    print(f"Mode: {args.mode}")
    print(f"Clear existing: {not args.no_clear}")
    print()

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    print("Seeding catalog...")
    try:
        result = await seed(mode=args.mode, clear=not args.no_clear)
    except Exception as e:
        print(f"  ✗ Error: {e}")
        raise

    print(f"  ✓ Deleted: {result['deleted']} existing products")
    print(f"  ✓ Categories: {result['categories_created']} created")
    print(f"  ✓ Created: {result['products_created']} products")
    print(f"  ✓ Featured: {result['featured']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
