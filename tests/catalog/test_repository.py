"""Tests for product listing order."""

import asyncio
from datetime import datetime, timezone

from axgbolt.catalog.models import Product
from axgbolt.catalog.repository import ProductRepository
from axgbolt.infrastructure.database import async_session_factory

CREATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


async def _page_through(ids: list[str], page_size: int) -> list[str]:
    async with async_session_factory() as session:
        for product_id in ids:
            session.add(
                Product(
                    id=product_id,
                    name=f"Battery {product_id}",
                    slug=f"battery-{product_id}",
                    sku=f"BAT{product_id.upper()}",
                    category="Batteries",
                    created_at=CREATED,
                )
            )
        await session.commit()

        repo = ProductRepository(session)
        seen: list[str] = []
        for offset in range(0, len(ids), page_size):
            page = await repo.find_all(limit=page_size, offset=offset)
            seen.extend(p.id for p in page)
        return seen


def test_default_order_breaks_ties_by_id(database: None) -> None:
    """Products created at the same instant page in id order, none repeated."""
    ids = ["p-4", "p-1", "p-5", "p-3", "p-2"]
    assert asyncio.run(_page_through(ids, page_size=2)) == sorted(ids)
