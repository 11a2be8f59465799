#!/usr/bin/env python3
"""Smoke test a running AXG Bolt API.

Runs a fixed sequence of requests against the server and prints one
pass/fail line per check. Expects the demo accounts from
``seed_users.py`` and at least one product from ``seed_catalog.py``.

Usage:
    python scripts/smoke_test.py
    python scripts/smoke_test.py --base-url http://localhost:8000/api
"""

import argparse
import asyncio
import sys
import uuid

import httpx

from axgbolt.client.api_client import APIResponse, AXGBoltAPIClient
from axgbolt.storefront.session import AuthContext, AuthSession
from axgbolt.storefront.storage import MemoryStorage

ADMIN_EMAIL = "admin@axgbolt.com"
ADMIN_PASSWORD = "AdminPass123!"


class SmokeRun:
    """Collects check results."""

    def __init__(self) -> None:
        self.passed = 0
        self.failed = 0

    def check(self, name: str, ok: bool, detail: str = "") -> bool:
        if ok:
            self.passed += 1
            print(f"  ✓ {name}")
        else:
            self.failed += 1
            print(f"  ✗ {name}{f': {detail}' if detail else ''}")
        return ok

    def response(self, name: str, response: APIResponse) -> bool:
        detail = response.error.user_message if response.error else ""
        return self.check(name, response.success, detail)


async def check_health(run: SmokeRun, base_url: str) -> None:
    root = base_url.rstrip("/").removesuffix("/api")
    async with httpx.AsyncClient(base_url=root, timeout=10.0) as client:
        for path in ("/health", "/ready"):
            try:
                response = await client.get(path)
            except httpx.RequestError as e:
                run.check(f"GET {path}", False, str(e))
                continue
            run.check(f"GET {path}", response.status_code == 200, f"HTTP {response.status_code}")


async def check_catalog(run: SmokeRun, api: AXGBoltAPIClient) -> str | None:
    """Browse the public catalog; returns a product id for the review checks."""
    run.response("List categories", await api.get_categories())
    run.response("List featured products", await api.get_featured_products())

    listing = await api.list_products(limit=5)
    if not run.response("List products", listing):
        return None
    products = listing.data.get("products") or []
    if not run.check("Catalog has products", bool(products), "run seed_catalog.py"):
        return None

    product = products[0]
    run.response("Get product by id", await api.get_product(product["id"]))
    run.response("Get product by slug", await api.get_product(product["slug"]))
    run.response("Filter by category", await api.list_products(categories=[product["category"]]))
    run.response("Search products", await api.list_products(search=product["name"].split()[0]))
    return product["id"]


async def check_shopper(run: SmokeRun, base_url: str, product_id: str | None) -> None:
    """Register a throwaway shopper, write a review and sign out."""
    session = AuthSession(MemoryStorage())
    api = AXGBoltAPIClient(base_url=base_url, session=session)
    auth = AuthContext(api, session)
    try:
        email = f"smoke-{uuid.uuid4().hex[:8]}@example.com"
        outcome = await auth.sign_up("Smoke", "Test", email, "SmokePass123!")
        if not run.check("Register and sign in", outcome.success, outcome.error or ""):
            return

        run.response("Get profile", await api.get_profile())
        if product_id is not None:
            run.response(
                "Write review",
                await api.create_review(product_id, 5, "Smoke test", "Works as expected."),
            )
            run.response("List my reviews", await api.get_my_reviews())

        await auth.sign_out()
        run.check("Sign out", not session.is_authenticated)
    finally:
        await api.close()


async def check_admin(run: SmokeRun, base_url: str) -> None:
    session = AuthSession(MemoryStorage())
    api = AXGBoltAPIClient(base_url=base_url, session=session)
    auth = AuthContext(api, session)
    try:
        outcome = await auth.sign_in(ADMIN_EMAIL, ADMIN_PASSWORD)
        if not run.check("Admin sign in", outcome.success, outcome.error or "run seed_users.py"):
            return
        run.check("Admin role", session.is_admin)
        run.response("Admin list products", await api.admin_list_products(limit=5))
        run.response("Admin list users", await api.list_users(limit=5))
        run.response("Admin list pending reviews", await api.admin_list_reviews(status="pending"))
        await auth.sign_out()
    finally:
        await api.close()


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Smoke test a running AXG Bolt API")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000/api",
        help="API base URL including the /api prefix",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("AXG Bolt Smoke Test")
    print("=" * 60)
    print(f"API: {args.base_url}")
    print()

    run = SmokeRun()
    await check_health(run, args.base_url)

    api = AXGBoltAPIClient(base_url=args.base_url)
    try:
        product_id = await check_catalog(run, api)
    finally:
        await api.close()

    await check_shopper(run, args.base_url, product_id)
    await check_admin(run, args.base_url)

    print()
    print("=" * 60)
    print(f"Passed: {run.passed}  Failed: {run.failed}")
    print("=" * 60)
    return 1 if run.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
