#!/usr/bin/env python3
"""Seed demo accounts.

Creates one administrator and one regular shopper. Existing accounts
with the same email are left alone.

Usage:
    python scripts/seed_users.py
"""

import asyncio

from axgbolt.application.user_service import UserService
from axgbolt.infrastructure.database import async_session_factory, create_tables
from axgbolt.infrastructure.repositories import UserRepository

DEMO_USERS = [
    {
        "first_name": "Admin",
        "last_name": "User",
        "email": "admin@axgbolt.com",
        "password": "AdminPass123!",
        "role": "admin",
    },
    {
        "first_name": "Demo",
        "last_name": "Shopper",
        "email": "user@axgbolt.com",
        "password": "UserPass123!",
        "role": "user",
    },
]


async def seed_users() -> list[tuple[str, bool]]:
    """Create the demo accounts.

    Returns:
        (email, created) per demo account.
    """
    results = []
    async with async_session_factory() as session:
        users = UserRepository(session)
        service = UserService(session)
        for account in DEMO_USERS:
            if await users.get_by_email(account["email"]) is not None:
                results.append((account["email"], False))
                continue
            await service.admin_create_user(**account)
            results.append((account["email"], True))
    return results


async def main() -> None:
    """Main entry point."""
    print("=" * 60)
    print("AXG Bolt User Seeder")
    print("=" * 60)

    await create_tables()

    for email, created in await seed_users():
        status = "created" if created else "already exists"
        print(f"  ✓ {email}: {status}")

    print()
    print("Demo credentials:")
    for account in DEMO_USERS:
        print(f"  {account['role']:<6} {account['email']} / {account['password']}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
