#!/usr/bin/env python3
"""
Script to initialize database tables.

Usage:
    python scripts/init_db.py
"""

import asyncio

from pedido_bot.db.sqlite import db


async def main() -> None:
    """Create all tables."""
    print("Initializing database...")
    print("-" * 50)

    print(f"Creating tables at {db.url}...")
    await db.init()
    print("✅ Database initialized")

    await db.close()


if __name__ == "__main__":
    asyncio.run(main())
