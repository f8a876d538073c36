#!/usr/bin/env python3
"""
Script to load a product catalog into the database.

Usage:
    python scripts/load_catalog.py path/to/catalog.xlsx
"""

import argparse
import asyncio
import sys
from pathlib import Path

from pedido_bot.data.loaders.catalog_loader import load_catalog
from pedido_bot.db.sqlite import db


async def main(file_path: str) -> None:
    """Load catalog from file."""
    file_path = Path(file_path)

    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    await db.init()

    print(f"Loading catalog from: {file_path}")
    print("-" * 50)

    try:
        stats = await load_catalog(file_path)

        print("✅ Successfully loaded catalog!")
        print(f"   Total products: {stats['total_products']}")
        print(f"   New products: {stats['created']}")
        print(f"   Updated products: {stats['updated']}")
        print(f"   Skipped rows: {stats['skipped_rows']}")

    except Exception as e:
        print(f"❌ Error loading catalog: {e}")
        raise
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load product catalog into database")
    parser.add_argument("file", help="Path to catalog file (XLSX or CSV)")

    args = parser.parse_args()
    asyncio.run(main(args.file))
