"""
Catalog loader - imports a parsed catalog spreadsheet into the database.
"""

import logging
from pathlib import Path
from typing import Optional

from pedido_bot.data.parsers import parse_catalog_file
from pedido_bot.db.repositories import SqlCatalogRepository
from pedido_bot.db.sqlite import Database, db

logger = logging.getLogger(__name__)


async def load_catalog(file_path: str | Path, database: Optional[Database] = None) -> dict:
    """
    Load catalog file into database.

    Args:
        file_path: Path to XLSX or CSV file
        database: Target database (global one by default)

    Returns:
        Statistics about loaded data
    """
    file_path = Path(file_path)
    parsed = parse_catalog_file(file_path)

    repository = SqlCatalogRepository(database or db)
    upserted = await repository.upsert_products(parsed.products)

    stats = {
        "file": file_path.name,
        "total_products": len(parsed.products),
        "skipped_rows": len(parsed.skipped_rows),
        **upserted,
    }
    logger.info(f"Loaded catalog {file_path.name}: {stats}")
    return stats
