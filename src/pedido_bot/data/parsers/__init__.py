"""
Catalog parsers for spreadsheet files.
"""

from pedido_bot.data.parsers.catalog_parser import (
    ParsedCatalog,
    parse_catalog_file,
    parse_catalog_frame,
)

__all__ = [
    "ParsedCatalog",
    "parse_catalog_file",
    "parse_catalog_frame",
]
