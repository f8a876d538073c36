"""
Spreadsheet parser for product catalogs.

Expected columns (header row, any order):
    sku, name, short_name, search_terms, units, unit_codes, facility_code

List columns are separated by ";" or ",". unit_codes pairs are "unit=CODE".
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from pedido_bot.core.catalog.models import CatalogProduct

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = ("sku", "name")
LIST_SEPARATOR = re.compile(r"[;,]")


@dataclass
class ParsedCatalog:
    """Result of parsing one catalog file."""
    products: list[CatalogProduct] = field(default_factory=list)
    skipped_rows: list[int] = field(default_factory=list)


def _cell(row: pd.Series, column: str) -> str:
    value = row.get(column)
    if value is None or pd.isna(value):
        return ""
    # Excel turns numeric skus into floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in LIST_SEPARATOR.split(value) if part.strip())


def _parse_unit_codes(value: str) -> dict[str, str]:
    codes = {}
    for pair in _split_list(value):
        unit, sep, code = pair.partition("=")
        if sep and unit.strip() and code.strip():
            codes[unit.strip()] = code.strip()
    return codes


def parse_catalog_frame(df: pd.DataFrame) -> ParsedCatalog:
    """
    Build catalog products from a DataFrame.

    Rows without sku or name are skipped; short_name falls back to name.
    Duplicate skus keep the last row.
    """
    df = df.rename(columns=lambda c: str(c).strip().lower())
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Catalog is missing columns: {', '.join(missing)}")

    parsed = ParsedCatalog()
    by_sku: dict[str, CatalogProduct] = {}

    for idx, row in df.iterrows():
        sku = _cell(row, "sku")
        name = _cell(row, "name")
        if not sku or not name:
            parsed.skipped_rows.append(int(idx))
            continue

        by_sku[sku] = CatalogProduct(
            sku=sku,
            name=name,
            short_name=_cell(row, "short_name") or name,
            search_terms=_split_list(_cell(row, "search_terms")),
            units=_split_list(_cell(row, "units")),
            unit_codes=_parse_unit_codes(_cell(row, "unit_codes")),
            facility_code=_cell(row, "facility_code") or None,
        )

    parsed.products = list(by_sku.values())
    if parsed.skipped_rows:
        logger.warning(f"Skipped {len(parsed.skipped_rows)} catalog rows without sku or name")
    return parsed


def parse_catalog_file(file_path: str | Path) -> ParsedCatalog:
    """
    Parse a catalog spreadsheet.

    Raises:
        ValueError: If file format is not supported
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if suffix in [".xlsx", ".xls"]:
        df = pd.read_excel(file_path, dtype=str)
    elif suffix == ".csv":
        df = pd.read_csv(file_path, dtype=str)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")

    return parse_catalog_frame(df)
