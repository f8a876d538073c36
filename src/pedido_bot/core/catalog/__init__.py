"""
Catalog module: product reference data and fuzzy matching.
"""

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.catalog.matcher import MatchResult, match_products, score_product

__all__ = [
    "CatalogProduct",
    "MatchResult",
    "match_products",
    "score_product",
]
