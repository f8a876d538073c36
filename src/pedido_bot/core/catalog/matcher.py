"""
Fuzzy catalog matcher.

Scores every product against the keywords of a phrase and returns all products
sharing the best score. Ties are never broken here: two or more results mean
the caller has to ask the user.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from rapidfuzz.distance import Levenshtein

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.text import normalize, tokenize

logger = logging.getLogger(__name__)


EXACT_WEIGHT = 3
NAME_SUBSTRING_WEIGHT = 1
FUZZY_WEIGHT = 2
MAX_FUZZY_DISTANCE = 2

# Words of this length or shorter ("de", "la", "y") never count as keywords
MIN_KEYWORD_LENGTH = 2


@dataclass
class MatchResult:
    """Products sharing the best score for a phrase."""
    products: list[CatalogProduct]
    score: int

    @property
    def is_empty(self) -> bool:
        return not self.products

    @property
    def is_ambiguous(self) -> bool:
        return len(self.products) > 1


def extract_keywords(text: str) -> list[str]:
    """Normalized words long enough to be meaningful for matching."""
    return tokenize(text, min_length=MIN_KEYWORD_LENGTH)


def score_product(keywords: list[str], product: CatalogProduct) -> int:
    """Relevance score of one product for a set of keywords."""
    terms = {normalize(term) for term in product.search_terms if term}
    name = normalize(product.name)

    exact = 0
    substring = 0
    fuzzy = 0

    for keyword in keywords:
        if keyword in terms:
            exact += 1
        elif any(
            0 < Levenshtein.distance(keyword, term, score_cutoff=MAX_FUZZY_DISTANCE) <= MAX_FUZZY_DISTANCE
            for term in terms
        ):
            fuzzy += 1

        if keyword in name:
            substring += 1

    return EXACT_WEIGHT * exact + NAME_SUBSTRING_WEIGHT * substring + FUZZY_WEIGHT * fuzzy


def match_products(text: str, catalog: Iterable[CatalogProduct]) -> MatchResult:
    """
    Find the best-scoring catalog products for a phrase.

    Args:
        text: Raw user phrase, e.g. "5 cajas de cerveza"
        catalog: Materialized catalog snapshot

    Returns:
        MatchResult with every product whose score equals the maximum,
        or an empty result when nothing scores above zero
    """
    keywords = extract_keywords(text)
    if not keywords:
        return MatchResult(products=[], score=0)

    best_score = 0
    best: list[CatalogProduct] = []

    for product in catalog:
        score = score_product(keywords, product)
        if score <= 0:
            continue
        if score > best_score:
            best_score = score
            best = [product]
        elif score == best_score:
            best.append(product)

    logger.debug(f"Matched '{text}' -> {[p.sku for p in best]} (score {best_score})")
    return MatchResult(products=best, score=best_score)
