"""
Quantity and unit extraction for a single item phrase.

`extract` is a pure rule-based analysis. `EntityResolver` wraps it and lets the
oracle fill whatever the rules could not find.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.errors import OracleError
from pedido_bot.core.text import normalize, tokenize
from pedido_bot.integrations.llm.oracle import OrderOracle

logger = logging.getLogger(__name__)


MAX_UNIT_DISTANCE = 2

# "3 botellas de 500 ml": 500 is a container size, not a quantity
VOLUME_SUFFIXES = ("ml", "cl", "cc", "l", "lt", "lts", "litro", "litros", "oz")

NUMBER_PATTERN = re.compile(r"(?<!\d)(?<!\d[.,])(\d+)(?!\d)(?![.,]\d)(?:\s*([a-z]+))?")

# Indefinite articles read as "one" when no digits are present
ARTICLE_QUANTITIES = {"un": 1, "una": 1, "uno": 1}


@dataclass
class Extraction:
    """Partial result: either field may be missing."""
    quantity: Optional[int] = None
    unit: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.quantity is not None and self.unit is not None

    @property
    def missing(self) -> Optional[str]:
        """
        Next thing to ask for: 'quantity', 'unit' or None.

        A phrase with a unit but no quantity is treated as quantity-missing.
        """
        if self.quantity is None:
            return "quantity"
        if self.unit is None:
            return "unit"
        return None


def _names_unit(word: str, units: Sequence[str]) -> bool:
    """True when the word is one of the units, singular or plural."""
    for unit in units:
        target = normalize(unit).strip()
        if target and word in (target, target + "s", target + "es"):
            return True
    return False


def extract_quantity(phrase: str, units: Sequence[str] = ()) -> Optional[int]:
    """
    First positive integer literal in the phrase, ignoring container sizes.

    A volume word that is itself one of the allowed units ("5 litros" of a
    product sold by the litro) is a quantity, not a container size.
    """
    normalized = normalize(phrase)

    for match in NUMBER_PATTERN.finditer(normalized):
        suffix = match.group(2)
        if suffix in VOLUME_SUFFIXES and not _names_unit(suffix, units):
            continue
        value = int(match.group(1))
        return value if value > 0 else None

    for word in tokenize(normalized):
        if word in ARTICLE_QUANTITIES:
            return ARTICLE_QUANTITIES[word]
    return None


def resolve_unit(text: str, units: Sequence[str]) -> Optional[str]:
    """
    Closest allowed unit mentioned in the text.

    Every word is compared against every allowed unit. Short or numeric words
    only count on an exact match. Returns the allowed unit as listed.
    """
    words = tokenize(text)
    best_unit = None
    best_distance = MAX_UNIT_DISTANCE + 1

    for unit in units:
        target = normalize(unit).strip()
        if not target:
            continue
        for word in words:
            if word == target:
                distance = 0
            elif word.isalpha() and len(word) > 2:
                distance = Levenshtein.distance(word, target, score_cutoff=MAX_UNIT_DISTANCE)
            else:
                continue
            if distance < best_distance:
                best_distance = distance
                best_unit = unit

    return best_unit if best_distance <= MAX_UNIT_DISTANCE else None


def extract(phrase: str, units: Sequence[str]) -> Extraction:
    """
    Rule-based extraction against a product's allowed units.

    >>> extract("20 cajas", ["caja", "unidad"])
    Extraction(quantity=20, unit='caja')
    """
    return Extraction(quantity=extract_quantity(phrase, units), unit=resolve_unit(phrase, units))


class EntityResolver:
    """Rules first; the oracle only fills gaps."""

    def __init__(self, oracle: Optional[OrderOracle] = None, default_unit: str = "unidad"):
        self.oracle = oracle
        self.default_unit = default_unit

    def allowed_units(self, product: CatalogProduct) -> tuple[str, ...]:
        """Product units, or the default unit when the catalog lists none."""
        return product.units or (self.default_unit,)

    async def resolve(self, phrase: str, product: CatalogProduct) -> Extraction:
        units = self.allowed_units(product)
        result = extract(phrase, units)

        if not product.units and result.unit is None:
            result.unit = self.default_unit

        if result.is_complete or self.oracle is None:
            return result

        try:
            entities = await self.oracle.extract_entities(phrase, [product])
        except OracleError as e:
            logger.warning(f"Oracle extraction failed for '{phrase}': {e}")
            return result

        if entities is None or (entities.sku is not None and entities.sku != product.sku):
            return result

        if result.quantity is None and entities.quantity is not None and entities.quantity > 0:
            result.quantity = entities.quantity
        if result.unit is None and entities.unit is not None:
            result.unit = resolve_unit(entities.unit, units)

        return result
