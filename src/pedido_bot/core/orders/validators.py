"""
Validators for follow-up replies during order collection.
"""

import re
from typing import Optional, Sequence, Tuple

from pedido_bot.core.orders.extractor import resolve_unit
from pedido_bot.core.text import normalize


UNIT_CHOICE_PREFIX = "order:unit:"


class QuantityValidator:
    """Validate a quantity reply."""

    MIN_QUANTITY = 1
    MAX_QUANTITY = 10000

    QUANTITY_PATTERN = re.compile(r'^\s*(\d+)\s*[a-z]*\.?\s*$')

    @classmethod
    def validate(
        cls, quantity_str: str, max_quantity: Optional[int] = None
    ) -> Tuple[bool, Optional[int], Optional[str]]:
        """
        Validate quantity.

        Accepts a bare number, optionally followed by a word ("12", "12 cajas").

        Returns:
            Tuple of (is_valid, quantity, error_message)
        """
        quantity_str = normalize(quantity_str or "").strip()
        max_quantity = max_quantity or cls.MAX_QUANTITY

        if not quantity_str:
            return False, None, "La cantidad no puede estar vacía"

        match = cls.QUANTITY_PATTERN.match(quantity_str)
        if not match:
            return False, None, "No entendí la cantidad. Escribe solo un número, por ejemplo: 10"

        quantity = int(match.group(1))

        if quantity < cls.MIN_QUANTITY:
            return False, None, f"La cantidad mínima es {cls.MIN_QUANTITY}"

        if quantity > max_quantity:
            return False, None, f"La cantidad máxima por producto es {max_quantity}"

        return True, quantity, None


class UnitValidator:
    """Validate a unit reply against the units a product allows."""

    @classmethod
    def validate(
        cls, unit_str: str, units: Sequence[str]
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate unit from a menu choice id or free text.

        Returns:
            Tuple of (is_valid, unit, error_message)
        """
        unit_str = (unit_str or "").strip()

        if not unit_str:
            return False, None, "La unidad no puede estar vacía"

        if unit_str.startswith(UNIT_CHOICE_PREFIX):
            chosen = unit_str[len(UNIT_CHOICE_PREFIX):]
            if chosen in units:
                return True, chosen, None
            return False, None, "Esa unidad no está disponible para este producto"

        unit = resolve_unit(unit_str, units)
        if unit is None:
            return False, None, (
                "No reconocí la unidad. Opciones disponibles: " + ", ".join(units)
            )

        return True, unit, None
