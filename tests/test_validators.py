"""
Tests for follow-up reply validators.
"""

import pytest

from pedido_bot.core.orders.validators import (
    UNIT_CHOICE_PREFIX,
    QuantityValidator,
    UnitValidator,
)


@pytest.mark.unit
class TestQuantityValidator:
    @pytest.mark.parametrize("text,expected", [("12", 12), (" 3 ", 3), ("12 cajas", 12), ("5 uds.", 5)])
    def test_valid(self, text, expected):
        is_valid, quantity, error = QuantityValidator.validate(text)
        assert is_valid
        assert quantity == expected
        assert error is None

    @pytest.mark.parametrize("text", ["", "doce", "1,5", "-2", "2 cajas de leche"])
    def test_invalid(self, text):
        is_valid, quantity, error = QuantityValidator.validate(text)
        assert not is_valid
        assert quantity is None
        assert error

    def test_zero(self):
        is_valid, _, error = QuantityValidator.validate("0")
        assert not is_valid
        assert "mínima" in error

    def test_custom_maximum(self):
        assert QuantityValidator.validate("50", max_quantity=100)[0]
        assert not QuantityValidator.validate("150", max_quantity=100)[0]


@pytest.mark.unit
class TestUnitValidator:
    UNITS = ("caja", "unidad")

    def test_choice_id(self):
        assert UnitValidator.validate(f"{UNIT_CHOICE_PREFIX}caja", self.UNITS) == (True, "caja", None)

    def test_choice_id_not_allowed(self):
        is_valid, unit, _ = UnitValidator.validate(f"{UNIT_CHOICE_PREFIX}pallet", self.UNITS)
        assert not is_valid
        assert unit is None

    def test_free_text(self):
        assert UnitValidator.validate("en cajas", self.UNITS) == (True, "caja", None)

    def test_unknown(self):
        is_valid, unit, error = UnitValidator.validate("toneladas", self.UNITS)
        assert not is_valid
        assert "caja, unidad" in error

    def test_empty(self):
        assert not UnitValidator.validate("  ", self.UNITS)[0]
