"""
Tests for command and menu-id detection.
"""

import pytest

from pedido_bot.core.orders import intent


@pytest.mark.unit
class TestCommands:
    @pytest.mark.parametrize("text", ["cancelar", "Cancela todo", "CANCELAR", intent.CANCEL_ID])
    def test_cancel(self, text):
        assert intent.is_cancel(text)

    def test_cancel_not_inside_words(self):
        assert not intent.is_cancel("cancelación de la leche")

    @pytest.mark.parametrize("text", ["/reset", "reset", "Reiniciar"])
    def test_reset(self, text):
        assert intent.is_reset(text)

    def test_reset_only_at_start(self):
        assert not intent.is_reset("no quiero reset")

    def test_start_order(self):
        assert intent.is_start_order("quiero hacer un pedido")
        assert intent.is_start_order(intent.MENU_START_ORDER)
        assert not intent.is_start_order("hola")

    def test_order_status(self):
        assert intent.is_order_status("estado de mi pedido")
        assert intent.is_order_status(intent.MENU_ORDER_STATUS)


@pytest.mark.unit
class TestConfirmation:
    @pytest.mark.parametrize("text", ["sí", "si", "Sí, confirmo", "confirmar", "dale", "ok", intent.FINAL_YES])
    def test_confirm(self, text):
        assert intent.is_confirmation(text)

    @pytest.mark.parametrize("text", ["no", "sigo", "siete cajas"])
    def test_not_confirm(self, text):
        assert not intent.is_confirmation(text)

    @pytest.mark.parametrize("text", ["no", "No, todavía no", "cambiar", intent.FINAL_NO])
    def test_decline(self, text):
        assert intent.is_decline(text)


@pytest.mark.unit
class TestRemoveIndex:
    def test_typed(self):
        assert intent.parse_remove_index("quitar 2") == 1
        assert intent.parse_remove_index("Eliminar 1") == 0

    def test_button(self):
        assert intent.parse_remove_index(f"{intent.CART_REMOVE_PREFIX}3") == 3

    def test_not_a_removal(self):
        assert intent.parse_remove_index("quitar la leche") is None
        assert intent.parse_remove_index(f"{intent.CART_REMOVE_PREFIX}x") is None
