"""
User-facing texts and menus emitted by the state machine.
"""

from typing import Sequence

from pedido_bot.core.conversation.messages import ChoiceMessage, ChoiceOption, TextMessage
from pedido_bot.core.orders.intent import (
    CANCEL_ID,
    CART_ADD_MORE,
    CART_CONFIRM,
    FINAL_NO,
    FINAL_YES,
    MENU_ORDER_STATUS,
    MENU_START_ORDER,
)
from pedido_bot.core.orders.models import Cart, PendingItem
from pedido_bot.core.orders.validators import UNIT_CHOICE_PREFIX


WELCOME_MESSAGE = """👋 <b>¡Hola!</b>

Soy el asistente de pedidos. Puedes escribirme tu pedido en lenguaje natural:
• «2 cajas de leche y 3 paquetes de arroz»
• «una cerveza, 5 gaseosas»

Escribe «cancelar» en cualquier momento para descartar el pedido en curso."""

ASK_ORDER_TEXT = (
    "🛒 ¿Qué productos quieres pedir?\n\n"
    "Puedes escribir varios a la vez, por ejemplo: «5 cajas de cerveza y 3 gaseosas»"
)
ASK_MORE_ITEMS = "➕ ¿Qué más quieres agregar?"
ASK_ORDER_ID = "🔎 Escribe el número de pedido que quieres consultar:"
CANCELLED = "Operación cancelada. ¿Hay algo más en lo que pueda ayudarte?"
RESET_DONE = "🔄 Conversación reiniciada. Empecemos de nuevo."
EMPTY_CART = "No agregué ningún producto. Intenta escribir tu pedido de nuevo."
CHOOSE_FROM_MENU = "Por favor elige una de las opciones del menú."
SESSION_ERROR = "Lo siento, perdí el hilo de la conversación. Empecemos de nuevo."
TURN_ERROR = "Lo siento, hubo un error inesperado. Por favor, intenta de nuevo."
UNSUPPORTED_MESSAGE = "Lo siento, por ahora solo puedo procesar mensajes de texto y selecciones de menú."


def main_menu() -> ChoiceMessage:
    return ChoiceMessage.build(
        body="¿Cómo puedo ayudarte hoy?",
        options=[
            ChoiceOption(id=MENU_START_ORDER, title="🛒 Realizar pedido"),
            ChoiceOption(id=MENU_ORDER_STATUS, title="📦 Estado de pedido"),
        ],
    )


def not_found(phrase: str) -> TextMessage:
    return TextMessage(f"😔 No encontré ningún producto para «{phrase}».")


def unresolved(phrase: str) -> TextMessage:
    return TextMessage(f"😔 No pude identificar el producto de «{phrase}». Lo omito.")


def item_added(line: str) -> TextMessage:
    return TextMessage(f"✅ Agregado: {line}")


def ask_quantity(pending: PendingItem) -> TextMessage:
    return TextMessage(
        f"¿Cuántas unidades de <b>{pending.product.name}</b> quieres? Escribe un número."
    )


def unit_menu(pending: PendingItem, units: Sequence[str]) -> ChoiceMessage:
    return ChoiceMessage.build(
        body=(
            f"¿En qué unidad quieres {pending.quantity} de <b>{pending.product.name}</b>?"
        ),
        options=[ChoiceOption(id=f"{UNIT_CHOICE_PREFIX}{unit}", title=unit) for unit in units],
    )


def cart_summary(cart: Cart) -> TextMessage:
    return TextMessage(
        "🧾 <b>Tu pedido</b>\n\n"
        f"{cart.format_summary()}\n\n"
        "Para quitar un producto escribe «quitar N»."
    )


def cart_menu() -> ChoiceMessage:
    return ChoiceMessage.build(
        body="¿Qué quieres hacer?",
        options=[
            ChoiceOption(id=CART_CONFIRM, title="✅ Confirmar"),
            ChoiceOption(id=CART_ADD_MORE, title="➕ Agregar más"),
            ChoiceOption(id=CANCEL_ID, title="❌ Cancelar"),
        ],
    )


def final_confirmation(cart: Cart) -> ChoiceMessage:
    return ChoiceMessage.build(
        body=(
            "📦 <b>Confirmación final</b>\n\n"
            f"{cart.format_summary()}\n\n"
            "¿Registro el pedido?"
        ),
        options=[
            ChoiceOption(id=FINAL_YES, title="✅ Sí, confirmar"),
            ChoiceOption(id=FINAL_NO, title="⬅️ No, volver"),
        ],
    )


def order_saved(order_id: str) -> TextMessage:
    return TextMessage(
        f"🎉 ¡Listo! Tu pedido <b>#{order_id}</b> fue registrado.\n\n"
        "Guarda este número para consultar su estado."
    )


def order_not_found(order_id: str) -> TextMessage:
    return TextMessage(f"No encontré el pedido «{order_id}».")
