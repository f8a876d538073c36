"""
Keyword and menu-id detection for conversation commands.
Pattern-based only; product interpretation lives in the matcher and extractor.
"""

import re
from typing import Optional

from pedido_bot.core.text import normalize


# Menu and button ids (what interactive replies send back)
MENU_START_ORDER = "menu:start_order"
MENU_ORDER_STATUS = "menu:order_status"
CANCEL_ID = "order:cancel"
PRODUCT_CHOICE_PREFIX = "order:product:"
CART_CONFIRM = "order:cart:confirm"
CART_ADD_MORE = "order:cart:add"
CART_REMOVE_PREFIX = "order:cart:remove:"
FINAL_YES = "order:final:yes"
FINAL_NO = "order:final:no"

CANCEL_PATTERN = re.compile(r'\bcancel(a|ar|ado)?\b')
RESET_PATTERN = re.compile(r'^/?(reset|reiniciar|reinicio)\b')

START_ORDER_PATTERNS = [
    r'\bpedido\b',
    r'\bpedir\b',
    r'\bordenar\b',
    r'\bcomprar\b',
    r'\bhacer\s+un\s+pedido\b',
]
START_ORDER_PATTERN = re.compile('|'.join(START_ORDER_PATTERNS))

ORDER_STATUS_PATTERN = re.compile(r'\bestado\b')

CONFIRM_PATTERNS = [
    r'^s[ií][,!.]?\s*$',
    r'^s[ií][,.]?\s*(confirm|claro|dale)',
    r'^confirm(o|ar|ado)',
    r'^dale\b',
    r'^ok\b',
    r'^correcto\b',
]
CONFIRM_PATTERN = re.compile('|'.join(CONFIRM_PATTERNS))

DECLINE_PATTERN = re.compile(r'^(no|todavia no|aun no|cambiar|modificar)\b')

REMOVE_PATTERN = re.compile(r'^(quitar|eliminar|borrar|sacar)\s+(\d+)\b')


def is_cancel(text: str) -> bool:
    """Check if text asks to cancel the current operation."""
    return text.strip() == CANCEL_ID or bool(CANCEL_PATTERN.search(normalize(text)))


def is_reset(text: str) -> bool:
    """Check if text asks to reset the whole session."""
    return bool(RESET_PATTERN.match(normalize(text).strip()))


def is_start_order(text: str) -> bool:
    """Check if text starts a new order (menu button or keywords)."""
    return text.strip() == MENU_START_ORDER or bool(START_ORDER_PATTERN.search(normalize(text)))


def is_order_status(text: str) -> bool:
    """Check if text asks for the status of an order."""
    return text.strip() == MENU_ORDER_STATUS or bool(ORDER_STATUS_PATTERN.search(normalize(text)))


def is_confirmation(text: str) -> bool:
    """Check if text confirms (sí, confirmar, dale, ok)."""
    return text.strip() == FINAL_YES or bool(CONFIRM_PATTERN.search(normalize(text).strip()))


def is_decline(text: str) -> bool:
    """Check if text declines the final confirmation."""
    return text.strip() == FINAL_NO or bool(DECLINE_PATTERN.search(normalize(text).strip()))


def parse_remove_index(text: str) -> Optional[int]:
    """
    Zero-based cart index from a remove button or "quitar N".

    Returns None when text is not a remove request.
    """
    text = text.strip()
    if text.startswith(CART_REMOVE_PREFIX):
        suffix = text[len(CART_REMOVE_PREFIX):]
        return int(suffix) if suffix.isdigit() else None

    match = REMOVE_PATTERN.match(normalize(text))
    if match:
        return int(match.group(2)) - 1
    return None
