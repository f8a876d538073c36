"""
Orders module for Pedido Bot.
Handles item segmentation, entity extraction, cart state and validation.
"""

from pedido_bot.core.orders.models import (
    Cart,
    OrderLineItem,
    PendingItem,
    SavedOrder,
)
from pedido_bot.core.orders.states import ConversationState, ConversationTag
from pedido_bot.core.orders.validators import QuantityValidator, UnitValidator

__all__ = [
    # Models
    "Cart",
    "OrderLineItem",
    "PendingItem",
    "SavedOrder",
    # States
    "ConversationState",
    "ConversationTag",
    # Validators
    "QuantityValidator",
    "UnitValidator",
]
