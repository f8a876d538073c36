"""
Contracts for the collaborators the conversation core depends on.
SQL implementations live in pedido_bot.db, in-memory ones in pedido_bot.db.memory.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.conversation.messages import OutboundMessage
from pedido_bot.core.orders.models import OrderLineItem, SavedOrder


@dataclass
class SessionRecord:
    """Raw stored session. `tag` is None when the user has no record yet."""
    user_id: str
    tag: Optional[str] = None
    data: dict = field(default_factory=dict)
    version: int = 0


class CatalogSource(ABC):
    """Read-only access to catalog products."""

    @abstractmethod
    async def list_products(self) -> list[CatalogProduct]:
        """Full catalog snapshot."""

    async def get_product(self, sku: str) -> Optional[CatalogProduct]:
        """Product by sku, or None."""
        for product in await self.list_products():
            if product.sku == sku:
                return product
        return None


class SessionStore(ABC):
    """Per-user session documents with compare-and-swap writes."""

    @abstractmethod
    async def get_state(self, user_id: str) -> SessionRecord:
        """Stored session, or an empty record at version 0."""

    @abstractmethod
    async def set_state(
        self, user_id: str, tag: str, data: dict, expected_version: int
    ) -> int:
        """
        Write the session if its stored version still equals expected_version.

        Returns:
            The new version

        Raises:
            SessionConflictError: Another writer got there first
        """

    @abstractmethod
    async def reset_state(self, user_id: str) -> None:
        """Unconditionally put the user back to IDLE with no data."""


class OrderSink(ABC):
    """Destination for confirmed orders."""

    @abstractmethod
    async def save_order(
        self, user_id: str, items: list[OrderLineItem], idempotency_key: str
    ) -> str:
        """
        Persist an order and return its id.

        Saving twice with the same idempotency key returns the first order's id.
        """

    @abstractmethod
    async def get_order(self, order_id: str, user_id: str) -> Optional[SavedOrder]:
        """Order by id if it belongs to the user, else None."""


class Messenger(ABC):
    """Outbound delivery. Implementations log failures instead of raising."""

    @abstractmethod
    async def send(self, user_id: str, message: OutboundMessage) -> None:
        pass


class ConversationLog(ABC):
    """Record of every exchange, kept for support and analytics."""

    @abstractmethod
    async def record(self, user_id: str, user_message: str, bot_response: str) -> None:
        pass
