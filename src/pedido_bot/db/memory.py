"""
In-memory collaborators. Used by tests and for running the bot without a database.
"""

import copy
from typing import Iterable, Optional

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.conversation.ports import (
    CatalogSource,
    ConversationLog,
    OrderSink,
    SessionRecord,
    SessionStore,
)
from pedido_bot.core.errors import SessionConflictError
from pedido_bot.core.orders.models import OrderLineItem, SavedOrder
from pedido_bot.db.repositories import new_order_id


class InMemoryCatalog(CatalogSource):
    def __init__(self, products: Iterable[CatalogProduct] = ()):
        self.products = list(products)

    async def list_products(self) -> list[CatalogProduct]:
        return list(self.products)


class InMemorySessionStore(SessionStore):
    """Same compare-and-swap contract as the SQL store."""

    def __init__(self):
        self._records: dict[str, SessionRecord] = {}

    async def get_state(self, user_id: str) -> SessionRecord:
        record = self._records.get(user_id)
        if record is None:
            return SessionRecord(user_id=user_id)
        return copy.deepcopy(record)

    async def set_state(
        self, user_id: str, tag: str, data: dict, expected_version: int
    ) -> int:
        current = self._records.get(user_id)
        current_version = current.version if current else 0
        if current_version != expected_version:
            raise SessionConflictError(user_id, expected_version)

        self._records[user_id] = SessionRecord(
            user_id=user_id,
            tag=tag,
            data=copy.deepcopy(data),
            version=expected_version + 1,
        )
        return expected_version + 1

    async def reset_state(self, user_id: str) -> None:
        current = self._records.get(user_id)
        version = current.version + 1 if current else 1
        self._records[user_id] = SessionRecord(user_id=user_id, version=version)

    def put_raw(self, user_id: str, tag: Optional[str], data: dict, version: int = 1) -> None:
        """Store a record as-is, bypassing the version check."""
        self._records[user_id] = SessionRecord(user_id=user_id, tag=tag, data=data, version=version)


class InMemoryOrderRepository(OrderSink):
    def __init__(self):
        self.orders: dict[str, SavedOrder] = {}
        self._by_key: dict[str, str] = {}

    async def save_order(
        self, user_id: str, items: list[OrderLineItem], idempotency_key: str
    ) -> str:
        if idempotency_key in self._by_key:
            return self._by_key[idempotency_key]

        order_id = new_order_id()
        self.orders[order_id] = SavedOrder(id=order_id, user_id=user_id, items=list(items))
        self._by_key[idempotency_key] = order_id
        return order_id

    async def get_order(self, order_id: str, user_id: str) -> Optional[SavedOrder]:
        order = self.orders.get(order_id)
        if order is None or order.user_id != user_id:
            return None
        return order


class InMemoryConversationLog(ConversationLog):
    def __init__(self):
        self.entries: list[tuple[str, str, str]] = []

    async def record(self, user_id: str, user_message: str, bot_response: str) -> None:
        self.entries.append((user_id, user_message, bot_response))
