"""
SQL implementations of the conversation collaborators.
"""

import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

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
from pedido_bot.db.models import (
    ConversationLogEntry,
    OrderLineRecord,
    OrderRecord,
    ProductRecord,
    SessionRow,
)
from pedido_bot.db.sqlite import Database

logger = logging.getLogger(__name__)


def new_order_id() -> str:
    """Short uppercase order id, e.g. 'A1B2C3D4'."""
    return uuid.uuid4().hex[:8].upper()


# =============================================================================
# CATALOG
# =============================================================================


class SqlCatalogRepository(CatalogSource):
    """Catalog stored in the products table."""

    def __init__(self, database: Database):
        self.db = database

    @staticmethod
    def _to_product(record: ProductRecord) -> CatalogProduct:
        return CatalogProduct(
            sku=record.sku,
            name=record.name,
            short_name=record.short_name,
            search_terms=tuple(record.search_terms or ()),
            units=tuple(record.units or ()),
            unit_codes=dict(record.unit_codes or {}),
            facility_code=record.facility_code,
        )

    async def list_products(self) -> list[CatalogProduct]:
        async with self.db.session() as session:
            result = await session.execute(select(ProductRecord).order_by(ProductRecord.id))
            return [self._to_product(r) for r in result.scalars().all()]

    async def get_product(self, sku: str) -> Optional[CatalogProduct]:
        async with self.db.session() as session:
            result = await session.execute(
                select(ProductRecord).where(ProductRecord.sku == sku)
            )
            record = result.scalar_one_or_none()
            return self._to_product(record) if record else None

    async def upsert_products(self, products: Iterable[CatalogProduct]) -> dict:
        """
        Insert new products and update existing ones by sku.

        Returns:
            Stats dict with created/updated counts
        """
        stats = {"created": 0, "updated": 0}

        async with self.db.session() as session:
            result = await session.execute(select(ProductRecord))
            existing = {r.sku: r for r in result.scalars().all()}

            for product in products:
                record = existing.get(product.sku)
                if record is None:
                    record = ProductRecord(sku=product.sku)
                    session.add(record)
                    existing[product.sku] = record
                    stats["created"] += 1
                else:
                    stats["updated"] += 1

                record.name = product.name
                record.short_name = product.short_name
                record.search_terms = list(product.search_terms)
                record.units = list(product.units)
                record.unit_codes = dict(product.unit_codes)
                record.facility_code = product.facility_code

        logger.info(f"Catalog upsert: {stats['created']} created, {stats['updated']} updated")
        return stats


# =============================================================================
# SESSIONS
# =============================================================================


class SqlSessionStore(SessionStore):
    """
    Session rows with optimistic concurrency.

    Version 0 means "no row yet"; every successful write bumps the version by one.
    """

    def __init__(self, database: Database):
        self.db = database

    async def get_state(self, user_id: str) -> SessionRecord:
        async with self.db.session() as session:
            row = await session.get(SessionRow, user_id)
            if row is None:
                return SessionRecord(user_id=user_id)
            return SessionRecord(
                user_id=user_id,
                tag=row.tag,
                data=dict(row.data or {}),
                version=row.version,
            )

    async def set_state(
        self, user_id: str, tag: str, data: dict, expected_version: int
    ) -> int:
        new_version = expected_version + 1

        if expected_version == 0:
            try:
                async with self.db.session() as session:
                    session.add(SessionRow(user_id=user_id, tag=tag, data=data, version=new_version))
            except IntegrityError:
                raise SessionConflictError(user_id, expected_version)
            return new_version

        async with self.db.session() as session:
            result = await session.execute(
                update(SessionRow)
                .where(SessionRow.user_id == user_id, SessionRow.version == expected_version)
                .values(tag=tag, data=data, version=new_version)
            )
            if result.rowcount != 1:
                raise SessionConflictError(user_id, expected_version)
        return new_version

    async def reset_state(self, user_id: str) -> None:
        async with self.db.session() as session:
            row = await session.get(SessionRow, user_id)
            if row is None:
                session.add(SessionRow(user_id=user_id, tag=None, data={}, version=1))
            else:
                row.tag = None
                row.data = {}
                row.version = row.version + 1
        logger.info(f"Session reset for {user_id}")


# =============================================================================
# ORDERS
# =============================================================================


class SqlOrderRepository(OrderSink):
    """Confirmed orders, idempotent on the confirmation key."""

    def __init__(self, database: Database):
        self.db = database

    async def _find_by_key(self, idempotency_key: str) -> Optional[str]:
        async with self.db.session() as session:
            result = await session.execute(
                select(OrderRecord.id).where(OrderRecord.idempotency_key == idempotency_key)
            )
            return result.scalar_one_or_none()

    async def save_order(
        self, user_id: str, items: list[OrderLineItem], idempotency_key: str
    ) -> str:
        existing = await self._find_by_key(idempotency_key)
        if existing:
            logger.info(f"Order {existing} already saved for key {idempotency_key}")
            return existing

        order_id = new_order_id()
        try:
            async with self.db.session() as session:
                order = OrderRecord(id=order_id, user_id=user_id, idempotency_key=idempotency_key)
                session.add(order)
                for position, item in enumerate(items):
                    session.add(OrderLineRecord(
                        order_id=order_id,
                        position=position,
                        sku=item.sku,
                        name=item.name,
                        short_name=item.short_name,
                        quantity=item.quantity,
                        unit=item.unit,
                        unit_code=item.unit_code,
                        facility_code=item.facility_code,
                    ))
        except IntegrityError:
            # Lost the race against a concurrent confirmation with the same key
            existing = await self._find_by_key(idempotency_key)
            if existing is None:
                raise
            return existing

        return order_id

    async def get_order(self, order_id: str, user_id: str) -> Optional[SavedOrder]:
        async with self.db.session() as session:
            result = await session.execute(
                select(OrderRecord).where(
                    OrderRecord.id == order_id, OrderRecord.user_id == user_id
                )
            )
            order = result.scalar_one_or_none()
            if order is None:
                return None

            return SavedOrder(
                id=order.id,
                user_id=order.user_id,
                created_at=order.created_at,
                items=[
                    OrderLineItem(
                        sku=line.sku,
                        name=line.name,
                        short_name=line.short_name,
                        quantity=line.quantity,
                        unit=line.unit,
                        unit_code=line.unit_code,
                        facility_code=line.facility_code,
                    )
                    for line in order.lines
                ],
            )


# =============================================================================
# CONVERSATION LOG
# =============================================================================


class SqlConversationLog(ConversationLog):
    """Append-only log of exchanges."""

    def __init__(self, database: Database):
        self.db = database

    async def record(self, user_id: str, user_message: str, bot_response: str) -> None:
        async with self.db.session() as session:
            session.add(ConversationLogEntry(
                user_id=user_id,
                user_message=user_message,
                bot_response=bot_response,
            ))
