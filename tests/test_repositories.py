"""
Tests for the SQLite-backed repositories.
"""

import dataclasses

import pytest
import pytest_asyncio
from sqlalchemy import select

from pedido_bot.bot.dependencies import build_engine
from pedido_bot.core.errors import SessionConflictError
from pedido_bot.core.orders import intent
from pedido_bot.core.orders.models import OrderLineItem
from pedido_bot.data.loaders.catalog_loader import load_catalog
from pedido_bot.db.models import ConversationLogEntry
from pedido_bot.db.repositories import (
    SqlCatalogRepository,
    SqlConversationLog,
    SqlOrderRepository,
    SqlSessionStore,
)
from pedido_bot.db.sqlite import Database

from conftest import GASEOSA, LECHE, RecordingMessenger

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def database(tmp_path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.init()
    yield database
    await database.close()


async def log_entries(database, user_id):
    async with database.session() as session:
        result = await session.execute(
            select(ConversationLogEntry)
            .where(ConversationLogEntry.user_id == user_id)
            .order_by(ConversationLogEntry.id)
        )
        return list(result.scalars().all())


@pytest_asyncio.fixture
async def catalog_repo(database, products):
    repository = SqlCatalogRepository(database)
    await repository.upsert_products(products)
    return repository


class TestCatalogRepository:
    async def test_round_trip(self, catalog_repo, products):
        stored = await catalog_repo.list_products()
        assert [p.sku for p in stored] == [p.sku for p in products]
        assert stored[0] == LECHE
        assert stored[0].unit_codes == LECHE.unit_codes

    async def test_get_product(self, catalog_repo):
        assert await catalog_repo.get_product(GASEOSA.sku) == GASEOSA
        assert await catalog_repo.get_product("NOPE") is None

    async def test_upsert_updates_by_sku(self, catalog_repo):
        renamed = dataclasses.replace(LECHE, name="Leche Entera 1 Litro")
        stats = await catalog_repo.upsert_products([renamed])

        assert stats == {"created": 0, "updated": 1}
        assert (await catalog_repo.get_product(LECHE.sku)).name == "Leche Entera 1 Litro"


class TestSessionStore:
    async def test_missing_session_is_version_zero(self, database):
        record = await SqlSessionStore(database).get_state("u1")
        assert record.tag is None
        assert record.version == 0

    async def test_compare_and_swap(self, database):
        store = SqlSessionStore(database)

        assert await store.set_state("u1", "IDLE", {"greeted": True}, expected_version=0) == 1
        assert await store.set_state("u1", "REVIEWING_CART", {"step": {"cart": []}}, expected_version=1) == 2

        record = await store.get_state("u1")
        assert (record.tag, record.data, record.version) == ("REVIEWING_CART", {"step": {"cart": []}}, 2)

    async def test_stale_update_rejected(self, database):
        store = SqlSessionStore(database)
        await store.set_state("u1", "IDLE", {}, expected_version=0)
        await store.set_state("u1", "IDLE", {}, expected_version=1)

        with pytest.raises(SessionConflictError):
            await store.set_state("u1", "COLLECTING_ORDER_TEXT", {}, expected_version=1)
        assert (await store.get_state("u1")).tag == "IDLE"

    async def test_concurrent_first_write_rejected(self, database):
        store = SqlSessionStore(database)
        await store.set_state("u1", "IDLE", {}, expected_version=0)

        with pytest.raises(SessionConflictError):
            await store.set_state("u1", "IDLE", {}, expected_version=0)

    async def test_reset_bumps_version(self, database):
        store = SqlSessionStore(database)
        await store.set_state("u1", "REVIEWING_CART", {"step": {}}, expected_version=0)

        await store.reset_state("u1")
        record = await store.get_state("u1")
        assert (record.tag, record.data, record.version) == (None, {}, 2)

        await store.reset_state("u2")
        assert (await store.get_state("u2")).version == 1


class TestOrderRepository:
    ITEMS = [
        OrderLineItem.from_product(LECHE, 2, "caja"),
        OrderLineItem.from_product(GASEOSA, 3, "unidad", default_facility_code="1000"),
    ]

    async def test_save_and_get(self, database):
        repository = SqlOrderRepository(database)
        order_id = await repository.save_order("u1", self.ITEMS, idempotency_key="k1")

        order = await repository.get_order(order_id, "u1")
        assert order.user_id == "u1"
        assert order.items == self.ITEMS
        assert order.order_number == f"#{order_id}"

    async def test_idempotent(self, database):
        repository = SqlOrderRepository(database)
        first = await repository.save_order("u1", self.ITEMS, idempotency_key="k1")
        second = await repository.save_order("u1", self.ITEMS, idempotency_key="k1")
        other = await repository.save_order("u1", self.ITEMS, idempotency_key="k2")

        assert first == second
        assert other != first

    async def test_unknown_order(self, database):
        assert await SqlOrderRepository(database).get_order("NOPE", "u1") is None

    async def test_other_users_order_is_hidden(self, database):
        repository = SqlOrderRepository(database)
        order_id = await repository.save_order("u1", self.ITEMS, idempotency_key="k1")

        assert await repository.get_order(order_id, "u2") is None
        assert (await repository.get_order(order_id, "u1")).id == order_id


class TestConversationLog:
    async def test_records_exchanges_per_user(self, database):
        log = SqlConversationLog(database)
        await log.record("u1", "hola", "menu")
        await log.record("u2", "hola", "menu")
        await log.record("u1", "pedido", "¿Qué productos?")

        entries = await log_entries(database, "u1")
        assert [(e.user_message, e.bot_response) for e in entries] == [
            ("hola", "menu"),
            ("pedido", "¿Qué productos?"),
        ]


class TestLoadCatalog:
    async def test_load_csv(self, database, tmp_path):
        path = tmp_path / "catalogo.csv"
        path.write_text(
            "sku,name,short_name,units\n"
            "ARR-001,Arroz Largo Fino 1kg,Arroz,paquete;bolsa\n"
            ",Sin codigo,,\n",
            encoding="utf-8",
        )

        stats = await load_catalog(path, database=database)

        assert stats["total_products"] == 1
        assert stats["skipped_rows"] == 1
        assert stats["created"] == 1
        product = await SqlCatalogRepository(database).get_product("ARR-001")
        assert product.units == ("paquete", "bolsa")

    async def test_reload_updates(self, database, tmp_path):
        path = tmp_path / "catalogo.csv"
        path.write_text("sku,name\nARR-001,Arroz\n", encoding="utf-8")

        await load_catalog(path, database=database)
        stats = await load_catalog(path, database=database)

        assert (stats["created"], stats["updated"]) == (0, 1)


class TestSqlBackedEngine:
    async def test_order_end_to_end(self, database, catalog_repo):
        messenger = RecordingMessenger()
        engine = build_engine(messenger, database=database)

        for text in ["pedido", "2 cajas de leche y 3 gaseosas", intent.CART_CONFIRM, intent.FINAL_YES]:
            await engine.handle_message("u1", text)

        order_id = messenger.bodies("u1")[-1].split("#", 1)[1].split("<", 1)[0]
        order = await SqlOrderRepository(database).get_order(order_id, "u1")
        assert [i.describe() for i in order.items] == [
            "2 caja de Leche Entera 1L",
            "3 unidad de Gaseosa Cola 2L",
        ]

        assert len(await log_entries(database, "u1")) == 4
