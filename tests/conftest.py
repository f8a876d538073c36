"""
Pytest configuration and shared fixtures.
Provides a small catalog, in-memory collaborators and fake oracle/messenger.
"""

from typing import Optional

import pytest

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.conversation.engine import ConversationEngine
from pedido_bot.core.conversation.machine import ConversationStateMachine
from pedido_bot.core.conversation.messages import OutboundMessage
from pedido_bot.core.conversation.ports import Messenger
from pedido_bot.core.errors import OracleError
from pedido_bot.core.orders.extractor import EntityResolver
from pedido_bot.core.orders.segmenter import ItemSegmenter
from pedido_bot.db.memory import (
    InMemoryCatalog,
    InMemoryConversationLog,
    InMemoryOrderRepository,
    InMemorySessionStore,
)
from pedido_bot.integrations.llm.oracle import OracleEntities, OrderOracle


LECHE = CatalogProduct(
    sku="LEC-001",
    name="Leche Entera 1L",
    short_name="Leche Entera",
    search_terms=("leche", "entera"),
    units=("caja", "unidad"),
    unit_codes={"caja": "CJ", "unidad": "UN"},
    facility_code="2000",
)
CERVEZA_RUBIA = CatalogProduct(
    sku="CER-001",
    name="Cerveza Rubia 330ml",
    short_name="Cerveza Rubia",
    search_terms=("cerveza", "rubia"),
    units=("caja", "botella"),
)
CERVEZA_NEGRA = CatalogProduct(
    sku="CER-002",
    name="Cerveza Negra 330ml",
    short_name="Cerveza Negra",
    search_terms=("cerveza", "negra"),
    units=("caja", "botella"),
)
ARROZ = CatalogProduct(
    sku="ARR-001",
    name="Arroz Blanco 1kg",
    short_name="Arroz",
    search_terms=("arroz",),
    units=("paquete", "bolsa"),
)
GASEOSA = CatalogProduct(
    sku="GAS-001",
    name="Gaseosa Cola 2L",
    short_name="Gaseosa Cola",
    search_terms=("gaseosa", "cola"),
)


class RecordingMessenger(Messenger):
    """Keeps every sent message per user."""

    def __init__(self):
        self.sent: list[tuple[str, OutboundMessage]] = []

    async def send(self, user_id: str, message: OutboundMessage) -> None:
        self.sent.append((user_id, message))

    def bodies(self, user_id: Optional[str] = None) -> list[str]:
        return [m.body for uid, m in self.sent if user_id is None or uid == user_id]


class FakeOracle(OrderOracle):
    """Scripted oracle. Set `fail=True` to make every call raise OracleError."""

    def __init__(
        self,
        splits: Optional[list[str]] = None,
        entities: Optional[OracleEntities] = None,
        fail: bool = False,
    ):
        self.splits = splits
        self.entities = entities
        self.fail = fail
        self.split_calls: list[str] = []
        self.extract_calls: list[str] = []

    async def split_items(self, text: str) -> list[str]:
        self.split_calls.append(text)
        if self.fail:
            raise OracleError("oracle unavailable")
        return list(self.splits or [])

    async def extract_entities(self, text, products) -> Optional[OracleEntities]:
        self.extract_calls.append(text)
        if self.fail:
            raise OracleError("oracle unavailable")
        return self.entities


@pytest.fixture
def products() -> list[CatalogProduct]:
    return [LECHE, CERVEZA_RUBIA, CERVEZA_NEGRA, ARROZ, GASEOSA]


@pytest.fixture
def catalog(products) -> InMemoryCatalog:
    return InMemoryCatalog(products)


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def orders() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def conversation_log() -> InMemoryConversationLog:
    return InMemoryConversationLog()


@pytest.fixture
def messenger() -> RecordingMessenger:
    return RecordingMessenger()


@pytest.fixture
def machine(catalog, orders) -> ConversationStateMachine:
    return ConversationStateMachine(
        catalog=catalog,
        orders=orders,
        segmenter=ItemSegmenter(),
        resolver=EntityResolver(default_unit="unidad"),
        max_quantity=10000,
        default_facility_code="1000",
    )


@pytest.fixture
def engine(machine, sessions, messenger, conversation_log) -> ConversationEngine:
    return ConversationEngine(
        machine=machine,
        sessions=sessions,
        messenger=messenger,
        conversation_log=conversation_log,
        conflict_retries=3,
    )
