"""
Wiring of the conversation engine with its collaborators.
"""

from pedido_bot.config import settings
from pedido_bot.core.conversation.engine import ConversationEngine
from pedido_bot.core.conversation.machine import ConversationStateMachine
from pedido_bot.core.conversation.ports import Messenger
from pedido_bot.core.orders.extractor import EntityResolver
from pedido_bot.core.orders.segmenter import ItemSegmenter
from pedido_bot.db.repositories import (
    SqlCatalogRepository,
    SqlConversationLog,
    SqlOrderRepository,
    SqlSessionStore,
)
from pedido_bot.db.sqlite import Database, db
from pedido_bot.integrations.llm import get_default_oracle


def build_engine(messenger: Messenger, database: Database = db) -> ConversationEngine:
    """Conversation engine backed by the SQL repositories and the configured oracle."""
    oracle = get_default_oracle()

    machine = ConversationStateMachine(
        catalog=SqlCatalogRepository(database),
        orders=SqlOrderRepository(database),
        segmenter=ItemSegmenter(oracle=oracle, strategy=settings.segmentation_strategy),
        resolver=EntityResolver(oracle=oracle, default_unit=settings.default_unit),
        max_quantity=settings.max_quantity,
        default_facility_code=settings.default_facility_code,
    )

    return ConversationEngine(
        machine=machine,
        sessions=SqlSessionStore(database),
        messenger=messenger,
        conversation_log=SqlConversationLog(database),
        conflict_retries=settings.session_conflict_retries,
    )
