"""
Conversation state machine.

Dispatches every inbound message to the handler of the user's current state.
Handlers never touch storage of the session itself: they return the next state
and the messages to send, and the engine persists and delivers them.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Optional

from pedido_bot.core.conversation import replies
from pedido_bot.core.conversation.messages import OutboundMessage, TextMessage
from pedido_bot.core.conversation.ports import CatalogSource, OrderSink
from pedido_bot.core.errors import InputError, ResolutionError, SessionCorruptionError
from pedido_bot.core.orders import intent
from pedido_bot.core.orders.disambiguation import build_clarification, resolve_choice
from pedido_bot.core.orders.extractor import EntityResolver, resolve_unit
from pedido_bot.core.orders.models import Cart
from pedido_bot.core.orders.orchestrator import CartOrchestrator, Transition
from pedido_bot.core.orders.segmenter import ItemSegmenter
from pedido_bot.core.orders.states import (
    AwaitingClarification,
    AwaitingFinalConfirmation,
    AwaitingOrderStatusId,
    AwaitingQuantity,
    AwaitingUnit,
    CollectingOrderText,
    ConversationState,
    ConversationTag,
    Idle,
    ReviewingCart,
)
from pedido_bot.core.orders.validators import QuantityValidator, UnitValidator
from pedido_bot.core.text import tokenize

logger = logging.getLogger(__name__)


ADD_MORE_WORDS = {"agregar", "anadir", "mas"}


@dataclass
class TurnResult:
    """State to persist and messages to deliver after one inbound message."""
    state: ConversationState
    messages: list[OutboundMessage] = field(default_factory=list)


class ConversationStateMachine:
    """Top-level controller for the order conversation."""

    def __init__(
        self,
        catalog: CatalogSource,
        orders: OrderSink,
        segmenter: Optional[ItemSegmenter] = None,
        resolver: Optional[EntityResolver] = None,
        max_quantity: int = QuantityValidator.MAX_QUANTITY,
        default_facility_code: Optional[str] = None,
    ):
        self.catalog = catalog
        self.orders = orders
        self.segmenter = segmenter or ItemSegmenter()
        self.resolver = resolver or EntityResolver()
        self.max_quantity = max_quantity
        self.orchestrator = CartOrchestrator(
            catalog=catalog,
            resolver=self.resolver,
            default_facility_code=default_facility_code,
        )

        self._handlers: dict[ConversationTag, Callable[..., Awaitable[Transition]]] = {
            ConversationTag.IDLE: self._handle_idle,
            ConversationTag.COLLECTING_ORDER_TEXT: self._handle_collecting,
            ConversationTag.AWAITING_QUANTITY: self._handle_quantity,
            ConversationTag.AWAITING_UNIT: self._handle_unit,
            ConversationTag.AWAITING_CLARIFICATION: self._handle_clarification,
            ConversationTag.REVIEWING_CART: self._handle_reviewing_cart,
            ConversationTag.AWAITING_FINAL_CONFIRMATION: self._handle_final_confirmation,
            ConversationTag.AWAITING_ORDER_STATUS_ID: self._handle_order_status,
        }

    async def dispatch(self, user_id: str, state: ConversationState, text: str) -> TurnResult:
        """
        Handle one inbound message.

        Args:
            user_id: Conversation owner
            state: Current state as read from the session store
            text: Raw text or interactive choice id

        Returns:
            TurnResult with the next state (same version as the input)

        Raises:
            SessionCorruptionError: State has no handler
        """
        text = (text or "").strip()

        if intent.is_reset(text):
            logger.info(f"Session reset by {user_id}")
            if state.tag == ConversationTag.IDLE and not state.greeted:
                # First contact: greet instead of announcing a reset
                return TurnResult(
                    state=ConversationState(step=Idle(), greeted=True, version=state.version),
                    messages=[TextMessage(replies.WELCOME_MESSAGE), replies.main_menu()],
                )
            return TurnResult(
                state=ConversationState(step=Idle(), greeted=False, version=state.version),
                messages=[TextMessage(replies.RESET_DONE), replies.main_menu()],
            )

        if state.tag != ConversationTag.IDLE and intent.is_cancel(text):
            logger.info(f"Order cancelled by {user_id} in {state.tag.value}")
            return TurnResult(
                state=ConversationState(step=Idle(), greeted=state.greeted, version=state.version),
                messages=[TextMessage(replies.CANCELLED)],
            )

        handler = self._handlers.get(state.tag)
        if handler is None:
            raise SessionCorruptionError(f"No handler for state {state.tag!r}")

        try:
            transition = await handler(user_id, state.step, text, state)
        except InputError as e:
            logger.debug(f"Input rejected in {state.tag.value}: {e}")
            messages: list[OutboundMessage] = [TextMessage(f"❌ {e}")]
            if e.reprompt is not None:
                messages.append(e.reprompt)
            return TurnResult(state=state, messages=messages)

        greeted = state.greeted or state.tag == ConversationTag.IDLE
        next_state = ConversationState(step=transition.step, greeted=greeted, version=state.version)
        if next_state.tag != state.tag:
            logger.info(f"{user_id}: {state.tag.value} -> {next_state.tag.value}")
        return TurnResult(state=next_state, messages=transition.messages)

    # =========================================================================
    # IDLE / ORDER STATUS
    # =========================================================================

    async def _handle_idle(
        self, user_id: str, step: Idle, text: str, state: ConversationState
    ) -> Transition:
        if intent.is_order_status(text):
            return Transition(AwaitingOrderStatusId(), [TextMessage(replies.ASK_ORDER_ID)])

        if intent.is_start_order(text):
            return Transition(CollectingOrderText(cart=Cart()), [TextMessage(replies.ASK_ORDER_TEXT)])

        messages: list[OutboundMessage] = []
        if not state.greeted:
            messages.append(TextMessage(replies.WELCOME_MESSAGE))
        messages.append(replies.main_menu())
        return Transition(step, messages)

    async def _handle_order_status(
        self, user_id: str, step: AwaitingOrderStatusId, text: str, state: ConversationState
    ) -> Transition:
        order_id = text.strip().lstrip("#").upper()
        if not order_id:
            raise InputError("Escribe el número de pedido", reprompt=TextMessage(replies.ASK_ORDER_ID))

        order = await self.orders.get_order(order_id, user_id)
        if order is None:
            return Transition(Idle(), [replies.order_not_found(order_id), replies.main_menu()])
        return Transition(Idle(), [TextMessage(order.format_status())])

    # =========================================================================
    # ITEM COLLECTION
    # =========================================================================

    async def _handle_collecting(
        self, user_id: str, step: CollectingOrderText, text: str, state: ConversationState
    ) -> Transition:
        segments = await self.segmenter.segment(text)
        if not segments:
            raise InputError("No recibí ningún producto", reprompt=TextMessage(replies.ASK_ORDER_TEXT))

        logger.info(f"{user_id}: {len(segments)} item(s) queued")
        return await self.orchestrator.drain(step.cart, segments)

    async def _handle_quantity(
        self, user_id: str, step: AwaitingQuantity, text: str, state: ConversationState
    ) -> Transition:
        is_valid, quantity, error = QuantityValidator.validate(text, self.max_quantity)
        if not is_valid:
            raise InputError(error, reprompt=replies.ask_quantity(step.pending))

        pending = replace(step.pending, quantity=quantity)
        units = self.resolver.allowed_units(pending.product)

        # "12 cajas" answers both questions at once
        if pending.unit is None:
            pending.unit = resolve_unit(text, units)

        if pending.unit is None:
            return Transition(
                AwaitingUnit(cart=step.cart, queue=step.queue, pending=pending),
                [replies.unit_menu(pending, units)],
            )

        messages: list[OutboundMessage] = []
        self.orchestrator.add_to_cart(step.cart, pending, messages)
        return await self.orchestrator.drain(step.cart, step.queue, messages)

    async def _handle_unit(
        self, user_id: str, step: AwaitingUnit, text: str, state: ConversationState
    ) -> Transition:
        units = self.resolver.allowed_units(step.pending.product)
        is_valid, unit, error = UnitValidator.validate(text, units)
        if not is_valid:
            raise InputError(error, reprompt=replies.unit_menu(step.pending, units))

        pending = replace(step.pending, unit=unit)
        messages: list[OutboundMessage] = []
        self.orchestrator.add_to_cart(step.cart, pending, messages)
        return await self.orchestrator.drain(step.cart, step.queue, messages)

    async def _handle_clarification(
        self, user_id: str, step: AwaitingClarification, text: str, state: ConversationState
    ) -> Transition:
        sku = resolve_choice(text, step.candidate_skus)
        if sku is None:
            raise InputError(replies.CHOOSE_FROM_MENU, reprompt=await self._clarification_menu(step))

        product = await self.catalog.get_product(sku)
        messages: list[OutboundMessage] = []
        if product is None:
            logger.warning(f"Chosen product {sku} is no longer in the catalog")
            messages.append(replies.not_found(step.phrase))
            return await self.orchestrator.drain(step.cart, step.queue, messages)

        # Quantity and unit come from what the user originally wrote, not the pick
        suspended = await self.orchestrator.continue_with_product(
            step.cart, step.queue, product, step.phrase, messages
        )
        if suspended is not None:
            return suspended
        return await self.orchestrator.drain(step.cart, step.queue, messages)

    async def _clarification_menu(self, step: AwaitingClarification) -> Optional[OutboundMessage]:
        catalog = await self.catalog.list_products()
        by_sku = {p.sku: p for p in catalog}
        candidates = [by_sku[sku] for sku in step.candidate_skus if sku in by_sku]
        try:
            return build_clarification(step.phrase, candidates).message
        except ResolutionError:
            return None

    # =========================================================================
    # CART REVIEW AND CONFIRMATION
    # =========================================================================

    async def _handle_reviewing_cart(
        self, user_id: str, step: ReviewingCart, text: str, state: ConversationState
    ) -> Transition:
        if text == intent.CART_CONFIRM or intent.is_confirmation(text):
            return Transition(
                AwaitingFinalConfirmation(cart=step.cart, confirmation_key=uuid.uuid4().hex),
                [replies.final_confirmation(step.cart)],
            )

        if text == intent.CART_ADD_MORE or ADD_MORE_WORDS & set(tokenize(text)):
            return Transition(CollectingOrderText(cart=step.cart), [TextMessage(replies.ASK_MORE_ITEMS)])

        index = intent.parse_remove_index(text)
        if index is not None:
            if not step.cart.remove_item(index):
                raise InputError(
                    f"No hay un producto número {index + 1} en el pedido",
                    reprompt=replies.cart_menu(),
                )
            if step.cart.is_empty:
                return Transition(
                    CollectingOrderText(cart=step.cart),
                    [TextMessage("🗑️ Producto quitado. Tu pedido quedó vacío."), TextMessage(replies.ASK_ORDER_TEXT)],
                )
            return Transition(
                ReviewingCart(cart=step.cart),
                [replies.cart_summary(step.cart), replies.cart_menu()],
            )

        raise InputError(replies.CHOOSE_FROM_MENU, reprompt=replies.cart_menu())

    async def _handle_final_confirmation(
        self, user_id: str, step: AwaitingFinalConfirmation, text: str, state: ConversationState
    ) -> Transition:
        if intent.is_confirmation(text):
            order_id = await self.orders.save_order(
                user_id, list(step.cart.items), idempotency_key=step.confirmation_key
            )
            logger.info(f"Order {order_id} saved for {user_id} ({len(step.cart.items)} lines)")
            return Transition(Idle(), [replies.order_saved(order_id)])

        if intent.is_decline(text):
            return Transition(
                ReviewingCart(cart=step.cart),
                [replies.cart_summary(step.cart), replies.cart_menu()],
            )

        raise InputError(replies.CHOOSE_FROM_MENU, reprompt=replies.final_confirmation(step.cart))
