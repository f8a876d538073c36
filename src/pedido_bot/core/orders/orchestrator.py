"""
Cart/queue orchestration.

Drains the item queue one segment at a time: match, extract, add to cart.
The loop stops early only when a segment needs the user (clarification,
quantity or unit); otherwise it ends by presenting the cart.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from pedido_bot.core.catalog.matcher import match_products
from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.conversation import replies
from pedido_bot.core.conversation.messages import OutboundMessage, TextMessage
from pedido_bot.core.conversation.ports import CatalogSource
from pedido_bot.core.errors import AmbiguityError, NotFoundError, ResolutionError
from pedido_bot.core.orders.disambiguation import build_clarification
from pedido_bot.core.orders.extractor import EntityResolver
from pedido_bot.core.orders.models import Cart, OrderLineItem, PendingItem
from pedido_bot.core.orders.states import (
    AwaitingClarification,
    AwaitingQuantity,
    AwaitingUnit,
    CollectingOrderText,
    ReviewingCart,
    Step,
)

logger = logging.getLogger(__name__)


@dataclass
class Transition:
    """Next state plus the messages to send for it."""
    step: Step
    messages: list[OutboundMessage] = field(default_factory=list)


def find_product(segment: str, catalog: list[CatalogProduct]) -> CatalogProduct:
    """
    Single best product for a segment.

    Raises:
        NotFoundError: Nothing matched
        AmbiguityError: Several products tie
    """
    result = match_products(segment, catalog)
    if result.is_empty:
        raise NotFoundError(segment)
    if result.is_ambiguous:
        raise AmbiguityError(segment, result.products)
    return result.products[0]


class CartOrchestrator:
    """Runs the per-item loop over the queue."""

    def __init__(
        self,
        catalog: CatalogSource,
        resolver: EntityResolver,
        default_facility_code: Optional[str] = None,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.default_facility_code = default_facility_code

    async def drain(
        self,
        cart: Cart,
        queue: list[str],
        messages: Optional[list[OutboundMessage]] = None,
    ) -> Transition:
        """
        Process queued segments until one needs the user or none are left.

        The catalog is read once, before anything is added to the cart.
        """
        messages = messages if messages is not None else []
        queue = list(queue)
        if not queue:
            return self.present_cart(cart, messages)

        catalog = await self.catalog.list_products()

        while queue:
            segment = queue.pop(0)
            try:
                product = find_product(segment, catalog)
            except NotFoundError:
                logger.info(f"No product for segment '{segment}'")
                messages.append(replies.not_found(segment))
                continue
            except AmbiguityError as e:
                try:
                    clarification = build_clarification(segment, e.candidates)
                except ResolutionError as resolution_error:
                    logger.warning(str(resolution_error))
                    messages.append(replies.unresolved(segment))
                    continue
                messages.append(clarification.message)
                return Transition(
                    step=AwaitingClarification(
                        cart=cart,
                        queue=queue,
                        phrase=segment,
                        candidate_skus=clarification.candidate_skus,
                    ),
                    messages=messages,
                )

            suspended = await self.continue_with_product(cart, queue, product, segment, messages)
            if suspended is not None:
                return suspended

        return self.present_cart(cart, messages)

    async def continue_with_product(
        self,
        cart: Cart,
        queue: list[str],
        product: CatalogProduct,
        phrase: str,
        messages: list[OutboundMessage],
    ) -> Optional[Transition]:
        """
        Complete a line item for a known product, or suspend to ask for what is missing.

        Returns:
            None when the item went into the cart, otherwise the awaiting state
        """
        extraction = await self.resolver.resolve(phrase, product)
        pending = PendingItem(
            product=product,
            phrase=phrase,
            quantity=extraction.quantity,
            unit=extraction.unit,
        )

        missing = extraction.missing
        if missing is None:
            self.add_to_cart(cart, pending, messages)
            return None

        if missing == "quantity":
            messages.append(replies.ask_quantity(pending))
            return Transition(
                step=AwaitingQuantity(cart=cart, queue=queue, pending=pending),
                messages=messages,
            )

        messages.append(replies.unit_menu(pending, self.resolver.allowed_units(product)))
        return Transition(
            step=AwaitingUnit(cart=cart, queue=queue, pending=pending),
            messages=messages,
        )

    def add_to_cart(
        self, cart: Cart, pending: PendingItem, messages: list[OutboundMessage]
    ) -> OrderLineItem:
        """Turn a fully specified pending item into a cart line."""
        item = OrderLineItem.from_product(
            pending.product,
            quantity=pending.quantity,
            unit=pending.unit,
            default_facility_code=self.default_facility_code,
        )
        cart.add_item(item)
        messages.append(replies.item_added(item.describe()))
        logger.info(f"Added {item.quantity} {item.unit} of {item.sku} to cart")
        return item

    def present_cart(self, cart: Cart, messages: list[OutboundMessage]) -> Transition:
        """Queue is empty: show the cart, or ask again if nothing was added."""
        if cart.is_empty:
            messages.append(TextMessage(replies.EMPTY_CART))
            return Transition(step=CollectingOrderText(cart=cart), messages=messages)

        messages.append(replies.cart_summary(cart))
        messages.append(replies.cart_menu())
        return Transition(step=ReviewingCart(cart=cart), messages=messages)
