"""
Disambiguation between catalog products that tie for the best match.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pedido_bot.core.catalog.models import CatalogProduct
from pedido_bot.core.conversation.messages import (
    MAX_LIST_OPTIONS,
    ChoiceMessage,
    ChoiceOption,
)
from pedido_bot.core.errors import ResolutionError
from pedido_bot.core.orders.intent import PRODUCT_CHOICE_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class Clarification:
    """Choice to show plus the skus the reply will be checked against."""
    message: ChoiceMessage
    candidate_skus: list[str]


def product_choice_id(sku: str) -> str:
    return f"{PRODUCT_CHOICE_PREFIX}{sku}"


def build_clarification(phrase: str, candidates: list[CatalogProduct]) -> Clarification:
    """
    Turn tied candidates into a bounded choice set.

    Candidates without a short name or sku cannot be shown and are dropped.
    Up to 3 candidates become buttons, more become a list capped at 10.

    Raises:
        ResolutionError: No candidate survived filtering
    """
    presentable = [p for p in candidates if p.sku and p.short_name]
    if len(presentable) < len(candidates):
        logger.warning(
            f"Dropped {len(candidates) - len(presentable)} candidates without display fields for '{phrase}'"
        )
    if not presentable:
        raise ResolutionError(f"No presentable candidates for '{phrase}'")

    presentable = presentable[:MAX_LIST_OPTIONS]
    options = [
        ChoiceOption(
            id=product_choice_id(p.sku),
            title=p.short_name,
            description=p.name if p.name != p.short_name else None,
        )
        for p in presentable
    ]

    message = ChoiceMessage.build(
        body=f"Encontré varias opciones para «{phrase}». ¿Cuál quieres?",
        options=options,
    )
    return Clarification(message=message, candidate_skus=[p.sku for p in presentable])


def resolve_choice(reply: str, candidate_skus: list[str]) -> Optional[str]:
    """Chosen sku if the reply names one of the candidates, else None."""
    reply = (reply or "").strip()
    if reply.startswith(PRODUCT_CHOICE_PREFIX):
        reply = reply[len(PRODUCT_CHOICE_PREFIX):]

    for sku in candidate_skus:
        if reply.lower() == sku.lower():
            return sku

    # Position in the list as typed by the user ("2")
    if reply.isdigit() and 1 <= int(reply) <= len(candidate_skus):
        return candidate_skus[int(reply) - 1]
    return None
