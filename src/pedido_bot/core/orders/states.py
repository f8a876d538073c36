"""
Conversation states for order collection.

Each state is its own dataclass holding exactly the fields that state needs,
so invalid combinations (a queue and a pending item in IDLE, a cart in the
order status lookup, ...) cannot be represented.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union

from pedido_bot.core.errors import SessionCorruptionError
from pedido_bot.core.orders.models import Cart, PendingItem


class ConversationTag(str, Enum):
    """Stored state tags."""
    IDLE = "IDLE"
    COLLECTING_ORDER_TEXT = "COLLECTING_ORDER_TEXT"     # Waiting for product text
    AWAITING_QUANTITY = "AWAITING_QUANTITY"             # Product known, quantity missing
    AWAITING_UNIT = "AWAITING_UNIT"                     # Quantity known, unit missing
    AWAITING_CLARIFICATION = "AWAITING_CLARIFICATION"   # Several products tied
    REVIEWING_CART = "REVIEWING_CART"                   # Queue drained, cart shown
    AWAITING_FINAL_CONFIRMATION = "AWAITING_FINAL_CONFIRMATION"
    AWAITING_ORDER_STATUS_ID = "AWAITING_ORDER_STATUS_ID"


@dataclass
class Idle:
    tag: ClassVar[ConversationTag] = ConversationTag.IDLE

    def to_dict(self) -> dict:
        return {}

    @classmethod
    def from_dict(cls, data: dict) -> "Idle":
        return cls()


@dataclass
class CollectingOrderText:
    tag: ClassVar[ConversationTag] = ConversationTag.COLLECTING_ORDER_TEXT
    cart: Cart = field(default_factory=Cart)

    def to_dict(self) -> dict:
        return {"cart": self.cart.to_list()}

    @classmethod
    def from_dict(cls, data: dict) -> "CollectingOrderText":
        return cls(cart=Cart.from_list(data.get("cart")))


@dataclass
class AwaitingQuantity:
    tag: ClassVar[ConversationTag] = ConversationTag.AWAITING_QUANTITY
    cart: Cart
    queue: list[str]
    pending: PendingItem

    def to_dict(self) -> dict:
        return {
            "cart": self.cart.to_list(),
            "queue": list(self.queue),
            "pending": self.pending.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AwaitingQuantity":
        return cls(
            cart=Cart.from_list(data.get("cart")),
            queue=list(data.get("queue") or []),
            pending=PendingItem.from_dict(data["pending"]),
        )


@dataclass
class AwaitingUnit:
    tag: ClassVar[ConversationTag] = ConversationTag.AWAITING_UNIT
    cart: Cart
    queue: list[str]
    pending: PendingItem

    def to_dict(self) -> dict:
        return {
            "cart": self.cart.to_list(),
            "queue": list(self.queue),
            "pending": self.pending.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AwaitingUnit":
        pending = PendingItem.from_dict(data["pending"])
        if pending.quantity is None:
            raise ValueError("AWAITING_UNIT requires a pending quantity")
        return cls(
            cart=Cart.from_list(data.get("cart")),
            queue=list(data.get("queue") or []),
            pending=pending,
        )


@dataclass
class AwaitingClarification:
    tag: ClassVar[ConversationTag] = ConversationTag.AWAITING_CLARIFICATION
    cart: Cart
    queue: list[str]
    phrase: str
    candidate_skus: list[str]

    def to_dict(self) -> dict:
        return {
            "cart": self.cart.to_list(),
            "queue": list(self.queue),
            "phrase": self.phrase,
            "candidate_skus": list(self.candidate_skus),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AwaitingClarification":
        return cls(
            cart=Cart.from_list(data.get("cart")),
            queue=list(data.get("queue") or []),
            phrase=data["phrase"],
            candidate_skus=[str(sku) for sku in data["candidate_skus"]],
        )


@dataclass
class ReviewingCart:
    tag: ClassVar[ConversationTag] = ConversationTag.REVIEWING_CART
    cart: Cart

    def to_dict(self) -> dict:
        return {"cart": self.cart.to_list()}

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewingCart":
        return cls(cart=Cart.from_list(data.get("cart")))


@dataclass
class AwaitingFinalConfirmation:
    tag: ClassVar[ConversationTag] = ConversationTag.AWAITING_FINAL_CONFIRMATION
    cart: Cart
    confirmation_key: str

    def to_dict(self) -> dict:
        return {"cart": self.cart.to_list(), "confirmation_key": self.confirmation_key}

    @classmethod
    def from_dict(cls, data: dict) -> "AwaitingFinalConfirmation":
        return cls(
            cart=Cart.from_list(data.get("cart")),
            confirmation_key=data["confirmation_key"],
        )


@dataclass
class AwaitingOrderStatusId:
    tag: ClassVar[ConversationTag] = ConversationTag.AWAITING_ORDER_STATUS_ID

    def to_dict(self) -> dict:
        return {}

    @classmethod
    def from_dict(cls, data: dict) -> "AwaitingOrderStatusId":
        return cls()


Step = Union[
    Idle,
    CollectingOrderText,
    AwaitingQuantity,
    AwaitingUnit,
    AwaitingClarification,
    ReviewingCart,
    AwaitingFinalConfirmation,
    AwaitingOrderStatusId,
]

STEP_TYPES: dict[ConversationTag, type] = {
    step_type.tag: step_type
    for step_type in (
        Idle,
        CollectingOrderText,
        AwaitingQuantity,
        AwaitingUnit,
        AwaitingClarification,
        ReviewingCart,
        AwaitingFinalConfirmation,
        AwaitingOrderStatusId,
    )
}


@dataclass
class ConversationState:
    """
    Per-user conversation record.

    Attributes:
        step: Current state with its own data
        greeted: Cross-turn session marker, cleared only by reset
        version: Stored version for compare-and-swap writes
    """
    step: Step = field(default_factory=Idle)
    greeted: bool = False
    version: int = 0

    @property
    def tag(self) -> ConversationTag:
        return self.step.tag

    def encode(self) -> tuple[str, dict]:
        """Tag and data bag for the session store."""
        return self.tag.value, {"greeted": self.greeted, "step": self.step.to_dict()}

    @classmethod
    def decode(cls, tag: Optional[str], data: Optional[dict], version: int = 0) -> "ConversationState":
        """
        Restore from the session store.

        Raises:
            SessionCorruptionError: Unknown tag or data not matching the tag
        """
        if tag is None:
            return cls(version=version)

        try:
            step_type = STEP_TYPES[ConversationTag(tag)]
        except ValueError as e:
            raise SessionCorruptionError(f"Unknown state tag: {tag!r}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise SessionCorruptionError(f"State data for {tag} is not a mapping")

        try:
            step = step_type.from_dict(data.get("step") or {})
        except (KeyError, TypeError, ValueError) as e:
            raise SessionCorruptionError(f"Malformed data for state {tag}: {e}") from e

        return cls(step=step, greeted=bool(data.get("greeted", False)), version=version)
