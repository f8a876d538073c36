"""
Order models for Pedido Bot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pedido_bot.core.catalog.models import CatalogProduct


@dataclass(frozen=True)
class OrderLineItem:
    """Single resolved line in a cart. Snapshot of the product at selection time."""
    sku: str
    name: str
    short_name: str
    quantity: int
    unit: str
    unit_code: str
    facility_code: Optional[str] = None

    @classmethod
    def from_product(
        cls,
        product: CatalogProduct,
        quantity: int,
        unit: str,
        default_facility_code: Optional[str] = None,
    ) -> "OrderLineItem":
        """Build a line item from a catalog product."""
        return cls(
            sku=product.sku,
            name=product.name,
            short_name=product.short_name,
            quantity=quantity,
            unit=unit,
            unit_code=product.unit_code_for(unit),
            facility_code=product.facility_code or default_facility_code,
        )

    def describe(self) -> str:
        """Human readable line, e.g. "2 caja de Leche Entera 1L"."""
        return f"{self.quantity} {self.unit} de {self.name}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sku": self.sku,
            "name": self.name,
            "short_name": self.short_name,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_code": self.unit_code,
            "facility_code": self.facility_code,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrderLineItem":
        return cls(
            sku=str(data["sku"]),
            name=data["name"],
            short_name=data.get("short_name") or "",
            quantity=int(data["quantity"]),
            unit=data["unit"],
            unit_code=data.get("unit_code") or data["unit"],
            facility_code=data.get("facility_code"),
        )


@dataclass
class PendingItem:
    """Line item under construction: product known, quantity and/or unit missing."""
    product: CatalogProduct
    phrase: str
    quantity: Optional[int] = None
    unit: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "product": self.product.to_dict(),
            "phrase": self.phrase,
            "quantity": self.quantity,
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingItem":
        quantity = data.get("quantity")
        return cls(
            product=CatalogProduct.from_dict(data["product"]),
            phrase=data.get("phrase") or "",
            quantity=int(quantity) if quantity is not None else None,
            unit=data.get("unit"),
        )


@dataclass
class Cart:
    """Line items accumulated during the current order."""
    items: list[OrderLineItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def add_item(self, item: OrderLineItem) -> None:
        """Add item to cart."""
        self.items.append(item)

    def remove_item(self, index: int) -> bool:
        """Remove item by index."""
        if 0 <= index < len(self.items):
            self.items.pop(index)
            return True
        return False

    def to_list(self) -> list[dict]:
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: Optional[list]) -> "Cart":
        return cls(items=[OrderLineItem.from_dict(item) for item in data or []])

    def format_summary(self) -> str:
        """Format items as numbered text lines."""
        return "\n".join(
            f"{i}. {item.describe()}" for i, item in enumerate(self.items, 1)
        )


@dataclass
class SavedOrder:
    """Order as persisted by the order sink."""
    id: str
    user_id: str
    items: list[OrderLineItem]
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def order_number(self) -> str:
        """Human-readable order number."""
        return f"#{self.id}"

    def format_status(self) -> str:
        """Short status text for order lookups."""
        lines = [
            f"📦 <b>Pedido {self.order_number}</b>",
            f"📅 {self.created_at.strftime('%d/%m/%Y %H:%M')}",
            "",
        ]
        lines.extend(f"• {item.describe()}" for item in self.items)
        return "\n".join(lines)
