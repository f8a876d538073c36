"""
SQLAlchemy models for Pedido Bot.
Catalog, per-user conversation sessions, confirmed orders and the conversation log.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


# =============================================================================
# CATALOG
# =============================================================================


class ProductRecord(Base):
    """Product in the catalog."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Matching and ordering metadata
    search_terms: Mapped[list] = mapped_column(JSON, default=list)
    units: Mapped[list] = mapped_column(JSON, default=list)
    unit_codes: Mapped[dict] = mapped_column(JSON, default=dict)
    facility_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<ProductRecord(sku='{self.sku}', name='{self.name}')>"


# =============================================================================
# SESSIONS
# =============================================================================


class SessionRow(Base):
    """Conversation state of one user. `version` guards concurrent writers."""

    __tablename__ = "sessions"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tag: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    data: Mapped[dict] = mapped_column(JSON, default=dict)
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<SessionRow(user_id='{self.user_id}', tag='{self.tag}', v={self.version})>"


# =============================================================================
# ORDERS
# =============================================================================


class OrderRecord(Base):
    """Confirmed order."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    idempotency_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    lines: Mapped[list["OrderLineRecord"]] = relationship(
        back_populates="order", order_by="OrderLineRecord.position", lazy="selectin"
    )

    __table_args__ = (Index("ix_orders_user", "user_id"),)

    def __repr__(self) -> str:
        return f"<OrderRecord(id='{self.id}', user_id='{self.user_id}')>"


class OrderLineRecord(Base):
    """Line of a confirmed order. Snapshot of the product at selection time."""

    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_name: Mapped[str] = mapped_column(String(255), default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    unit_code: Mapped[str] = mapped_column(String(50), nullable=False)
    facility_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # Relationships
    order: Mapped["OrderRecord"] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<OrderLineRecord(order='{self.order_id}', sku='{self.sku}', qty={self.quantity})>"


# =============================================================================
# CONVERSATION LOG
# =============================================================================


class ConversationLogEntry(Base):
    """One exchange: what the user wrote and what the bot answered."""

    __tablename__ = "conversation_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    user_message: Mapped[str] = mapped_column(Text, nullable=False)
    bot_response: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_conversation_log_user", "user_id"),)

    def __repr__(self) -> str:
        return f"<ConversationLogEntry(id={self.id}, user_id='{self.user_id}')>"
